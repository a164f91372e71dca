import os

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEBUG = LOG_LEVEL == "DEBUG"

ALLOWED_ORIGINS_RAW = os.getenv("ALLOWED_ORIGINS", "*")
ALLOWED_ORIGINS: list[str] = [
    origin.strip() for origin in ALLOWED_ORIGINS_RAW.split(",") if origin.strip()
]

CLOUDBEDS_API_URL = os.getenv("CLOUDBEDS_API_URL", "https://api.cloudbeds.com/api/v1.3")
CLOUDBEDS_PAGE_SIZE = int(os.getenv("CLOUDBEDS_PAGE_SIZE", "100"))
CLOUDBEDS_PAGE_DELAY_SECONDS = float(os.getenv("CLOUDBEDS_PAGE_DELAY_SECONDS", "0.15"))
PROPERTY_BATCH_SIZE = int(os.getenv("PROPERTY_BATCH_SIZE", "2"))
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "30"))

GA_PROPERTY_ID = os.getenv("GA_PROPERTY_ID", "460526176")
GOOGLE_SERVICE_ACCOUNT = os.getenv("GOOGLE_SERVICE_ACCOUNT")
