# hotel_dashboard/main.py

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hotel_dashboard.config import ALLOWED_ORIGINS
from hotel_dashboard.logging_config import setup_logging
from hotel_dashboard.middleware import RequestIDMiddleware
from hotel_dashboard.routes.dashboard import router as dashboard_router
from hotel_dashboard.routes.health import router as health_router
from hotel_dashboard.routes.metrics import router as metrics_router

# Initialize structured logging
setup_logging()
logger = structlog.get_logger(__name__)

app = FastAPI(
    title="Hotel Booking Dashboard API",
    description="Cloudbeds bookings and Google Analytics traffic merged into one dashboard feed",
    version="1.0.0",
)

app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS if "*" not in ALLOWED_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(health_router, tags=["Health"])
app.include_router(metrics_router, tags=["Metrics"])
app.include_router(dashboard_router, prefix="/api", tags=["Dashboard"])


@app.on_event("startup")
def startup_event() -> None:
    """Load the property registry once so misconfiguration shows up at boot."""
    from hotel_dashboard.dependencies import get_properties

    logger.info("FastAPI application starting up...")

    properties = get_properties()
    if not properties:
        logger.warning("no_properties_configured")

    logger.info("FastAPI application initialized", properties=len(properties))
