import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import argparse
import asyncio
import json
from datetime import timedelta

import httpx
import structlog

from hotel_dashboard.cache import analytics_token_cache
from hotel_dashboard.config import HTTP_TIMEOUT_SECONDS
from hotel_dashboard.logging_config import setup_logging
from hotel_dashboard.properties import load_properties
from hotel_dashboard.services.dashboard import build_dashboard_report, normalize_date_range
from hotel_dashboard.utils.datetime import utc_today

setup_logging()
logger = structlog.get_logger(__name__)


async def run(start: str, end: str) -> dict:
    start_date, end_date = normalize_date_range(start, end)
    properties = load_properties()

    async with httpx.AsyncClient(timeout=HTTP_TIMEOUT_SECONDS) as http:
        report = await build_dashboard_report(
            http, properties, start_date, end_date, analytics_token_cache
        )
    return report.model_dump(by_alias=True, mode="json")


def main() -> None:
    """
    Build one dashboard report from the configured environment and print it as JSON.
    Defaults to the last 7 days.
    """
    today = utc_today()
    parser = argparse.ArgumentParser(description=main.__doc__)
    parser.add_argument("--start", default=(today - timedelta(days=7)).isoformat())
    parser.add_argument("--end", default=today.isoformat())
    args = parser.parse_args()

    logger.info("Building report for %s to %s", args.start, args.end)

    try:
        report = asyncio.run(run(args.start, args.end))
    except Exception:
        logger.exception("Report build failed")
        raise

    print(json.dumps(report, indent=2))


if __name__ == "__main__":
    main()
