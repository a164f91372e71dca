"""
Dashboard endpoints: the merged report, its CSV and PDF exports and the
upstream connection check.
"""

from __future__ import annotations

from typing import Any, Optional, Tuple, Union

import httpx
import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse, Response

from hotel_dashboard.cache import AccessTokenCache
from hotel_dashboard.dependencies import (
    get_http_client,
    get_properties,
    get_service_account,
    get_token_cache,
)
from hotel_dashboard.exceptions import InvalidDateRangeError
from hotel_dashboard.exporters.csv_export import csv_filename, render_report_csv
from hotel_dashboard.exporters.pdf_export import pdf_filename, render_report_pdf
from hotel_dashboard.models.properties import Property
from hotel_dashboard.schemas.dashboard import ConnectionStatus, DashboardReport, DashboardRequest
from hotel_dashboard.services.connection_status import get_connection_status
from hotel_dashboard.services.dashboard import build_dashboard_report, normalize_date_range

logger = structlog.get_logger(__name__)

router = APIRouter()


def _invalid_range_response(error: InvalidDateRangeError) -> JSONResponse:
    logger.warning("dashboard_request_invalid", error=str(error))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid date range", "details": str(error)},
    )


def _failure_response(error: Exception) -> JSONResponse:
    logger.exception("dashboard_request_failed", error=str(error))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Failed to fetch dashboard data", "details": str(error)},
    )


@router.post("/dashboard-data", response_model=DashboardReport)
async def dashboard_data(
    payload: Optional[DashboardRequest] = None,
    properties: list[Property] = Depends(get_properties),
    http: httpx.AsyncClient = Depends(get_http_client),
    token_cache: AccessTokenCache = Depends(get_token_cache),
    service_account: Optional[str] = Depends(get_service_account),
) -> Any:
    """
    Build the dashboard report for a date range.

    Property and analytics outages degrade to zero-valued sections; only a
    missing or unparsable date range is reported as an error (400).

    Example:
        >>> POST /api/dashboard-data {"startDate": "2025-03-01", "endDate": "2025-03-07"}
        {"websiteTraffic": {...}, "propertyData": [...], ...}
    """
    payload = payload or DashboardRequest()
    try:
        start_date, end_date = normalize_date_range(payload.start_date, payload.end_date)
    except InvalidDateRangeError as e:
        return _invalid_range_response(e)

    try:
        return await build_dashboard_report(
            http,
            properties,
            start_date,
            end_date,
            token_cache,
            service_account_json=service_account,
        )
    except Exception as e:
        return _failure_response(e)


async def _build_export(
    payload: Optional[DashboardRequest],
    properties: list[Property],
    http: httpx.AsyncClient,
    token_cache: AccessTokenCache,
    service_account: Optional[str],
) -> Union[JSONResponse, Tuple[DashboardReport, str, str]]:
    """Build the report behind an export, or the error response to return instead."""
    payload = payload or DashboardRequest()
    try:
        start_date, end_date = normalize_date_range(payload.start_date, payload.end_date)
    except InvalidDateRangeError as e:
        return _invalid_range_response(e)

    try:
        report = await build_dashboard_report(
            http,
            properties,
            start_date,
            end_date,
            token_cache,
            service_account_json=service_account,
        )
    except Exception as e:
        return _failure_response(e)
    return report, start_date, end_date


@router.post("/export-csv", response_class=Response)
async def export_csv(
    payload: Optional[DashboardRequest] = None,
    properties: list[Property] = Depends(get_properties),
    http: httpx.AsyncClient = Depends(get_http_client),
    token_cache: AccessTokenCache = Depends(get_token_cache),
    service_account: Optional[str] = Depends(get_service_account),
) -> Response:
    """Build the report for a date range and return it as a CSV attachment."""
    result = await _build_export(payload, properties, http, token_cache, service_account)
    if isinstance(result, JSONResponse):
        return result
    report, start_date, end_date = result

    return Response(
        content=render_report_csv(report, start_date, end_date),
        media_type="text/csv",
        headers={
            "Content-Disposition": f"attachment; filename={csv_filename(start_date, end_date)}"
        },
    )


@router.post("/export-pdf", response_class=Response)
async def export_pdf(
    payload: Optional[DashboardRequest] = None,
    properties: list[Property] = Depends(get_properties),
    http: httpx.AsyncClient = Depends(get_http_client),
    token_cache: AccessTokenCache = Depends(get_token_cache),
    service_account: Optional[str] = Depends(get_service_account),
) -> Response:
    """Build the report for a date range and return it as a PDF attachment."""
    result = await _build_export(payload, properties, http, token_cache, service_account)
    if isinstance(result, JSONResponse):
        return result
    report, start_date, end_date = result

    return Response(
        content=render_report_pdf(report, start_date, end_date),
        media_type="application/pdf",
        headers={
            "Content-Disposition": f"attachment; filename={pdf_filename(start_date, end_date)}"
        },
    )


@router.get("/connection-status", response_model=ConnectionStatus)
async def connection_status(
    properties: list[Property] = Depends(get_properties),
    http: httpx.AsyncClient = Depends(get_http_client),
    token_cache: AccessTokenCache = Depends(get_token_cache),
    service_account: Optional[str] = Depends(get_service_account),
) -> ConnectionStatus:
    """
    Check connectivity to the analytics API and to each Cloudbeds property.

    Example:
        >>> GET /api/connection-status
        {"googleAnalytics": {"connected": true, "lastSync": "..."},
         "cloudbeds": {"connected": true, "connectedProperties": "5/5", ...}}
    """
    return await get_connection_status(
        http, properties, token_cache, service_account_json=service_account
    )
