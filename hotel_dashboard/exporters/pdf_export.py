"""PDF rendering of a dashboard report, with the same three sections as the CSV export."""

from __future__ import annotations

from io import BytesIO
from typing import Any

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from hotel_dashboard.schemas.dashboard import DashboardReport

REPORT_TITLE = "Website Booking Analytics Report"

TABLE_STYLE = TableStyle(
    [
        ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.black),
        ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("BOTTOMPADDING", (0, 0), (-1, 0), 6),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
    ]
)


def pdf_filename(start_date: str, end_date: str) -> str:
    return f"dashboard-report-{start_date}-to-{end_date}.pdf"


def report_sections(report: DashboardReport) -> list[tuple[str, list[list[str]]]]:
    """
    Tabulate the report as (heading, rows) pairs, header row first.

    Args:
        report: Report to tabulate

    Returns:
        list[tuple[str, list[list[str]]]]: Website Traffic, Property Performance
        and Operational Metrics sections
    """
    traffic = report.website_traffic
    ops = report.operational_data

    traffic_rows = [
        ["Metric", "Value"],
        ["Sessions", f"{traffic.sessions:,}"],
        ["Page Views", f"{traffic.page_views:,}"],
        ["Avg Engagement Time", traffic.avg_engagement_time],
        ["New Users", f"{traffic.new_users:,}"],
        ["ADR", f"${traffic.adr}"],
        ["RevPAR", f"${traffic.revpar}"],
        ["Conversion", f"{traffic.conversion}%"],
    ]

    property_rows = [["Property", "Bookings", "Occupancy %", "Beds Remaining"]]
    for row in report.property_data:
        property_rows.append(
            [row.name, str(row.total_bookings), f"{row.occupancy}%", str(row.beds_remaining)]
        )

    operational_rows = [
        ["Metric", "Value"],
        ["Check-ins", str(ops.check_ins)],
        ["Check-outs", str(ops.check_outs)],
        ["In-house", str(ops.in_house)],
        ["Stay Over", str(ops.stay_over)],
        ["No Shows", str(ops.no_shows)],
        ["Cancellations", str(ops.cancellations)],
    ]

    return [
        ("Website Traffic", traffic_rows),
        ("Property Performance", property_rows),
        ("Operational Metrics", operational_rows),
    ]


def render_report_pdf(report: DashboardReport, start_date: str, end_date: str) -> bytes:
    """
    Render a report as a single A4 document using ReportLab.

    Args:
        report: Report to render
        start_date: First day of the range, YYYY-MM-DD
        end_date: Last day of the range, YYYY-MM-DD

    Returns:
        bytes: PDF document
    """
    buf = BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=A4, title=REPORT_TITLE)
    styles = getSampleStyleSheet()
    story: list[Any] = []

    story.append(Paragraph(REPORT_TITLE, styles["Title"]))
    story.append(Paragraph(f"Date Range: {start_date} - {end_date}", styles["Normal"]))
    story.append(Spacer(1, 18))

    for heading, rows in report_sections(report):
        story.append(Paragraph(heading, styles["Heading2"]))
        table = Table(rows, repeatRows=1, hAlign="LEFT")
        table.setStyle(TABLE_STYLE)
        story.append(table)
        story.append(Spacer(1, 18))

    doc.build(story)
    pdf_bytes = buf.getvalue()
    buf.close()
    return pdf_bytes
