"""CSV rendering of a dashboard report, matching the dashboard's "Export CSV" layout."""

from __future__ import annotations

import csv
import io

from hotel_dashboard.schemas.dashboard import DashboardReport


def csv_filename(start_date: str, end_date: str) -> str:
    return f"dashboard-data-{start_date}-to-{end_date}.csv"


def render_report_csv(report: DashboardReport, start_date: str, end_date: str) -> str:
    """
    Render the traffic, property and operational sections of a report as CSV.

    Args:
        report: Report to render
        start_date: First day of the range, YYYY-MM-DD
        end_date: Last day of the range, YYYY-MM-DD

    Returns:
        str: CSV document
    """
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    traffic = report.website_traffic
    ops = report.operational_data

    writer.writerow(["Website Booking Analytics Report"])
    writer.writerow([f"Date Range: {start_date} - {end_date}"])
    writer.writerow([])

    writer.writerow(["Website Traffic"])
    writer.writerow(["Metric", "Value"])
    writer.writerow(["Sessions", traffic.sessions])
    writer.writerow(["Page Views", traffic.page_views])
    writer.writerow(["Avg Engagement Time", traffic.avg_engagement_time])
    writer.writerow(["New Users", traffic.new_users])
    writer.writerow(["ADR", f"${traffic.adr}"])
    writer.writerow(["RevPAR", f"${traffic.revpar}"])
    writer.writerow(["Conversion", f"{traffic.conversion}%"])
    writer.writerow([])

    writer.writerow(["Property Performance"])
    writer.writerow(["Property", "Total Bookings", "Private Rooms", "Occupancy %", "Beds Remaining"])
    for row in report.property_data:
        writer.writerow(
            [row.name, row.total_bookings, row.private_rooms, row.occupancy, row.beds_remaining]
        )
    writer.writerow([])

    writer.writerow(["Operational Metrics"])
    writer.writerow(["Metric", "Value"])
    writer.writerow(["Check-ins", ops.check_ins])
    writer.writerow(["Check-outs", ops.check_outs])
    writer.writerow(["In-house", ops.in_house])
    writer.writerow(["Stay Over", ops.stay_over])
    writer.writerow(["No Shows", ops.no_shows])
    writer.writerow(["Cancellations", ops.cancellations])

    return buf.getvalue()
