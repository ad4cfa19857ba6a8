"""Registry of the dashboard's datasets.

Each dataset exists twice: as a server-tier DatasetView exported from a
Zoho view, and as a client-tier DataSource fetched from a CSV endpoint
(usually the matching server route) with stored and bundled fallbacks.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from dashfeed.core.models import DatasetView, DataSource


if TYPE_CHECKING:
    from dashfeed.config import Settings


DEFAULT_VIEWS: tuple[DatasetView, ...] = (
    DatasetView("billing", "Billing Leaderboard", "ZOHO_VIEW_BILLING", "billing"),
    DatasetView(
        "enquiry_members",
        "Enquiry by Team Member",
        "ZOHO_VIEW_ENQUIRY_MEMBER",
        "enquiry-by-member",
    ),
    DatasetView(
        "enquiries_team",
        "Enquiries by Team",
        "ZOHO_VIEW_ENQUIRIES_TEAM",
        "enquiries-by-team",
    ),
    DatasetView(
        "monthly_sales", "This Month's Sales", "ZOHO_VIEW_MONTHLY_SALES", "monthly-sales"
    ),
    DatasetView(
        "outgoing_enquiries",
        "Outgoing Enquiries Leaderboard",
        "ZOHO_VIEW_OUTGOING_ENQUIRIES",
        "outgoing-enquiries",
    ),
    DatasetView("pipeline", "Pipeline", "ZOHO_VIEW_PIPELINE", "pipeline"),
)

DEFAULT_SOURCES: tuple[DataSource, ...] = (
    DataSource("billing", "Billing Leaderboard", "lbb-billing-csv", "billing_leaderboard.csv"),
    DataSource(
        "enquiry_members",
        "Enquiry by Team Member",
        "lbb-enquiry-member-csv",
        "enquiry_by_member.csv",
    ),
    DataSource(
        "enquiries_team",
        "Enquiries by Team",
        "lbb-enquiries-team-csv",
        "enquiries_by_team.csv",
    ),
    DataSource(
        "monthly_sales",
        "This Month's Sales",
        "lbb-monthly-sales-csv",
        "monthly_sales.csv",
    ),
    DataSource(
        "outgoing_enquiries",
        "Outgoing Enquiries Leaderboard",
        "lbb-outgoing-enquiries-csv",
        "outgoing_enquiries.csv",
    ),
    DataSource("pipeline", "Pipeline", "lbb-pipeline-csv", "pipeline.csv"),
)


def endpoint_env(source: DataSource) -> str:
    """Environment variable naming a source's CSV endpoint."""
    return f"DASHFEED_{source.key.upper()}_CSV_URL"


def configured_sources(settings: Settings) -> list[DataSource]:
    """Default sources with endpoints taken from settings."""
    return [
        source.with_endpoint(settings.endpoints.get(endpoint_env(source)))
        for source in DEFAULT_SOURCES
    ]
