"""Internal service layer for app orchestration extraction."""

from pubmed_browser.services.pubmed_api_service import (
    FetchError,
    GatewayError,
    PubMedServiceError,
    fetch_records,
    search_ids,
)

__all__ = [
    "FetchError",
    "GatewayError",
    "PubMedServiceError",
    "fetch_records",
    "search_ids",
]
