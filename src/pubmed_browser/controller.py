"""Search and bookmark flow, independent of any UI toolkit."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal

import httpx

from pubmed_browser.action_messages import (
    STATUS_EMPTY_QUERY,
    STATUS_NO_RESULTS,
    STATUS_SEARCH_FAILED,
    build_loaded_status,
)
from pubmed_browser.config import AppSettings
from pubmed_browser.models import QueryDescriptor, Record
from pubmed_browser.query import build_query_descriptor
from pubmed_browser.saved import SavedStore
from pubmed_browser.services.interfaces import AppServices, build_default_app_services
from pubmed_browser.services.pubmed_api_service import PubMedServiceError

logger = logging.getLogger(__name__)

USER_AGENT = "pubmed-browser/1.0"

OutcomeKind = Literal["empty_query", "no_results", "loaded", "error"]


@dataclass(slots=True)
class SearchOutcome:
    """Result of one search flow, ready for display."""

    kind: OutcomeKind
    status: str
    records: list[Record] = field(default_factory=list)
    descriptor: QueryDescriptor | None = None
    # True when a newer search started while this one was in flight
    stale: bool = False


class SearchController:
    """Drives QueryBuilder -> search -> fetch, and save/remove on the store.

    Each search takes a request token; responses that arrive after a newer
    search started are reported as stale so the UI can drop them.
    """

    def __init__(
        self,
        saved: SavedStore,
        settings: AppSettings | None = None,
        services: AppServices | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.saved = saved
        self.settings = settings or AppSettings()
        self.services = services or build_default_app_services()
        self.client = client
        self._request_token = 0

    def prepare(
        self, term: str, days_back: object = None, sort: object = None
    ) -> QueryDescriptor | None:
        """Normalize user input; None means the term was empty."""
        if not term or not term.strip():
            return None
        return build_query_descriptor(term, days_back, sort)

    async def execute(self, descriptor: QueryDescriptor) -> SearchOutcome:
        """Run esearch then efetch for a prepared descriptor."""
        self._request_token += 1
        token = self._request_token
        api = self.services.pubmed
        timeout = self.settings.request_timeout_seconds
        api_key = self.settings.api_key

        try:
            pmids = await api.search_ids(
                client=self.client,
                descriptor=descriptor,
                timeout_seconds=timeout,
                user_agent=USER_AGENT,
                api_key=api_key,
            )
            if token != self._request_token:
                return self._stale(descriptor)
            if not pmids:
                return SearchOutcome("no_results", STATUS_NO_RESULTS, descriptor=descriptor)

            records = await api.fetch_records(
                client=self.client,
                pmids=pmids,
                timeout_seconds=timeout,
                user_agent=USER_AGENT,
                api_key=api_key,
            )
        except PubMedServiceError:
            logger.warning("Search for %r failed", descriptor.term, exc_info=True)
            outcome = SearchOutcome("error", STATUS_SEARCH_FAILED, descriptor=descriptor)
            outcome.stale = token != self._request_token
            return outcome

        if token != self._request_token:
            return self._stale(descriptor)
        return SearchOutcome(
            "loaded",
            build_loaded_status(len(records)),
            records=records,
            descriptor=descriptor,
        )

    async def search(
        self, term: str, days_back: object = None, sort: object = None
    ) -> SearchOutcome:
        """Validate input and run the full search flow."""
        descriptor = self.prepare(term, days_back, sort)
        if descriptor is None:
            return SearchOutcome("empty_query", STATUS_EMPTY_QUERY)
        return await self.execute(descriptor)

    @staticmethod
    def _stale(descriptor: QueryDescriptor) -> SearchOutcome:
        logger.debug("Dropping stale response for %r", descriptor.term)
        return SearchOutcome("loaded", "", descriptor=descriptor, stale=True)

    def save(self, record: Record) -> bool:
        """Bookmark a record. Returns True if it was newly added."""
        added = self.saved.add(record)
        if added:
            logger.debug("Saved %s", record.pmid)
        return added

    def remove(self, pmid: str) -> bool:
        """Drop a bookmark. Returns True if something was removed."""
        removed = self.saved.remove(pmid)
        if removed:
            logger.debug("Removed %s", pmid)
        return removed

    def is_saved(self, pmid: str) -> bool:
        return self.saved.contains(pmid)


__all__ = [
    "USER_AGENT",
    "SearchController",
    "SearchOutcome",
]
