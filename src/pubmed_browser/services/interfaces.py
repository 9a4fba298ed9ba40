"""Service interfaces + default adapters for app-level dependency injection."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import httpx

from pubmed_browser.models import QueryDescriptor, Record
from pubmed_browser.services import pubmed_api_service as _pubmed_api


@runtime_checkable
class PubMedApiService(Protocol):
    """Interface for PubMed E-utilities operations."""

    async def search_ids(
        self,
        *,
        client: httpx.AsyncClient | None,
        descriptor: QueryDescriptor,
        timeout_seconds: float,
        user_agent: str,
        api_key: str = "",
    ) -> list[str]:
        """Search PubMed and return matching PMIDs."""
        ...

    async def fetch_records(
        self,
        *,
        client: httpx.AsyncClient | None,
        pmids: Sequence[str],
        timeout_seconds: float,
        user_agent: str,
        api_key: str = "",
    ) -> list[Record]:
        """Fetch and parse full records for PMIDs."""
        ...


class DefaultPubMedApiService:
    """Default adapter that delegates to function-based PubMed services."""

    async def search_ids(
        self,
        *,
        client: httpx.AsyncClient | None,
        descriptor: QueryDescriptor,
        timeout_seconds: float,
        user_agent: str,
        api_key: str = "",
    ) -> list[str]:
        return await _pubmed_api.search_ids(
            client=client,
            descriptor=descriptor,
            timeout_seconds=timeout_seconds,
            user_agent=user_agent,
            api_key=api_key,
        )

    async def fetch_records(
        self,
        *,
        client: httpx.AsyncClient | None,
        pmids: Sequence[str],
        timeout_seconds: float,
        user_agent: str,
        api_key: str = "",
    ) -> list[Record]:
        return await _pubmed_api.fetch_records(
            client=client,
            pmids=pmids,
            timeout_seconds=timeout_seconds,
            user_agent=user_agent,
            api_key=api_key,
        )


@dataclass(slots=True)
class AppServices:
    """Aggregated service interfaces consumed by the app layer."""

    pubmed: PubMedApiService


def build_default_app_services() -> AppServices:
    """Build default app services backed by existing function-based modules."""
    return AppServices(pubmed=DefaultPubMedApiService())


__all__ = [
    "AppServices",
    "DefaultPubMedApiService",
    "PubMedApiService",
    "build_default_app_services",
]
