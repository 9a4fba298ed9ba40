"""Tests for service interface adapters and defaults."""

from __future__ import annotations

from datetime import date
from unittest.mock import AsyncMock, patch

import pytest

from pubmed_browser.models import QueryDescriptor
from pubmed_browser.services.interfaces import (
    AppServices,
    DefaultPubMedApiService,
    PubMedApiService,
    build_default_app_services,
)


def test_build_default_app_services_protocol_compatible() -> None:
    services = build_default_app_services()

    assert isinstance(services, AppServices)
    assert isinstance(services.pubmed, PubMedApiService)
    assert isinstance(services.pubmed, DefaultPubMedApiService)


@pytest.mark.asyncio
async def test_default_pubmed_adapter_delegates(make_record) -> None:
    descriptor = QueryDescriptor("cancer", "pub+date", date(2024, 1, 1), date(2024, 2, 1))
    services = build_default_app_services()

    with (
        patch(
            "pubmed_browser.services.interfaces._pubmed_api.search_ids",
            new=AsyncMock(return_value=["1", "2"]),
        ) as search,
        patch(
            "pubmed_browser.services.interfaces._pubmed_api.fetch_records",
            new=AsyncMock(return_value=[make_record(pmid="1")]),
        ) as fetch,
    ):
        ids = await services.pubmed.search_ids(
            client=None,
            descriptor=descriptor,
            timeout_seconds=30,
            user_agent="pubmed-browser/1.0",
        )
        records = await services.pubmed.fetch_records(
            client=None,
            pmids=ids,
            timeout_seconds=30,
            user_agent="pubmed-browser/1.0",
            api_key="secret",
        )

    assert ids == ["1", "2"]
    assert [r.pmid for r in records] == ["1"]
    search.assert_awaited_once_with(
        client=None,
        descriptor=descriptor,
        timeout_seconds=30,
        user_agent="pubmed-browser/1.0",
        api_key="",
    )
    fetch.assert_awaited_once_with(
        client=None,
        pmids=["1", "2"],
        timeout_seconds=30,
        user_agent="pubmed-browser/1.0",
        api_key="secret",
    )
