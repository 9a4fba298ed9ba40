"""Tests for PubMed E-utilities service helpers."""

from __future__ import annotations

from datetime import date
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from pubmed_browser.models import QueryDescriptor
from pubmed_browser.services.pubmed_api_service import (
    EFETCH_URL,
    ESEARCH_URL,
    FetchError,
    GatewayError,
    PubMedServiceError,
    build_fetch_params,
    build_search_params,
    fetch_records,
    search_ids,
)

USER_AGENT = "pubmed-browser/1.0"

DESCRIPTOR = QueryDescriptor(
    term="cancer",
    sort="pub+date",
    date_from=date(2024, 2, 14),
    date_to=date(2024, 3, 15),
)

EFETCH_XML = """<?xml version="1.0"?>
<PubmedArticleSet>
  <PubmedArticle><MedlineCitation><PMID>111</PMID>
    <Article><ArticleTitle>First</ArticleTitle></Article>
  </MedlineCitation></PubmedArticle>
  <PubmedArticle><MedlineCitation><PMID>222</PMID>
    <Article><ArticleTitle>Second</ArticleTitle></Article>
  </MedlineCitation></PubmedArticle>
</PubmedArticleSet>
"""


def _mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestParams:
    def test_search_params(self) -> None:
        assert build_search_params(DESCRIPTOR) == {
            "db": "pubmed",
            "retmode": "json",
            "retmax": "20",
            "term": "cancer",
            "sort": "pub+date",
            "datetype": "pdat",
            "mindate": "2024/02/14",
            "maxdate": "2024/03/15",
        }

    def test_search_params_with_api_key(self) -> None:
        assert build_search_params(DESCRIPTOR, api_key="k")["api_key"] == "k"

    def test_fetch_params_join_ids(self) -> None:
        assert build_fetch_params(["1", "2", "3"]) == {
            "db": "pubmed",
            "id": "1,2,3",
            "retmode": "xml",
        }


class TestSearchIds:
    @pytest.mark.asyncio
    async def test_sends_query_and_returns_ids(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"esearchresult": {"idlist": ["111", "222"]}})

        async with _mock_client(handler) as client:
            ids = await search_ids(
                client=client,
                descriptor=DESCRIPTOR,
                timeout_seconds=30,
                user_agent=USER_AGENT,
            )

        assert ids == ["111", "222"]
        (request,) = seen
        assert str(request.url).startswith(ESEARCH_URL)
        assert request.url.params["term"] == "cancer"
        assert request.url.params["mindate"] == "2024/02/14"
        assert request.url.params["maxdate"] == "2024/03/15"
        assert request.url.params["retmax"] == "20"
        assert request.headers["User-Agent"] == USER_AGENT

    @pytest.mark.asyncio
    async def test_missing_idlist_is_empty(self) -> None:
        async with _mock_client(lambda _r: httpx.Response(200, json={})) as client:
            ids = await search_ids(
                client=client, descriptor=DESCRIPTOR, timeout_seconds=30, user_agent=USER_AGENT
            )
        assert ids == []

    @pytest.mark.asyncio
    async def test_http_error_status_raises_gateway_error(self) -> None:
        async with _mock_client(lambda _r: httpx.Response(503)) as client:
            with pytest.raises(GatewayError, match="503"):
                await search_ids(
                    client=client, descriptor=DESCRIPTOR, timeout_seconds=30, user_agent=USER_AGENT
                )

    @pytest.mark.asyncio
    async def test_transport_error_raises_gateway_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("offline", request=request)

        async with _mock_client(handler) as client:
            with pytest.raises(GatewayError):
                await search_ids(
                    client=client, descriptor=DESCRIPTOR, timeout_seconds=30, user_agent=USER_AGENT
                )

    @pytest.mark.asyncio
    async def test_non_json_body_raises_gateway_error(self) -> None:
        async with _mock_client(lambda _r: httpx.Response(200, text="<html/>")) as client:
            with pytest.raises(GatewayError, match="non-JSON"):
                await search_ids(
                    client=client, descriptor=DESCRIPTOR, timeout_seconds=30, user_agent=USER_AGENT
                )

    @pytest.mark.asyncio
    async def test_without_shared_client_uses_temp_client(self) -> None:
        response = MagicMock()
        response.json.return_value = {"esearchresult": {"idlist": ["9"]}}
        response.raise_for_status = MagicMock()

        class DummyClient:
            async def __aenter__(self):
                return self

            async def __aexit__(self, exc_type, exc, tb):
                return False

            async def get(self, *_args, **_kwargs):
                return response

        with patch(
            "pubmed_browser.services.pubmed_api_service.httpx.AsyncClient",
            return_value=DummyClient(),
        ):
            ids = await search_ids(
                client=None, descriptor=DESCRIPTOR, timeout_seconds=30, user_agent=USER_AGENT
            )

        assert ids == ["9"]
        response.raise_for_status.assert_called_once()


class TestFetchRecords:
    @pytest.mark.asyncio
    async def test_parses_records_in_order(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, text=EFETCH_XML)

        async with _mock_client(handler) as client:
            records = await fetch_records(
                client=client,
                pmids=["111", "222"],
                timeout_seconds=30,
                user_agent=USER_AGENT,
            )

        assert [(r.pmid, r.title) for r in records] == [("111", "First"), ("222", "Second")]
        (request,) = seen
        assert str(request.url).startswith(EFETCH_URL)
        assert request.url.params["id"] == "111,222"
        assert request.url.params["retmode"] == "xml"

    @pytest.mark.asyncio
    async def test_empty_pmids_rejected_without_request(self) -> None:
        client = SimpleNamespace(get=AsyncMock())

        with pytest.raises(ValueError):
            await fetch_records(client=client, pmids=[], timeout_seconds=30, user_agent=USER_AGENT)

        client.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_http_error_status_raises_fetch_error(self) -> None:
        async with _mock_client(lambda _r: httpx.Response(500)) as client:
            with pytest.raises(FetchError, match="500"):
                await fetch_records(
                    client=client, pmids=["1"], timeout_seconds=30, user_agent=USER_AGENT
                )

    @pytest.mark.asyncio
    async def test_malformed_xml_raises_fetch_error(self) -> None:
        async with _mock_client(lambda _r: httpx.Response(200, text="<Pubmed")) as client:
            with pytest.raises(FetchError):
                await fetch_records(
                    client=client, pmids=["1"], timeout_seconds=30, user_agent=USER_AGENT
                )

    @pytest.mark.asyncio
    async def test_timeout_raises_fetch_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        async with _mock_client(handler) as client:
            with pytest.raises(FetchError):
                await fetch_records(
                    client=client, pmids=["1"], timeout_seconds=1, user_agent=USER_AGENT
                )


def test_service_errors_share_a_base() -> None:
    assert issubclass(GatewayError, PubMedServiceError)
    assert issubclass(FetchError, PubMedServiceError)
