"""PubMed E-utilities service helpers for id search and record fetches."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from pubmed_browser.models import SEARCH_MAX_RESULTS, QueryDescriptor, Record
from pubmed_browser.parsing import parse_esearch_ids, parse_pubmed_articles

logger = logging.getLogger(__name__)

EUTILS_BASE_URL = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils"
ESEARCH_URL = f"{EUTILS_BASE_URL}/esearch.fcgi"
EFETCH_URL = f"{EUTILS_BASE_URL}/efetch.fcgi"


class PubMedServiceError(RuntimeError):
    """Base error for failed E-utilities requests."""


class GatewayError(PubMedServiceError):
    """The esearch request failed."""


class FetchError(PubMedServiceError):
    """The efetch request failed."""


def build_search_params(descriptor: QueryDescriptor, api_key: str = "") -> dict[str, str]:
    """Build esearch query parameters for a descriptor."""
    params = {
        "db": "pubmed",
        "retmode": "json",
        "retmax": str(SEARCH_MAX_RESULTS),
        "term": descriptor.term,
        "sort": descriptor.sort,
        "datetype": "pdat",
        "mindate": descriptor.mindate,
        "maxdate": descriptor.maxdate,
    }
    if api_key:
        params["api_key"] = api_key
    return params


def build_fetch_params(pmids: Sequence[str], api_key: str = "") -> dict[str, str]:
    """Build efetch query parameters for a batch of PMIDs."""
    params = {
        "db": "pubmed",
        "id": ",".join(pmids),
        "retmode": "xml",
    }
    if api_key:
        params["api_key"] = api_key
    return params


async def _get(
    client: httpx.AsyncClient | None,
    url: str,
    *,
    params: dict[str, str],
    timeout_seconds: float,
    user_agent: str,
) -> httpx.Response:
    headers = {"User-Agent": user_agent}
    if client is not None:
        response = await client.get(url, params=params, headers=headers, timeout=timeout_seconds)
    else:
        async with httpx.AsyncClient() as tmp_client:
            response = await tmp_client.get(
                url, params=params, headers=headers, timeout=timeout_seconds
            )
    response.raise_for_status()
    return response


async def search_ids(
    *,
    client: httpx.AsyncClient | None,
    descriptor: QueryDescriptor,
    timeout_seconds: float,
    user_agent: str,
    api_key: str = "",
) -> list[str]:
    """Run esearch and return up to SEARCH_MAX_RESULTS PMIDs.

    Raises:
        GatewayError: On transport failure, non-success status, or a non-JSON body.
    """
    try:
        response = await _get(
            client,
            ESEARCH_URL,
            params=build_search_params(descriptor, api_key),
            timeout_seconds=timeout_seconds,
            user_agent=user_agent,
        )
    except httpx.HTTPStatusError as exc:
        raise GatewayError(f"esearch returned HTTP {exc.response.status_code}") from exc
    except httpx.HTTPError as exc:
        raise GatewayError(f"esearch request failed: {exc}") from exc

    try:
        payload: Any = response.json()
    except ValueError as exc:
        raise GatewayError("esearch returned a non-JSON body") from exc

    ids = parse_esearch_ids(payload)
    logger.debug(
        "esearch %r (%s..%s) -> %d ids",
        descriptor.term,
        descriptor.mindate,
        descriptor.maxdate,
        len(ids),
    )
    return ids


async def fetch_records(
    *,
    client: httpx.AsyncClient | None,
    pmids: Sequence[str],
    timeout_seconds: float,
    user_agent: str,
    api_key: str = "",
) -> list[Record]:
    """Run efetch for a batch of PMIDs and parse the XML into Records.

    Raises:
        ValueError: If ``pmids`` is empty.
        FetchError: On transport failure, non-success status, or malformed XML.
    """
    if not pmids:
        raise ValueError("fetch_records requires at least one PMID")

    try:
        response = await _get(
            client,
            EFETCH_URL,
            params=build_fetch_params(pmids, api_key),
            timeout_seconds=timeout_seconds,
            user_agent=user_agent,
        )
    except httpx.HTTPStatusError as exc:
        raise FetchError(f"efetch returned HTTP {exc.response.status_code}") from exc
    except httpx.HTTPError as exc:
        raise FetchError(f"efetch request failed: {exc}") from exc

    try:
        records = parse_pubmed_articles(response.text)
    except ValueError as exc:
        raise FetchError(str(exc)) from exc

    logger.debug("efetch %d ids -> %d records", len(pmids), len(records))
    return records


__all__ = [
    "EFETCH_URL",
    "ESEARCH_URL",
    "FetchError",
    "GatewayError",
    "PubMedServiceError",
    "build_fetch_params",
    "build_search_params",
    "fetch_records",
    "search_ids",
]
