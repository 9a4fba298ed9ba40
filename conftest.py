"""Shared test fixtures for PubMed Browser tests."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from pubmed_browser.models import Record
from pubmed_browser.saved import SavedStore
from pubmed_browser.themes import DEFAULT_THEME, THEME_COLORS

# ── Module-level dict isolation ──────────────────────────────────────────────


@pytest.fixture(autouse=True)
def _reset_theme_colors():
    """Restore THEME_COLORS after each test.

    PubMedBrowser.__init__ and theme cycling mutate the module-level palette.
    """
    yield
    THEME_COLORS.clear()
    THEME_COLORS.update(DEFAULT_THEME)


# ── Fakes ────────────────────────────────────────────────────────────────────


class MemoryStore:
    """In-memory key-value store with an optional write failure switch."""

    def __init__(self, data: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(data or {})
        self.fail_writes = False
        self.writes = 0

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> bool:
        self.writes += 1
        if self.fail_writes:
            return False
        self.data[key] = value
        return True


# ── Factories ────────────────────────────────────────────────────────────────


@pytest.fixture
def make_record():
    """Factory fixture for creating Record instances with sensible defaults."""

    def _make(
        pmid: str = "12345678",
        title: str = "Test Paper",
        authors: str = "Kim JH, Lee S",
        journal: str = "Nature",
        year: str = "2024",
        abstract: str = "Test abstract content.",
    ) -> Record:
        return Record(
            pmid=pmid,
            title=title,
            authors=authors,
            journal=journal,
            year=year,
            abstract=abstract,
        )

    return _make


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def saved_store(memory_store) -> SavedStore:
    store = SavedStore(memory_store)
    store.load_all()
    return store


@pytest.fixture
def make_services():
    """Factory fixture for AppServices-shaped fakes with AsyncMock endpoints."""

    def _make(ids=None, records=None, search_error=None, fetch_error=None):
        search = AsyncMock(return_value=list(ids or []))
        if search_error is not None:
            search.side_effect = search_error
        fetch = AsyncMock(return_value=list(records or []))
        if fetch_error is not None:
            fetch.side_effect = fetch_error
        return SimpleNamespace(
            pubmed=SimpleNamespace(search_ids=search, fetch_records=fetch),
        )

    return _make
