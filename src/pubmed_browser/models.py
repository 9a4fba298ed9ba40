"""Data models and constants for the PubMed Browser application."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any

# Application identity, used for platformdirs config paths
CONFIG_APP_NAME = "pubmed-browser"

# E-utilities search constants
SEARCH_MAX_RESULTS = 20
DEFAULT_DAYS_BACK = 365
DEFAULT_SORT = "pub+date"

# Sort keys understood by esearch, in selector order
SORT_OPTIONS: dict[str, str] = {
    "pub+date": "Newest first",
    "relevance": "Best match",
    "Author": "First author",
    "JournalName": "Journal",
}

# Preset shortcuts shown under the search bar
RECOMMENDED_TERMS: list[str] = [
    "cancer immunotherapy",
    "CRISPR",
    "gut microbiome",
    "long COVID",
    "Alzheimer disease",
]

# Durable store key holding the JSON-serialized saved set
SAVED_KEY = "saved_papers"

PUBMED_RECORD_URL = "https://pubmed.ncbi.nlm.nih.gov/{pmid}/"

# Placeholders for metadata missing upstream
NO_TITLE = "(untitled)"
NO_AUTHORS = "No author information"
NO_JOURNAL = "No journal information"
NO_YEAR = "No year information"
NO_ABSTRACT = "No abstract available"


def format_eutils_date(d: date) -> str:
    """Render a date as zero-padded YYYY/MM/DD for esearch."""
    return f"{d.year:04d}/{d.month:02d}/{d.day:02d}"


def record_url(pmid: str) -> str:
    """Return the canonical PubMed page for a PMID."""
    return PUBMED_RECORD_URL.format(pmid=pmid)


@dataclass(slots=True)
class Record:
    """A single PubMed paper."""

    pmid: str
    title: str = NO_TITLE
    authors: str = NO_AUTHORS
    journal: str = NO_JOURNAL
    year: str = NO_YEAR
    abstract: str = NO_ABSTRACT

    @property
    def url(self) -> str:
        return record_url(self.pmid)

    def to_dict(self) -> dict[str, str]:
        return {
            "pmid": self.pmid,
            "title": self.title,
            "authors": self.authors,
            "journal": self.journal,
            "year": self.year,
            "abstract": self.abstract,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Record | None:
        """Build a Record from stored JSON, or None when it has no usable pmid.

        Non-string fields fall back to their placeholders.
        """
        pmid = data.get("pmid")
        if isinstance(pmid, int) and not isinstance(pmid, bool):
            pmid = str(pmid)
        if not isinstance(pmid, str) or not pmid.strip():
            return None

        def _text(key: str, default: str) -> str:
            value = data.get(key)
            return value if isinstance(value, str) and value else default

        return cls(
            pmid=pmid.strip(),
            title=_text("title", NO_TITLE),
            authors=_text("authors", NO_AUTHORS),
            journal=_text("journal", NO_JOURNAL),
            year=_text("year", NO_YEAR),
            abstract=_text("abstract", NO_ABSTRACT),
        )


@dataclass(frozen=True, slots=True)
class QueryDescriptor:
    """Normalized esearch parameters for one search."""

    term: str
    sort: str
    date_from: date
    date_to: date

    @property
    def mindate(self) -> str:
        return format_eutils_date(self.date_from)

    @property
    def maxdate(self) -> str:
        return format_eutils_date(self.date_to)


__all__ = [
    "CONFIG_APP_NAME",
    "DEFAULT_DAYS_BACK",
    "DEFAULT_SORT",
    "NO_ABSTRACT",
    "NO_AUTHORS",
    "NO_JOURNAL",
    "NO_TITLE",
    "NO_YEAR",
    "PUBMED_RECORD_URL",
    "RECOMMENDED_TERMS",
    "SAVED_KEY",
    "SEARCH_MAX_RESULTS",
    "SORT_OPTIONS",
    "QueryDescriptor",
    "Record",
    "format_eutils_date",
    "record_url",
]
