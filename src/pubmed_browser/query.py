"""Search query normalization and Rich text helpers."""

from __future__ import annotations

import math
from datetime import date, timedelta

from rich.markup import escape as escape_markup

from pubmed_browser.models import (
    DEFAULT_DAYS_BACK,
    DEFAULT_SORT,
    SORT_OPTIONS,
    QueryDescriptor,
    format_eutils_date,
)


def escape_rich_text(text: str) -> str:
    """Escape text for safe Rich markup rendering."""
    return escape_markup(text) if text else ""


def coerce_days_back(raw: object) -> int:
    """Parse a lookback window in days, defaulting to DEFAULT_DAYS_BACK.

    Accepts ints, floats and numeric strings. Anything missing, non-numeric,
    non-finite or below one day falls back to the default. Fractions are
    truncated.
    """
    if raw is None or isinstance(raw, bool):
        return DEFAULT_DAYS_BACK
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return DEFAULT_DAYS_BACK
    try:
        value = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return DEFAULT_DAYS_BACK
    if not math.isfinite(value) or value < 1:
        return DEFAULT_DAYS_BACK
    return int(value)


def coerce_sort(raw: object) -> str:
    """Return a known esearch sort key, defaulting to publication date."""
    if isinstance(raw, str) and raw in SORT_OPTIONS:
        return raw
    return DEFAULT_SORT


def build_query_descriptor(
    term: str,
    days_back: object = None,
    sort: object = None,
    *,
    today: date | None = None,
) -> QueryDescriptor:
    """Build the esearch descriptor for a term and lookback window.

    The window ends today and starts ``days_back`` days earlier. Inputs are
    defaulted, never rejected; empty terms are filtered by the caller.
    """
    end = today or date.today()
    days = coerce_days_back(days_back)
    try:
        start = end - timedelta(days=days)
    except OverflowError:
        start = date.min
    return QueryDescriptor(
        term=term.strip(),
        sort=coerce_sort(sort),
        date_from=start,
        date_to=end,
    )


__all__ = [
    "build_query_descriptor",
    "coerce_days_back",
    "coerce_sort",
    "escape_rich_text",
    "format_eutils_date",
]
