"""UI-facing status copy for search and saved-list states."""

from __future__ import annotations

STATUS_EMPTY_QUERY = "Enter a search term first."
STATUS_SEARCHING = "Searching PubMed..."
STATUS_NO_RESULTS = "No papers matched your search."
STATUS_SEARCH_FAILED = "Something went wrong while loading papers. Please try again shortly."
STATUS_NO_SAVED = "No saved papers."


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


def build_loaded_status(count: int) -> str:
    """Status line after a successful search."""
    return f"Loaded {_plural(count, 'paper')}."


def build_saved_status(count: int) -> str:
    """Header line for the saved list."""
    if count <= 0:
        return STATUS_NO_SAVED
    return _plural(count, "saved paper")


def build_persist_warning(action: str) -> str:
    """Notification shown when the saved set could not be written."""
    return f"Could not {action.strip()} permanently; the change will be lost on exit."


__all__ = [
    "STATUS_EMPTY_QUERY",
    "STATUS_NO_RESULTS",
    "STATUS_NO_SAVED",
    "STATUS_SEARCHING",
    "STATUS_SEARCH_FAILED",
    "build_loaded_status",
    "build_persist_warning",
    "build_saved_status",
]
