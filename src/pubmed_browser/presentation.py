"""Presentation models: pure projections from Record to display state."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Literal

from pubmed_browser.models import Record, record_url

CardContext = Literal["results", "saved"]

ABSTRACT_SHOW_LABEL = "Show abstract"
ABSTRACT_HIDE_LABEL = "Hide abstract"
SAVE_LABEL = "Save"
SAVED_LABEL = "Saved"
REMOVE_LABEL = "Remove"


@dataclass(frozen=True, slots=True)
class RecordView:
    """Everything a UI needs to draw one record card."""

    pmid: str
    title: str
    author_line: str
    venue_line: str
    link_url: str
    link_label: str
    abstract: str
    abstract_visible: bool
    toggle_label: str
    action: Literal["save", "remove"]
    action_label: str
    action_enabled: bool


def _toggle_label(visible: bool) -> str:
    return ABSTRACT_HIDE_LABEL if visible else ABSTRACT_SHOW_LABEL


def build_record_view(
    record: Record,
    *,
    context: CardContext,
    is_saved: bool = False,
    abstract_visible: bool = False,
) -> RecordView:
    """Project a record into a card for the results or saved list."""
    if context == "saved":
        action: Literal["save", "remove"] = "remove"
        action_label = REMOVE_LABEL
        action_enabled = True
    else:
        action = "save"
        action_label = SAVED_LABEL if is_saved else SAVE_LABEL
        action_enabled = not is_saved

    return RecordView(
        pmid=record.pmid,
        title=record.title,
        author_line=f"Authors: {record.authors}",
        venue_line=f"{record.journal} / {record.year}",
        link_url=record_url(record.pmid),
        link_label=f"PMID: {record.pmid}",
        abstract=record.abstract,
        abstract_visible=abstract_visible,
        toggle_label=_toggle_label(abstract_visible),
        action=action,
        action_label=action_label,
        action_enabled=action_enabled,
    )


def toggle_abstract(view: RecordView) -> RecordView:
    """Flip abstract visibility and relabel the toggle."""
    visible = not view.abstract_visible
    return replace(view, abstract_visible=visible, toggle_label=_toggle_label(visible))


def with_saved_state(view: RecordView, is_saved: bool) -> RecordView:
    """Re-project the save action after the saved set changed.

    Remove actions are unaffected.
    """
    if view.action != "save":
        return view
    return replace(
        view,
        action_label=SAVED_LABEL if is_saved else SAVE_LABEL,
        action_enabled=not is_saved,
    )


__all__ = [
    "ABSTRACT_HIDE_LABEL",
    "ABSTRACT_SHOW_LABEL",
    "REMOVE_LABEL",
    "SAVED_LABEL",
    "SAVE_LABEL",
    "CardContext",
    "RecordView",
    "build_record_view",
    "toggle_abstract",
    "with_saved_state",
]
