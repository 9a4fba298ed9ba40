"""Record card widget binding a RecordView to Textual widgets."""

from __future__ import annotations

import logging
import webbrowser

from textual import on
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.widgets import Button, Static

from pubmed_browser.models import Record
from pubmed_browser.presentation import (
    CardContext,
    RecordView,
    build_record_view,
    toggle_abstract,
    with_saved_state,
)
from pubmed_browser.query import escape_rich_text
from pubmed_browser.themes import THEME_COLORS

logger = logging.getLogger(__name__)


class RecordCard(Vertical):
    """One paper in the results or saved list."""

    DEFAULT_CSS = """
    RecordCard {
        height: auto;
        padding: 0 1;
        margin-bottom: 1;
        border: tall $th-panel-alt;
        background: $th-panel;
    }

    RecordCard:focus-within {
        border: tall $th-accent;
    }

    RecordCard .card-title {
        text-style: bold;
    }

    RecordCard .card-meta {
        color: $th-muted;
    }

    RecordCard .card-actions {
        height: auto;
    }

    RecordCard .card-actions Button {
        min-width: 10;
        margin-right: 1;
    }

    RecordCard .card-abstract {
        padding: 1 0 0 0;
    }
    """

    class SaveRequested(Message):
        """The user asked to bookmark this card's record."""

        def __init__(self, record: Record) -> None:
            super().__init__()
            self.record = record

    class RemoveRequested(Message):
        """The user asked to drop this card's record from the saved list."""

        def __init__(self, pmid: str) -> None:
            super().__init__()
            self.pmid = pmid

    def __init__(self, record: Record, context: CardContext, is_saved: bool = False) -> None:
        super().__init__(classes=f"record-card {context}-card")
        self.record = record
        self.card_context = context
        self.record_view = build_record_view(record, context=context, is_saved=is_saved)

    def compose(self) -> ComposeResult:
        view = self.record_view
        yield Static(escape_rich_text(view.title), classes="card-title")
        yield Static(escape_rich_text(view.author_line), classes="card-meta card-authors")
        yield Static(escape_rich_text(view.venue_line), classes="card-meta card-venue")
        yield Static(self._link_markup(view), classes="card-link")
        with Horizontal(classes="card-actions"):
            yield Button(view.toggle_label, classes="toggle-abstract")
            yield Button(
                view.action_label,
                classes=f"card-action {view.action}-action",
                disabled=not view.action_enabled,
                variant="error" if view.action == "remove" else "primary",
            )
            yield Button("Open", classes="open-link")
        abstract = Static(escape_rich_text(view.abstract), classes="card-abstract")
        abstract.display = view.abstract_visible
        yield abstract

    @staticmethod
    def _link_markup(view: RecordView) -> str:
        accent = THEME_COLORS["accent"]
        muted = THEME_COLORS["muted"]
        return (
            f"[{accent}]{escape_rich_text(view.link_label)}[/]"
            f"  [{muted}]{escape_rich_text(view.link_url)}[/]"
        )

    def _apply_view(self, view: RecordView) -> None:
        self.record_view = view
        toggle = self.query_one(".toggle-abstract", Button)
        toggle.label = view.toggle_label
        self.query_one(".card-abstract", Static).display = view.abstract_visible
        action = self.query_one(".card-action", Button)
        action.label = view.action_label
        action.disabled = not view.action_enabled

    def set_saved(self, is_saved: bool) -> None:
        """Refresh the save button after the saved set changed."""
        self._apply_view(with_saved_state(self.record_view, is_saved))

    @on(Button.Pressed, ".toggle-abstract")
    def on_toggle_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        self._apply_view(toggle_abstract(self.record_view))

    @on(Button.Pressed, ".card-action")
    def on_action_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if self.record_view.action == "remove":
            self.post_message(self.RemoveRequested(self.record.pmid))
        elif self.record_view.action_enabled:
            self.post_message(self.SaveRequested(self.record))

    @on(Button.Pressed, ".open-link")
    def on_open_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        try:
            webbrowser.open(self.record_view.link_url)
        except webbrowser.Error:
            logger.warning("Could not open %s", self.record_view.link_url, exc_info=True)
            self.notify("Could not open a browser.", severity="warning")


__all__ = ["RecordCard"]
