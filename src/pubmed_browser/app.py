"""PubMed Browser TUI - search PubMed and bookmark papers.

Usage:
    pubmed-browser                         # Open the browser
    pubmed-browser --query "gut microbiome" # Search on start
    pubmed-browser --query CRISPR --print  # Print results without the TUI

Key bindings:
    /       - Focus the search field
    Enter   - Run the search (query or days field)
    Ctrl+t  - Cycle color theme
    q       - Quit
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Any

import httpx
from textual import on
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.widgets import Button, Footer, Header, Input, Label, Select

from pubmed_browser.action_messages import (
    STATUS_EMPTY_QUERY,
    STATUS_SEARCHING,
    build_persist_warning,
    build_saved_status,
)
from pubmed_browser.config import AppSettings, JsonKeyValueStore, save_settings
from pubmed_browser.controller import SearchController
from pubmed_browser.models import SORT_OPTIONS, QueryDescriptor, Record
from pubmed_browser.saved import SavedStore
from pubmed_browser.services.interfaces import AppServices
from pubmed_browser.themes import (
    TEXTUAL_THEMES,
    THEME_NAMES,
    apply_theme_colors,
    next_theme_name,
)
from pubmed_browser.ui_constants import APP_BINDINGS, APP_CSS
from pubmed_browser.widgets import RecordCard

logger = logging.getLogger(__name__)


class PubMedBrowser(App):
    """A TUI application to search PubMed and keep a reading list."""

    TITLE = "PubMed Browser"

    CSS = APP_CSS

    BINDINGS = APP_BINDINGS

    def __init__(
        self,
        settings: AppSettings | None = None,
        saved: SavedStore | None = None,
        services: AppServices | None = None,
        initial_query: str = "",
        save_settings_fn: Callable[[AppSettings], bool] = save_settings,
    ) -> None:
        super().__init__()
        # Register all Textual themes so $th-* CSS variables resolve before compose()
        for textual_theme in TEXTUAL_THEMES.values():
            self.register_theme(textual_theme)
        self._settings = settings or AppSettings()
        self._saved = saved if saved is not None else SavedStore(JsonKeyValueStore())
        self._saved.load_all()
        self._controller = SearchController(self._saved, self._settings, services)
        self._initial_query = initial_query.strip()
        self._save_settings_fn = save_settings_fn
        self._result_records: list[Record] = []

        # Background task tracking (prevent GC of fire-and-forget tasks)
        self._background_tasks: set[asyncio.Task[None]] = set()

        # Shared HTTP client for connection pooling (created in on_mount)
        self._http_client: httpx.AsyncClient | None = None

        self._settings.theme_name = apply_theme_colors(self._settings.theme_name)
        try:
            self.theme = self._settings.theme_name
        except Exception as e:
            logger.debug("Skipping theme activation in current context: %s", e, exc_info=True)

    def get_theme_variable_defaults(self) -> dict[str, str]:
        """Fallback $th-* values so CSS resolves under any active theme."""
        return dict(TEXTUAL_THEMES[THEME_NAMES[0]].variables)

    @property
    def controller(self) -> SearchController:
        return self._controller

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="search-panel"):
            with Horizontal(id="search-bar"):
                yield Input(
                    value=self._initial_query,
                    placeholder="Search PubMed (e.g. cancer immunotherapy)",
                    id="query-input",
                )
                yield Input(
                    value=str(self._settings.days_back),
                    placeholder="Days",
                    id="days-input",
                )
                yield Select(
                    [(label, key) for key, label in SORT_OPTIONS.items()],
                    value=self._settings.sort,
                    allow_blank=False,
                    id="sort-select",
                )
                yield Button("Search", variant="primary", id="search-button")
            with Horizontal(id="recommend-bar"):
                yield Label("Try:", id="recommend-label")
                for i, term in enumerate(self._settings.recommended_terms):
                    yield Button(term, name=term, classes="recommend-btn", id=f"recommend-{i}")
            yield Label("", id="status-text")
        with Horizontal(id="main-container"):
            with Vertical(id="results-pane"):
                yield Label(" Results", id="results-header")
                yield VerticalScroll(id="results")
            with Vertical(id="saved-pane"):
                yield Label(" Saved papers", id="saved-header")
                yield Label("", id="saved-status")
                yield VerticalScroll(id="saved-list")
        yield Footer()

    async def on_mount(self) -> None:
        self._http_client = httpx.AsyncClient()
        self._controller.client = self._http_client
        self.sub_title = build_saved_status(len(self._saved))
        await self._render_saved_list()
        self.query_one("#query-input", Input).focus()
        if self._initial_query:
            self._request_search(self._initial_query)
        logger.debug("App mounted: %d saved papers", len(self._saved))

    async def on_unmount(self) -> None:
        """Save the last lookback/sort and release the HTTP client."""
        if not self._save_settings_fn(self._settings):
            logger.warning("Settings were not saved on exit")

        for task in list(self._background_tasks):
            task.cancel()

        client = self._http_client
        self._http_client = None
        self._controller.client = None
        if client is not None:
            await client.aclose()

    def _track_task(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task[None]:
        """Create an asyncio task and track it to prevent garbage collection."""
        task = asyncio.create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        task.add_done_callback(self._on_task_done)
        return task

    @staticmethod
    def _on_task_done(task: asyncio.Task[None]) -> None:
        """Log unhandled exceptions from background tasks."""
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Unhandled exception in background task: %s", exc, exc_info=exc)

    # ── Search ────────────────────────────────────────────────────────────

    def _sort_value(self) -> str | None:
        value = self.query_one("#sort-select", Select).value
        return value if isinstance(value, str) else None

    def _remember_search(self, descriptor: QueryDescriptor) -> None:
        """Keep the last lookback and sort for the next session."""
        self._settings.days_back = (descriptor.date_to - descriptor.date_from).days
        self._settings.sort = descriptor.sort

    def _set_status(self, text: str) -> None:
        self.query_one("#status-text", Label).update(text)

    def _request_search(self, term: str | None = None) -> None:
        if term is None:
            term = self.query_one("#query-input", Input).value
        self._track_task(self._run_search(term))

    async def _run_search(self, term: str) -> None:
        descriptor = self._controller.prepare(
            term, self.query_one("#days-input", Input).value, self._sort_value()
        )
        if descriptor is None:
            self._set_status(STATUS_EMPTY_QUERY)
            return

        self._remember_search(descriptor)
        self._set_status(STATUS_SEARCHING)
        await self._render_results([])
        outcome = await self._controller.execute(descriptor)
        if outcome.stale:
            return
        self._set_status(outcome.status)
        await self._render_results(outcome.records)

    @on(Input.Submitted, "#query-input")
    def on_query_submitted(self) -> None:
        self._request_search()

    @on(Input.Submitted, "#days-input")
    def on_days_submitted(self) -> None:
        self._request_search()

    @on(Button.Pressed, "#search-button")
    def on_search_pressed(self) -> None:
        self._request_search()

    @on(Button.Pressed, ".recommend-btn")
    def on_recommend_pressed(self, event: Button.Pressed) -> None:
        term = event.button.name or ""
        self.query_one("#query-input", Input).value = term
        self._request_search(term)

    # ── Rendering ─────────────────────────────────────────────────────────

    async def _render_results(self, records: list[Record]) -> None:
        self._result_records = list(records)
        container = self.query_one("#results", VerticalScroll)
        await container.remove_children()
        if records:
            await container.mount_all(
                RecordCard(record, "results", is_saved=self._controller.is_saved(record.pmid))
                for record in records
            )

    async def _render_saved_list(self) -> None:
        self.query_one("#saved-status", Label).update(build_saved_status(len(self._saved)))
        container = self.query_one("#saved-list", VerticalScroll)
        await container.remove_children()
        if len(self._saved):
            await container.mount_all(RecordCard(record, "saved") for record in self._saved.records)

    def _sync_result_cards(self) -> None:
        for card in self.query_one("#results", VerticalScroll).query(RecordCard):
            card.set_saved(self._controller.is_saved(card.record.pmid))

    def _warn_if_not_persisted(self, action: str) -> None:
        if not self._saved.last_persist_ok:
            self.notify(build_persist_warning(action), severity="warning")

    @on(RecordCard.SaveRequested)
    async def on_card_save(self, event: RecordCard.SaveRequested) -> None:
        if not self._controller.save(event.record):
            return
        self._warn_if_not_persisted("save the paper")
        self.sub_title = build_saved_status(len(self._saved))
        self._sync_result_cards()
        await self._render_saved_list()

    @on(RecordCard.RemoveRequested)
    async def on_card_remove(self, event: RecordCard.RemoveRequested) -> None:
        self._controller.remove(event.pmid)
        self._warn_if_not_persisted("remove the paper")
        self.sub_title = build_saved_status(len(self._saved))
        self._sync_result_cards()
        await self._render_saved_list()

    # ── Actions ───────────────────────────────────────────────────────────

    def action_focus_query(self) -> None:
        self.query_one("#query-input", Input).focus()

    async def action_cycle_theme(self) -> None:
        """Cycle through available color themes."""
        name = apply_theme_colors(next_theme_name(self._settings.theme_name))
        self._settings.theme_name = name
        self.theme = name
        # Card markup captured the old palette
        await self._render_results(self._result_records)
        await self._render_saved_list()
        if not self._save_settings_fn(self._settings):
            self.notify("Failed to save theme preference.", severity="warning")
        self.notify(f"Theme: {name}", title="Theme")


__all__ = ["PubMedBrowser"]
