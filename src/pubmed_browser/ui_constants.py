"""Internal UI constants for the PubMedBrowser app."""

from __future__ import annotations

from textual.binding import Binding, BindingType

APP_CSS = """
Screen {
    background: $th-background;
}

Header {
    background: $th-panel-alt;
    color: $th-text;
}

#search-panel {
    height: auto;
    padding: 0 1;
    background: $th-panel;
}

#search-bar,
#recommend-bar {
    height: auto;
}

#query-input {
    width: 1fr;
    border: tall $th-accent;
    background: $th-background;
}

#query-input:focus {
    border: tall $th-accent-alt;
}

#days-input {
    width: 12;
    background: $th-background;
}

#sort-select {
    width: 24;
}

#recommend-label {
    padding: 1 1 0 0;
    color: $th-muted;
}

.recommend-btn {
    min-width: 8;
    margin-right: 1;
}

#status-text {
    padding: 0 1;
    color: $th-accent-alt;
}

#main-container {
    height: 1fr;
}

#results-pane {
    width: 3fr;
    height: 100%;
    border: tall $th-highlight;
}

#saved-pane {
    width: 2fr;
    height: 100%;
    border: tall $th-highlight;
}

#results-pane:focus-within,
#saved-pane:focus-within {
    border: tall $th-accent;
}

#results-header,
#saved-header {
    padding: 0 1;
    color: $th-accent;
    text-style: bold;
}

#saved-status {
    padding: 0 1;
    color: $th-muted;
}

#results,
#saved-list {
    height: 1fr;
    padding: 0 1;
}
"""

APP_BINDINGS: list[BindingType] = [
    Binding("slash", "focus_query", "Search"),
    Binding("ctrl+t", "cycle_theme", "Theme"),
    Binding("q", "quit", "Quit"),
]
