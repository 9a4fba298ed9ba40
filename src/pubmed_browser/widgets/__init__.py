"""Widget classes for modular UI composition."""

from pubmed_browser.widgets.cards import RecordCard

__all__ = ["RecordCard"]
