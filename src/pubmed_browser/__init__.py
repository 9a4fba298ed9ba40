"""PubMed Browser - search recent PubMed papers and keep a saved reading list."""

from pubmed_browser.cli import main
from pubmed_browser.models import QueryDescriptor, Record

__all__ = ["QueryDescriptor", "Record", "main"]
