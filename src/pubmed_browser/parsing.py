"""PubMed E-utilities response parsing (esearch JSON, efetch XML)."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pubmed_browser.models import (
    NO_ABSTRACT,
    NO_AUTHORS,
    NO_JOURNAL,
    NO_TITLE,
    NO_YEAR,
    SEARCH_MAX_RESULTS,
    Record,
)

logger = logging.getLogger(__name__)

ARTICLE_TAG = "PubmedArticle"
AUTHOR_SEPARATOR = ", "
ABSTRACT_SEPARATOR = "\n\n"


def element_text(node: ET.Element | None) -> str:
    """Return the stripped text content of a node, including nested markup."""
    if node is None:
        return ""
    return "".join(node.itertext()).strip()


def format_author(last_name: str, initials: str) -> str:
    """Format one author as "LastName Initials".

    Returns an empty string when the last name is missing so the caller
    can drop the entry.
    """
    last_name = last_name.strip()
    initials = initials.strip()
    if not last_name:
        return ""
    return f"{last_name} {initials}" if initials else last_name


def _collect_authors(nodes: list[ET.Element]) -> str:
    names = (
        format_author(element_text(node.find("LastName")), element_text(node.find("Initials")))
        for node in nodes
    )
    return AUTHOR_SEPARATOR.join(name for name in names if name)


def _collect_abstract(nodes: list[ET.Element]) -> str:
    parts = (element_text(node) for node in nodes)
    return ABSTRACT_SEPARATOR.join(part for part in parts if part)


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """Maps element paths inside a PubmedArticle to one Record field.

    Scalar fields (``collect`` is None) take the first path with non-empty
    text. Collected fields gather every match of the first path and reduce
    them with ``collect``. Either way an empty result becomes ``default``.
    """

    name: str
    paths: tuple[str, ...]
    default: str
    collect: Callable[[list[ET.Element]], str] | None = None

    def extract(self, article: ET.Element) -> str:
        if self.collect is not None:
            value = self.collect(article.findall(self.paths[0]))
            return value or self.default
        for path in self.paths:
            value = element_text(article.find(path))
            if value:
                return value
        return self.default


RECORD_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("pmid", (".//PMID",), ""),
    FieldSpec("title", (".//ArticleTitle",), NO_TITLE),
    FieldSpec("authors", (".//Author",), NO_AUTHORS, collect=_collect_authors),
    FieldSpec("journal", (".//Journal/Title",), NO_JOURNAL),
    FieldSpec("year", (".//PubDate/Year", ".//ArticleDate/Year"), NO_YEAR),
    FieldSpec("abstract", (".//AbstractText",), NO_ABSTRACT, collect=_collect_abstract),
)


def parse_pubmed_article(article: ET.Element) -> Record | None:
    """Deserialize one PubmedArticle element, or None when it has no PMID."""
    values = {spec.name: spec.extract(article) for spec in RECORD_FIELDS}
    if not values["pmid"]:
        return None
    return Record(**values)


def parse_pubmed_articles(xml_text: str) -> list[Record]:
    """Parse an efetch XML payload into Records.

    Raises:
        ValueError: If the payload is not well-formed XML.
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as exc:
        raise ValueError(f"Malformed efetch XML: {exc}") from exc

    records: list[Record] = []
    for article in root.iter(ARTICLE_TAG):
        record = parse_pubmed_article(article)
        if record is None:
            logger.debug("Skipping %s without a PMID", ARTICLE_TAG)
            continue
        records.append(record)
    return records


def parse_esearch_ids(payload: Any) -> list[str]:
    """Extract ``esearchresult.idlist`` from an esearch JSON body.

    A missing or mistyped path means "no results", not an error.
    """
    if not isinstance(payload, dict):
        return []
    result = payload.get("esearchresult")
    if not isinstance(result, dict):
        return []
    id_list = result.get("idlist")
    if not isinstance(id_list, list):
        return []
    ids = [str(item).strip() for item in id_list if isinstance(item, (str, int))]
    return [pmid for pmid in ids if pmid][:SEARCH_MAX_RESULTS]


__all__ = [
    "ABSTRACT_SEPARATOR",
    "ARTICLE_TAG",
    "AUTHOR_SEPARATOR",
    "RECORD_FIELDS",
    "FieldSpec",
    "element_text",
    "format_author",
    "parse_esearch_ids",
    "parse_pubmed_article",
    "parse_pubmed_articles",
]
