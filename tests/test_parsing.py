"""Tests for E-utilities response parsing."""

from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

from pubmed_browser.models import (
    NO_ABSTRACT,
    NO_AUTHORS,
    NO_JOURNAL,
    NO_TITLE,
    NO_YEAR,
    Record,
)
from pubmed_browser.parsing import (
    element_text,
    format_author,
    parse_esearch_ids,
    parse_pubmed_article,
    parse_pubmed_articles,
)

FULL_ARTICLE = """
<PubmedArticle>
  <MedlineCitation>
    <PMID Version="1">38000001</PMID>
    <Article>
      <Journal>
        <Title>The Lancet</Title>
        <JournalIssue><PubDate><Year>2023</Year><Month>Nov</Month></PubDate></JournalIssue>
      </Journal>
      <ArticleTitle>Checkpoint <i>inhibitors</i> in practice.</ArticleTitle>
      <Abstract>
        <AbstractText Label="BACKGROUND">First part.</AbstractText>
        <AbstractText Label="RESULTS">Second <sup>2</sup> part.</AbstractText>
      </Abstract>
      <AuthorList>
        <Author><LastName>Kim</LastName><Initials>JH</Initials></Author>
        <Author><LastName>Lee</LastName></Author>
        <Author><CollectiveName>Trial Group</CollectiveName></Author>
      </AuthorList>
    </Article>
  </MedlineCitation>
</PubmedArticle>
"""


def _wrap(*articles: str) -> str:
    return "<PubmedArticleSet>" + "".join(articles) + "</PubmedArticleSet>"


class TestFormatAuthor:
    def test_last_name_and_initials(self) -> None:
        assert format_author("Kim", "JH") == "Kim JH"

    def test_missing_initials(self) -> None:
        assert format_author("Kim", "") == "Kim"

    def test_missing_last_name_is_dropped(self) -> None:
        assert format_author("  ", "JH") == ""


def test_element_text_includes_nested_markup() -> None:
    node = ET.fromstring("<ArticleTitle> A <i>B</i> C </ArticleTitle>")
    assert element_text(node) == "A B C"
    assert element_text(None) == ""


class TestParsePubmedArticles:
    def test_full_article(self) -> None:
        records = parse_pubmed_articles(_wrap(FULL_ARTICLE))

        assert records == [
            Record(
                pmid="38000001",
                title="Checkpoint inhibitors in practice.",
                authors="Kim JH, Lee",
                journal="The Lancet",
                year="2023",
                abstract="First part.\n\nSecond 2 part.",
            )
        ]

    def test_missing_fields_use_placeholders(self) -> None:
        xml = _wrap("<PubmedArticle><MedlineCitation><PMID>1</PMID></MedlineCitation></PubmedArticle>")

        (record,) = parse_pubmed_articles(xml)

        assert record == Record(
            pmid="1",
            title=NO_TITLE,
            authors=NO_AUTHORS,
            journal=NO_JOURNAL,
            year=NO_YEAR,
            abstract=NO_ABSTRACT,
        )

    def test_year_falls_back_to_article_date(self) -> None:
        xml = _wrap(
            "<PubmedArticle><PMID>2</PMID>"
            "<Article><ArticleDate><Year>2022</Year></ArticleDate></Article>"
            "</PubmedArticle>"
        )
        assert parse_pubmed_articles(xml)[0].year == "2022"

    def test_pub_date_wins_over_article_date(self) -> None:
        xml = _wrap(
            "<PubmedArticle><PMID>2</PMID><Article>"
            "<Journal><JournalIssue><PubDate><Year>2021</Year></PubDate></JournalIssue></Journal>"
            "<ArticleDate><Year>2022</Year></ArticleDate>"
            "</Article></PubmedArticle>"
        )
        assert parse_pubmed_articles(xml)[0].year == "2021"

    def test_authors_without_last_name_only(self) -> None:
        xml = _wrap(
            "<PubmedArticle><PMID>3</PMID><AuthorList>"
            "<Author><CollectiveName>Consortium</CollectiveName></Author>"
            "</AuthorList></PubmedArticle>"
        )
        assert parse_pubmed_articles(xml)[0].authors == NO_AUTHORS

    def test_empty_abstract_text_uses_placeholder(self) -> None:
        xml = _wrap("<PubmedArticle><PMID>4</PMID><AbstractText>  </AbstractText></PubmedArticle>")
        assert parse_pubmed_articles(xml)[0].abstract == NO_ABSTRACT

    def test_article_without_pmid_is_skipped(self) -> None:
        xml = _wrap(
            "<PubmedArticle><ArticleTitle>No id</ArticleTitle></PubmedArticle>",
            "<PubmedArticle><PMID>5</PMID></PubmedArticle>",
        )
        assert [r.pmid for r in parse_pubmed_articles(xml)] == ["5"]

    def test_preserves_payload_order(self) -> None:
        xml = _wrap(
            "<PubmedArticle><PMID>9</PMID></PubmedArticle>",
            "<PubmedArticle><PMID>7</PMID></PubmedArticle>",
            "<PubmedArticle><PMID>8</PMID></PubmedArticle>",
        )
        assert [r.pmid for r in parse_pubmed_articles(xml)] == ["9", "7", "8"]

    def test_empty_set(self) -> None:
        assert parse_pubmed_articles("<PubmedArticleSet/>") == []

    def test_malformed_xml_raises(self) -> None:
        with pytest.raises(ValueError, match="Malformed"):
            parse_pubmed_articles("<PubmedArticleSet><PubmedArticle>")

    def test_first_pmid_is_the_citation_pmid(self) -> None:
        xml = _wrap(
            "<PubmedArticle><MedlineCitation><PMID>10</PMID>"
            "<CommentsCorrectionsList><CommentsCorrections><PMID>99</PMID>"
            "</CommentsCorrections></CommentsCorrectionsList>"
            "</MedlineCitation></PubmedArticle>"
        )
        assert parse_pubmed_articles(xml)[0].pmid == "10"


def test_parse_pubmed_article_returns_none_without_pmid() -> None:
    assert parse_pubmed_article(ET.fromstring("<PubmedArticle/>")) is None


class TestParseEsearchIds:
    def test_extracts_idlist(self) -> None:
        payload = {"esearchresult": {"count": "2", "idlist": ["111", "222"]}}
        assert parse_esearch_ids(payload) == ["111", "222"]

    def test_caps_at_twenty(self) -> None:
        payload = {"esearchresult": {"idlist": [str(i) for i in range(1, 30)]}}
        assert len(parse_esearch_ids(payload)) == 20

    @pytest.mark.parametrize(
        "payload",
        [
            None,
            [],
            {},
            {"esearchresult": None},
            {"esearchresult": {}},
            {"esearchresult": {"idlist": "123"}},
        ],
    )
    def test_missing_idlist_means_no_results(self, payload) -> None:
        assert parse_esearch_ids(payload) == []

    def test_skips_blank_and_non_scalar_ids(self) -> None:
        payload = {"esearchresult": {"idlist": ["1", "", None, {"x": 1}, 2]}}
        assert parse_esearch_ids(payload) == ["1", "2"]
