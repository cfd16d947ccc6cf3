import pytest

from citation_resolver.core.identifiers import (
    extract_doi,
    extract_identifier,
    match_url_pattern,
    normalize_doi,
    trim_captured_tail,
)
from citation_resolver.core.models import Identifier, IdentifierKind, InputRecord


def test_normalize_doi_strips_prefixes_and_lowercases():
    assert normalize_doi("https://doi.org/10.1000/ABC") == "10.1000/abc"
    assert normalize_doi("DOI:10.1000/XYZ") == "10.1000/xyz"
    assert normalize_doi("  HTTPS://DX.DOI.ORG/10.5555/ABC  ") == "10.5555/abc"


def test_normalize_doi_handles_empty_values():
    assert normalize_doi("") is None
    assert normalize_doi("   ") is None
    assert normalize_doi(None) is None


def test_doi_in_filename_title_drops_file_extension():
    record = InputRecord(title="Smith et al - 2024 - 10.1038/s41586-024-01234-5.pdf")

    assert extract_identifier(record) == Identifier(IdentifierKind.DOI, "10.1038/s41586-024-01234-5")


def test_doi_in_prose_drops_trailing_punctuation_and_unbalanced_bracket():
    record = InputRecord(title="As reported (doi:10.1000/XYZ123).")

    assert extract_identifier(record) == Identifier(IdentifierKind.DOI, "10.1000/xyz123")


def test_trim_keeps_balanced_parentheses():
    assert trim_captured_tail("10.1002/(sici)1097-4636(199910)") == "10.1002/(sici)1097-4636(199910)"
    assert trim_captured_tail("10.1000/abc).") == "10.1000/abc"


def test_doi_in_url_stops_at_query_string():
    record = InputRecord(title="Some paper", url="https://doi.org/10.1145/3292500.3330701?utm_source=feed")

    assert extract_identifier(record) == Identifier(IdentifierKind.DOI, "10.1145/3292500.3330701")


def test_url_is_percent_decoded_before_scanning():
    record = InputRecord(title="Some paper", url="https://example.org/view?ref=10.1234%2Fabc.def")

    assert extract_identifier(record) == Identifier(IdentifierKind.DOI, "10.1234/abc.def")


def test_title_wins_over_url():
    record = InputRecord(
        title="Paper 10.1000/from-title",
        url="https://doi.org/10.1000/from-url",
    )

    assert extract_identifier(record).value == "10.1000/from-title"


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://arxiv.org/abs/1706.03762v5", Identifier(IdentifierKind.ARXIV, "1706.03762")),
        ("https://arxiv.org/pdf/2106.09685.pdf", Identifier(IdentifierKind.ARXIV, "2106.09685")),
        ("https://pubmed.ncbi.nlm.nih.gov/31452104/", Identifier(IdentifierKind.PUBMED, "31452104")),
        (
            "https://www.nature.com/articles/s41586-020-2649-2",
            Identifier(IdentifierKind.DOI, "10.1038/s41586-020-2649-2"),
        ),
        (
            "https://link.springer.com/article/10.1007/s10994-021-05946-3",
            Identifier(IdentifierKind.DOI, "10.1007/s10994-021-05946-3"),
        ),
        (
            "https://journals.plos.org/plosone/article?id=10.1371/journal.pone.0230416",
            Identifier(IdentifierKind.DOI, "10.1371/journal.pone.0230416"),
        ),
        (
            "https://www.semanticscholar.org/paper/Attention-is-All-you-Need-Vaswani/"
            "204e3073870fae3d05bcbc2f6a8e263d9b72e776",
            Identifier(IdentifierKind.PLATFORM, "204e3073870fae3d05bcbc2f6a8e263d9b72e776", "semanticscholar"),
        ),
        (
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=42s",
            Identifier(IdentifierKind.PLATFORM, "dQw4w9WgXcQ", "youtube"),
        ),
        ("https://youtu.be/dQw4w9WgXcQ", Identifier(IdentifierKind.PLATFORM, "dQw4w9WgXcQ", "youtube")),
    ],
)
def test_platform_urls(url, expected):
    assert extract_identifier(InputRecord(title="Untitled", url=url)) == expected
    assert match_url_pattern(url) == expected


def test_arxiv_and_pmid_prefixes_in_title():
    assert extract_identifier(InputRecord(title="arXiv:2106.09685 LoRA")) == Identifier(
        IdentifierKind.ARXIV, "2106.09685"
    )
    assert extract_identifier(InputRecord(title="PMID: 31452104")) == Identifier(IdentifierKind.PUBMED, "31452104")


def test_no_identifier_returns_none():
    assert extract_identifier(InputRecord(title="Notes from the design meeting")) is None
    assert extract_identifier(InputRecord(title="Blog", url="https://example.com/post/42")) is None
    assert match_url_pattern(None) is None
    assert match_url_pattern("") is None


def test_extract_doi_from_free_text():
    assert extract_doi("doi: 10.5555/Example.1") == "10.5555/example.1"
    assert extract_doi("nothing here") is None
    assert extract_doi(None) is None


def test_identifier_string_form():
    assert str(Identifier(IdentifierKind.DOI, "10.1000/x")) == "doi:10.1000/x"
    assert str(Identifier(IdentifierKind.PLATFORM, "abc", "youtube")) == "youtube:abc"


def test_normalize_doi_ignores_non_string_values():
    assert normalize_doi(["10.1000/abc"]) is None
    assert normalize_doi(12345) is None
