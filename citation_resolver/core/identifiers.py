"""Deterministic identifier extraction from record titles and URLs.

Patterns are tried in table order and the first match wins. Nothing here
performs I/O or raises on unexpected input; a miss is reported as ``None``.
"""

from __future__ import annotations

import re
from typing import Callable, Optional, Pattern, Sequence, Tuple
from urllib.parse import unquote

from .models import Identifier, IdentifierKind, InputRecord

_DOI_PREFIX_PATTERN = re.compile(r"^(https?://)?(dx\.)?doi\.org/", re.IGNORECASE)

_FILE_EXTENSION_TAIL = re.compile(r"\.(pdf|docx?|html?|xml|txt|epub|ris|bib)$", re.IGNORECASE)
_TRAILING_PUNCTUATION = ".,;:'\"]}>"

IdentifierBuilder = Callable[[str], Optional[Identifier]]


def normalize_doi(doi: str | None) -> str | None:
    """Normalize a DOI string into a canonical lowercase form.

    The normalization removes leading DOI prefixes (e.g., ``https://doi.org/`` or
    ``doi:``), trims whitespace, and lowercases the remaining identifier. Empty
    or missing values return ``None``, as do non-string values.
    """

    if not doi or not isinstance(doi, str):
        return None

    cleaned = doi.strip()
    cleaned = _DOI_PREFIX_PATTERN.sub("", cleaned)
    if cleaned.lower().startswith("doi:"):
        cleaned = cleaned.split(":", 1)[1]
    cleaned = cleaned.strip().lower()

    return cleaned or None


def trim_captured_tail(value: str) -> str:
    """Remove punctuation and file extensions picked up by greedy patterns."""

    cleaned = value.strip()
    while cleaned:
        previous = cleaned
        cleaned = _FILE_EXTENSION_TAIL.sub("", cleaned)
        cleaned = cleaned.rstrip(_TRAILING_PUNCTUATION).rstrip()
        # DOIs may legitimately contain balanced parentheses.
        if cleaned.endswith(")") and cleaned.count(")") > cleaned.count("("):
            cleaned = cleaned[:-1]
        if cleaned == previous:
            break
    return cleaned


def _doi(raw: str) -> Optional[Identifier]:
    value = normalize_doi(trim_captured_tail(raw))
    if not value or "/" not in value:
        return None
    return Identifier(IdentifierKind.DOI, value)


def _nature_doi(raw: str) -> Optional[Identifier]:
    return _doi(f"10.1038/{raw}")


def _arxiv(raw: str) -> Optional[Identifier]:
    value = trim_captured_tail(raw)
    value = re.sub(r"v\d+$", "", value)
    return Identifier(IdentifierKind.ARXIV, value) if value else None


def _pubmed(raw: str) -> Optional[Identifier]:
    return Identifier(IdentifierKind.PUBMED, raw.strip())


def _platform(platform: str) -> IdentifierBuilder:
    def build(raw: str) -> Optional[Identifier]:
        return Identifier(IdentifierKind.PLATFORM, raw.strip(), platform=platform)

    return build


_ARXIV_ID = r"(\d{4}\.\d{4,5}(?:v\d+)?|[a-z\-]+(?:\.[A-Z]{2})?/\d{7}(?:v\d+)?)"
_DOI_BODY = r"(10\.\d{4,9}/\S+)"
_DOI_URL_BODY = r"(10\.\d{4,9}/[^\s?&#]+)"

PatternTable = Sequence[Tuple[str, Pattern[str], IdentifierBuilder]]


def _doi_patterns(body: str) -> PatternTable:
    return (
        ("standard", re.compile(r"\b" + body, re.IGNORECASE), _doi),
        ("resolver_url", re.compile(r"doi\.org/" + body, re.IGNORECASE), _doi),
        ("prefixed", re.compile(r"doi[:\s]+" + body, re.IGNORECASE), _doi),
    )


DOI_PATTERNS = _doi_patterns(_DOI_BODY)
# In URLs a DOI ends at the query string or fragment.
URL_DOI_PATTERNS = _doi_patterns(_DOI_URL_BODY)

URL_PATTERNS: PatternTable = (
    ("arxiv", re.compile(r"arxiv\.org/(?:abs|pdf)/" + _ARXIV_ID, re.IGNORECASE), _arxiv),
    ("pubmed", re.compile(r"pubmed\.ncbi\.nlm\.nih\.gov/(\d+)", re.IGNORECASE), _pubmed),
    ("ncbi_pubmed", re.compile(r"ncbi\.nlm\.nih\.gov/pubmed/(\d+)", re.IGNORECASE), _pubmed),
    ("doi", re.compile(r"doi\.org/" + _DOI_URL_BODY, re.IGNORECASE), _doi),
    (
        "springer",
        re.compile(r"link\.springer\.com/(?:article|chapter)/" + _DOI_URL_BODY, re.IGNORECASE),
        _doi,
    ),
    (
        "wiley",
        re.compile(
            r"onlinelibrary\.wiley\.com/doi/(?:abs/|full/|epdf/|pdf/)?" + _DOI_URL_BODY,
            re.IGNORECASE,
        ),
        _doi,
    ),
    (
        "acm",
        re.compile(r"dl\.acm\.org/doi/(?:abs/|full/|pdf/)?" + _DOI_URL_BODY, re.IGNORECASE),
        _doi,
    ),
    (
        "plos",
        re.compile(r"journals\.plos\.org/\w+/article\?id=(10\.\d{4,9}/[^\s&#]+)", re.IGNORECASE),
        _doi,
    ),
    ("nature", re.compile(r"nature\.com/articles/([a-z0-9][a-z0-9.\-]+)", re.IGNORECASE), _nature_doi),
    (
        "semanticscholar",
        re.compile(r"semanticscholar\.org/paper/(?:[^/\s]+/)?([0-9a-f]{40})", re.IGNORECASE),
        _platform("semanticscholar"),
    ),
    (
        "youtube",
        re.compile(
            r"(?:youtube\.com/watch\?(?:[^\s#]*&)?v=|youtu\.be/|youtube\.com/(?:embed|shorts)/)"
            r"([A-Za-z0-9_-]{11})",
            re.IGNORECASE,
        ),
        _platform("youtube"),
    ),
    ("embedded_doi", re.compile(_DOI_URL_BODY, re.IGNORECASE), _doi),
)

TITLE_PLATFORM_PATTERNS: PatternTable = (
    ("arxiv_prefix", re.compile(r"\barxiv:\s*" + _ARXIV_ID, re.IGNORECASE), _arxiv),
    ("pmid_prefix", re.compile(r"\bpmid:?\s*(\d{5,9})\b", re.IGNORECASE), _pubmed),
)

PLATFORM_PATTERNS: PatternTable = (
    *(entry for entry in URL_PATTERNS if entry[2] is not _doi),
    *TITLE_PLATFORM_PATTERNS,
)

# DOI shapes first, then platform-specific paths.
TITLE_EXTRACTION_PATTERNS: PatternTable = (*DOI_PATTERNS, *PLATFORM_PATTERNS)
URL_EXTRACTION_PATTERNS: PatternTable = (*URL_DOI_PATTERNS, *PLATFORM_PATTERNS)


def _scan(text: str, table: PatternTable) -> Optional[Identifier]:
    for _, pattern, build in table:
        match = pattern.search(text)
        if not match:
            continue
        identifier = build(match.group(1))
        if identifier is not None:
            return identifier
    return None


def _prepare_url(url: str) -> str:
    try:
        return unquote(url)
    except (TypeError, ValueError):
        return url


def extract_doi(text: str | None) -> Optional[str]:
    """Return the first DOI found in ``text`` or ``None``."""

    if not text:
        return None
    identifier = _scan(text, DOI_PATTERNS)
    return identifier.value if identifier else None


def extract_identifier(record: InputRecord) -> Optional[Identifier]:
    """Extract the first identifier from a record's title, then its URL."""

    if record.title:
        identifier = _scan(record.title, TITLE_EXTRACTION_PATTERNS)
        if identifier:
            return identifier
    if record.url:
        return _scan(_prepare_url(record.url), URL_EXTRACTION_PATTERNS)
    return None


def match_url_pattern(url: str | None) -> Optional[Identifier]:
    """Match ``url`` against known publisher and aggregator URL shapes."""

    if not url:
        return None
    return _scan(_prepare_url(url), URL_PATTERNS)


__all__ = [
    "DOI_PATTERNS",
    "PLATFORM_PATTERNS",
    "TITLE_EXTRACTION_PATTERNS",
    "URL_DOI_PATTERNS",
    "URL_EXTRACTION_PATTERNS",
    "URL_PATTERNS",
    "extract_doi",
    "extract_identifier",
    "match_url_pattern",
    "normalize_doi",
    "trim_captured_tail",
]
