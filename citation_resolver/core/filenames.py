"""Heuristics for titles that are really filenames.

Scraped sources are frequently uploaded documents whose title is the file
name, e.g. ``"Smith et al - 2024 - Deep Models.pdf"``. These helpers turn such
strings into search-friendly titles and pull out a first-author surname and
publication year when the name follows a common convention.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Optional, Pattern, Sequence, Tuple

_DASH = r"[-–—]"

_EXTENSION = re.compile(r"\.(pdf|docx?|xlsx?|pptx?)$", re.IGNORECASE)
_QUOTES = re.compile(r"[\"']")
_PLATFORM_SUFFIX = re.compile(r"\s*-\s*(arXiv|ResearchGate|YouTube).*$", re.IGNORECASE)
_ET_AL = re.compile(r"\s+et\s+al\.?\s*", re.IGNORECASE)
_STANDALONE_YEAR = re.compile(r"\s*\d{4}\s*-\s*")
_COAUTHORS = re.compile(r"\s+(&|and)\s+.*")


@dataclass(frozen=True)
class FilenameMetadata:
    author: Optional[str] = None
    year: Optional[int] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.author) and self.year is not None


def clean_title_for_search(title: str) -> str:
    """Strip file extensions, quotes, platform suffixes and year separators."""

    cleaned = _EXTENSION.sub("", title)
    cleaned = _QUOTES.sub("", cleaned)
    cleaned = _PLATFORM_SUFFIX.sub("", cleaned)
    cleaned = _ET_AL.sub(" ", cleaned, count=1)
    cleaned = _STANDALONE_YEAR.sub(" ", cleaned)
    return " ".join(cleaned.split())


def _first_author(raw: str) -> str:
    return _COAUTHORS.sub("", raw).strip()


# Ordered by priority; the first matching pattern wins.
_FILENAME_PATTERNS: Sequence[Tuple[str, Pattern[str], Callable[[str], str]]] = (
    # "Smith et al - 2024 - Title" / "Smith et al. – 2024"
    ("et_al", re.compile(rf"^([^-]+?)\s+et\s+al\.?\s*{_DASH}\s*(\d{{4}})", re.IGNORECASE), str.strip),
    # "Jones & Brown (2023) - Title"
    ("parenthesized_year", re.compile(r"^([^(]+?)\s*\((\d{4})\)"), _first_author),
    # "Smith - 2024 - Title"
    ("dashed", re.compile(rf"^([A-Z][a-z]+(?:-[A-Z][a-z]+)?)\s*{_DASH}\s*(\d{{4}})"), str.strip),
    # "Smith 2024 Title"
    ("spaced", re.compile(r"^([A-Z][a-z]+(?:\s+[A-Z][a-z]+)?)\s*(\d{4})\s+"), str.strip),
)


def parse_filename_metadata(title: str) -> FilenameMetadata:
    """Parse a first-author surname and year out of a filename-shaped title."""

    if not title:
        return FilenameMetadata()

    for _, pattern, author_of in _FILENAME_PATTERNS:
        match = pattern.match(title)
        if not match:
            continue
        author = author_of(match.group(1))
        if not author:
            continue
        return FilenameMetadata(author=author, year=int(match.group(2)))
    return FilenameMetadata()


__all__ = ["FilenameMetadata", "clean_title_for_search", "parse_filename_metadata"]
