from __future__ import annotations

import re

from .models import InputRecord, SourceType

_DOCUMENT_EXTENSION = re.compile(r"\.(pdf|docx?)$", re.IGNORECASE)
_YEAR = re.compile(r"\d{4}")
_ACADEMIC_KEYWORDS = ("et al", "journal", "conference")

# Titles longer than this are treated as article headlines.
WEB_TITLE_MIN_LENGTH = 20


def detect_source_type(record: InputRecord) -> SourceType:
    """Classify a record from keywords and shape of its title and URL.

    The result only chooses which strategies run first; the resolver still
    falls through to the generic strategies when they fail.
    """

    title = record.title.lower()
    url = (record.url or "").lower()

    if "youtube" in title or "youtube.com" in url or "youtu.be" in url:
        return SourceType.YOUTUBE

    if "arxiv" in title or "arxiv.org" in url:
        return SourceType.ARXIV

    if (
        record.type == "pdf"
        or _DOCUMENT_EXTENSION.search(title)
        or _YEAR.search(title)
        or any(keyword in title for keyword in _ACADEMIC_KEYWORDS)
    ):
        return SourceType.ACADEMIC

    if url or len(title) > WEB_TITLE_MIN_LENGTH:
        return SourceType.WEB

    return SourceType.UNKNOWN


__all__ = ["WEB_TITLE_MIN_LENGTH", "detect_source_type"]
