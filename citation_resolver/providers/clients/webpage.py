"""Generic web page metadata from Open Graph, Twitter card and ``<meta>`` tags."""

from __future__ import annotations

import logging
import re
from typing import Optional
from urllib.parse import urlparse

import requests
from lxml import etree, html

from citation_resolver.core.identifiers import extract_doi
from citation_resolver.core.models import CandidateMetadata
from citation_resolver.providers.clients.base import BaseHttpClient, tolerates_malformed_payload

logger = logging.getLogger(__name__)

_YEAR_PREFIX = re.compile(r"^(\d{4})")
_HTML_HEADERS = {"Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.5"}


class WebPageClient(BaseHttpClient):
    """Fetch a page and read the metadata its publisher declares.

    Page metadata is self-reported, so candidates carry a fixed medium
    confidence instead of a similarity score.
    """

    PROVIDER = "web"

    def __init__(
        self,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
        max_attempts: int = 1,
        confidence: float = 0.7,
    ) -> None:
        super().__init__(session=session, timeout=timeout, max_attempts=max_attempts)
        self.confidence = confidence

    @tolerates_malformed_payload
    def fetch_metadata(self, url: str) -> Optional[CandidateMetadata]:
        if not url or not url.lower().startswith(("http://", "https://")):
            return None

        text = self._get_text(url, operation="fetch_page", identifier=url, headers=_HTML_HEADERS)
        if not text:
            return None

        try:
            document = html.fromstring(text)
        except (etree.ParserError, ValueError):
            logger.debug("Discarding unparseable page: %s", url)
            return None

        def meta(*names: str) -> Optional[str]:
            for name in names:
                for attribute in ("property", "name", "itemprop"):
                    values = document.xpath(f'//meta[@{attribute}="{name}"]/@content')
                    for value in values:
                        cleaned = " ".join(str(value).split())
                        if cleaned:
                            return cleaned
            return None

        page_title = document.findtext(".//title")
        title = meta("og:title", "twitter:title") or (" ".join(page_title.split()) if page_title else None)
        author = meta("author", "article:author", "citation_author")
        published = meta("article:published_time", "datePublished", "citation_publication_date")
        year_match = _YEAR_PREFIX.match(published) if published else None

        return CandidateMetadata(
            title=title,
            provider_tag="web:page-metadata",
            confidence=self.confidence,
            authors=[author] if author else [],
            year=int(year_match.group(1)) if year_match else None,
            abstract=meta("og:description", "twitter:description", "description"),
            doi=extract_doi(meta("citation_doi", "dc.identifier", "DC.identifier")),
            url=url,
            publisher=meta("og:site_name", "twitter:site") or urlparse(url).hostname,
            date=published,
        )
