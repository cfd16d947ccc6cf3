"""Crossref client for DOI resolution and title search."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests
from lxml import etree, html

from citation_resolver.core.identifiers import normalize_doi
from citation_resolver.core.matching import title_similarity
from citation_resolver.core.models import CandidateMetadata
from citation_resolver.providers.clients.base import BaseHttpClient, text_or_none, tolerates_malformed_payload

logger = logging.getLogger(__name__)

_DATE_KEYS = ("published", "issued", "published-print", "published-online", "created")


@dataclass(frozen=True)
class DoiSearchHit:
    """Top Crossref hit for a title query, with its native relevance score."""

    doi: str
    score: float
    title: Optional[str] = None


class CrossrefClient(BaseHttpClient):
    """Lightweight wrapper around the Crossref works API."""

    BASE_URL = "https://api.crossref.org"
    PROVIDER = "crossref"

    def __init__(
        self,
        *,
        session: Optional[requests.Session] = None,
        base_url: Optional[str] = None,
        timeout: float = 10.0,
        max_attempts: int = 1,
        mailto: Optional[str] = None,
        title_threshold: float = 0.7,
        structured_threshold: float = 0.75,
        year_match_bonus: float = 0.2,
        min_doi_score: float = 30.0,
        identifier_confidence: float = 1.0,
    ) -> None:
        super().__init__(session=session, base_url=base_url, timeout=timeout, max_attempts=max_attempts)
        self.mailto = mailto
        self.title_threshold = title_threshold
        self.structured_threshold = structured_threshold
        self.year_match_bonus = year_match_bonus
        self.min_doi_score = min_doi_score
        self.identifier_confidence = identifier_confidence

    @tolerates_malformed_payload
    def works_by_doi(self, doi: str) -> Optional[CandidateMetadata]:
        """Resolve a DOI to authoritative metadata."""

        normalized_doi = normalize_doi(doi)
        if not normalized_doi:
            return None

        payload = self._get_json(
            f"/works/{quote(normalized_doi, safe='/')}",
            operation="works_by_doi",
            identifier=normalized_doi,
            params=self._polite_params(),
        )
        if payload is None:
            return None
        message = payload.get("message")
        if not isinstance(message, dict):
            return None
        return self._to_candidate(message, confidence=self.identifier_confidence, provider_tag="crossref:doi")

    @tolerates_malformed_payload
    def search_by_title(self, title: str) -> Optional[CandidateMetadata]:
        """Return the top title-search hit when it is similar enough."""

        if not title:
            return None

        item = self._top_item(
            {"query.title": title, "rows": 3},
            operation="search_by_title",
            identifier=title,
        )
        if item is None:
            return None

        confidence = title_similarity(title, self._first(item.get("title")) or "")
        if confidence < self.title_threshold:
            logger.debug("Crossref title match rejected: similarity=%.2f title=%s", confidence, title)
            return None
        return self._to_candidate(item, confidence=confidence, provider_tag="crossref:title-search")

    @tolerates_malformed_payload
    def search_by_author_year(self, author: str, year: int, title: str) -> Optional[CandidateMetadata]:
        """Query with author and publication-year constraints.

        The confidence is the title similarity plus ``year_match_bonus`` when
        the returned work was published in ``year``, clamped to 1.0.
        """

        if not author or not title:
            return None

        item = self._top_item(
            {
                "query.author": author,
                "query.title": title,
                "filter": f"from-pub-date:{year},until-pub-date:{year}",
                "rows": 3,
            },
            operation="search_by_author_year",
            identifier=f"{author}:{year}",
        )
        if item is None:
            return None

        similarity = title_similarity(title, self._first(item.get("title")) or "")
        item_year = self._extract_year(item)
        bonus = self.year_match_bonus if item_year == year else 0.0
        confidence = min(1.0, similarity + bonus)
        if confidence < self.structured_threshold:
            logger.debug("Crossref author/year match rejected: confidence=%.2f title=%s", confidence, title)
            return None

        candidate = self._to_candidate(item, confidence=confidence, provider_tag="crossref:author-year")
        if candidate.year is None:
            candidate.year = year
        return candidate

    @tolerates_malformed_payload
    def find_doi_by_title(self, title: str) -> Optional[DoiSearchHit]:
        """Look up a DOI for ``title`` using Crossref's own relevance score.

        The floor is deliberately lenient: a wrong DOI is corrected by the
        metadata fetched for it, while a missed DOI loses the match entirely.
        """

        if not title:
            return None

        item = self._top_item(
            {"query.title": title, "rows": 1, "select": "DOI,title,score"},
            operation="find_doi_by_title",
            identifier=title,
        )
        if item is None:
            return None

        doi = normalize_doi(item.get("DOI"))
        score = self._as_float(item.get("score"))
        if not doi:
            return None
        if score < self.min_doi_score:
            logger.debug("Crossref DOI search below floor: score=%.1f doi=%s", score, doi)
            return None
        return DoiSearchHit(doi=doi, score=score, title=self._first(item.get("title")))

    def _polite_params(self) -> Optional[Dict[str, Any]]:
        return {"mailto": self.mailto} if self.mailto else None

    def _top_item(self, params: Dict[str, Any], *, operation: str, identifier: str) -> Optional[Dict[str, Any]]:
        query = dict(params)
        if self.mailto:
            query["mailto"] = self.mailto
        payload = self._get_json("/works", operation=operation, identifier=identifier, params=query)
        if payload is None:
            return None
        message = payload.get("message")
        items = message.get("items") if isinstance(message, dict) else None
        if not isinstance(items, list) or not items or not isinstance(items[0], dict):
            return None
        return items[0]

    def _to_candidate(self, data: Dict[str, Any], *, confidence: float, provider_tag: str) -> CandidateMetadata:
        doi = normalize_doi(data.get("DOI"))
        extras: Dict[str, Any] = {}
        issn = self._first(data.get("ISSN"))
        if issn:
            extras["issn"] = issn
        citation_count = data.get("is-referenced-by-count")
        if isinstance(citation_count, int) and citation_count:
            extras["citation_count"] = citation_count
        if data.get("type"):
            extras["crossref_type"] = data["type"]

        url = text_or_none(data.get("URL")) or (f"https://doi.org/{doi}" if doi else None)
        return CandidateMetadata(
            title=self._first(data.get("title")),
            provider_tag=provider_tag,
            confidence=confidence,
            authors=self._extract_authors(data.get("author") or []),
            year=self._extract_year(data),
            abstract=self._clean_abstract(data.get("abstract")),
            venue=self._first(data.get("container-title")),
            volume=self._as_text(data.get("volume")),
            issue=self._as_text(data.get("issue")),
            pages=self._as_text(data.get("page")),
            doi=doi,
            url=url,
            publisher=self._as_text(data.get("publisher")),
            date=self._format_date(data),
            extras=extras,
        )

    def _extract_authors(self, authors: Any) -> List[str]:
        extracted: List[str] = []
        if not isinstance(authors, list):
            return extracted
        for author in authors:
            if not isinstance(author, dict):
                continue
            family = text_or_none(author.get("family"))
            given = text_or_none(author.get("given"))
            if family and given:
                extracted.append(f"{given} {family}")
            elif family or given:
                extracted.append(family or given)
            elif text_or_none(author.get("name")):
                extracted.append(author["name"].strip())
        return extracted

    def _date_parts(self, data: Dict[str, Any]) -> Optional[List[Any]]:
        for key in _DATE_KEYS:
            component = data.get(key)
            if not isinstance(component, dict):
                continue
            parts = component.get("date-parts")
            if isinstance(parts, list) and parts and isinstance(parts[0], list) and parts[0]:
                if isinstance(parts[0][0], int):
                    return parts[0]
        return None

    def _extract_year(self, data: Dict[str, Any]) -> Optional[int]:
        parts = self._date_parts(data)
        return parts[0] if parts else None

    def _format_date(self, data: Dict[str, Any]) -> Optional[str]:
        parts = self._date_parts(data)
        if not parts:
            return None
        year = parts[0]
        month = parts[1] if len(parts) > 1 and isinstance(parts[1], int) else None
        day = parts[2] if len(parts) > 2 and isinstance(parts[2], int) else None
        if month and day:
            return f"{year}-{month:02d}-{day:02d}"
        if month:
            return f"{year}-{month:02d}"
        return str(year)

    def _clean_abstract(self, abstract: Any) -> Optional[str]:
        if not isinstance(abstract, str) or not abstract.strip():
            return None
        try:
            text = html.fragment_fromstring(abstract, create_parent="div").text_content()
        except (etree.ParserError, ValueError):
            logger.debug("Dropping unparseable Crossref abstract")
            return None
        cleaned = " ".join(text.split())
        return cleaned or None

    @staticmethod
    def _first(value: Any) -> Optional[str]:
        if isinstance(value, list):
            value = value[0] if value else None
        return text_or_none(value)

    @staticmethod
    def _as_text(value: Any) -> Optional[str]:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return text_or_none(value)

    @staticmethod
    def _as_float(value: Any) -> float:
        try:
            return float(value)
        except (TypeError, ValueError):
            return 0.0
