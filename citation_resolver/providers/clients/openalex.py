"""Client for querying OpenAlex works by DOI or title."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from citation_resolver.core.identifiers import normalize_doi
from citation_resolver.core.matching import title_similarity
from citation_resolver.core.models import CandidateMetadata
from citation_resolver.providers.clients.base import BaseHttpClient, text_or_none, tolerates_malformed_payload

logger = logging.getLogger(__name__)

ABSTRACT_MAX_CHARS = 1000
MAX_KEYWORDS = 5


def reconstruct_abstract(inverted_index: Any) -> Optional[str]:
    """Rebuild abstract text from OpenAlex's word -> positions index.

    Each word is placed at every position it lists. Positions nobody claims
    are skipped. A malformed index yields ``None`` rather than an error.
    """

    if not isinstance(inverted_index, dict) or not inverted_index:
        return None

    placed: Dict[int, str] = {}
    for word, positions in inverted_index.items():
        if not isinstance(word, str) or not isinstance(positions, list):
            return None
        for position in positions:
            if not isinstance(position, int) or isinstance(position, bool) or position < 0:
                return None
            placed[position] = word

    if not placed:
        return None

    text = " ".join(placed[position] for position in sorted(placed)).strip()
    return text[:ABSTRACT_MAX_CHARS] or None


class OpenAlexClient(BaseHttpClient):
    """Lightweight wrapper around the OpenAlex Works API."""

    BASE_URL = "https://api.openalex.org"
    PROVIDER = "openalex"

    def __init__(
        self,
        *,
        session: Optional[requests.Session] = None,
        base_url: Optional[str] = None,
        timeout: float = 10.0,
        max_attempts: int = 1,
        mailto: Optional[str] = None,
        title_threshold: float = 0.65,
        identifier_confidence: float = 1.0,
    ) -> None:
        super().__init__(session=session, base_url=base_url, timeout=timeout, max_attempts=max_attempts)
        self.mailto = mailto
        self.title_threshold = title_threshold
        self.identifier_confidence = identifier_confidence

    @tolerates_malformed_payload
    def get_by_doi(self, doi: str) -> Optional[CandidateMetadata]:
        normalized_doi = normalize_doi(doi)
        if not normalized_doi:
            return None

        encoded = quote(f"https://doi.org/{normalized_doi}", safe="")
        payload = self._get_json(
            f"/works/{encoded}",
            operation="work_lookup",
            identifier=normalized_doi,
            params=self._polite_params(),
        )
        if payload is None:
            return None
        return self._to_candidate(payload, confidence=self.identifier_confidence, provider_tag="openalex:doi")

    @tolerates_malformed_payload
    def search_by_title(self, title: str) -> Optional[CandidateMetadata]:
        if not title:
            return None

        params: Dict[str, Any] = {"search": title, "per-page": 3}
        if self.mailto:
            params["mailto"] = self.mailto
        payload = self._get_json("/works", operation="search", identifier=title, params=params)
        if payload is None:
            return None

        results = payload.get("results")
        if not isinstance(results, list) or not results or not isinstance(results[0], dict):
            return None

        item = results[0]
        confidence = title_similarity(title, self._title(item) or "")
        if confidence < self.title_threshold:
            logger.debug("OpenAlex title match rejected: similarity=%.2f title=%s", confidence, title)
            return None
        return self._to_candidate(item, confidence=confidence, provider_tag="openalex:title-search")

    def _polite_params(self) -> Optional[Dict[str, Any]]:
        return {"mailto": self.mailto} if self.mailto else None

    def _to_candidate(self, data: Dict[str, Any], *, confidence: float, provider_tag: str) -> CandidateMetadata:
        doi = normalize_doi(data.get("doi"))
        location = data.get("primary_location") if isinstance(data.get("primary_location"), dict) else {}
        source = location.get("source") if isinstance(location.get("source"), dict) else {}
        biblio = data.get("biblio") if isinstance(data.get("biblio"), dict) else {}

        extras: Dict[str, Any] = {}
        openalex_id = self._normalize_openalex_id(data.get("id"))
        if openalex_id:
            extras["openalex_id"] = openalex_id
        cited_by = data.get("cited_by_count")
        if isinstance(cited_by, int) and cited_by:
            extras["citation_count"] = cited_by
        keywords = self._extract_keywords(data.get("concepts"))
        if keywords:
            extras["keywords"] = keywords

        return CandidateMetadata(
            title=self._title(data),
            provider_tag=provider_tag,
            confidence=confidence,
            authors=self._extract_authors(data.get("authorships")),
            year=data.get("publication_year") if isinstance(data.get("publication_year"), int) else None,
            abstract=reconstruct_abstract(data.get("abstract_inverted_index")),
            venue=text_or_none(source.get("display_name")) or self._legacy_venue(data.get("host_venue")),
            volume=self._as_text(biblio.get("volume")),
            issue=self._as_text(biblio.get("issue")),
            pages=self._format_pages(biblio),
            doi=doi,
            url=(f"https://doi.org/{doi}" if doi else None) or text_or_none(location.get("landing_page_url")),
            publisher=text_or_none(source.get("host_organization_name")),
            date=text_or_none(data.get("publication_date")),
            extras=extras,
        )

    @staticmethod
    def _title(data: Dict[str, Any]) -> Optional[str]:
        return text_or_none(data.get("display_name")) or text_or_none(data.get("title"))

    def _extract_authors(self, authorships: Any) -> List[str]:
        authors: List[str] = []
        if not isinstance(authorships, list):
            return authors
        for authorship in authorships:
            if not isinstance(authorship, dict):
                continue
            author = authorship.get("author")
            if not isinstance(author, dict):
                continue
            name = text_or_none(author.get("display_name")) or text_or_none(author.get("name"))
            if name:
                authors.append(name)
        return authors

    def _extract_keywords(self, concepts: Any) -> List[str]:
        if not isinstance(concepts, list):
            return []
        names = [text_or_none(concept.get("display_name")) for concept in concepts if isinstance(concept, dict)]
        return [name for name in names if name][:MAX_KEYWORDS]

    def _format_pages(self, biblio: Dict[str, Any]) -> Optional[str]:
        first = self._as_text(biblio.get("first_page"))
        last = self._as_text(biblio.get("last_page"))
        if first and last:
            return f"{first}-{last}"
        return first

    def _normalize_openalex_id(self, raw_id: Any) -> str:
        if not raw_id or not isinstance(raw_id, str):
            return ""
        return raw_id.rsplit("/", 1)[-1]

    def _legacy_venue(self, host_venue: Any) -> Optional[str]:
        if isinstance(host_venue, dict):
            return text_or_none(host_venue.get("display_name"))
        return None

    @staticmethod
    def _as_text(value: Any) -> Optional[str]:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return text_or_none(value)
