"""Semantic Scholar client for title search and paper-ID lookups."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from citation_resolver.core.identifiers import normalize_doi
from citation_resolver.core.matching import title_similarity
from citation_resolver.core.models import CandidateMetadata
from citation_resolver.providers.clients.base import BaseHttpClient, text_or_none, tolerates_malformed_payload

logger = logging.getLogger(__name__)

DEFAULT_FIELDS = "paperId,externalIds,title,abstract,year,venue,authors.name,url,publicationDate,citationCount"


class SemanticScholarClient(BaseHttpClient):
    """Lightweight wrapper around the Semantic Scholar Graph API v1.

    The public API rate-limits aggressively; a 429 is reported as "no result"
    like any other provider failure.
    """

    BASE_URL = "https://api.semanticscholar.org/graph/v1"
    PROVIDER = "semanticscholar"

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        base_url: Optional[str] = None,
        timeout: float = 10.0,
        max_attempts: int = 1,
        title_threshold: float = 0.65,
        identifier_confidence: float = 0.95,
    ) -> None:
        super().__init__(session=session, base_url=base_url, timeout=timeout, max_attempts=max_attempts)
        self.api_key = api_key
        self.title_threshold = title_threshold
        self.identifier_confidence = identifier_confidence

    def _auth_headers(self) -> Optional[Dict[str, str]]:
        if not self.api_key:
            return None
        return {"x-api-key": self.api_key}

    @tolerates_malformed_payload
    def search_by_title(self, title: str) -> Optional[CandidateMetadata]:
        if not title:
            return None

        payload = self._get_json(
            "/paper/search",
            operation="search",
            identifier=title,
            params={"query": title, "limit": 3, "fields": DEFAULT_FIELDS},
            headers=self._auth_headers(),
        )
        if payload is None:
            return None

        data = payload.get("data")
        if not isinstance(data, list) or not data or not isinstance(data[0], dict):
            return None

        item = data[0]
        confidence = title_similarity(title, text_or_none(item.get("title")) or "")
        if confidence < self.title_threshold:
            logger.debug("Semantic Scholar title match rejected: similarity=%.2f title=%s", confidence, title)
            return None
        return self._to_candidate(item, confidence=confidence, provider_tag="semanticscholar:title-search")

    @tolerates_malformed_payload
    def get_by_paper_id(self, paper_id: str) -> Optional[CandidateMetadata]:
        if not paper_id:
            return None

        payload = self._get_json(
            f"/paper/{paper_id}",
            operation="paper_lookup",
            identifier=paper_id,
            params={"fields": DEFAULT_FIELDS},
            headers=self._auth_headers(),
        )
        if payload is None:
            return None
        return self._to_candidate(
            payload, confidence=self.identifier_confidence, provider_tag="semanticscholar:paper-id"
        )

    def _to_candidate(self, data: Dict[str, Any], *, confidence: float, provider_tag: str) -> CandidateMetadata:
        external_ids = data.get("externalIds") if isinstance(data.get("externalIds"), dict) else {}
        doi = normalize_doi(external_ids.get("DOI"))

        extras: Dict[str, Any] = {}
        paper_id = text_or_none(data.get("paperId"))
        if paper_id:
            extras["semanticscholar_id"] = paper_id
        arxiv_id = text_or_none(external_ids.get("ArXiv"))
        if arxiv_id:
            extras["arxiv_id"] = arxiv_id
        pmid = external_ids.get("PubMed")
        if isinstance(pmid, (str, int)) and str(pmid).strip():
            extras["pmid"] = str(pmid).strip()
        citation_count = data.get("citationCount")
        if isinstance(citation_count, int) and citation_count:
            extras["citation_count"] = citation_count

        return CandidateMetadata(
            title=text_or_none(data.get("title")),
            provider_tag=provider_tag,
            confidence=confidence,
            authors=self._extract_authors(data.get("authors")),
            year=data.get("year") if isinstance(data.get("year"), int) else None,
            abstract=text_or_none(data.get("abstract")),
            venue=text_or_none(data.get("venue")),
            doi=doi,
            url=f"https://doi.org/{doi}" if doi else text_or_none(data.get("url")),
            date=text_or_none(data.get("publicationDate")),
            extras=extras,
        )

    def _extract_authors(self, authors: Any) -> List[str]:
        names: List[str] = []
        if not isinstance(authors, list):
            return names
        for author in authors:
            if not isinstance(author, dict):
                continue
            name = text_or_none(author.get("name"))
            if name:
                names.append(name)
        return names
