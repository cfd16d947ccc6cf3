"""PubMed E-utilities client for PMID lookups."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

import requests

from citation_resolver.core.identifiers import normalize_doi
from citation_resolver.core.models import CandidateMetadata
from citation_resolver.providers.clients.base import BaseHttpClient, text_or_none, tolerates_malformed_payload

_YEAR_RE = re.compile(r"\b(1[89]|20)\d{2}\b")


def _parse_year(pubdate: Any) -> Optional[int]:
    if not isinstance(pubdate, str):
        return None
    match = _YEAR_RE.search(pubdate)
    return int(match.group(0)) if match else None


def _doi_from_summary(article: Dict[str, Any]) -> Optional[str]:
    articleids = article.get("articleids")
    if isinstance(articleids, list):
        for item in articleids:
            if not isinstance(item, dict):
                continue
            if str(item.get("idtype") or "").lower() == "doi" and isinstance(item.get("value"), str):
                doi = normalize_doi(item["value"])
                if doi:
                    return doi

    elocation = article.get("elocationid")
    if isinstance(elocation, str) and "doi:" in elocation.lower():
        return normalize_doi(elocation[elocation.lower().index("doi:"):])
    return None


class PubMedClient(BaseHttpClient):
    """Fetch article summaries from NCBI's ESummary endpoint."""

    BASE_URL = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils"
    PROVIDER = "pubmed"

    def __init__(
        self,
        *,
        session: Optional[requests.Session] = None,
        base_url: Optional[str] = None,
        timeout: float = 10.0,
        max_attempts: int = 1,
        identifier_confidence: float = 0.95,
    ) -> None:
        super().__init__(session=session, base_url=base_url, timeout=timeout, max_attempts=max_attempts)
        self.identifier_confidence = identifier_confidence

    @tolerates_malformed_payload
    def get_by_pmid(self, pmid: str) -> Optional[CandidateMetadata]:
        pmid = (pmid or "").strip()
        if not pmid.isdigit():
            return None

        payload = self._get_json(
            "/esummary.fcgi",
            operation="esummary",
            identifier=pmid,
            params={"db": "pubmed", "id": pmid, "retmode": "json"},
        )
        if payload is None:
            return None

        result = payload.get("result")
        article = result.get(pmid) if isinstance(result, dict) else None
        if not isinstance(article, dict) or article.get("error"):
            return None
        title = text_or_none(article.get("title"))
        if not title:
            return None

        return CandidateMetadata(
            title=title.rstrip("."),
            provider_tag="pubmed:pmid",
            confidence=self.identifier_confidence,
            authors=self._extract_authors(article.get("authors")),
            year=_parse_year(article.get("pubdate")),
            venue=text_or_none(article.get("fulljournalname")) or text_or_none(article.get("source")),
            volume=text_or_none(article.get("volume")),
            issue=text_or_none(article.get("issue")),
            pages=text_or_none(article.get("pages")),
            doi=_doi_from_summary(article),
            url=f"https://pubmed.ncbi.nlm.nih.gov/{pmid}/",
            date=text_or_none(article.get("pubdate")),
            extras={"pmid": pmid},
        )

    def _extract_authors(self, authors: Any) -> List[str]:
        if not isinstance(authors, list):
            return []
        return [
            author["name"].strip()
            for author in authors
            if isinstance(author, dict) and text_or_none(author.get("name"))
        ]
