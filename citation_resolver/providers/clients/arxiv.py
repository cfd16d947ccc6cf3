"""arXiv Atom feed client for identifier lookups and title search."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests
from lxml import etree

from citation_resolver.core.identifiers import normalize_doi
from citation_resolver.core.matching import title_similarity
from citation_resolver.core.models import CandidateMetadata
from citation_resolver.providers.clients.base import BaseHttpClient, tolerates_malformed_payload

logger = logging.getLogger(__name__)

NAMESPACES = {
    "atom": "http://www.w3.org/2005/Atom",
    "arxiv": "http://arxiv.org/schemas/atom",
}


def _clean_text(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    cleaned = " ".join(value.split())
    return cleaned or None


def _extract_arxiv_id(id_url: Optional[str]) -> Optional[str]:
    if not id_url or "/abs/" not in id_url:
        return None
    raw = id_url.split("/abs/", 1)[1].strip("/")
    head, sep, version = raw.rpartition("v")
    if sep and head and version.isdigit():
        return head
    return raw or None


def parse_feed(xml_text: str) -> List[Dict[str, Any]]:
    """Parse an arXiv Atom feed into plain dictionaries; malformed XML yields ``[]``."""

    try:
        root = etree.fromstring(xml_text.encode("utf-8"))
    except etree.XMLSyntaxError:
        logger.debug("Discarding malformed arXiv feed")
        return []

    entries: List[Dict[str, Any]] = []
    for entry in root.findall("atom:entry", NAMESPACES):
        arxiv_id = _extract_arxiv_id(_clean_text(entry.findtext("atom:id", namespaces=NAMESPACES)))
        if not arxiv_id:
            # The API reports errors as entries pointing at /api/errors.
            continue

        doi = _clean_text(entry.findtext("arxiv:doi", namespaces=NAMESPACES))
        if not doi:
            for link in entry.findall("atom:link", NAMESPACES):
                if link.get("title") == "doi":
                    doi = link.get("href")
                    break

        authors = [
            name
            for name in (
                _clean_text(author.findtext("atom:name", namespaces=NAMESPACES))
                for author in entry.findall("atom:author", NAMESPACES)
            )
            if name
        ]
        categories = [term for term in (c.get("term") for c in entry.findall("atom:category", NAMESPACES)) if term]
        primary = entry.find("arxiv:primary_category", NAMESPACES)

        entries.append(
            {
                "id": arxiv_id,
                "title": _clean_text(entry.findtext("atom:title", namespaces=NAMESPACES)),
                "summary": _clean_text(entry.findtext("atom:summary", namespaces=NAMESPACES)),
                "published": _clean_text(entry.findtext("atom:published", namespaces=NAMESPACES)),
                "authors": authors,
                "doi": normalize_doi(doi),
                "journal_ref": _clean_text(entry.findtext("arxiv:journal_ref", namespaces=NAMESPACES)),
                "categories": categories,
                "primary_category": primary.get("term") if primary is not None else None,
            }
        )
    return entries


class ArxivClient(BaseHttpClient):
    """Query the arXiv export API by identifier or by title."""

    BASE_URL = "https://export.arxiv.org/api"
    PROVIDER = "arxiv"

    def __init__(
        self,
        *,
        session: Optional[requests.Session] = None,
        base_url: Optional[str] = None,
        timeout: float = 10.0,
        max_attempts: int = 1,
        title_threshold: float = 0.65,
        identifier_confidence: float = 0.95,
    ) -> None:
        super().__init__(session=session, base_url=base_url, timeout=timeout, max_attempts=max_attempts)
        self.title_threshold = title_threshold
        self.identifier_confidence = identifier_confidence

    @tolerates_malformed_payload
    def get_by_id(self, arxiv_id: str) -> Optional[CandidateMetadata]:
        if not arxiv_id:
            return None

        entries = self._query({"id_list": arxiv_id, "max_results": 1}, operation="id_lookup", identifier=arxiv_id)
        if not entries:
            return None
        return self._to_candidate(entries[0], confidence=self.identifier_confidence, provider_tag="arxiv:id")

    @tolerates_malformed_payload
    def search_by_title(self, title: str) -> Optional[CandidateMetadata]:
        if not title:
            return None

        escaped = title.replace('"', " ")
        entries = self._query(
            {"search_query": f'ti:"{escaped}"', "start": 0, "max_results": 3},
            operation="title_search",
            identifier=title,
        )
        if not entries:
            return None

        entry = entries[0]
        confidence = title_similarity(title, entry.get("title") or "")
        if confidence < self.title_threshold:
            logger.debug("arXiv title match rejected: similarity=%.2f title=%s", confidence, title)
            return None
        return self._to_candidate(entry, confidence=confidence, provider_tag="arxiv:title-search")

    def _query(self, params: Dict[str, Any], *, operation: str, identifier: str) -> List[Dict[str, Any]]:
        text = self._get_text(
            "/query",
            operation=operation,
            identifier=identifier,
            params=params,
            headers={"Accept": "application/atom+xml"},
        )
        if not text:
            return []
        return parse_feed(text)

    def _to_candidate(self, entry: Dict[str, Any], *, confidence: float, provider_tag: str) -> CandidateMetadata:
        published = entry.get("published")
        date = published.split("T", 1)[0] if published else None
        year = int(date[:4]) if date and date[:4].isdigit() else None

        extras: Dict[str, Any] = {"arxiv_id": entry["id"]}
        if entry.get("categories"):
            extras["categories"] = entry["categories"]
        if entry.get("primary_category"):
            extras["primary_category"] = entry["primary_category"]
        if entry.get("journal_ref"):
            extras["journal_ref"] = entry["journal_ref"]

        return CandidateMetadata(
            title=entry.get("title"),
            provider_tag=provider_tag,
            confidence=confidence,
            authors=list(entry.get("authors") or []),
            year=year,
            abstract=entry.get("summary"),
            doi=entry.get("doi"),
            url=f"https://arxiv.org/abs/{entry['id']}",
            publisher="arXiv",
            date=date,
            extras=extras,
        )
