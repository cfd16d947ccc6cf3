"""Provider clients and the immutable provider set handed to the resolver."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import requests

from citation_resolver.config import ResolverConfig

from .clients import (
    ArxivClient,
    CrossrefClient,
    OpenAlexClient,
    PubMedClient,
    SemanticScholarClient,
    WebPageClient,
    YouTubeClient,
)


@dataclass(frozen=True)
class ProviderSet:
    """The external metadata providers available to one resolver.

    Built once per resolver and never mutated; tests substitute any member
    with a stub exposing the same methods.
    """

    crossref: CrossrefClient
    openalex: OpenAlexClient
    semanticscholar: SemanticScholarClient
    arxiv: ArxivClient
    pubmed: PubMedClient
    youtube: YouTubeClient
    webpage: WebPageClient

    @classmethod
    def from_config(
        cls, config: ResolverConfig, *, session: Optional[requests.Session] = None
    ) -> "ProviderSet":
        session = config.build_session(session)
        common = {
            "session": session,
            "timeout": config.request_timeout_s,
            "max_attempts": config.max_attempts,
        }
        return cls(
            crossref=CrossrefClient(
                base_url=config.crossref_base_url,
                mailto=config.mailto,
                title_threshold=config.crossref_title_threshold,
                structured_threshold=config.structured_query_threshold,
                year_match_bonus=config.year_match_bonus,
                min_doi_score=config.doi_search_min_score,
                identifier_confidence=config.identifier_confidence,
                **common,
            ),
            openalex=OpenAlexClient(
                base_url=config.openalex_base_url,
                mailto=config.mailto,
                title_threshold=config.openalex_title_threshold,
                identifier_confidence=config.identifier_confidence,
                **common,
            ),
            semanticscholar=SemanticScholarClient(
                base_url=config.semanticscholar_base_url,
                api_key=config.semanticscholar_api_key,
                title_threshold=config.semanticscholar_title_threshold,
                identifier_confidence=config.platform_confidence,
                **common,
            ),
            arxiv=ArxivClient(
                base_url=config.arxiv_base_url,
                title_threshold=config.arxiv_title_threshold,
                identifier_confidence=config.platform_confidence,
                **common,
            ),
            pubmed=PubMedClient(
                base_url=config.pubmed_base_url,
                identifier_confidence=config.platform_confidence,
                **common,
            ),
            youtube=YouTubeClient(
                base_url=config.youtube_base_url,
                api_key=config.youtube_api_key,
                identifier_confidence=config.platform_confidence,
                no_key_confidence=config.youtube_no_key_confidence,
                **common,
            ),
            webpage=WebPageClient(confidence=config.web_page_confidence, **common),
        )


__all__ = ["ProviderSet"]
