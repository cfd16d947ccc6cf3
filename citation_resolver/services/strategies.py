"""Resolution strategies and the order in which the resolver tries them.

Every strategy has the same shape, ``(record, context) -> CandidateMetadata |
None``: it either produces a candidate that already cleared its own acceptance
bar or returns ``None`` so the resolver falls through to the next one.
Provider clients swallow their own transport failures, so a strategy only
raises on programming errors.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from citation_resolver.config import ResolverConfig
from citation_resolver.core.filenames import clean_title_for_search, parse_filename_metadata
from citation_resolver.core.identifiers import extract_identifier, match_url_pattern
from citation_resolver.core.models import (
    CandidateMetadata,
    Identifier,
    IdentifierKind,
    InputRecord,
    ResolutionPath,
    SourceType,
)
from citation_resolver.providers import ProviderSet

logger = logging.getLogger(__name__)

_BARE_ARXIV_ID = re.compile(r"\b(\d{4}\.\d{4,5})(?:v\d+)?\b")


@dataclass(frozen=True)
class StrategyContext:
    """Everything a strategy may use besides the record itself."""

    providers: ProviderSet
    config: ResolverConfig


StrategyFn = Callable[[InputRecord, StrategyContext], Optional[CandidateMetadata]]


@dataclass(frozen=True)
class Strategy:
    name: str
    run: StrategyFn
    resolved_via: ResolutionPath
    found_by_title: bool = False


def search_title(record: InputRecord) -> str:
    """The title as sent to search endpoints, falling back to the raw title."""

    return clean_title_for_search(record.title) or record.title.strip()


def resolve_identifier(identifier: Identifier, context: StrategyContext) -> Optional[CandidateMetadata]:
    """Fetch metadata for ``identifier`` from the provider that owns it."""

    providers = context.providers
    if identifier.kind is IdentifierKind.DOI:
        return providers.crossref.works_by_doi(identifier.value) or providers.openalex.get_by_doi(identifier.value)
    if identifier.kind is IdentifierKind.ARXIV:
        return providers.arxiv.get_by_id(identifier.value)
    if identifier.kind is IdentifierKind.PUBMED:
        return providers.pubmed.get_by_pmid(identifier.value)
    if identifier.platform == "semanticscholar":
        return providers.semanticscholar.get_by_paper_id(identifier.value)
    if identifier.platform == "youtube":
        return providers.youtube.get_video(identifier.value)
    logger.debug("No provider registered for identifier %s", identifier)
    return None


# Identifier strategies


def identifier_in_source(record: InputRecord, context: StrategyContext) -> Optional[CandidateMetadata]:
    identifier = extract_identifier(record)
    if identifier is None:
        return None
    logger.debug("Found identifier %s in source %r", identifier, record.title)
    return resolve_identifier(identifier, context)


def url_pattern(record: InputRecord, context: StrategyContext) -> Optional[CandidateMetadata]:
    identifier = match_url_pattern(record.url)
    if identifier is None or identifier == extract_identifier(record):
        return None
    return resolve_identifier(identifier, context)


def doi_by_title_search(record: InputRecord, context: StrategyContext) -> Optional[CandidateMetadata]:
    hit = context.providers.crossref.find_doi_by_title(search_title(record))
    if hit is None:
        return None
    logger.debug("Crossref suggested DOI %s (score %.1f) for %r", hit.doi, hit.score, record.title)
    return resolve_identifier(Identifier(IdentifierKind.DOI, hit.doi), context)


# Type-specific strategies


def youtube_video(record: InputRecord, context: StrategyContext) -> Optional[CandidateMetadata]:
    identifier = match_url_pattern(record.url) or match_url_pattern(record.title)
    if identifier is None or identifier.platform != "youtube":
        return None
    if identifier == extract_identifier(record):
        # Already looked up by the identifier strategy.
        return None
    return context.providers.youtube.get_video(identifier.value)


def arxiv_lookup(record: InputRecord, context: StrategyContext) -> Optional[CandidateMetadata]:
    match = _BARE_ARXIV_ID.search(record.title)
    if match:
        candidate = context.providers.arxiv.get_by_id(match.group(1))
        if candidate is not None:
            return candidate
    return context.providers.arxiv.search_by_title(search_title(record))


def web_page(record: InputRecord, context: StrategyContext) -> Optional[CandidateMetadata]:
    if not record.url:
        return None
    return context.providers.webpage.fetch_metadata(record.url)


# Search strategies


def structured_author_year(record: InputRecord, context: StrategyContext) -> Optional[CandidateMetadata]:
    parsed = parse_filename_metadata(record.title)
    if not parsed.is_complete:
        return None
    return context.providers.crossref.search_by_author_year(parsed.author, parsed.year, search_title(record))


def crossref_title(record: InputRecord, context: StrategyContext) -> Optional[CandidateMetadata]:
    return context.providers.crossref.search_by_title(search_title(record))


def openalex_title(record: InputRecord, context: StrategyContext) -> Optional[CandidateMetadata]:
    return context.providers.openalex.search_by_title(search_title(record))


def semanticscholar_title(record: InputRecord, context: StrategyContext) -> Optional[CandidateMetadata]:
    return context.providers.semanticscholar.search_by_title(search_title(record))


IDENTIFIER_STRATEGIES: Tuple[Strategy, ...] = (
    Strategy("identifier_in_source", identifier_in_source, ResolutionPath.IDENTIFIER),
    Strategy("url_pattern", url_pattern, ResolutionPath.URL),
    Strategy("doi_by_title_search", doi_by_title_search, ResolutionPath.IDENTIFIER, found_by_title=True),
)

PRIMARY_STRATEGIES: Dict[SourceType, Tuple[Strategy, ...]] = {
    SourceType.YOUTUBE: (Strategy("youtube_video", youtube_video, ResolutionPath.URL),),
    SourceType.ARXIV: (Strategy("arxiv_lookup", arxiv_lookup, ResolutionPath.SEARCH),),
    SourceType.WEB: (Strategy("web_page", web_page, ResolutionPath.URL),),
}

SEARCH_STRATEGIES: Tuple[Strategy, ...] = (
    Strategy("structured_author_year", structured_author_year, ResolutionPath.SEARCH),
    Strategy("crossref_title", crossref_title, ResolutionPath.SEARCH),
    Strategy("openalex_title", openalex_title, ResolutionPath.SEARCH),
    Strategy("semanticscholar_title", semanticscholar_title, ResolutionPath.SEARCH),
)


def build_chain(source_type: SourceType) -> Tuple[Strategy, ...]:
    """Return the ordered strategies for a record of ``source_type``."""

    chain = (*IDENTIFIER_STRATEGIES, *PRIMARY_STRATEGIES.get(source_type, ()), *SEARCH_STRATEGIES)
    seen = set()
    ordered = []
    for strategy in chain:
        if strategy.name in seen:
            continue
        seen.add(strategy.name)
        ordered.append(strategy)
    return tuple(ordered)


__all__ = [
    "IDENTIFIER_STRATEGIES",
    "PRIMARY_STRATEGIES",
    "SEARCH_STRATEGIES",
    "Strategy",
    "StrategyContext",
    "arxiv_lookup",
    "build_chain",
    "crossref_title",
    "doi_by_title_search",
    "identifier_in_source",
    "openalex_title",
    "resolve_identifier",
    "search_title",
    "semanticscholar_title",
    "structured_author_year",
    "url_pattern",
    "web_page",
    "youtube_video",
]
