"""Resolve scraped source records to bibliographic metadata."""

from __future__ import annotations

from typing import Callable, Optional, Sequence

from .config import ResolverConfig
from .core.models import BatchResult, EnrichedRecord, InputRecord, ProgressEvent
from .services import BatchEnrichmentService, ResolutionService

_default_resolver: Optional[ResolutionService] = None


def get_default_resolver() -> ResolutionService:
    """Return the default ``ResolutionService`` instance, creating it lazily."""

    global _default_resolver
    if _default_resolver is None:
        _default_resolver = ResolutionService.from_config(ResolverConfig())
    return _default_resolver


def resolve_record(record: InputRecord) -> EnrichedRecord:
    """Resolve a single record through the strategy chain."""

    return get_default_resolver().resolve(record)


def enrich_records(
    records: Sequence[InputRecord],
    on_progress: Optional[Callable[[ProgressEvent], None]] = None,
    collection_name: Optional[str] = None,
) -> BatchResult:
    """Enrich records in order, spacing them by the configured delay."""

    service = BatchEnrichmentService(get_default_resolver())
    return service.run(records, on_progress=on_progress, collection_name=collection_name)


__all__ = [
    "BatchResult",
    "EnrichedRecord",
    "InputRecord",
    "ResolverConfig",
    "enrich_records",
    "get_default_resolver",
    "resolve_record",
]
