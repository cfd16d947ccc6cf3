"""Service layer for the citation resolver."""

from .batch_service import BatchEnrichmentService, classify_outcome
from .rate_limiter import RateLimiter
from .record_merge_service import RecordMergeService
from .resolution_service import ResolutionService
from .strategies import Strategy, StrategyContext, build_chain

__all__ = [
    "BatchEnrichmentService",
    "RateLimiter",
    "RecordMergeService",
    "ResolutionService",
    "Strategy",
    "StrategyContext",
    "build_chain",
    "classify_outcome",
]
