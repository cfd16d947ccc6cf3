"""Sequential batch enrichment with progress reporting."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence

from citation_resolver.core.models import (
    BatchResult,
    BatchTallies,
    EnrichedRecord,
    InputRecord,
    OutcomeTag,
    ProgressEvent,
)
from citation_resolver.services.rate_limiter import RateLimiter
from citation_resolver.services.record_merge_service import RecordMergeService
from citation_resolver.services.resolution_service import ResolutionService

logger = logging.getLogger(__name__)

TITLE_SNIPPET_LENGTH = 60

ProgressCallback = Callable[[ProgressEvent], None]

_STATUS_TEXT = {
    OutcomeTag.SUCCESS: "Full metadata retrieved",
    OutcomeTag.PARTIAL: "Partial metadata",
    OutcomeTag.FAILED: "No match found",
}


def classify_outcome(record: EnrichedRecord) -> OutcomeTag:
    """Grade how complete the metadata of an enriched record is."""

    has_author = bool(record.authors)
    if has_author and (record.identifier or record.abstract or record.venue):
        return OutcomeTag.SUCCESS
    if has_author or record.identifier or record.abstract:
        return OutcomeTag.PARTIAL
    return OutcomeTag.FAILED


class BatchEnrichmentService:
    """Resolve records one after another and tally how well each went.

    Records are processed strictly in order with a minimum spacing between
    them. A record that raises is emitted with ``confidence=0`` and its error
    message, counted as failed, and the batch carries on.
    """

    def __init__(
        self,
        resolver: ResolutionService,
        *,
        delay_s: Optional[float] = None,
        rate_limiter: Optional[RateLimiter] = None,
        merger: Optional[RecordMergeService] = None,
    ) -> None:
        self.resolver = resolver
        if rate_limiter is None:
            rate_limiter = RateLimiter(resolver.config.request_delay_s if delay_s is None else delay_s)
        self.rate_limiter = rate_limiter
        self.merger = merger or RecordMergeService()

    def run(
        self,
        records: Sequence[InputRecord],
        on_progress: Optional[ProgressCallback] = None,
        collection_name: Optional[str] = None,
    ) -> BatchResult:
        tallies = BatchTallies()
        enriched: List[EnrichedRecord] = []
        total = len(records)
        self.rate_limiter.reset()

        for index, record in enumerate(records, start=1):
            snippet = record.title[:TITLE_SNIPPET_LENGTH]
            self._notify(on_progress, ProgressEvent(index, total, snippet, "Processing...", OutcomeTag.PROCESSING))
            self.rate_limiter.wait()

            try:
                result = self.resolver.resolve(record)
            except Exception as exc:
                logger.exception("Enrichment failed for %r", snippet)
                message = str(exc) or exc.__class__.__name__
                enriched.append(self.merger.failed(record, message))
                tallies.failed += 1
                self._notify(
                    on_progress,
                    ProgressEvent(index, total, snippet, f"Error: {message}", OutcomeTag.ERROR),
                )
                continue

            outcome = classify_outcome(result)
            if outcome is OutcomeTag.SUCCESS:
                tallies.success += 1
            elif outcome is OutcomeTag.PARTIAL:
                tallies.partial += 1
            else:
                tallies.failed += 1
            enriched.append(result)
            self._notify(on_progress, ProgressEvent(index, total, snippet, _STATUS_TEXT[outcome], outcome))

        logger.info(
            "Batch enrichment complete",
            extra={"collection": collection_name, "total": total, **tallies.as_dict()},
        )
        self._notify(
            on_progress,
            ProgressEvent(
                total,
                total,
                "",
                "Complete!",
                OutcomeTag.COMPLETE,
                tallies=BatchTallies(**tallies.as_dict()),
            ),
        )
        return BatchResult(tallies=tallies, records=enriched, collection_name=collection_name)

    def _notify(self, callback: Optional[ProgressCallback], event: ProgressEvent) -> None:
        if callback is None:
            return
        try:
            callback(event)
        except Exception:
            logger.warning("Progress callback raised; ignoring", exc_info=True)
