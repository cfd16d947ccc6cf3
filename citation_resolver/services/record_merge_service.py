"""Overlay an accepted candidate onto the record it was resolved for."""

from __future__ import annotations

from typing import Any, Dict

from citation_resolver.core.models import (
    NO_MATCH_METHOD,
    CandidateMetadata,
    EnrichedRecord,
    InputRecord,
    ResolutionPath,
    SourceType,
)

# Candidate fields copied onto the record when the candidate defines them.
OVERLAY_FIELDS = (
    "title",
    "url",
    "date",
    "authors",
    "year",
    "abstract",
    "venue",
    "volume",
    "issue",
    "pages",
    "doi",
    "publisher",
)


class RecordMergeService:
    """Build the single EnrichedRecord emitted for an input record.

    The winning candidate is overlaid field by field: a candidate value that
    is ``None`` or empty never replaces what the input already carried, and
    confidence plus provenance come from that one candidate only.
    """

    def merge(
        self,
        record: InputRecord,
        candidate: CandidateMetadata,
        *,
        resolved_via: ResolutionPath,
        source_type: SourceType,
        found_by_title: bool = False,
    ) -> EnrichedRecord:
        values = self._base_values(record)
        for field_name in OVERLAY_FIELDS:
            value = getattr(candidate, field_name)
            if self._is_defined(value):
                values[field_name] = list(value) if isinstance(value, list) else value
        values["extras"] = {key: value for key, value in candidate.extras.items() if self._is_defined(value)}

        return EnrichedRecord(
            **values,
            confidence=candidate.confidence,
            enrichment_method=candidate.provider_tag,
            resolved_via=resolved_via,
            source_type=source_type,
            found_by_title=found_by_title,
        )

    def unresolved(self, record: InputRecord, *, source_type: SourceType = SourceType.UNKNOWN) -> EnrichedRecord:
        return EnrichedRecord(
            **self._base_values(record),
            confidence=0.0,
            enrichment_method=NO_MATCH_METHOD,
            resolved_via=ResolutionPath.UNRESOLVED,
            source_type=source_type,
        )

    def failed(self, record: InputRecord, error: str) -> EnrichedRecord:
        return EnrichedRecord(
            **self._base_values(record),
            confidence=0.0,
            enrichment_method=NO_MATCH_METHOD,
            resolved_via=ResolutionPath.UNRESOLVED,
            error=error or "unknown error",
        )

    @staticmethod
    def _base_values(record: InputRecord) -> Dict[str, Any]:
        return {"title": record.title, "url": record.url, "type": record.type, "date": record.date}

    @staticmethod
    def _is_defined(value: Any) -> bool:
        if value is None:
            return False
        if isinstance(value, str):
            return bool(value.strip())
        if isinstance(value, (list, tuple, dict, set)):
            return bool(value)
        return True
