"""Core data models, identifier extraction and title matching."""

from .classification import detect_source_type
from .filenames import FilenameMetadata, clean_title_for_search, parse_filename_metadata
from .identifiers import extract_doi, extract_identifier, match_url_pattern, normalize_doi
from .matching import jaccard, normalize_for_matching, title_similarity, title_tokens
from .models import (
    BatchResult,
    BatchTallies,
    CandidateMetadata,
    EnrichedRecord,
    Identifier,
    IdentifierKind,
    InputRecord,
    OutcomeTag,
    ProgressEvent,
    ResolutionPath,
    SourceType,
)

__all__ = [
    "BatchResult",
    "BatchTallies",
    "CandidateMetadata",
    "EnrichedRecord",
    "FilenameMetadata",
    "Identifier",
    "IdentifierKind",
    "InputRecord",
    "OutcomeTag",
    "ProgressEvent",
    "ResolutionPath",
    "SourceType",
    "clean_title_for_search",
    "detect_source_type",
    "extract_doi",
    "extract_identifier",
    "jaccard",
    "match_url_pattern",
    "normalize_doi",
    "normalize_for_matching",
    "parse_filename_metadata",
    "title_similarity",
    "title_tokens",
]
