"""Records, candidates and batch bookkeeping types shared across the resolver."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

RECORD_TYPES = ("pdf", "web", "youtube", "unknown")

NO_MATCH_METHOD = "none"


class IdentifierKind(str, Enum):
    DOI = "doi"
    ARXIV = "arxiv"
    PUBMED = "pubmed"
    PLATFORM = "platform"


class ResolutionPath(str, Enum):
    """How the winning candidate for a record was reached."""

    IDENTIFIER = "identifier"
    URL = "url"
    SEARCH = "search"
    UNRESOLVED = "unresolved"


class SourceType(str, Enum):
    YOUTUBE = "youtube"
    ARXIV = "arxiv"
    ACADEMIC = "academic"
    WEB = "web"
    UNKNOWN = "unknown"


class OutcomeTag(str, Enum):
    PROCESSING = "processing"
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"
    ERROR = "error"
    COMPLETE = "complete"


@dataclass(frozen=True)
class InputRecord:
    """A raw source record as produced by the page scraper.

    ``title`` is required; an empty ``url`` is treated as absent and unknown
    ``type`` tags collapse to ``"unknown"``.
    """

    title: str
    url: Optional[str] = None
    type: str = "unknown"
    date: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.title, str) or not self.title.strip():
            raise ValueError("InputRecord.title must be a non-empty string")
        url = self.url.strip() if isinstance(self.url, str) else None
        object.__setattr__(self, "url", url or None)
        record_type = (self.type or "unknown").strip().lower()
        if record_type not in RECORD_TYPES:
            record_type = "unknown"
        object.__setattr__(self, "type", record_type)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InputRecord":
        return cls(
            title=str(data.get("title") or ""),
            url=data.get("url") or None,
            type=str(data.get("type") or "unknown"),
            date=data.get("date") or None,
        )


@dataclass(frozen=True)
class Identifier:
    """A normalized identifier extracted from a title or URL."""

    kind: IdentifierKind
    value: str
    platform: Optional[str] = None

    def __str__(self) -> str:
        if self.kind is IdentifierKind.PLATFORM:
            return f"{self.platform}:{self.value}"
        return f"{self.kind.value}:{self.value}"


@dataclass
class CandidateMetadata:
    """One provider's answer for one query.

    ``extras`` holds provider-specific fields (arXiv categories, PubMed IDs,
    citation counts, ...) so the shared shape stays narrow.
    """

    title: Optional[str]
    provider_tag: str
    confidence: float
    authors: List[str] = field(default_factory=list)
    year: Optional[int] = None
    abstract: Optional[str] = None
    venue: Optional[str] = None
    volume: Optional[str] = None
    issue: Optional[str] = None
    pages: Optional[str] = None
    doi: Optional[str] = None
    url: Optional[str] = None
    publisher: Optional[str] = None
    date: Optional[str] = None
    extras: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class EnrichedRecord:
    """The single durable output for one input record."""

    title: str
    url: Optional[str] = None
    type: str = "unknown"
    date: Optional[str] = None
    authors: List[str] = field(default_factory=list)
    year: Optional[int] = None
    abstract: Optional[str] = None
    venue: Optional[str] = None
    volume: Optional[str] = None
    issue: Optional[str] = None
    pages: Optional[str] = None
    doi: Optional[str] = None
    publisher: Optional[str] = None
    extras: Dict[str, Any] = field(default_factory=dict)
    confidence: float = 0.0
    enrichment_method: str = NO_MATCH_METHOD
    resolved_via: ResolutionPath = ResolutionPath.UNRESOLVED
    source_type: SourceType = SourceType.UNKNOWN
    found_by_title: bool = False
    error: Optional[str] = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")
        if self.confidence > 0 and (not self.enrichment_method or self.enrichment_method == NO_MATCH_METHOD):
            raise ValueError("A record with non-zero confidence requires an enrichment method")

    @property
    def identifier(self) -> Optional[str]:
        """The strongest identifier carried by the record, if any."""

        if self.doi:
            return self.doi
        for key in ("arxiv_id", "pmid"):
            value = self.extras.get(key)
            if value:
                return str(value)
        return None

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["resolved_via"] = self.resolved_via.value
        payload["source_type"] = self.source_type.value
        return payload


@dataclass
class BatchTallies:
    success: int = 0
    partial: int = 0
    failed: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {"success": self.success, "partial": self.partial, "failed": self.failed}


@dataclass
class BatchResult:
    tallies: BatchTallies
    records: List[EnrichedRecord] = field(default_factory=list)
    collection_name: Optional[str] = None

    @property
    def success(self) -> int:
        return self.tallies.success

    @property
    def partial(self) -> int:
        return self.tallies.partial

    @property
    def failed(self) -> int:
        return self.tallies.failed


@dataclass(frozen=True)
class ProgressEvent:
    current: int
    total: int
    title_snippet: str
    status_text: str
    outcome: OutcomeTag
    tallies: Optional[BatchTallies] = None


__all__ = [
    "BatchResult",
    "BatchTallies",
    "CandidateMetadata",
    "EnrichedRecord",
    "Identifier",
    "IdentifierKind",
    "InputRecord",
    "NO_MATCH_METHOD",
    "OutcomeTag",
    "ProgressEvent",
    "RECORD_TYPES",
    "ResolutionPath",
    "SourceType",
]
