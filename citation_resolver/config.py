"""Application configuration for the citation resolver."""

from __future__ import annotations

from typing import Optional

import requests
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ResolverConfig(BaseSettings):  # type: ignore[misc]
    """Immutable settings controlling provider access and acceptance thresholds.

    Values are read from ``RESOLVER_*`` environment variables (and a ``.env``
    file when present). The per-provider thresholds reflect observed top-hit
    precision of each service and are kept as independent knobs rather than
    derived from one another.
    """

    request_timeout_s: float = Field(10.0, description="Timeout (in seconds) for outbound HTTP requests")
    request_delay_s: float = Field(0.2, description="Minimum spacing (in seconds) between records in a batch")
    max_attempts: int = Field(1, description="HTTP attempts per provider call; 1 disables retries")
    user_agent: str = Field("citation-resolver", description="User-Agent sent to providers")
    mailto: Optional[str] = Field(None, description="Contact e-mail for the Crossref polite pool")
    semanticscholar_api_key: Optional[str] = Field(None, description="Semantic Scholar API key")
    youtube_api_key: Optional[str] = Field(None, description="YouTube Data API v3 key")

    crossref_base_url: str = "https://api.crossref.org"
    openalex_base_url: str = "https://api.openalex.org"
    semanticscholar_base_url: str = "https://api.semanticscholar.org/graph/v1"
    arxiv_base_url: str = "https://export.arxiv.org/api"
    pubmed_base_url: str = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils"
    youtube_base_url: str = "https://www.googleapis.com/youtube/v3"

    crossref_title_threshold: float = 0.7
    openalex_title_threshold: float = 0.65
    semanticscholar_title_threshold: float = 0.65
    arxiv_title_threshold: float = 0.65
    structured_query_threshold: float = 0.75
    year_match_bonus: float = 0.2
    doi_search_min_score: float = Field(30.0, description="Minimum Crossref relevance score (0-100 scale)")

    identifier_confidence: float = 1.0
    platform_confidence: float = 0.95
    web_page_confidence: float = 0.7
    youtube_no_key_confidence: float = 0.3

    model_config = SettingsConfigDict(
        env_prefix="RESOLVER_", env_file=".env", extra="ignore", frozen=True
    )

    @field_validator(
        "crossref_title_threshold",
        "openalex_title_threshold",
        "semanticscholar_title_threshold",
        "arxiv_title_threshold",
        "structured_query_threshold",
        "year_match_bonus",
        "identifier_confidence",
        "platform_confidence",
        "web_page_confidence",
        "youtube_no_key_confidence",
    )
    @classmethod
    def validate_unit_interval(cls, value: float) -> float:
        if not 0.0 <= value <= 1.0:
            raise ValueError("value must be within [0, 1]")
        return value

    @field_validator("request_delay_s", "doi_search_min_score")
    @classmethod
    def validate_non_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("value must not be negative")
        return value

    @field_validator("request_timeout_s")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("request_timeout_s must be positive")
        return value

    @field_validator("max_attempts")
    @classmethod
    def validate_max_attempts(cls, value: int) -> int:
        if value < 1:
            raise ValueError("max_attempts must be at least 1")
        return value

    def build_session(self, session: Optional[requests.Session] = None) -> requests.Session:
        """Return a configured :class:`requests.Session` using the settings."""

        session = session or requests.Session()
        if self.user_agent:
            agent = self.user_agent
            if self.mailto:
                agent = f"{agent} (mailto:{self.mailto})"
            session.headers["User-Agent"] = agent
        session.headers.setdefault("Accept", "application/json")
        return session
