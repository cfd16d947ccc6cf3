"""HTTP clients for the external metadata providers."""

from .arxiv import ArxivClient
from .base import (
    BaseHttpClient,
    ClientError,
    NotFoundError,
    RateLimitedError,
    RequestRejectedError,
    UpstreamError,
)
from .crossref import CrossrefClient, DoiSearchHit
from .openalex import OpenAlexClient, reconstruct_abstract
from .pubmed import PubMedClient
from .semanticscholar import SemanticScholarClient
from .webpage import WebPageClient
from .youtube import YouTubeClient

__all__ = [
    "ArxivClient",
    "BaseHttpClient",
    "ClientError",
    "CrossrefClient",
    "DoiSearchHit",
    "NotFoundError",
    "OpenAlexClient",
    "PubMedClient",
    "RateLimitedError",
    "RequestRejectedError",
    "SemanticScholarClient",
    "UpstreamError",
    "WebPageClient",
    "YouTubeClient",
    "reconstruct_abstract",
]
