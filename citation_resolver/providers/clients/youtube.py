"""YouTube Data API v3 client for video metadata."""

from __future__ import annotations

from typing import Any, Dict, Optional

import requests

from citation_resolver.core.models import CandidateMetadata
from citation_resolver.providers.clients.base import BaseHttpClient, text_or_none, tolerates_malformed_payload


class YouTubeClient(BaseHttpClient):
    """Look up a video by ID.

    Without an API key the client can still vouch for the canonical watch URL,
    so it returns a low-confidence candidate carrying only that link.
    """

    BASE_URL = "https://www.googleapis.com/youtube/v3"
    PROVIDER = "youtube"

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        base_url: Optional[str] = None,
        timeout: float = 10.0,
        max_attempts: int = 1,
        identifier_confidence: float = 0.95,
        no_key_confidence: float = 0.3,
    ) -> None:
        super().__init__(session=session, base_url=base_url, timeout=timeout, max_attempts=max_attempts)
        self.api_key = api_key
        self.identifier_confidence = identifier_confidence
        self.no_key_confidence = no_key_confidence

    @staticmethod
    def watch_url(video_id: str) -> str:
        return f"https://www.youtube.com/watch?v={video_id}"

    @tolerates_malformed_payload
    def get_video(self, video_id: str) -> Optional[CandidateMetadata]:
        if not video_id:
            return None

        if not self.api_key:
            return CandidateMetadata(
                title=None,
                provider_tag="youtube:no-key",
                confidence=self.no_key_confidence,
                url=self.watch_url(video_id),
                publisher="YouTube",
                extras={"video_id": video_id},
            )

        payload = self._get_json(
            "/videos",
            operation="videos",
            identifier=video_id,
            params={"id": video_id, "key": self.api_key, "part": "snippet,contentDetails"},
        )
        if payload is None:
            return None

        items = payload.get("items")
        if not isinstance(items, list) or not items or not isinstance(items[0], dict):
            return None
        return self._to_candidate(video_id, items[0])

    def _to_candidate(self, video_id: str, item: Dict[str, Any]) -> CandidateMetadata:
        snippet = item.get("snippet") if isinstance(item.get("snippet"), dict) else {}
        details = item.get("contentDetails") if isinstance(item.get("contentDetails"), dict) else {}

        published = snippet.get("publishedAt")
        date = published[:10] if isinstance(published, str) and len(published) >= 10 else None
        year = int(date[:4]) if date and date[:4].isdigit() else None

        extras: Dict[str, Any] = {"video_id": video_id}
        duration = text_or_none(details.get("duration"))
        if duration:
            extras["duration"] = duration
        if isinstance(snippet.get("tags"), list) and snippet["tags"]:
            extras["tags"] = list(snippet["tags"])

        channel = text_or_none(snippet.get("channelTitle"))
        return CandidateMetadata(
            title=text_or_none(snippet.get("title")),
            provider_tag="youtube:video-id",
            confidence=self.identifier_confidence,
            authors=[channel] if channel else [],
            year=year,
            abstract=text_or_none(snippet.get("description")),
            url=self.watch_url(video_id),
            publisher="YouTube",
            date=date,
            extras=extras,
        )
