"""Shared HTTP client utilities with bounded retries and error handling."""

from __future__ import annotations

import functools
import logging
import random
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Callable, Dict, Mapping, Optional, Type, TypeVar

import requests
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from citation_resolver.exceptions import ProviderError

logger = logging.getLogger(__name__)

DEFAULT_HEADERS: Dict[str, str] = {
    "User-Agent": "citation-resolver",
    "Accept": "application/json",
}

# 429 is absent: a rate-limited provider is "no result" for this pass.
RETRYABLE_STATUS_CODES = frozenset({500, 502, 503, 504})

DEFAULT_MAX_ATTEMPTS = 1

BASE_WAIT_MULTIPLIER = 0.5
BASE_WAIT_MIN_SECONDS = 0.5
BASE_WAIT_MAX_SECONDS = 8

_BODY_EXCERPT_LIMIT = 200

# Raised while reading fields out of a decoded payload whose shape is not the
# documented one (a string where an object was expected, and so on).
MALFORMED_PAYLOAD_ERRORS = (TypeError, AttributeError, KeyError, IndexError, ValueError)

_shared_session: Optional[requests.Session] = None

T = TypeVar("T")


class ClientError(ProviderError):
    """Base exception for HTTP client errors."""


class NotFoundError(ClientError):
    """HTTP 404."""


class RateLimitedError(ClientError):
    """HTTP 429. ``retry_after`` holds the server's requested pause, if any."""

    def __init__(self, message: str, retry_after: Optional[float] = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class RequestRejectedError(ClientError):
    """Any other 4xx response."""

    def __init__(self, status: int, message: str, body_excerpt: Optional[str] = None) -> None:
        super().__init__(message)
        self.status = status
        self.body_excerpt = body_excerpt


class UnauthorizedError(RequestRejectedError):
    """HTTP 401: missing or invalid credentials."""


class ForbiddenError(RequestRejectedError):
    """HTTP 403: credentials lack access, or the key quota is exhausted."""


class UpstreamError(ClientError):
    """5xx responses and transport failures."""


class RetryableResponseError(Exception):
    """Carries a 5xx response through tenacity so it can be retried."""

    def __init__(self, response: requests.Response):
        super().__init__(f"Retryable response ({response.status_code})")
        self.response = response


_CREDENTIAL_REJECTIONS: Dict[int, Type[RequestRejectedError]] = {
    401: UnauthorizedError,
    403: ForbiddenError,
}


def _get_shared_session() -> requests.Session:
    global _shared_session
    if _shared_session is None:
        _shared_session = requests.Session()
    for key, value in DEFAULT_HEADERS.items():
        _shared_session.headers.setdefault(key, value)
    return _shared_session


def _retry_after_seconds(headers: Mapping[str, str]) -> Optional[float]:
    """Read ``Retry-After`` as delta-seconds or an HTTP date."""

    value = (headers.get("Retry-After") or "").strip()
    if not value:
        return None
    if value.isdigit():
        return float(value)

    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max((when - datetime.now(timezone.utc)).total_seconds(), 0.0)


_base_wait = wait_exponential(
    multiplier=BASE_WAIT_MULTIPLIER, min=BASE_WAIT_MIN_SECONDS, max=BASE_WAIT_MAX_SECONDS
)


def _retry_wait(retry_state: RetryCallState) -> float:
    """Exponential backoff with jitter, honoring Retry-After when present."""

    outcome = retry_state.outcome
    if outcome is not None and outcome.failed:
        exception = outcome.exception()
        if isinstance(exception, RetryableResponseError):
            requested = _retry_after_seconds(exception.response.headers)
            if requested is not None:
                return min(requested, BASE_WAIT_MAX_SECONDS)

    fallback = _base_wait(retry_state)
    return random.uniform(fallback * 0.5, min(fallback * 1.5, BASE_WAIT_MAX_SECONDS))


def _log_retry_attempt(retry_state: RetryCallState) -> None:
    method, url = (tuple(retry_state.args or ()) + ("?", "?"))[:2]
    exception = retry_state.outcome.exception() if retry_state.outcome else None
    logger.debug("Retry attempt %s for %s %s: %s", retry_state.attempt_number, method, url, exception)


def _body_excerpt(response: requests.Response) -> Optional[str]:
    try:
        text = response.text
    except (UnicodeDecodeError, LookupError, RuntimeError):
        return None
    return " ".join(text.split())[:_BODY_EXCERPT_LIMIT] or None


def text_or_none(value: Any) -> Optional[str]:
    """Return ``value`` stripped when it is a non-blank string, else ``None``."""

    if not isinstance(value, str):
        return None
    return value.strip() or None


def tolerates_malformed_payload(method: Callable[..., Optional[T]]) -> Callable[..., Optional[T]]:
    """Turn shape errors raised while reading a payload into ``None``.

    Wraps a public provider operation. Transport failures are already handled
    by :meth:`BaseHttpClient._safe_get`; this covers payloads that decode fine
    but do not have the structure the client reads.
    """

    @functools.wraps(method)
    def wrapper(self: "BaseHttpClient", *args: Any, **kwargs: Any) -> Optional[T]:
        try:
            return method(self, *args, **kwargs)
        except MALFORMED_PAYLOAD_ERRORS as exc:
            identifier = str(args[0]) if args else ""
            self._log_failed_request(
                method.__name__,
                identifier,
                status=None,
                detail=f"malformed payload ({exc.__class__.__name__}: {exc})",
            )
            return None

    return wrapper


class BaseHttpClient:
    """Base class providing shared HTTP behavior for provider clients.

    Transport failures and 5xx responses share a retry budget of
    ``max_attempts`` (one attempt, i.e. no retry, by default). Once the budget
    is spent, HTTP 429 raises :class:`RateLimitedError`, 5xx and transport
    failures raise :class:`UpstreamError`, and other 4xx responses raise
    :class:`RequestRejectedError` subclasses.

    Provider operations use :meth:`_get_json` and :meth:`_get_text`, which
    convert every one of those errors into ``None``. Operations decorated with
    :func:`tolerates_malformed_payload` do the same for payloads of the wrong
    shape, so a failing provider never interrupts a resolution pass.
    """

    BASE_URL = ""
    PROVIDER = "http"

    def __init__(
        self,
        *,
        session: Optional[requests.Session] = None,
        base_url: Optional[str] = None,
        timeout: float = 10.0,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        self.session = session or _get_shared_session()
        for key, value in DEFAULT_HEADERS.items():
            self.session.headers.setdefault(key, value)
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)

    def _send_once(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        if response.status_code in RETRYABLE_STATUS_CODES:
            raise RetryableResponseError(response)
        return response

    def _send(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        retrying = Retrying(
            reraise=True,
            stop=stop_after_attempt(self.max_attempts),
            wait=_retry_wait,
            retry=retry_if_exception_type((requests.RequestException, RetryableResponseError)),
            before_sleep=_log_retry_attempt,
        )
        return retrying(self._send_once, method, url, **kwargs)

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        **kwargs: Any,
    ) -> requests.Response:
        url = path if path.startswith(("http://", "https://")) else f"{self.base_url}{path}"
        try:
            response = self._send(method, url, params=params, headers=headers, **kwargs)
        except RetryableResponseError as exc:
            response = exc.response
        except requests.RequestException as exc:
            raise UpstreamError(f"Request failed: {exc}") from exc

        return self._handle_response(response)

    def _handle_response(self, response: requests.Response) -> requests.Response:
        status = response.status_code
        if status < 400:
            return response
        if status == 404:
            raise NotFoundError("Resource not found")
        if status == 429:
            raise RateLimitedError("Rate limit exceeded", retry_after=_retry_after_seconds(response.headers))

        excerpt = _body_excerpt(response)
        suffix = f": {excerpt}" if excerpt else ""
        if status >= 500:
            raise UpstreamError(f"Upstream service error{suffix} ({status})")
        if status in _CREDENTIAL_REJECTIONS:
            label = "Unauthorized" if status == 401 else "Forbidden"
            raise _CREDENTIAL_REJECTIONS[status](status, f"{label} ({status})", body_excerpt=excerpt)
        raise RequestRejectedError(status, f"Client request rejected{suffix} ({status})", body_excerpt=excerpt)

    def _get_json(
        self,
        path: str,
        *,
        operation: str,
        identifier: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Optional[Dict[str, Any]]:
        """GET ``path`` and decode a JSON object, or ``None`` on any failure."""

        response = self._safe_get(path, operation=operation, identifier=identifier, params=params, headers=headers)
        if response is None:
            return None
        try:
            payload = response.json()
        except ValueError as exc:
            self._log_failed_request(operation, identifier, status=response.status_code, detail=f"invalid JSON: {exc}")
            return None
        if not isinstance(payload, dict):
            self._log_failed_request(operation, identifier, status=response.status_code, detail="unexpected payload shape")
            return None
        return payload

    def _get_text(
        self,
        path: str,
        *,
        operation: str,
        identifier: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Optional[str]:
        """GET ``path`` and return the body text, or ``None`` on any failure."""

        response = self._safe_get(path, operation=operation, identifier=identifier, params=params, headers=headers)
        if response is None:
            return None
        return response.text or None

    def _safe_get(
        self,
        path: str,
        *,
        operation: str,
        identifier: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Optional[requests.Response]:
        try:
            return self._request("GET", path, params=params, headers=headers)
        except NotFoundError:
            self._log_failed_request(operation, identifier, status=404, detail="Not found")
        except (UnauthorizedError, ForbiddenError) as exc:
            logger.warning(
                "%s %s rejected the configured credentials (status=%s)", self.PROVIDER, operation, exc.status
            )
        except RequestRejectedError as exc:
            self._log_failed_request(operation, identifier, status=exc.status, detail=exc.body_excerpt)
        except RateLimitedError as exc:
            detail = "rate limited"
            if exc.retry_after is not None:
                detail = f"{detail}, retry after {exc.retry_after:.0f}s"
            self._log_failed_request(operation, identifier, status=429, detail=detail)
        except UpstreamError as exc:
            self._log_failed_request(operation, identifier, status=None, detail=str(exc))
        return None

    def _log_failed_request(
        self,
        operation: str,
        identifier: str,
        *,
        status: Optional[int],
        detail: Optional[str],
    ) -> None:
        logger.debug(
            "%s %s failed for identifier=%s status=%s%s",
            self.PROVIDER,
            operation,
            identifier,
            status,
            f" detail={detail}" if detail else "",
        )
