"""Provider error classification.

Translates whatever the provider call raised into a ``ProviderError``
tagged with an ``ErrorKind``. This is the only place that pattern-matches
on error text; everything downstream decides on the variant.
"""

from __future__ import annotations

import asyncio

import httpx

from keyrelay.domain.exceptions import (
    NonRetryableProviderError,
    ProviderError,
    RetryableProviderError,
)
from keyrelay.shared.providers.types import ErrorKind

# Checked in order; first match wins. Matching is case-insensitive.
_MESSAGE_PATTERNS: tuple[tuple[ErrorKind, tuple[str, ...]], ...] = (
    (
        ErrorKind.RATE_LIMITED,
        ("429", "too many requests", "quota", "rate limit", "rate_limit_exceeded", "resource_exhausted"),
    ),
    (ErrorKind.UNAVAILABLE, ("503", "service unavailable")),
    (ErrorKind.TIMEOUT, ("timeout", "timed out")),
    (ErrorKind.UNAUTHORIZED, ("api_key_invalid", "401", "permission_denied", "403", "unauthorized")),
)

_STATUS_KINDS: dict[int, ErrorKind] = {
    401: ErrorKind.UNAUTHORIZED,
    403: ErrorKind.UNAUTHORIZED,
    408: ErrorKind.TIMEOUT,
    429: ErrorKind.RATE_LIMITED,
    503: ErrorKind.UNAVAILABLE,
    504: ErrorKind.TIMEOUT,
}


def classify_message(message: str) -> ErrorKind:
    lowered = message.lower()
    for kind, patterns in _MESSAGE_PATTERNS:
        if any(p in lowered for p in patterns):
            return kind
    return ErrorKind.OTHER


def classify_error(exc: BaseException) -> ErrorKind:
    """Map an arbitrary exception to an ``ErrorKind``."""
    if isinstance(exc, ProviderError):
        return exc.kind
    if isinstance(exc, (asyncio.TimeoutError, httpx.TimeoutException)):
        return ErrorKind.TIMEOUT
    if isinstance(exc, httpx.HTTPStatusError):
        kind = _STATUS_KINDS.get(exc.response.status_code)
        if kind is not None:
            return kind
        # Gemini reports quota and key problems as 400 with a status string in the body.
        return classify_message(_http_error_message(exc))
    return classify_message(str(exc))


def to_provider_error(exc: BaseException) -> ProviderError:
    """Wrap ``exc`` in the matching ``ProviderError`` subclass."""
    if isinstance(exc, ProviderError):
        return exc

    kind = classify_error(exc)
    if isinstance(exc, httpx.HTTPStatusError):
        message = _http_error_message(exc)
    else:
        message = str(exc) or type(exc).__name__

    error_cls = RetryableProviderError if kind.retryable else NonRetryableProviderError
    return error_cls(message, kind=kind)


def _http_error_message(exc: httpx.HTTPStatusError) -> str:
    response = exc.response
    try:
        body = response.text
    except httpx.ResponseNotRead:
        body = ""
    return f"HTTP {response.status_code} {response.reason_phrase}: {body}".strip()
