"""Tests for provider error classification."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from keyrelay.domain.exceptions import (
    NonRetryableProviderError,
    ProviderError,
    RetryableProviderError,
)
from keyrelay.shared.providers import ErrorKind, classify_error, to_provider_error


def _http_error(status: int, body: str = "") -> httpx.HTTPStatusError:
    request = httpx.Request("POST", "https://example.test/v1beta/models/m:generateContent")
    response = httpx.Response(status, text=body, request=request)
    return httpx.HTTPStatusError(f"status {status}", request=request, response=response)


class TestMessageClassification:
    @pytest.mark.parametrize(
        ("message", "kind"),
        [
            ("[429 Too Many Requests] slow down", ErrorKind.RATE_LIMITED),
            ("You exceeded your current quota", ErrorKind.RATE_LIMITED),
            ("rate limit reached for key", ErrorKind.RATE_LIMITED),
            ("RATE_LIMIT_EXCEEDED", ErrorKind.RATE_LIMITED),
            ("RESOURCE_EXHAUSTED", ErrorKind.RATE_LIMITED),
            ("503 Service Unavailable", ErrorKind.UNAVAILABLE),
            ("The model is overloaded. Service Unavailable", ErrorKind.UNAVAILABLE),
            ("request timeout", ErrorKind.TIMEOUT),
            ("DEADLINE TIMEOUT", ErrorKind.TIMEOUT),
            ("API_KEY_INVALID", ErrorKind.UNAUTHORIZED),
            ("401 Unauthorized", ErrorKind.UNAUTHORIZED),
            ("PERMISSION_DENIED", ErrorKind.UNAUTHORIZED),
            ("403 Forbidden", ErrorKind.UNAUTHORIZED),
            ("Invalid JSON payload received", ErrorKind.OTHER),
            ("", ErrorKind.OTHER),
        ],
    )
    def test_message_patterns(self, message: str, kind: ErrorKind) -> None:
        assert classify_error(RuntimeError(message)) == kind


class TestTypedClassification:
    def test_asyncio_timeout(self) -> None:
        assert classify_error(asyncio.TimeoutError()) == ErrorKind.TIMEOUT

    def test_httpx_timeout(self) -> None:
        assert classify_error(httpx.ReadTimeout("read")) == ErrorKind.TIMEOUT

    @pytest.mark.parametrize(
        ("status", "kind"),
        [
            (401, ErrorKind.UNAUTHORIZED),
            (403, ErrorKind.UNAUTHORIZED),
            (429, ErrorKind.RATE_LIMITED),
            (503, ErrorKind.UNAVAILABLE),
            (504, ErrorKind.TIMEOUT),
            (500, ErrorKind.OTHER),
        ],
    )
    def test_http_status(self, status: int, kind: ErrorKind) -> None:
        assert classify_error(_http_error(status)) == kind

    def test_http_400_with_invalid_key_body(self) -> None:
        body = '{"error": {"code": 400, "status": "INVALID_ARGUMENT", "details": [{"reason": "API_KEY_INVALID"}]}}'
        assert classify_error(_http_error(400, body)) == ErrorKind.UNAUTHORIZED

    def test_http_400_malformed_request(self) -> None:
        body = '{"error": {"code": 400, "message": "Invalid JSON payload received."}}'
        assert classify_error(_http_error(400, body)) == ErrorKind.OTHER

    def test_provider_error_keeps_kind(self) -> None:
        err = NonRetryableProviderError("429 in prompt text", kind=ErrorKind.OTHER)
        assert classify_error(err) == ErrorKind.OTHER


class TestTranslation:
    def test_retryable_subclass(self) -> None:
        err = to_provider_error(RuntimeError("429 Too Many Requests"))
        assert isinstance(err, RetryableProviderError)
        assert err.retryable is True
        assert err.kind == ErrorKind.RATE_LIMITED
        assert err.message == "429 Too Many Requests"

    def test_non_retryable_subclass(self) -> None:
        err = to_provider_error(ValueError("bad prompt"))
        assert isinstance(err, NonRetryableProviderError)
        assert err.retryable is False

    def test_passthrough(self) -> None:
        original = RetryableProviderError("busy", kind=ErrorKind.UNAVAILABLE)
        assert to_provider_error(original) is original

    def test_empty_message_uses_type_name(self) -> None:
        err = to_provider_error(ConnectionResetError())
        assert err.message == "ConnectionResetError"

    def test_http_message_includes_status_and_body(self) -> None:
        err = to_provider_error(_http_error(429, "quota exceeded"))
        assert isinstance(err, ProviderError)
        assert err.message.startswith("HTTP 429 Too Many Requests")
        assert "quota exceeded" in err.message
