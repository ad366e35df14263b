"""Domain-specific exception hierarchy.

All exceptions inherit from ``DomainError`` so callers can catch the entire
family in one clause while still discriminating on subclass.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from keyrelay.shared.providers.types import ErrorKind


class DomainError(Exception):
    """Base class for all domain-layer errors."""

    def __init__(self, message: str, *, code: str = "DOMAIN_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(message)


# ── Validation ───────────────────────────────────────────────
class ValidationError(DomainError):
    """Input failed domain validation rules."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="VALIDATION_ERROR")


# ── Configuration ────────────────────────────────────────────
class ConfigurationError(DomainError):
    """The credential pool cannot be built. Fatal at startup, never retried."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="CONFIGURATION_ERROR")


# ── Provider calls ───────────────────────────────────────────
class ProviderError(DomainError):
    """A single provider call failed.

    ``kind`` is the classified failure variant; retry decisions are driven
    off it, never off the raw message.
    """

    def __init__(self, message: str, *, kind: ErrorKind) -> None:
        self.kind = kind
        super().__init__(message, code="PROVIDER_ERROR")

    @property
    def retryable(self) -> bool:
        return self.kind.retryable


class RetryableProviderError(ProviderError):
    """Rate limit, quota, unavailability, timeout or a rejected credential."""


class NonRetryableProviderError(ProviderError):
    """Any failure a different credential is not expected to fix."""


class PoolExhaustedError(DomainError):
    """No credential in the pool produced a successful response."""

    def __init__(
        self,
        *,
        pool_size: int,
        attempts: int,
        last_error: ProviderError | None = None,
    ) -> None:
        self.pool_size = pool_size
        self.attempts = attempts
        self.last_error = last_error
        self.last_error_message = last_error.message if last_error else "Unknown"
        super().__init__(
            f"All {pool_size} API keys failed. Last error: {self.last_error_message}",
            code="POOL_EXHAUSTED",
        )
