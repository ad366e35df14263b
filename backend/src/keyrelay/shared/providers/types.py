"""Core types for the credential rotation dispatcher."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

# Async provider capability: (token, prompt) -> generated text.
SendFn = Callable[[str, str], Awaitable[str]]


class ErrorKind(str, enum.Enum):
    """Closed set of provider failure variants."""

    RATE_LIMITED = "rate_limited"
    UNAVAILABLE = "unavailable"
    TIMEOUT = "timeout"
    UNAUTHORIZED = "unauthorized"
    OTHER = "other"

    @property
    def retryable(self) -> bool:
        # A rejected key is retryable: another key in the pool may still be valid.
        return self is not ErrorKind.OTHER


@dataclass(frozen=True)
class CredentialStats:
    """Read-only snapshot of one credential's counters."""

    preview: str
    uses: int
    failures: int

    def to_dict(self) -> dict[str, Any]:
        return {"preview": self.preview, "uses": self.uses, "failures": self.failures}


@dataclass(frozen=True)
class PoolStats:
    """Read-only snapshot of the whole pool, in pool order."""

    total_credentials: int
    per_credential: tuple[CredentialStats, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalCredentials": self.total_credentials,
            "perCredential": [c.to_dict() for c in self.per_credential],
        }
