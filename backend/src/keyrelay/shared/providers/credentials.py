"""Credential pool - holds the API keys and their rotation state.

The pool owns every piece of shared mutable state: the records, their
counters and the round-robin cursor. All of it is guarded by one lock and
each critical section is a few assignments long, so callers never hold it
across a network call.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Iterable

import structlog

from keyrelay.domain.exceptions import ConfigurationError
from keyrelay.shared.providers.types import CredentialStats, PoolStats

logger = structlog.get_logger(__name__)

DEFAULT_PREVIEW_LENGTH = 10

# Sample values shipped in example .env files.
PLACEHOLDER_TOKENS = frozenset(
    {
        "your_api_key_here",
        "your_actual_gemini_api_key_here",
        "your_gemini_api_key_here",
        "test_key",
        "REPLACE_WITH_YOUR_ACTUAL_GEMINI_API_KEY",
    }
)


def preview_token(token: str, length: int = DEFAULT_PREVIEW_LENGTH) -> str:
    """Redacted display form of a secret. The only way a token reaches a log.

    The prefix never covers more than half the token, so short keys stay hidden.
    """
    return token[: min(length, len(token) // 2)] + "..."


@dataclass
class CredentialRecord:
    """State for a single API key."""

    token: str
    index: int
    total_uses: int = 0
    total_failures: int = 0

    @property
    def position(self) -> int:
        """1-based position, as shown in diagnostics."""
        return self.index + 1

    def preview(self, length: int = DEFAULT_PREVIEW_LENGTH) -> str:
        return preview_token(self.token, length)

    def __repr__(self) -> str:
        return (
            f"CredentialRecord(index={self.index}, token={self.preview()!r}, "
            f"total_uses={self.total_uses}, total_failures={self.total_failures})"
        )


def filter_credentials(candidates: Iterable[str]) -> tuple[str, ...]:
    """Trim candidates and drop blanks, duplicates and placeholders, keeping order.

    Raises:
        ConfigurationError: If nothing was supplied, or nothing survives filtering.
    """
    stripped = [c.strip() for c in candidates if c and c.strip()]
    if not stripped:
        raise ConfigurationError("no credentials supplied")

    accepted: list[str] = []
    placeholders = 0
    duplicates = 0
    for candidate in stripped:
        if candidate in PLACEHOLDER_TOKENS:
            placeholders += 1
            continue
        if candidate in accepted:
            duplicates += 1
            continue
        accepted.append(candidate)

    if placeholders or duplicates:
        logger.warning(
            "credentials_filtered",
            placeholders=placeholders,
            duplicates=duplicates,
        )

    if not accepted:
        raise ConfigurationError("no valid credentials after filtering placeholders")

    return tuple(accepted)


def parse_credentials(raw: str | None) -> tuple[str, ...]:
    """Split a comma-separated key list and filter it like ``filter_credentials``."""
    if not raw:
        raise ConfigurationError("no credentials supplied")
    return filter_credentials(raw.split(","))


class CredentialPool:
    """Ordered, non-empty pool of API keys with a shared round-robin cursor.

    Every construction path filters its tokens, so a live pool never holds
    blanks, duplicates or placeholder values.
    """

    def __init__(
        self,
        tokens: Iterable[str],
        *,
        preview_length: int = DEFAULT_PREVIEW_LENGTH,
    ) -> None:
        accepted = filter_credentials(tokens)
        self._records = [CredentialRecord(token=t, index=i) for i, t in enumerate(accepted)]
        self._preview_length = preview_length
        self._lock = threading.Lock()
        self._cursor = 0

        logger.info("credential_pool_initialized", credentials=len(self._records))

    @classmethod
    def from_string(
        cls,
        raw: str | None,
        *,
        preview_length: int = DEFAULT_PREVIEW_LENGTH,
    ) -> CredentialPool:
        """Build a pool from a comma-separated configuration string."""
        if not raw:
            raise ConfigurationError("no credentials supplied")
        return cls(raw.split(","), preview_length=preview_length)

    def __len__(self) -> int:
        return len(self._records)

    @property
    def size(self) -> int:
        return len(self._records)

    @property
    def cursor(self) -> int:
        with self._lock:
            return self._cursor

    def select_next(self) -> CredentialRecord:
        """Return the record at the cursor and advance it, wrapping at the end."""
        with self._lock:
            record = self._records[self._cursor]
            self._cursor = (self._cursor + 1) % len(self._records)
            return record

    def record_use(self, record: CredentialRecord) -> None:
        with self._lock:
            record.total_uses += 1

    def record_failure(self, record: CredentialRecord) -> int:
        """Count a failed attempt; returns the new failure total."""
        with self._lock:
            record.total_failures += 1
            return record.total_failures

    def preview(self, record: CredentialRecord) -> str:
        return record.preview(self._preview_length)

    def stats(self) -> PoolStats:
        """Snapshot of every credential's counters. Does not touch the cursor."""
        with self._lock:
            return PoolStats(
                total_credentials=len(self._records),
                per_credential=tuple(
                    CredentialStats(
                        preview=r.preview(self._preview_length),
                        uses=r.total_uses,
                        failures=r.total_failures,
                    )
                    for r in self._records
                ),
            )
