"""Credential dispatcher - the main entry-point for provider calls.

Callers hand in a prompt; the dispatcher picks the next key in rotation,
invokes the provider, and on a retryable failure moves on to the next key
until every key in the pool has had one attempt.
"""

from __future__ import annotations

import asyncio
import math
import time

import structlog

from keyrelay.domain.exceptions import PoolExhaustedError, ProviderError
from keyrelay.shared.observability.metrics import (
    CREDENTIAL_ATTEMPTS,
    DISPATCH_EXHAUSTED,
    DISPATCH_LATENCY,
)
from keyrelay.shared.providers.classifier import to_provider_error
from keyrelay.shared.providers.credentials import CredentialPool
from keyrelay.shared.providers.types import PoolStats, SendFn

logger = structlog.get_logger(__name__)


def estimate_tokens(text: str) -> int:
    """Rough token count (four characters per token)."""
    return math.ceil(len(text) / 4)


class CredentialDispatcher:
    """Round-robin dispatcher with failover across a credential pool.

    Usage::

        pool = CredentialPool.from_string(settings.credential_string)
        dispatcher = CredentialDispatcher(pool, provider.send)

        text = await dispatcher.dispatch("Summarise this policy ...")

    ``send`` receives ``(token, prompt)`` and must return the generated text
    or raise. Each call tries at most ``len(pool)`` keys.
    """

    def __init__(
        self,
        pool: CredentialPool,
        send: SendFn,
        *,
        timeout_s: float | None = None,
    ) -> None:
        self._pool = pool
        self._send = send
        self._timeout = timeout_s if timeout_s and timeout_s > 0 else None

    @property
    def pool(self) -> CredentialPool:
        return self._pool

    async def dispatch(self, prompt: str) -> str:
        """Send ``prompt`` using the first key that succeeds.

        Raises:
            PoolExhaustedError: If every key failed, or a non-retryable
                failure stopped the loop early. The last ``ProviderError``
                is attached as ``last_error`` and chained as the cause.
        """
        pool = self._pool
        max_attempts = pool.size
        prompt_tokens = estimate_tokens(prompt)
        last_error: ProviderError | None = None
        attempts = 0
        start = time.monotonic()

        logger.debug("dispatch_started", estimated_prompt_tokens=prompt_tokens)

        while attempts < max_attempts:
            record = pool.select_next()
            attempts += 1
            log = logger.bind(
                key=f"{record.position}/{max_attempts}",
                key_preview=pool.preview(record),
                attempt=attempts,
            )
            log.info("credential_attempt")

            try:
                text = await self._call(record.token, prompt)
            except Exception as exc:
                error = to_provider_error(exc)
                last_error = error
                failures = pool.record_failure(record)
                CREDENTIAL_ATTEMPTS.labels(credential=str(record.position), outcome="failure").inc()

                will_retry = error.retryable and attempts < max_attempts
                log.warning(
                    "credential_failed",
                    error=error.message,
                    kind=error.kind.value,
                    retryable=error.retryable,
                    total_failures=failures,
                    next_action="try_next_key" if will_retry else "stop",
                )
                if will_retry:
                    continue
                break

            pool.record_use(record)
            CREDENTIAL_ATTEMPTS.labels(credential=str(record.position), outcome="success").inc()
            DISPATCH_LATENCY.observe(time.monotonic() - start)

            response_tokens = estimate_tokens(text)
            log.info(
                "credential_succeeded",
                response_tokens=response_tokens,
                total_tokens=prompt_tokens + response_tokens,
            )
            return text

        DISPATCH_EXHAUSTED.inc()
        DISPATCH_LATENCY.observe(time.monotonic() - start)
        self._log_exhaustion(attempts, last_error)
        raise PoolExhaustedError(
            pool_size=max_attempts,
            attempts=attempts,
            last_error=last_error,
        ) from last_error

    def get_stats(self) -> PoolStats:
        """Per-key usage snapshot; never mutates counters or the cursor."""
        return self._pool.stats()

    # ── Internals ────────────────────────────────────────────
    async def _call(self, token: str, prompt: str) -> str:
        if self._timeout is None:
            return await self._send(token, prompt)
        try:
            return await asyncio.wait_for(self._send(token, prompt), timeout=self._timeout)
        except asyncio.TimeoutError:
            raise asyncio.TimeoutError(f"Provider call timeout after {self._timeout}s") from None

    def _log_exhaustion(self, attempts: int, last_error: ProviderError | None) -> None:
        stats = self._pool.stats()
        logger.error(
            "credential_pool_exhausted",
            total_credentials=stats.total_credentials,
            attempts=attempts,
            last_error=last_error.message if last_error else None,
            summary=[
                f"#{i} ({c.preview}): {c.uses} uses, {c.failures} failures"
                for i, c in enumerate(stats.per_credential, start=1)
            ],
        )
