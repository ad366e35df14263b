"""Gemini text provider - the ``send(token, prompt)`` capability.

A pure HTTP call with no retry logic; the dispatcher owns rotation
and failover.
"""

from __future__ import annotations

import re
from typing import Any

import httpx
import structlog

from keyrelay.domain.exceptions import NonRetryableProviderError
from keyrelay.shared.providers.types import ErrorKind

logger = structlog.get_logger(__name__)

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*")
_FENCE_CLOSE = re.compile(r"```\s*$")


def clean_json_response(response: str) -> str:
    """Strip a markdown code fence (```json ... ```) wrapped around a reply."""
    text = response.strip()
    if text.startswith("```"):
        text = _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", text))
    return text.strip()


class GeminiTextProvider:
    """Calls ``models/{model}:generateContent`` and returns the first candidate's text."""

    def __init__(
        self,
        *,
        model: str = "gemini-2.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def model(self) -> str:
        return self._model

    async def send(self, token: str, prompt: str) -> str:
        logger.debug("gemini_request", model=self._model, prompt_chars=len(prompt))
        response = await self._client.post(
            f"{self._base_url}/models/{self._model}:generateContent",
            params={"key": token},
            headers={"Content-Type": "application/json"},
            json={"contents": [{"parts": [{"text": prompt}]}]},
        )
        response.raise_for_status()
        return self._extract_text(response.json())

    @staticmethod
    def _extract_text(data: dict[str, Any]) -> str:
        candidates = data.get("candidates") or []
        if not candidates:
            reason = (data.get("promptFeedback") or {}).get("blockReason", "no candidates returned")
            raise NonRetryableProviderError(f"Empty response: {reason}", kind=ErrorKind.OTHER)
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(p.get("text", "") for p in parts)

    async def close(self) -> None:
        await self._client.aclose()
