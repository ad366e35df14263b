"""Shared test fixtures."""

from __future__ import annotations

import os
import sys
from collections.abc import Callable

import pytest

# Add src to path so imports work without an editable install
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "../src")))

from keyrelay.domain.exceptions import NonRetryableProviderError, RetryableProviderError
from keyrelay.shared.providers import CredentialPool
from keyrelay.shared.providers.types import ErrorKind


class ScriptedProvider:
    """Provider stub that answers per token from a script.

    A script value is either the text to return or an exception to raise.
    Tokens missing from the script succeed with ``"ok:<token>"``.
    """

    def __init__(self, script: dict[str, str | Exception] | None = None) -> None:
        self.script = script or {}
        self.calls: list[tuple[str, str]] = []

    async def send(self, token: str, prompt: str) -> str:
        self.calls.append((token, prompt))
        outcome = self.script.get(token, f"ok:{token}")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    @property
    def tokens_tried(self) -> list[str]:
        return [t for t, _ in self.calls]


@pytest.fixture
def tokens() -> list[str]:
    return ["AIzaKeyAlpha-000000001", "AIzaKeyBravo-000000002", "AIzaKeyCharlie-0000003"]


@pytest.fixture
def pool(tokens: list[str]) -> CredentialPool:
    return CredentialPool.from_string(",".join(tokens))


@pytest.fixture
def provider() -> ScriptedProvider:
    return ScriptedProvider()


@pytest.fixture
def rate_limited() -> Callable[[], Exception]:
    return lambda: RetryableProviderError("429 Too Many Requests", kind=ErrorKind.RATE_LIMITED)


@pytest.fixture
def bad_request() -> Callable[[], Exception]:
    return lambda: NonRetryableProviderError("400 Bad Request: malformed prompt", kind=ErrorKind.OTHER)


@pytest.fixture
def scripted() -> type[ScriptedProvider]:
    return ScriptedProvider
