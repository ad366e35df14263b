"""Credential rotation framework.

Round-robin selection over a pool of API keys, failure classification,
and failover to the next key on retryable errors.
"""

from keyrelay.shared.providers.types import (
    CredentialStats,
    ErrorKind,
    PoolStats,
    SendFn,
)
from keyrelay.shared.providers.classifier import classify_error, to_provider_error
from keyrelay.shared.providers.credentials import (
    CredentialPool,
    CredentialRecord,
    filter_credentials,
    parse_credentials,
    preview_token,
)
from keyrelay.shared.providers.dispatcher import CredentialDispatcher

__all__ = [
    "CredentialDispatcher",
    "CredentialPool",
    "CredentialRecord",
    "CredentialStats",
    "ErrorKind",
    "PoolStats",
    "SendFn",
    "classify_error",
    "filter_credentials",
    "parse_credentials",
    "preview_token",
    "to_provider_error",
]
