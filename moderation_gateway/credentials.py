"""Upstream credential resolution.

The bearer key for the upstream classifier is resolved on EVERY call through a
CredentialProvider — never read once at startup and held in module state. An
operator can set or rotate the key without a restart, and tests substitute a
StaticCredentialProvider instead of mutating the process environment.

Layout:
    CredentialProvider            — Protocol: get_api_key() -> str | None
    EnvironmentCredentialProvider — reads os.environ[<api_key_env>] per call
    StaticCredentialProvider      — fixed value (tests, embedding)
    create_credential_provider()  — factory used by the lifespan
    require_api_key()             — raises MissingCredentialError when absent
"""

from __future__ import annotations

import os
from typing import Optional, Protocol, runtime_checkable

from moderation_gateway.config import Config
from moderation_gateway.errors import MissingCredentialError
from moderation_gateway.utils.logger import get_logger

logger = get_logger(__name__)


# ─── CredentialProvider Protocol ──────────────────────────────────────────────


@runtime_checkable
class CredentialProvider(Protocol):
    """Source of the upstream bearer key, consulted at call time."""

    source: str

    def get_api_key(self) -> Optional[str]:
        """Return the current key, or None if it is not configured."""
        ...


class EnvironmentCredentialProvider:
    """Reads the key from the process environment on every call."""

    def __init__(self, env_var: str) -> None:
        self.env_var = env_var
        self.source = env_var

    def get_api_key(self) -> Optional[str]:
        return os.environ.get(self.env_var) or None


class StaticCredentialProvider:
    """Serves a fixed key. ``None`` models an unconfigured deployment."""

    def __init__(self, api_key: Optional[str], source: str = "static") -> None:
        self._api_key = api_key
        self.source = source

    def get_api_key(self) -> Optional[str]:
        return self._api_key or None


def create_credential_provider(config: Config) -> CredentialProvider:
    """Build the provider for ``config.upstream.api_key_env``.

    Logs whether the key is present at startup (never its value). A missing key
    does not refuse startup: OPTIONS and /health must keep answering, and
    every classify call reports the misconfiguration as HTTP 500.
    """
    provider = EnvironmentCredentialProvider(config.upstream.api_key_env)
    if provider.get_api_key() is None:
        logger.warning(
            "Upstream credential not configured — classify calls will fail with 500",
            api_key_env=provider.env_var,
        )
    else:
        logger.info("Upstream credential present", api_key_env=provider.env_var)
    return provider


def require_api_key(provider: CredentialProvider) -> str:
    """Resolve the key now or raise MissingCredentialError.

    Raises:
        MissingCredentialError: If the provider returns None or an empty string.
    """
    api_key = provider.get_api_key()
    if not api_key:
        raise MissingCredentialError(provider.source)
    return api_key


assert isinstance(StaticCredentialProvider(None), CredentialProvider), (
    "StaticCredentialProvider does not satisfy CredentialProvider protocol"
)
