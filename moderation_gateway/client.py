"""Caller-side helper for the moderation gateway.

Used by the application before it stores or delivers user content (a chat
message, an exchange request):

    async with ModerationClient("https://gateway.internal/moderate-content") as client:
        verdict = await client.moderate(text)
    if verdict.flagged:
        reject(verdict.reason)

The helper fails open exactly like the gateway does: a transport error, a
non-2xx status (including the gateway's own 500) or an undecodable body is
logged and returns ``Verdict(flagged=False, reason=None)``. Moderation being
down must never stop a user from sending a message.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from moderation_gateway.constants import DEFAULT_UPSTREAM_TIMEOUT_S
from moderation_gateway.models.verdict import Verdict
from moderation_gateway.utils.logger import get_logger

logger = get_logger(__name__)


class ModerationClient:
    """Thin async client for ``POST /moderate-content``."""

    def __init__(
        self,
        url: str,
        *,
        headers: Optional[dict[str, str]] = None,
        timeout: float = DEFAULT_UPSTREAM_TIMEOUT_S,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.url = url
        self._headers = headers or {}
        self._timeout = timeout
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "ModerationClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def moderate(self, content: str) -> Verdict:
        """Ask the gateway about ``content``; never raises for gateway failures."""
        try:
            response = await self._client.post(
                self.url,
                json={"content": content},
                headers=self._headers,
                timeout=self._timeout,
            )
        except httpx.HTTPError as exc:
            logger.error("moderation_request_failed", error_type=type(exc).__name__, error=str(exc))
            return Verdict.safe()

        if not response.is_success:
            logger.error("moderation_gateway_error", status_code=response.status_code)
            return Verdict.safe()

        try:
            data = response.json()
        except ValueError:
            logger.error("moderation_response_not_json", status_code=response.status_code)
            return Verdict.safe()

        if not isinstance(data, dict):
            return Verdict.safe()

        reason = data.get("reason")
        return Verdict(
            flagged=bool(data.get("flagged")),
            reason=reason if isinstance(reason, str) and reason else None,
        )
