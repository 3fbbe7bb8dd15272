"""Moderation classifier — classify(content) -> Verdict.

One linear pipeline per call, no shared mutable state:

  1. Input validation   — missing / non-string / empty content → not flagged,
                          upstream never called
  2. Content cap        — content above upstream.max_content_chars is truncated
  3. Prompt             — classifier.prompt.build_messages()
  4. Credential         — resolved NOW via the CredentialProvider;
                          absent → MissingCredentialError (the fatal path)
  5. Upstream call      — ONE POST, bounded timeout, no retries
  6. Status handling    — 429 / 402 → soft error verdict; other non-2xx → not flagged
  7. Parsing            — classifier.parser; any failure → not flagged

Failure mode separation:
  - MissingCredentialError is the ONLY exception that leaves classify().
  - httpx transport errors (connect, timeout, protocol) are absorbed: a
    moderation outage must not block the caller's message delivery.
  - Upstream 429 / 402 carry an ``error`` field so the caller can tell
    "moderation unavailable" from "content is clean".
"""

from __future__ import annotations

from typing import Any

import httpx

from moderation_gateway.classifier.parser import extract_message_text, parse_verdict
from moderation_gateway.classifier.prompt import build_messages
from moderation_gateway.config import UpstreamConfig
from moderation_gateway.constants import (
    DEFAULT_UPSTREAM_TIMEOUT_S,
    PAYMENT_REQUIRED_ERROR,
    POOL_KEEPALIVE_EXPIRY,
    POOL_MAX_CONNECTIONS,
    POOL_MAX_KEEPALIVE,
    RATE_LIMITED_ERROR,
)
from moderation_gateway.credentials import CredentialProvider, require_api_key
from moderation_gateway.errors import VerdictParseError
from moderation_gateway.models.verdict import Verdict
from moderation_gateway.utils.logger import get_logger

logger = get_logger(__name__)

# Upstream statuses that degrade softly with a caller-visible error field.
_SOFT_ERROR_STATUSES: dict[int, str] = {
    429: RATE_LIMITED_ERROR,
    402: PAYMENT_REQUIRED_ERROR,
}


# ─── httpx.AsyncClient factory ────────────────────────────────────────────────


def create_http_client() -> httpx.AsyncClient:
    """Create the shared httpx.AsyncClient used for upstream calls.

    Created once at lifespan startup and stored in app.state.http_client.
    Pooling is whatever httpx provides; the gateway adds no queue or limiter.
    """
    return httpx.AsyncClient(
        limits=httpx.Limits(
            max_connections=POOL_MAX_CONNECTIONS,
            max_keepalive_connections=POOL_MAX_KEEPALIVE,
            keepalive_expiry=POOL_KEEPALIVE_EXPIRY,
        ),
        timeout=httpx.Timeout(DEFAULT_UPSTREAM_TIMEOUT_S),
        follow_redirects=False,
    )


# ─── Input helpers ────────────────────────────────────────────────────────────


def apply_content_cap(content: str, max_chars: int) -> str:
    """Truncate content to ``max_chars`` characters (0 disables the cap)."""
    if max_chars and len(content) > max_chars:
        logger.warning(
            "content_truncated",
            original_length=len(content),
            limit=max_chars,
        )
        return content[:max_chars]
    return content


# ─── classify ─────────────────────────────────────────────────────────────────


async def classify(
    content: Any,
    *,
    http_client: httpx.AsyncClient,
    upstream: UpstreamConfig,
    credentials: CredentialProvider,
) -> Verdict:
    """Classify ``content`` against the moderation policy.

    Args:
        content:     Caller-supplied value; anything but a non-empty string is
                     treated as trivially safe.
        http_client: Shared AsyncClient (app.state.http_client).
        upstream:    Upstream endpoint, model, timeout and content cap.
        credentials: Provider consulted for the bearer key on this call.

    Returns:
        The validated Verdict, or the fail-open Verdict on any upstream or
        parse failure.

    Raises:
        MissingCredentialError: If no upstream key is configured.
    """
    if not isinstance(content, str) or not content:
        logger.debug("classification_skipped", content_type=type(content).__name__)
        return Verdict.safe()

    content = apply_content_cap(content, upstream.max_content_chars)
    messages = build_messages(content)

    api_key = require_api_key(credentials)

    try:
        response = await http_client.post(
            upstream.url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            json={"model": upstream.model, "messages": messages},
            timeout=upstream.timeout_s,
        )
    except httpx.HTTPError as exc:
        # ConnectError, TimeoutException, RemoteProtocolError, InvalidURL ...
        logger.warning(
            "upstream_unavailable",
            upstream_url=upstream.url,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        return Verdict.safe()

    if not response.is_success:
        soft_error = _SOFT_ERROR_STATUSES.get(response.status_code)
        if soft_error is not None:
            logger.warning(
                "upstream_soft_error",
                status_code=response.status_code,
                error=soft_error,
            )
            return Verdict.safe(error=soft_error)
        logger.error(
            "upstream_error",
            status_code=response.status_code,
            upstream_url=upstream.url,
        )
        return Verdict.safe()

    try:
        payload = response.json()
    except ValueError:
        logger.error(
            "upstream_body_not_json",
            status_code=response.status_code,
            body=response.text[:500],
        )
        return Verdict.safe()

    answer = extract_message_text(payload)
    try:
        verdict = parse_verdict(answer)
    except VerdictParseError as exc:
        logger.error(
            "verdict_parse_failed",
            error=exc.message,
            raw_text=exc.raw_text,
        )
        return Verdict.safe()

    logger.info(
        "classification_completed",
        flagged=verdict.flagged,
        reason=verdict.reason,
        content_length=len(content),
        model=upstream.model,
    )
    return verdict
