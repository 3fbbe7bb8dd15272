"""HTTP response builders for the moderation endpoint.

Two shapes only, and they are never confused:

  build_verdict_response():
      HTTP 200 — any Verdict, including the soft-degraded ones that carry an
      ``error`` field (rate limited, payment required). The caller treats all
      of these as "proceed unless flagged".

  build_error_response():
      HTTP 500 (or 413 for an oversized body) — operator-facing failure.
      Body: ``{"error": <message>, "flagged": false}``. Only missing
      configuration, an unreadable request body and unexpected exceptions
      land here.

Every response carries the CORS headers and, when known, ``X-Request-ID``.
"""

from __future__ import annotations

from typing import Optional

from fastapi.responses import JSONResponse

from moderation_gateway.constants import CORS_HEADERS
from moderation_gateway.models.verdict import Verdict

REQUEST_ID_HEADER = "X-Request-ID"


def _headers(request_id: Optional[str]) -> dict[str, str]:
    headers = dict(CORS_HEADERS)
    if request_id:
        headers[REQUEST_ID_HEADER] = request_id
    return headers


def build_verdict_response(verdict: Verdict, request_id: Optional[str] = None) -> JSONResponse:
    """Render a Verdict as an HTTP 200 JSON response."""
    return JSONResponse(
        status_code=200,
        content=verdict.to_dict(),
        headers=_headers(request_id),
    )


def build_error_response(
    message: str,
    status_code: int = 500,
    request_id: Optional[str] = None,
) -> JSONResponse:
    """Render the error shape ``{"error": message, "flagged": false}``.

    Args:
        message:     Human-readable error. MUST NOT contain the credential value.
        status_code: 500 for misconfiguration / unexpected failure, 413 for
                     an oversized body.
        request_id:  ULID for log correlation, if one was assigned.
    """
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "flagged": False},
        headers=_headers(request_id),
    )
