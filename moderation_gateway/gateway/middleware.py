"""Ingress middleware for the moderation gateway.

CORSMiddleware (this module, not Starlette's):
  - Answers EVERY OPTIONS request immediately: HTTP 200, empty body, CORS
    headers. No route, config or credential is consulted, so browser
    pre-flight keeps working even when the gateway is misconfigured.
  - Stamps the CORS headers onto every other response.
  Starlette's CORSMiddleware only short-circuits requests that carry
  ``Access-Control-Request-Method``; a bare OPTIONS would fall through to a 405.

BodySizeLimitMiddleware:
  Enforces the 1 MB request body hard cap BEFORE the body is parsed.
    1. Content-Length fast path: reject immediately on an oversized header value.
    2. Chunked slow path: accumulate with a rolling cap; reject once exceeded.
  Rejections use the gateway error shape ``{"error": ..., "flagged": false}``.
"""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from moderation_gateway.constants import CORS_HEADERS, MAX_REQUEST_BODY_BYTES
from moderation_gateway.models.responses import build_error_response
from moderation_gateway.utils.logger import get_logger

logger = get_logger(__name__)

_PAYLOAD_TOO_LARGE_MESSAGE = "Request body too large. Maximum size: 1MB"
_INVALID_CONTENT_LENGTH_MESSAGE = "Invalid Content-Length header"


class CORSMiddleware(BaseHTTPMiddleware):
    """Permissive CORS: any origin, enumerated request headers."""

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=dict(CORS_HEADERS))

        response = await call_next(request)
        for name, value in CORS_HEADERS.items():
            response.headers[name] = value
        return response


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject request bodies larger than MAX_REQUEST_BODY_BYTES with HTTP 413.

    - Content-Length > limit  → 413 (fast path, no body read)
    - Content-Length == limit → accepted
    - No Content-Length, accumulated body > limit → 413 (rolling cap)
    """

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        content_length_header = request.headers.get("content-length")

        if content_length_header is not None:
            try:
                declared_size = int(content_length_header)
            except ValueError:
                logger.warning(
                    "Invalid Content-Length header",
                    value=content_length_header,
                    path=request.url.path,
                )
                return build_error_response(_INVALID_CONTENT_LENGTH_MESSAGE, status_code=400)

            if declared_size > MAX_REQUEST_BODY_BYTES:
                logger.warning(
                    "Request body too large (Content-Length)",
                    declared_size=declared_size,
                    limit=MAX_REQUEST_BODY_BYTES,
                    path=request.url.path,
                )
                return build_error_response(_PAYLOAD_TOO_LARGE_MESSAGE, status_code=413)

            return await call_next(request)

        body_chunks: list[bytes] = []
        total_size: int = 0

        async for chunk in request.stream():
            total_size += len(chunk)
            if total_size > MAX_REQUEST_BODY_BYTES:
                logger.warning(
                    "Request body too large (chunked)",
                    accumulated_size=total_size,
                    limit=MAX_REQUEST_BODY_BYTES,
                    path=request.url.path,
                )
                return build_error_response(_PAYLOAD_TOO_LARGE_MESSAGE, status_code=413)
            body_chunks.append(chunk)

        # Request.body() returns the cached bytes instead of re-reading the
        # already-consumed stream.
        request._body = b"".join(body_chunks)  # type: ignore[attr-defined]

        return await call_next(request)
