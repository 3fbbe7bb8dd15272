"""Moderation endpoint.

POST /moderate-content (and POST /) with body ``{"content": string}``.

Response taxonomy:
  - 200 ``{"flagged": bool, "reason": str | null}``          — classified, or
                                                                fail-open
  - 200 same shape + ``"error": "Rate limited" | "Payment required"``
  - 500 ``{"error": str, "flagged": false}``                  — unreadable body,
                                                                missing credential,
                                                                unexpected exception

The handler catches everything itself, so the 500 shape still passes back
through CORSMiddleware and carries the CORS headers.
"""

from __future__ import annotations

import json

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from moderation_gateway.classifier.engine import classify
from moderation_gateway.errors import MissingCredentialError
from moderation_gateway.models.responses import build_error_response, build_verdict_response
from moderation_gateway.utils.logger import clear_request_id, get_logger, set_request_id
from moderation_gateway.utils.ulid import generate_ulid

logger = get_logger(__name__)

router = APIRouter(tags=["moderation"])


@router.post("/moderate-content")
@router.post("/")
async def moderate_content(request: Request) -> JSONResponse:
    request_id = generate_ulid()
    set_request_id(request_id)
    try:
        try:
            body = json.loads(await request.body())
        except ValueError as exc:
            # Total request-body failure: the one input condition that is an error.
            logger.warning("request_body_invalid", error=str(exc))
            return build_error_response(f"Invalid request body: {exc}", request_id=request_id)

        content = body.get("content") if isinstance(body, dict) else None

        verdict = await classify(
            content,
            http_client=request.app.state.http_client,
            upstream=request.app.state.config.upstream,
            credentials=request.app.state.credentials,
        )
        return build_verdict_response(verdict, request_id=request_id)

    except MissingCredentialError as exc:
        logger.error("moderation_misconfigured", error=exc.message)
        return build_error_response(exc.message, request_id=request_id)
    except Exception as exc:
        logger.exception(
            "moderation_error",
            error_type=type(exc).__name__,
            error=str(exc),
        )
        return build_error_response(str(exc) or "Unknown error", request_id=request_id)
    finally:
        clear_request_id()
