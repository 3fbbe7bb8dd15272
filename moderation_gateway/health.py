"""Health endpoint for the moderation gateway.

GET /health — 503 before ``app.state.ready`` is set during lifespan startup,
200 afterwards.

The body reports whether the upstream credential is currently configured. The
provider is consulted on every check (the key is read at call time everywhere),
and only a boolean is exposed — never the key.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request

from moderation_gateway.config import Config
from moderation_gateway.credentials import CredentialProvider

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    """Primary health check endpoint.

    Response body (200):
        {
          "status": "ok" | "degraded",
          "upstream_model": "google/gemini-2.5-flash-lite",
          "credential_configured": true | false
        }

    ``degraded`` means the gateway is up but every classify call would return
    HTTP 500 until the credential is configured.
    """
    if not getattr(request.app.state, "ready", False):
        raise HTTPException(
            status_code=503,
            detail={
                "status": "starting",
                "message": "Moderation gateway is starting up.",
            },
        )

    config: Config = request.app.state.config
    credentials: CredentialProvider = request.app.state.credentials
    credential_configured = credentials.get_api_key() is not None

    return {
        "status": "ok" if credential_configured else "degraded",
        "upstream_model": config.upstream.model,
        "credential_configured": credential_configured,
    }
