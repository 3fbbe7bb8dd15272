"""Moderation gateway FastAPI application factory + lifespan lifecycle.

This module implements:
  - create_app() — testable application factory
  - lifespan — @asynccontextmanager startup/shutdown sequence
  - /health router — delegated to health.py
  - /moderate-content router — delegated to gateway/router.py
  - /        route  — service discovery root
  - app = create_app() — module-level instance for uvicorn

Startup sequence:
  1. load_config()                 → app.state.config
  2. create_credential_provider()  → app.state.credentials (key read per call)
  3. create_http_client()          → app.state.http_client
  4. app.state.ready = True

Shutdown (reverse):
  app.state.ready = False → close HTTP client
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi.routing import APIRouter

from moderation_gateway.classifier.engine import create_http_client
from moderation_gateway.config import Config, load_config
from moderation_gateway.constants import CORS_HEADERS
from moderation_gateway.credentials import create_credential_provider
from moderation_gateway.gateway.middleware import BodySizeLimitMiddleware, CORSMiddleware
from moderation_gateway.gateway.router import router as moderation_router
from moderation_gateway.health import router as health_router
from moderation_gateway.utils.logger import configure_logging, get_logger

# ─── Logging Setup ────────────────────────────────────────────────────────────
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO" if not DEBUG else "DEBUG")
JSON_LOGS = os.getenv("JSON_LOGS", "true").lower() == "true"

configure_logging(log_level=LOG_LEVEL, json_output=JSON_LOGS)
logger = get_logger(__name__)


root_router = APIRouter(tags=["root"])


@root_router.get("/")
async def root() -> dict[str, str]:
    """Root endpoint — service identity / discovery."""
    return {
        "service": "moderation-gateway",
        "moderate": "/moderate-content",
        "health": "/health",
    }


# ─── Lifespan ─────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan — startup and shutdown sequence."""
    logger.info("Moderation gateway starting up...")

    # load_config() raises SystemExit on an invalid config file, so the
    # process exits non-zero before ready=True is ever set.
    config: Config = load_config()
    app.state.config = config

    # A missing key does NOT refuse startup; it is reported per call as 500.
    app.state.credentials = create_credential_provider(config)

    http_client: httpx.AsyncClient = create_http_client()
    app.state.http_client = http_client
    logger.info(
        "Upstream client created",
        upstream_url=config.upstream.url,
        upstream_model=config.upstream.model,
        timeout_s=config.upstream.timeout_s,
    )

    app.state.ready = True
    logger.info("Moderation gateway ready")

    yield

    logger.info("Moderation gateway shutting down...")
    app.state.ready = False

    try:
        await http_client.aclose()
        logger.info("Upstream client closed")
    except Exception as exc:
        logger.warning("Upstream client close error (non-fatal)", error=str(exc))

    logger.info("Moderation gateway shutdown complete")


# ─── Application Factory ──────────────────────────────────────────────────────


def create_app() -> FastAPI:
    """Create and configure the moderation gateway FastAPI application.

    Call this function directly in tests to get an isolated app instance.
    """
    application = FastAPI(
        title="Moderation Gateway",
        description="Classifies user-submitted text against the community content policy",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if DEBUG else None,
        redoc_url="/redoc" if DEBUG else None,
        openapi_url="/openapi.json" if DEBUG else None,
    )

    application.state.ready = False

    # In Starlette the LAST-added middleware is OUTERMOST (runs first).
    # CORSMiddleware is outermost so 413 rejections carry CORS headers too,
    # and OPTIONS never reaches the body check.
    application.add_middleware(BodySizeLimitMiddleware)
    application.add_middleware(CORSMiddleware)

    application.include_router(root_router)
    application.include_router(health_router)
    application.include_router(moderation_router)

    @application.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        logger.warning(
            "HTTP exception",
            status_code=exc.status_code,
            detail=exc.detail,
            path=str(request.url.path),
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail, "flagged": False},
            headers=dict(CORS_HEADERS),
        )

    @application.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.error(
            "Unhandled exception",
            error=str(exc),
            error_type=type(exc).__name__,
            path=str(request.url.path),
        )
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "flagged": False},
            headers=dict(CORS_HEADERS),
        )

    return application


app = create_app()
