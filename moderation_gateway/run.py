"""Programmatic uvicorn entry point for the moderation gateway.

Reads host and port from the loaded config (127.0.0.1:8787 by default).

Usage:
    python -m moderation_gateway.run
    moderation-gateway                 # via pyproject.toml [project.scripts]
"""

from __future__ import annotations

import uvicorn

from moderation_gateway.config import load_config

# Connections beyond this receive HTTP 503 from uvicorn. The gateway itself
# has no queue or limiter; this is the only concurrency bound.
UVICORN_LIMIT_CONCURRENCY: int = 100

UVICORN_BACKLOG: int = 50

UVICORN_TIMEOUT_KEEP_ALIVE: int = 5


def main() -> None:
    """Start the moderation gateway.

    Raises:
        SystemExit: Propagated from load_config() on config parse errors.
    """
    config = load_config()

    uvicorn.run(
        "moderation_gateway.main:app",
        host=config.server.host,
        port=config.server.port,
        limit_concurrency=UVICORN_LIMIT_CONCURRENCY,
        backlog=UVICORN_BACKLOG,
        timeout_keep_alive=UVICORN_TIMEOUT_KEEP_ALIVE,
    )


if __name__ == "__main__":
    main()
