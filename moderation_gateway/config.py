"""Config loading for the moderation gateway.

Reads `.moderation-gateway/config.yaml` (or `~/.moderation-gateway/config.yaml`).
Raises SystemExit on parse errors, a missing `version` field or invalid values.
If no config file is found, returns default values (safe to run without config).

Config search order:
  1. `config_path` argument (if provided — for testing or explicit override)
  2. MODERATION_GATEWAY_CONFIG environment variable (if set)
  3. `.moderation-gateway/config.yaml` (working directory — for development)
  4. `~/.moderation-gateway/config.yaml` (home directory — for deployments)

Environment variable overrides:
  MODERATION_GATEWAY_PORT — overrides server.port
  MODERATION_UPSTREAM_URL — overrides upstream.url
  MODERATION_MODEL        — overrides upstream.model

The upstream credential never lives in this file. Only the NAME of the
environment variable holding it (upstream.api_key_env) is configurable; the
value is resolved per call by credentials.py.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import Any, NoReturn, Optional

import yaml

from moderation_gateway.constants import (
    DEFAULT_API_KEY_ENV,
    DEFAULT_HOST,
    DEFAULT_MAX_CONTENT_CHARS,
    DEFAULT_PORT,
    DEFAULT_UPSTREAM_MODEL,
    DEFAULT_UPSTREAM_TIMEOUT_S,
    DEFAULT_UPSTREAM_URL,
)
from moderation_gateway.utils.logger import get_logger

logger = get_logger(__name__)

# ─── Version constants ────────────────────────────────────────────────────────

SUPPORTED_CONFIG_VERSION = 1

SUPPORTED_VERSIONS: frozenset[int] = frozenset({1})

DEFAULT_CONFIG_PATHS = [
    ".moderation-gateway/config.yaml",
    os.path.expanduser("~/.moderation-gateway/config.yaml"),
]


# ─── Dataclasses ─────────────────────────────────────────────────────────────


@dataclass
class UpstreamConfig:
    """Upstream chat-completion classifier configuration.

    url:               Full chat-completions endpoint URL.
    model:             Model identifier sent with every request.
    api_key_env:       Environment variable that holds the bearer credential.
    timeout_s:         Total timeout for the single upstream attempt.
    max_content_chars: Content is truncated to this many characters before
                       forwarding; 0 disables the cap.
    """

    url: str = DEFAULT_UPSTREAM_URL
    model: str = DEFAULT_UPSTREAM_MODEL
    api_key_env: str = DEFAULT_API_KEY_ENV
    timeout_s: float = DEFAULT_UPSTREAM_TIMEOUT_S
    max_content_chars: int = DEFAULT_MAX_CONTENT_CHARS


@dataclass
class ServerConfig:
    """uvicorn binding configuration."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT


@dataclass
class Config:
    """Root configuration object populated from config.yaml.

    All fields have safe defaults — the gateway can start without any config file.
    """

    version: int = SUPPORTED_CONFIG_VERSION
    upstream: UpstreamConfig = field(default_factory=UpstreamConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    path: Optional[str] = None  # Path to the loaded config file

    @classmethod
    def defaults(cls) -> "Config":
        """Return a fully-default Config (no file required)."""
        return cls()

    @classmethod
    def from_dict(cls, raw: dict, path: Optional[str] = None) -> "Config":
        """Construct Config from a parsed YAML dict.

        Merges user-supplied values onto defaults; unknown keys are silently ignored.

        Raises:
            SystemExit(1): On a non-mapping section or an out-of-range value.
        """
        upstream_raw = _section(raw, "upstream")
        upstream = UpstreamConfig(
            url=str(upstream_raw.get("url", DEFAULT_UPSTREAM_URL)),
            model=str(upstream_raw.get("model", DEFAULT_UPSTREAM_MODEL)),
            api_key_env=str(upstream_raw.get("api_key_env", DEFAULT_API_KEY_ENV)),
            timeout_s=upstream_raw.get("timeout_s", DEFAULT_UPSTREAM_TIMEOUT_S),
            max_content_chars=upstream_raw.get("max_content_chars", DEFAULT_MAX_CONTENT_CHARS),
        )

        if not upstream.url.startswith(("http://", "https://")):
            _fail(f"Invalid upstream.url: '{upstream.url}'. Must be an http(s) URL.")
        if not upstream.api_key_env:
            _fail("upstream.api_key_env must name an environment variable.")
        if isinstance(upstream.timeout_s, bool) or not isinstance(upstream.timeout_s, (int, float)) \
                or upstream.timeout_s <= 0:
            _fail(f"Invalid upstream.timeout_s: '{upstream.timeout_s}'. Must be a positive number.")
        if isinstance(upstream.max_content_chars, bool) or not isinstance(upstream.max_content_chars, int) \
                or upstream.max_content_chars < 0:
            _fail(
                f"Invalid upstream.max_content_chars: '{upstream.max_content_chars}'. "
                "Must be a non-negative integer (0 disables the cap)."
            )
        upstream.timeout_s = float(upstream.timeout_s)

        server_raw = _section(raw, "server")
        server = ServerConfig(
            host=str(server_raw.get("host", DEFAULT_HOST)),
            port=server_raw.get("port", DEFAULT_PORT),
        )
        if isinstance(server.port, bool) or not isinstance(server.port, int):
            _fail(f"Invalid server.port: '{server.port}'. Must be an integer.")

        return cls(
            version=raw.get("version", SUPPORTED_CONFIG_VERSION),
            upstream=upstream,
            server=server,
            path=path,
        )


def _section(raw: dict, name: str) -> dict[str, Any]:
    value = raw.get(name) or {}
    if not isinstance(value, dict):
        _fail(f"'{name}' must be a YAML mapping.")
    return value


def _fail(message: str) -> NoReturn:
    print(f"CONFIG ERROR: {message}", file=sys.stderr)
    raise SystemExit(1)


# ─── Config loading ───────────────────────────────────────────────────────────


def load_config(config_path: Optional[str] = None) -> Config:
    """Load and validate the gateway configuration.

    If no file is found at any search path, returns default Config (not an error).
    If a file is found but invalid, writes error to stderr and raises SystemExit(1).
    Environment overrides are applied in both cases.

    Raises:
        SystemExit(1): On YAML parse error, missing ``version`` field, unsupported
                       version, invalid values, or an invalid
                       ``MODERATION_GATEWAY_PORT``.
    """
    search_paths: list[str] = []
    if config_path:
        search_paths.append(config_path)
    env_config = os.environ.get("MODERATION_GATEWAY_CONFIG")
    if env_config:
        search_paths.append(env_config)
    search_paths.extend(DEFAULT_CONFIG_PATHS)

    found_path: Optional[str] = None
    for candidate in search_paths:
        expanded = os.path.expanduser(candidate)
        if os.path.isfile(expanded):
            found_path = expanded
            break

    # Missing config is NOT an error — use all defaults.
    if found_path is None:
        logger.info("No config file found — using defaults", searched=search_paths)
        config = Config.defaults()
        _apply_env_overrides(config)
        return config

    logger.info("Loading config", path=found_path)

    try:
        with open(found_path) as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        _fail(
            f"Failed to parse {found_path}: {exc}\n"
            "The gateway refuses to start with an invalid config. "
            "Check the YAML syntax and try again."
        )
    except OSError as exc:
        _fail(f"Could not read {found_path}: {exc}")

    if not isinstance(raw, dict):
        if raw is None:
            _fail(
                f"{found_path} is missing the required 'version' field.\n"
                "Add 'version: 1' to the top of your config file."
            )
        _fail(
            f"{found_path} is not a valid YAML mapping.\n"
            "The config file must be a YAML dictionary at the top level."
        )

    version = raw.get("version")
    if version is None:
        _fail(
            f"{found_path} is missing the required 'version' field.\n"
            "Add 'version: 1' to the top of your config file."
        )
    if version not in SUPPORTED_VERSIONS:
        _fail(
            f"Unsupported config version: {version}. "
            f"Supported versions: {sorted(SUPPORTED_VERSIONS)}."
        )

    config = Config.from_dict(raw, path=found_path)
    _apply_env_overrides(config)

    if config.server.host == "0.0.0.0":
        logger.warning(
            "Gateway is configured to bind on 0.0.0.0 (all interfaces). "
            "Put it behind the application's edge proxy."
        )

    logger.info(
        "Config loaded",
        path=found_path,
        version=config.version,
        upstream_model=config.upstream.model,
        api_key_env=config.upstream.api_key_env,
    )
    return config


def _apply_env_overrides(config: Config) -> None:
    """Apply environment variable overrides to a Config object in-place.

    Env vars always take precedence over any file value.

    Raises:
        SystemExit(1): If MODERATION_GATEWAY_PORT is set but not a valid integer.
    """
    env_port = os.environ.get("MODERATION_GATEWAY_PORT")
    if env_port is not None:
        try:
            config.server.port = int(env_port)
        except ValueError:
            _fail(
                "MODERATION_GATEWAY_PORT environment variable is not a valid "
                f"integer: '{env_port}'"
            )

    env_url = os.environ.get("MODERATION_UPSTREAM_URL")
    if env_url:
        config.upstream.url = env_url

    env_model = os.environ.get("MODERATION_MODEL")
    if env_model:
        config.upstream.model = env_model
