"""Shared constants for the moderation gateway.

All size limits, timeouts and upstream defaults used across modules are defined
here. No magic numbers in other modules — import from here.
"""

# ─── Request size limits ─────────────────────────────────────────────────────

# Maximum allowed request body size.
# HTTP 413 is returned for bodies exceeding this limit, BEFORE the body is parsed.
MAX_REQUEST_BODY_BYTES: int = 1_048_576  # 1 MB

# Content longer than this is truncated before it is forwarded upstream.
# 0 disables the cap (configurable via upstream.max_content_chars).
DEFAULT_MAX_CONTENT_CHARS: int = 8_192

# ─── Upstream classifier defaults ────────────────────────────────────────────

DEFAULT_UPSTREAM_URL: str = "https://ai.gateway.lovable.dev/v1/chat/completions"
DEFAULT_UPSTREAM_MODEL: str = "google/gemini-2.5-flash-lite"

# Name of the environment variable holding the bearer credential.
# The key itself is read at call time, never at startup.
DEFAULT_API_KEY_ENV: str = "LOVABLE_API_KEY"

# Total per-call upstream timeout (seconds). A single attempt; no retries.
DEFAULT_UPSTREAM_TIMEOUT_S: float = 15.0

# Shared httpx client pool.
POOL_MAX_CONNECTIONS: int = 100
POOL_MAX_KEEPALIVE: int = 20
POOL_KEEPALIVE_EXPIRY: float = 30.0  # seconds

# ─── Soft upstream errors surfaced to the caller ─────────────────────────────

RATE_LIMITED_ERROR: str = "Rate limited"
PAYMENT_REQUIRED_ERROR: str = "Payment required"

# ─── CORS ────────────────────────────────────────────────────────────────────

CORS_ALLOW_ORIGIN: str = "*"
CORS_ALLOW_HEADERS: tuple[str, ...] = (
    "authorization",
    "x-client-info",
    "apikey",
    "content-type",
    "x-supabase-client-platform",
    "x-supabase-client-platform-version",
    "x-supabase-client-runtime",
    "x-supabase-client-runtime-version",
)

CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": CORS_ALLOW_ORIGIN,
    "Access-Control-Allow-Headers": ", ".join(CORS_ALLOW_HEADERS),
}

# ─── Server binding ──────────────────────────────────────────────────────────

DEFAULT_HOST: str = "127.0.0.1"
DEFAULT_PORT: int = 8787
