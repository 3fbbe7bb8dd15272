"""ULID generation for request correlation.

``generate_ulid()`` returns the 26-character identifier used as:
  - the ``X-Request-ID`` response header on every moderation call
  - the ``request_id`` field on every structured log line for that call

Uses the `python-ulid` library; do NOT hand-roll ULID generation.
"""

from __future__ import annotations

from ulid import ULID


def generate_ulid() -> str:
    """Generate a new ULID as a 26-character uppercase string.

    Returns:
        str: Crockford Base32 ULID, e.g. ``"01KJ0JRVHYA7KX32VPN5ZSCTMV"``.
    """
    return str(ULID())
