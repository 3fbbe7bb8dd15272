"""Parsing and validation of the classifier's answer.

The upstream model is asked for raw JSON but is untrusted: it may wrap the
answer in markdown fences, answer in prose, or return the right keys with the
wrong types. This module turns its text into a typed Verdict, or raises
VerdictParseError when there is no JSON object to read.

Coercion rules:
  - the JSON value must be an object; anything else raises
  - ``flagged`` is coerced by truthiness; missing or null counts as false
  - a truthy non-string ``reason`` is stringified; blank or falsy becomes null
  - ``reason`` is dropped when ``flagged`` is false
"""

from __future__ import annotations

import json
import re
from typing import Any

from moderation_gateway.errors import VerdictParseError
from moderation_gateway.models.verdict import Verdict

# ```json / ``` fences, each optionally followed by a newline
_CODE_FENCE_RE = re.compile(r"```json\n?|```\n?")


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences and surrounding whitespace."""
    return _CODE_FENCE_RE.sub("", text).strip()


def extract_message_text(payload: Any) -> str:
    """Return ``choices[0].message.content`` from a chat-completion body.

    Any missing level or unexpected type yields ``""``.
    """
    if not isinstance(payload, dict):
        return ""
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    first = choices[0]
    if not isinstance(first, dict):
        return ""
    message = first.get("message")
    if not isinstance(message, dict):
        return ""
    content = message.get("content")
    return content if isinstance(content, str) else ""


def parse_verdict(text: str) -> Verdict:
    """Parse the classifier's text answer into a Verdict.

    Raises:
        VerdictParseError: On invalid JSON or a value that is not an object.
    """
    cleaned = strip_code_fences(text)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise VerdictParseError(f"Invalid JSON: {exc.msg}", raw_text=text) from exc

    if not isinstance(parsed, dict):
        raise VerdictParseError(
            f"Expected a JSON object, got {type(parsed).__name__}", raw_text=text
        )

    # Truthiness, so 1 / "true" / "yes" from a sloppy model still flag.
    flagged = bool(parsed.get("flagged"))

    reason = parsed.get("reason")
    if not flagged or not reason:
        reason = None
    else:
        reason = (reason if isinstance(reason, str) else str(reason)).strip() or None

    return Verdict(flagged=flagged, reason=reason)
