"""Verdict — the result of a single moderation check.

A Verdict is transient: it is built for one request, rendered to JSON, and
dropped. Nothing about it is persisted.

Wire shape (``Verdict.to_dict()``):

.. code-block:: json

    {"flagged": true, "reason": "hate speech"}
    {"flagged": false, "reason": null}
    {"flagged": false, "reason": null, "error": "Rate limited"}

``error`` is only present for the soft-degraded upstream cases (rate limited,
payment required). It never accompanies ``flagged: true``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Verdict:
    """Normalized moderation decision returned to the caller."""

    flagged: bool
    reason: Optional[str] = None
    error: Optional[str] = None

    def __post_init__(self) -> None:
        # reason is only meaningful on a flagged verdict
        if not self.flagged and self.reason is not None:
            object.__setattr__(self, "reason", None)

    @classmethod
    def safe(cls, error: Optional[str] = None) -> "Verdict":
        """Return the fail-open verdict: not flagged, no reason."""
        return cls(flagged=False, reason=None, error=error)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"flagged": self.flagged, "reason": self.reason}
        if self.error is not None:
            body["error"] = self.error
        return body
