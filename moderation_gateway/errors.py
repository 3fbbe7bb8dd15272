"""Exceptions raised inside the moderation gateway.

Only MissingCredentialError ever reaches the caller (as HTTP 500). Everything
else is absorbed by the classifier and converted to the fail-open verdict.
"""

from __future__ import annotations


class GatewayError(Exception):
    """Base class for errors raised inside the moderation gateway."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class MissingCredentialError(GatewayError):
    """Raised when the upstream credential is not configured.

    HTTP mapping: 500 with ``{"error": message, "flagged": false}``.
    """

    def __init__(self, env_var: str) -> None:
        super().__init__(f"{env_var} is not configured")
        self.env_var = env_var


class VerdictParseError(GatewayError):
    """Raised when the classifier's answer is not a valid verdict.

    Never surfaced to the caller — the classifier logs the raw text and
    returns the fail-open verdict.
    """

    def __init__(self, message: str, raw_text: str) -> None:
        super().__init__(message)
        self.raw_text = raw_text
