"""Fixed instruction prompt for the upstream classifier.

The policy taxonomy is part of the contract with the caller: changing a
category here changes what gets blocked in the application.
"""

from __future__ import annotations

POLICY_CATEGORIES: tuple[str, ...] = (
    "Profanity or offensive language",
    "Drug-related content (selling, buying, references to illegal substances)",
    "Hate speech or discrimination",
    "Scams, phishing, or fraudulent content",
    "Sexual or explicit content",
    "Violence or threats",
)

SYSTEM_PROMPT: str = (
    "You are a content moderation system for a skill-sharing platform. "
    "Analyze the user's text and determine if it contains:\n"
    + "\n".join(f"{i}. {category}" for i, category in enumerate(POLICY_CATEGORIES, start=1))
    + "\n\n"
    'Respond ONLY with valid JSON: {"flagged": true/false, '
    '"reason": "brief reason if flagged, null if not"}\n'
    "Do NOT wrap in markdown code blocks. Just raw JSON."
)


def build_messages(content: str) -> list[dict[str, str]]:
    """Return the two-message conversation sent to the chat-completion endpoint."""
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": f'Analyze this text: "{content}"'},
    ]
