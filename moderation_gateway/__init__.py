"""Content-moderation gateway for the skill-exchange community app."""

__version__ = "1.0.0"
