"""Root test configuration for the moderation gateway.

Isolates every test from the developer's environment: no real upstream key,
no config file picked up from the working directory or home directory, and no
env overrides leaking in from the shell.
"""

import pytest


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Clear gateway env vars and run each test from an empty directory."""
    for name in (
        "LOVABLE_API_KEY",
        "MODERATION_GATEWAY_CONFIG",
        "MODERATION_GATEWAY_PORT",
        "MODERATION_UPSTREAM_URL",
        "MODERATION_MODEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setattr(
        "moderation_gateway.config.DEFAULT_CONFIG_PATHS",
        [".moderation-gateway/config.yaml"],
    )
    monkeypatch.chdir(tmp_path)
