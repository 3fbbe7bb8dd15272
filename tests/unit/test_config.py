"""Unit tests for config loading, validation and environment overrides.

Covers:
  - Missing config file → Config.defaults(), no exception
  - Missing / unsupported 'version' → SystemExit(1)
  - Invalid YAML / non-mapping YAML → SystemExit(1)
  - Section values merged onto defaults; invalid values → SystemExit(1)
  - MODERATION_GATEWAY_CONFIG, MODERATION_GATEWAY_PORT, MODERATION_UPSTREAM_URL,
    MODERATION_MODEL env vars
"""

from __future__ import annotations

import textwrap
from typing import Any

import pytest

from moderation_gateway.config import (
    SUPPORTED_VERSIONS,
    Config,
    ServerConfig,
    UpstreamConfig,
    load_config,
)
from moderation_gateway.constants import (
    DEFAULT_API_KEY_ENV,
    DEFAULT_MAX_CONTENT_CHARS,
    DEFAULT_UPSTREAM_MODEL,
    DEFAULT_UPSTREAM_URL,
)


def _write(tmp_path: Any, content: str) -> str:
    config_file = tmp_path / "config.yaml"
    config_file.write_text(textwrap.dedent(content))
    return str(config_file)


# ─── Missing config file → defaults ───────────────────────────────────────────


class TestMissingConfigFile:
    def test_nonexistent_path_returns_defaults(self) -> None:
        config = load_config(config_path="/nonexistent/path/config.yaml")
        assert isinstance(config, Config)
        assert config.version == 1
        assert config.path is None

    def test_default_upstream(self) -> None:
        config = load_config(config_path="/nonexistent/path/config.yaml")
        assert config.upstream.url == DEFAULT_UPSTREAM_URL
        assert config.upstream.model == DEFAULT_UPSTREAM_MODEL
        assert config.upstream.api_key_env == DEFAULT_API_KEY_ENV == "LOVABLE_API_KEY"
        assert config.upstream.max_content_chars == DEFAULT_MAX_CONTENT_CHARS

    def test_default_timeout_is_bounded(self) -> None:
        config = load_config(config_path="/nonexistent/path/config.yaml")
        assert 10.0 <= config.upstream.timeout_s <= 15.0

    def test_default_server_binding(self) -> None:
        config = load_config(config_path="/nonexistent/path/config.yaml")
        assert config.server == ServerConfig(host="127.0.0.1", port=8787)


# ─── Version validation ──────────────────────────────────────────────────────


class TestVersionValidation:
    def test_missing_version_raises_system_exit(self, tmp_path: Any) -> None:
        path = _write(tmp_path, "upstream:\n  model: 'x'\n")
        with pytest.raises(SystemExit) as exc_info:
            load_config(config_path=path)
        assert exc_info.value.code == 1

    def test_missing_version_message(self, tmp_path: Any, capsys: pytest.CaptureFixture) -> None:
        path = _write(tmp_path, "upstream: {}\n")
        with pytest.raises(SystemExit):
            load_config(config_path=path)
        assert "version" in capsys.readouterr().err

    def test_unsupported_version_raises(self, tmp_path: Any) -> None:
        path = _write(tmp_path, "version: 2\n")
        with pytest.raises(SystemExit) as exc_info:
            load_config(config_path=path)
        assert exc_info.value.code == 1

    def test_empty_file_raises(self, tmp_path: Any) -> None:
        path = _write(tmp_path, "")
        with pytest.raises(SystemExit):
            load_config(config_path=path)

    def test_supported_versions_constant(self) -> None:
        assert 1 in SUPPORTED_VERSIONS


class TestInvalidYaml:
    def test_invalid_yaml_raises(self, tmp_path: Any) -> None:
        path = _write(tmp_path, "version: 1\nupstream: [unclosed\n")
        with pytest.raises(SystemExit) as exc_info:
            load_config(config_path=path)
        assert exc_info.value.code == 1

    def test_scalar_yaml_raises(self, tmp_path: Any) -> None:
        path = _write(tmp_path, "just a string\n")
        with pytest.raises(SystemExit):
            load_config(config_path=path)


# ─── Section parsing ──────────────────────────────────────────────────────────


class TestSectionParsing:
    def test_version_only_populates_defaults(self, tmp_path: Any) -> None:
        config = load_config(config_path=_write(tmp_path, "version: 1\n"))
        assert config.upstream == UpstreamConfig()
        assert config.path is not None

    def test_upstream_values_loaded(self, tmp_path: Any) -> None:
        path = _write(
            tmp_path,
            """
            version: 1
            upstream:
              url: "http://localhost:9999/v1/chat/completions"
              model: "test/model"
              api_key_env: "TEST_MODERATION_KEY"
              timeout_s: 10
              max_content_chars: 0
            server:
              host: "0.0.0.0"
              port: 9000
            """,
        )
        config = load_config(config_path=path)
        assert config.upstream.url == "http://localhost:9999/v1/chat/completions"
        assert config.upstream.model == "test/model"
        assert config.upstream.api_key_env == "TEST_MODERATION_KEY"
        assert config.upstream.timeout_s == 10.0
        assert isinstance(config.upstream.timeout_s, float)
        assert config.upstream.max_content_chars == 0
        assert config.server.host == "0.0.0.0"
        assert config.server.port == 9000

    def test_unknown_keys_ignored(self, tmp_path: Any) -> None:
        path = _write(tmp_path, "version: 1\nmystery: true\nupstream:\n  extra: 1\n")
        config = load_config(config_path=path)
        assert config.upstream.model == DEFAULT_UPSTREAM_MODEL

    @pytest.mark.parametrize(
        "upstream_yaml",
        [
            "url: 'ftp://example.com'",
            "timeout_s: 0",
            "timeout_s: -3",
            "timeout_s: 'soon'",
            "max_content_chars: -1",
            "max_content_chars: 1.5",
            "api_key_env: ''",
        ],
    )
    def test_invalid_upstream_values_raise(self, tmp_path: Any, upstream_yaml: str) -> None:
        path = _write(tmp_path, f"version: 1\nupstream:\n  {upstream_yaml}\n")
        with pytest.raises(SystemExit) as exc_info:
            load_config(config_path=path)
        assert exc_info.value.code == 1

    def test_non_mapping_section_raises(self, tmp_path: Any) -> None:
        path = _write(tmp_path, "version: 1\nupstream: [1, 2]\n")
        with pytest.raises(SystemExit):
            load_config(config_path=path)

    def test_non_integer_port_raises(self, tmp_path: Any) -> None:
        path = _write(tmp_path, "version: 1\nserver:\n  port: 'eighty'\n")
        with pytest.raises(SystemExit):
            load_config(config_path=path)


# ─── Environment overrides ────────────────────────────────────────────────────


class TestEnvOverrides:
    def test_config_env_var_used(self, tmp_path: Any, monkeypatch: pytest.MonkeyPatch) -> None:
        path = _write(tmp_path, "version: 1\nupstream:\n  model: 'from-env-path'\n")
        monkeypatch.setenv("MODERATION_GATEWAY_CONFIG", path)
        assert load_config().upstream.model == "from-env-path"

    def test_working_directory_config_found(self, tmp_path: Any) -> None:
        config_dir = tmp_path / ".moderation-gateway"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("version: 1\nupstream:\n  model: 'cwd'\n")
        assert load_config().upstream.model == "cwd"

    def test_port_override_without_file(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MODERATION_GATEWAY_PORT", "9191")
        assert load_config().server.port == 9191

    def test_port_override_beats_file(self, tmp_path: Any, monkeypatch: pytest.MonkeyPatch) -> None:
        path = _write(tmp_path, "version: 1\nserver:\n  port: 9000\n")
        monkeypatch.setenv("MODERATION_GATEWAY_PORT", "9191")
        assert load_config(config_path=path).server.port == 9191

    def test_invalid_port_override_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MODERATION_GATEWAY_PORT", "not-a-port")
        with pytest.raises(SystemExit) as exc_info:
            load_config()
        assert exc_info.value.code == 1

    def test_upstream_url_and_model_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MODERATION_UPSTREAM_URL", "http://stub:1234/v1/chat/completions")
        monkeypatch.setenv("MODERATION_MODEL", "stub/model")
        config = load_config()
        assert config.upstream.url == "http://stub:1234/v1/chat/completions"
        assert config.upstream.model == "stub/model"
