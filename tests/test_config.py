"""Tests for the configuration module."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from designbridge.config import (
    Config,
    deep_merge,
    get_config,
    load_config,
    reset_config,
)
from designbridge.config.loader import env_overrides
from designbridge.config.paths import (
    get_config_paths,
    get_project_config_path,
    get_system_config_path,
    get_user_config_path,
)


class TestDeepMerge:
    """Test the deep merge algorithm."""

    def test_simple_override(self) -> None:
        """Test that override values replace base values."""
        result = deep_merge({"a": 1, "b": 2}, {"b": 3, "c": 4})
        assert result == {"a": 1, "b": 3, "c": 4}

    def test_nested_merge(self) -> None:
        """Test that nested dicts are recursively merged."""
        base = {"bridge": {"port": 9001, "request_timeout": 10}}
        result = deep_merge(base, {"bridge": {"request_timeout": 2}})
        assert result["bridge"] == {"port": 9001, "request_timeout": 2}

    def test_none_does_not_override(self) -> None:
        """Test that None values in override don't replace base values."""
        assert deep_merge({"a": 1}, {"a": None}) == {"a": 1}

    def test_list_replaced_not_merged(self) -> None:
        """Test that lists are replaced, not concatenated."""
        assert deep_merge({"items": [1, 2, 3]}, {"items": [4, 5]}) == {"items": [4, 5]}

    def test_base_is_not_mutated(self) -> None:
        base = {"a": {"b": 1}}
        deep_merge(base, {"a": {"b": 2}})
        assert base == {"a": {"b": 1}}


class TestConfigPaths:
    """Test platform-aware path resolution."""

    def test_windows_system_path(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(sys, "platform", "win32")
        monkeypatch.setenv("PROGRAMDATA", "C:\\ProgramData")

        path = get_system_config_path()
        assert path is not None
        assert "ProgramData" in str(path)
        assert "designbridge" in str(path)

    def test_unix_system_path(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(sys, "platform", "linux")
        assert get_system_config_path() == Path("/etc/designbridge/config.yaml")

    def test_unix_user_path_xdg(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test user config path respects XDG_CONFIG_HOME."""
        monkeypatch.setattr(sys, "platform", "linux")
        monkeypatch.setenv("XDG_CONFIG_HOME", "/home/test/.config-custom")

        path = get_user_config_path()
        assert path == Path("/home/test/.config-custom/designbridge/config.yaml")

    def test_project_config_path(self) -> None:
        path = get_project_config_path("/home/user/myproject")
        assert path == Path("/home/user/myproject/.designbridge/config.yaml")

    def test_get_config_paths_order(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that config paths are in correct order."""
        monkeypatch.setattr(sys, "platform", "linux")
        monkeypatch.setenv("XDG_CONFIG_HOME", "/xdg")

        paths = get_config_paths(root="/project")
        assert len(paths) == 3
        assert "etc" in paths[0].parts
        assert "xdg" in paths[1].parts
        assert "project" in paths[2].parts


class TestConfigLoading:
    """Test configuration loading."""

    @pytest.fixture(autouse=True)
    def isolated(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Keep real user config and DESIGNBRIDGE_* variables out of the way."""
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
        for var in (
            "DESIGNBRIDGE_HOST",
            "DESIGNBRIDGE_PORT",
            "DESIGNBRIDGE_TIMEOUT",
            "DESIGNBRIDGE_WORKER_URL",
            "DESIGNBRIDGE_LOG",
        ):
            monkeypatch.delenv(var, raising=False)

    @pytest.fixture
    def project(self, tmp_path: Path) -> Path:
        """Create a temporary project with a config directory."""
        root = tmp_path / "project"
        (root / ".designbridge").mkdir(parents=True)
        return root

    def write(self, project: Path, text: str) -> None:
        (project / ".designbridge" / "config.yaml").write_text(text)

    def test_missing_file_uses_defaults(self, project: Path) -> None:
        config = load_config(root=str(project))
        assert isinstance(config, Config)
        assert config.bridge.port == 9001
        assert config.bridge.request_timeout == 10.0
        assert config.bridge.fail_pending_on_disconnect is False

    def test_load_yaml_config(self, project: Path) -> None:
        self.write(
            project,
            """
bridge:
  port: 9100
  request_timeout: 3
  fail_pending_on_disconnect: true
logging:
  level: DEBUG
""",
        )
        config = load_config(root=str(project))
        assert config.bridge.port == 9100
        assert config.bridge.request_timeout == 3.0
        assert config.bridge.fail_pending_on_disconnect is True
        assert config.logging.level == "DEBUG"

    def test_worker_url_follows_bridge_address(self, project: Path) -> None:
        self.write(project, "bridge:\n  host: 0.0.0.0\n  port: 9200\n")
        config = load_config(root=str(project))
        assert config.worker.url == "ws://0.0.0.0:9200/"

    def test_explicit_worker_url_wins(self, project: Path) -> None:
        self.write(project, "bridge:\n  port: 9200\nworker:\n  url: ws://example:1/\n")
        assert load_config(root=str(project)).worker.url == "ws://example:1/"

    def test_user_config_is_overridden_by_project(self, tmp_path: Path, project: Path) -> None:
        user_dir = tmp_path / "xdg" / "designbridge"
        user_dir.mkdir(parents=True)
        (user_dir / "config.yaml").write_text("bridge:\n  port: 9300\n  request_timeout: 7\n")
        self.write(project, "bridge:\n  port: 9400\n")

        config = load_config(root=str(project))
        assert config.bridge.port == 9400
        assert config.bridge.request_timeout == 7.0

    def test_env_overrides_config(self, project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        self.write(project, "bridge:\n  port: 9100\n")
        monkeypatch.setenv("DESIGNBRIDGE_PORT", "9500")
        monkeypatch.setenv("DESIGNBRIDGE_TIMEOUT", "1.5")

        config = load_config(root=str(project))
        assert config.bridge.port == 9500
        assert config.bridge.request_timeout == 1.5

    def test_bad_env_value_is_ignored(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        monkeypatch.setenv("DESIGNBRIDGE_PORT", "not-a-port")
        assert env_overrides() == {}
        assert "DESIGNBRIDGE_PORT" in caplog.text

    def test_invalid_yaml_uses_defaults(self, project: Path) -> None:
        self.write(project, "invalid: yaml: :")
        config = load_config(root=str(project))
        assert config.bridge.port == 9001

    def test_extra_fields_preserved(self, project: Path) -> None:
        """Test that unknown config fields are preserved in extra."""
        self.write(project, "custom_field: custom_value\nnested:\n  field: value\n")
        config = load_config(root=str(project))
        assert config.extra["custom_field"] == "custom_value"
        assert config.extra["nested"]["field"] == "value"

    def test_get_config_is_cached(self) -> None:
        first = get_config()
        assert get_config() is first
        reset_config()
        assert get_config() is not first

    def test_malformed_values_keep_defaults(
        self, project: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        self.write(
            project,
            "bridge:\n  port: not-a-port\n  request_timeout: soon\n"
            "worker:\n  reconnect_delay: [1, 2]\nlogging:\n  verbose: loud\n",
        )
        config = load_config(root=str(project))
        assert config.bridge.port == 9001
        assert config.bridge.request_timeout == 10.0
        assert config.worker.reconnect_delay == Config().worker.reconnect_delay
        assert config.logging.verbose is None
        assert "bridge.port" in caplog.text
        assert "logging.verbose" in caplog.text

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("true", True), ("'false'", False), ("'no'", False), ("'YES'", True), ("0", False)],
    )
    def test_boolean_strings(self, project: Path, raw: str, expected: bool) -> None:
        self.write(project, f"bridge:\n  fail_pending_on_disconnect: {raw}\n")
        assert load_config(root=str(project)).bridge.fail_pending_on_disconnect is expected

    def test_unrecognized_boolean_keeps_default(
        self, project: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        self.write(project, "bridge:\n  fail_pending_on_disconnect: maybe\n")
        assert load_config(root=str(project)).bridge.fail_pending_on_disconnect is False
        assert "fail_pending_on_disconnect" in caplog.text
