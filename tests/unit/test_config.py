"""Tests for settings loading and AgentConfig."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from podlift.config import AgentConfig, Settings, load_settings


SETTINGS_YAML = """
default_provider: lab
default_workspace: api
providers:
  lab:
    type: ssh
    host: dev@lab.internal
    port: 2222
  local:
    type: docker
workspaces:
  api:
    source:
      git_repository: https://github.com/acme/api.git
  web:
    provider: local
    source:
      image: node:20
"""


@pytest.fixture
def settings_file(tmp_path: Path) -> Path:
    path = tmp_path / "settings.yaml"
    path.write_text(SETTINGS_YAML)
    return path


class TestLoadSettings:
    def test_explicit_path(self, settings_file: Path) -> None:
        settings = load_settings(settings_file)

        assert settings.default_provider == "lab"
        assert settings.providers["lab"].port == 2222
        assert settings.providers["local"].type == "docker"
        assert settings.workspaces["api"].source.git_repository == "https://github.com/acme/api.git"
        assert settings.workspaces["web"].provider == "local"

    def test_env_var_path(self, settings_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PODLIFT_SETTINGS", str(settings_file))

        settings = load_settings()

        assert settings.default_workspace == "api"

    def test_explicit_path_wins_over_env(
        self, settings_file: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("PODLIFT_SETTINGS", str(tmp_path / "missing.yaml"))

        assert load_settings(settings_file).default_provider == "lab"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            load_settings(tmp_path / "nope.yaml")

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("")

        assert load_settings(path) == Settings()

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("providers: [unclosed\n")

        with pytest.raises(yaml.YAMLError):
            load_settings(path)

    def test_conflicting_source_is_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text(
            "workspaces:\n"
            "  api:\n"
            "    source:\n"
            "      git_repository: https://github.com/acme/api.git\n"
            "      image: node:20\n"
        )

        with pytest.raises(ValidationError, match="at most one"):
            load_settings(path)


class TestAgentConfig:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.chdir(tmp_path)

        config = AgentConfig()

        assert config.remote_helper_location == "/tmp/podlift"
        assert config.remote_user == "vscode"
        assert config.editor_binary == "code"
        assert config.readiness_timeout_seconds == 300.0

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("PODLIFT_REMOTE_USER", "dev")
        monkeypatch.setenv("PODLIFT_TUNNEL_GRACE_SECONDS", "0.5")

        config = AgentConfig()

        assert config.remote_user == "dev"
        assert config.tunnel_grace_seconds == 0.5

    def test_empty_proxy_command(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("PODLIFT_SSH_PROXY_COMMAND", "")

        assert AgentConfig().ssh_proxy_command == ""

    def test_rejects_non_positive_timeout(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("PODLIFT_READINESS_TIMEOUT_SECONDS", "0")

        with pytest.raises(ValidationError):
            AgentConfig()
