"""Tests for workspace resolution."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from podlift.config import ProviderConfig, Settings, WorkspaceConfig
from podlift.core.exceptions import ConfigurationError, WorkspaceNotFoundError
from podlift.core.types import Workspace, WorkspaceSource
from podlift.providers import DockerProvider, SSHProvider
from podlift.workspace import resolve_workspace, source_from_selector, workspace_id_from


@pytest.fixture
def settings() -> Settings:
    return Settings(
        default_provider="lab",
        default_workspace="api",
        providers={
            "lab": ProviderConfig(type="ssh", host="dev@lab"),
            "local": ProviderConfig(type="docker"),
        },
        workspaces={
            "api": WorkspaceConfig(
                source=WorkspaceSource(git_repository="https://github.com/acme/api.git"),
            ),
            "web": WorkspaceConfig(
                provider="local",
                context="work",
                source=WorkspaceSource(image="node:20"),
            ),
        },
    )


class TestWorkspaceIdFrom:
    @pytest.mark.parametrize(
        ("selector", "expected"),
        [
            ("https://github.com/acme/api.git", "api"),
            ("git@github.com:acme/My_Service.git", "my-service"),
            ("python:3.12", "python-3-12"),
            ("ghcr.io/acme/devbox:latest", "devbox-latest"),
            ("/home/dev/scratch/", "scratch"),
            ("///", "workspace"),
        ],
    )
    def test_derives_id(self, selector: str, expected: str) -> None:
        assert workspace_id_from(selector) == expected


class TestSourceFromSelector:
    def test_git_url(self) -> None:
        source = source_from_selector("https://github.com/acme/api.git")
        assert source == WorkspaceSource(git_repository="https://github.com/acme/api.git")

    def test_local_folder(self, tmp_path: Path) -> None:
        source = source_from_selector(str(tmp_path))
        assert source == WorkspaceSource(local_folder=str(tmp_path.resolve()))

    def test_image(self) -> None:
        assert source_from_selector("python:3.12") == WorkspaceSource(image="python:3.12")

    def test_unknown(self) -> None:
        assert source_from_selector("no-such-thing") is None


class TestResolveWorkspace:
    def test_default_workspace(self, settings: Settings) -> None:
        workspace, provider = resolve_workspace(settings, [])

        assert workspace.id == "api"
        assert workspace.provider == "lab"
        assert workspace.source.git_repository == "https://github.com/acme/api.git"
        assert isinstance(provider, SSHProvider)

    def test_configured_workspace_with_own_provider(self, settings: Settings) -> None:
        workspace, provider = resolve_workspace(settings, ["web"])

        assert workspace == Workspace(
            id="web",
            context="work",
            provider="local",
            source=WorkspaceSource(image="node:20"),
        )
        assert isinstance(provider, DockerProvider)

    def test_ad_hoc_git_workspace(self, settings: Settings) -> None:
        workspace, provider = resolve_workspace(settings, ["https://github.com/acme/billing.git"])

        assert workspace.id == "billing"
        assert workspace.source.git_repository == "https://github.com/acme/billing.git"
        assert provider.name == "lab"

    def test_ad_hoc_local_folder(self, settings: Settings, tmp_path: Path) -> None:
        folder = tmp_path / "scratch"
        folder.mkdir()

        workspace, _ = resolve_workspace(settings, [str(folder)])

        assert workspace.id == "scratch"
        assert workspace.source.local_folder == str(folder.resolve())

    def test_too_many_selectors(self, settings: Settings) -> None:
        with pytest.raises(ConfigurationError, match="at most one"):
            resolve_workspace(settings, ["api", "web"])

    def test_no_selector_and_no_default(self) -> None:
        with pytest.raises(WorkspaceNotFoundError, match="no default_workspace"):
            resolve_workspace(Settings(), [])

    def test_unknown_selector(self, settings: Settings) -> None:
        with pytest.raises(WorkspaceNotFoundError, match="'no-such-thing' not found"):
            resolve_workspace(settings, ["no-such-thing"])

    def test_missing_default_provider(self) -> None:
        settings = Settings(workspaces={"api": WorkspaceConfig()})

        with pytest.raises(ConfigurationError, match="no default_provider"):
            resolve_workspace(settings, ["api"])

    def test_unconfigured_provider(self, settings: Settings) -> None:
        settings.workspaces["ops"] = WorkspaceConfig(provider="cloud")

        with pytest.raises(ConfigurationError, match="'cloud' is not configured"):
            resolve_workspace(settings, ["ops"])

    def test_invalid_configured_id(self, settings: Settings) -> None:
        settings.workspaces["Bad_Name"] = WorkspaceConfig()

        with pytest.raises(ValidationError):
            resolve_workspace(settings, ["Bad_Name"])
