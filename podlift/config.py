# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from podlift.agent.command import REMOTE_HELPER_LOCATION
from podlift.core.types import WorkspaceSource


DEFAULT_SETTINGS_PATH = Path("~/.podlift/settings.yaml")


class AgentConfig(BaseSettings):
    """Agent bootstrap and local tooling configuration.

    All settings can be overridden via environment variables with PODLIFT_ prefix.
    Example: PODLIFT_REMOTE_USER=dev overrides the remote user.
    """

    model_config = SettingsConfigDict(
        env_prefix="PODLIFT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    agent_download_url: str = Field(
        default="https://github.com/podlift/podlift/releases/latest/download",
        description="Origin the remote agent binary is downloaded from",
    )
    remote_helper_location: str = Field(
        default=REMOTE_HELPER_LOCATION,
        description="Path of the agent binary on the remote host",
    )
    remote_user: str = Field(
        default="vscode",
        description="User to log into the devcontainer as",
    )
    editor_binary: str = Field(
        default="code",
        description="Editor executable launched after the workspace is up",
    )
    ssh_config_path: Path = Field(
        default=Path("~/.ssh/config"),
        description="SSH client config the workspace host entry is written to",
    )
    ssh_proxy_command: str = Field(
        default="podlift ssh --stdio --context {context} {workspace_id}",
        description="ProxyCommand for the workspace host entry; empty writes a plain entry",
    )
    readiness_timeout_seconds: float = Field(
        default=300.0,
        gt=0,
        description="Max time to wait for the instance to become ready",
    )
    readiness_poll_interval_seconds: float = Field(
        default=1.0,
        gt=0,
        description="Delay between instance status checks",
    )
    tunnel_grace_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Time the tunnel server gets to finish after the remote command exits",
    )


class ProviderConfig(BaseModel):
    """Configuration of a single provider.

    Attributes:
        type: Provider implementation (ssh or docker).
        host: SSH destination, required for ssh providers.
        port: SSH port.
        identity_file: SSH private key.
        container_prefix: Prefix of workspace container names for docker providers.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["ssh", "docker"]
    host: str | None = None
    port: int | None = Field(default=None, ge=1, le=65535)
    identity_file: str | None = None
    container_prefix: str = "podlift-"

    @model_validator(mode="after")
    def _ssh_needs_host(self) -> "ProviderConfig":
        if self.type == "ssh" and not self.host:
            raise ValueError("ssh providers require a host")
        return self


class WorkspaceConfig(BaseModel):
    """Configured workspace, keyed by its id in Settings.workspaces.

    Attributes:
        provider: Provider name; falls back to Settings.default_provider.
        context: Owning context.
        source: Workspace origin.
    """

    model_config = ConfigDict(frozen=True)

    provider: str | None = None
    context: str = "default"
    source: WorkspaceSource = Field(default_factory=WorkspaceSource)


class Settings(BaseModel):
    """Global settings for podlift.

    Attributes:
        default_provider: Provider used by workspaces that name none.
        default_workspace: Workspace brought up when none is selected.
        providers: Provider configurations keyed by name.
        workspaces: Workspace configurations keyed by id.
    """

    default_provider: str | None = None
    default_workspace: str | None = None
    providers: dict[str, ProviderConfig] = Field(default_factory=dict)
    workspaces: dict[str, WorkspaceConfig] = Field(default_factory=dict)


def load_settings(config_path: Path | None = None) -> Settings:
    """Load settings from a YAML file.

    Resolution order:
    1. Explicit config_path parameter (if provided)
    2. PODLIFT_SETTINGS environment variable (if set)
    3. Default: ~/.podlift/settings.yaml

    Args:
        config_path: Optional explicit path to the configuration file.

    Returns:
        Settings object populated from the YAML configuration.

    Raises:
        FileNotFoundError: If the configuration file does not exist.
        yaml.YAMLError: If the YAML file is malformed.
        pydantic.ValidationError: If the configuration fails validation.
    """
    if config_path is None:
        env_path = os.environ.get("PODLIFT_SETTINGS")
        config_path = Path(env_path) if env_path else DEFAULT_SETTINGS_PATH
    config_path = config_path.expanduser()

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found at {config_path}")

    with open(config_path) as f:
        data = yaml.safe_load(f)

    return Settings(**(data or {}))
