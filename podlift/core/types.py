# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Shared type definitions for podlift.

Contains the workspace models (Workspace, WorkspaceSource), the options
value handed to a provider's remote command execution (CommandOptions) and
the status enums used by readiness waiting and the up orchestrator.
"""
from dataclasses import dataclass
from enum import StrEnum
from typing import IO, Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


# Anything asyncio.create_subprocess_exec accepts as a stdio slot.
Stream = int | IO[Any] | None


class InstanceStatus(StrEnum):
    """Status of the compute backing a workspace, as reported by a provider."""

    RUNNING = "running"
    BUSY = "busy"
    STOPPED = "stopped"
    NOT_FOUND = "not_found"


class UpState(StrEnum):
    """States of the linear up sequence.

    Attributes:
        READINESS_PENDING: Waiting for the instance to accept connections.
        AGENT_BOOTSTRAPPING: Installing and starting the remote agent.
        SSH_CONFIGURED: Writing the local SSH host entry.
        EDITOR_LAUNCHED: Starting the local editor.
        DONE: Every step completed.
        FAILED: A step raised; the sequence stopped.
    """

    READINESS_PENDING = "readiness_pending"
    AGENT_BOOTSTRAPPING = "agent_bootstrapping"
    SSH_CONFIGURED = "ssh_configured"
    EDITOR_LAUNCHED = "editor_launched"
    DONE = "done"
    FAILED = "failed"


class WorkspaceSource(BaseModel):
    """Origin of a workspace. At most one variant may be set.

    Attributes:
        git_repository: Git repository URL to clone.
        image: Container image reference to start from.
        local_folder: Local folder synced into the workspace.
    """

    model_config = ConfigDict(frozen=True)

    git_repository: str = ""
    image: str = ""
    local_folder: str = ""

    @model_validator(mode="after")
    def _single_variant(self) -> "WorkspaceSource":
        populated = [v for v in (self.git_repository, self.image, self.local_folder) if v]
        if len(populated) > 1:
            raise ValueError(
                "workspace source must set at most one of git_repository, image, local_folder"
            )
        return self


class Workspace(BaseModel):
    """A named development environment bound to a source.

    Attributes:
        id: Workspace identifier, also used as the SSH host alias.
        context: Owning context the workspace belongs to.
        provider: Name of the provider that supplies its compute.
        source: Where the workspace content comes from.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(pattern=r"^[a-z0-9][a-z0-9-]*$")
    context: str = "default"
    provider: str = ""
    source: WorkspaceSource = Field(default_factory=WorkspaceSource)


@dataclass(frozen=True)
class CommandOptions:
    """Options for a provider's remote command execution.

    The caller owns every stream passed here and closes them after the
    provider call returns.
    """

    command: str
    stdin: Stream = None
    stdout: Stream = None
    stderr: Stream = None
