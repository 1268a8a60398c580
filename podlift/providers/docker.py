# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Docker-based provider for workspaces running in local containers.

Manages one container per workspace. All docker interactions use
asyncio.create_subprocess_exec; no Docker SDK dependency.
"""

from __future__ import annotations

import asyncio

from loguru import logger

from podlift.core.types import InstanceStatus, Workspace
from podlift.providers.base import ServerProvider


_STATUS_MAP = {
    "running": InstanceStatus.RUNNING,
    "created": InstanceStatus.BUSY,
    "restarting": InstanceStatus.BUSY,
    "removing": InstanceStatus.BUSY,
    "paused": InstanceStatus.STOPPED,
    "exited": InstanceStatus.STOPPED,
    "dead": InstanceStatus.STOPPED,
}


class DockerProvider:
    """Runs each workspace in a local container named ``{prefix}{id}``.

    The container image ships its own agent, so this provider does not
    support remote command execution and the bootstrap step is skipped.

    Args:
        name: Provider name as configured.
        container_prefix: Prefix for workspace container names.
    """

    def __init__(self, name: str, container_prefix: str = "podlift-") -> None:
        self._name = name
        self.container_prefix = container_prefix

    @property
    def name(self) -> str:
        return self._name

    def container_name(self, workspace: Workspace) -> str:
        return f"{self.container_prefix}{workspace.id}"

    async def status(self, workspace: Workspace) -> InstanceStatus:
        """Map the container state reported by ``docker inspect``."""
        proc = await asyncio.create_subprocess_exec(
            "docker", "inspect",
            "--format", "{{.State.Status}}",
            self.container_name(workspace),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, _ = await proc.communicate()
        if proc.returncode != 0:
            return InstanceStatus.NOT_FOUND
        return _STATUS_MAP.get(stdout.decode().strip(), InstanceStatus.BUSY)

    async def start(self, workspace: Workspace) -> None:
        """Start the stopped workspace container.

        Raises:
            RuntimeError: If docker start fails.
        """
        container = self.container_name(workspace)
        proc = await asyncio.create_subprocess_exec(
            "docker", "start", container,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        _, stderr = await proc.communicate()
        if proc.returncode != 0:
            raise RuntimeError(
                f"Failed to start container {container}: {stderr.decode().strip()}"
            )
        logger.info("Container started", container=container)

    def as_server_provider(self) -> ServerProvider | None:
        return None
