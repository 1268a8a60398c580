# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Protocols for the collaborators the up orchestrator drives."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from podlift.core.types import Workspace


if TYPE_CHECKING:
    from loguru import Logger

    from podlift.providers.base import Provider


@runtime_checkable
class ReadinessWaiter(Protocol):
    """Blocks until a workspace instance accepts connections."""

    async def wait(
        self,
        provider: Provider,
        workspace: Workspace,
        wait_for_running: bool,
        log: Logger,
    ) -> None:
        """Wait for the instance backing ``workspace``.

        Args:
            provider: Provider owning the instance.
            workspace: Workspace to wait for.
            wait_for_running: Start a stopped instance and wait for it.
            log: Logger for progress messages.

        Raises:
            ReadinessError: If the instance never became ready.
        """
        ...


@runtime_checkable
class SshConfigurator(Protocol):
    """Makes a workspace reachable with the local ssh client."""

    async def configure(self, context: str, workspace_id: str, remote_user: str) -> None:
        """Write the SSH host entry for a workspace.

        Raises:
            SshConfigError: If the configuration cannot be written.
        """
        ...


@runtime_checkable
class EditorLauncher(Protocol):
    """Opens a workspace in a local editor."""

    async def launch(self, workspace_id: str) -> None:
        """Launch the editor connected to the workspace.

        Raises:
            EditorLaunchError: If the editor fails to start or exits non-zero.
        """
        ...
