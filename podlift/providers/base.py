# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Provider protocols: transport-agnostic workspace compute interface."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from podlift.core.types import CommandOptions, InstanceStatus, Workspace


@runtime_checkable
class ServerProvider(Protocol):
    """Provider capability for running an arbitrary command in the workspace.

    The command runs with its stdio redirected to the streams in
    ``CommandOptions``. Implementations must return promptly with
    ``asyncio.CancelledError`` when the calling task is cancelled.
    """

    async def command(self, workspace: Workspace, options: CommandOptions) -> None:
        """Run ``options.command`` remotely and wait for it to exit.

        Args:
            workspace: Workspace to run the command in.
            options: Command and the streams to wire to its stdio.

        Raises:
            ProviderCommandError: If the command fails or exits non-zero.
        """
        ...


@runtime_checkable
class Provider(Protocol):
    """Pluggable backend supplying and controlling workspace compute.

    Every provider reports and starts its instances. Providers that can
    execute remote commands expose that capability through
    ``as_server_provider()``; the rest manage the agent themselves.
    """

    @property
    def name(self) -> str:
        """Provider name as configured."""
        ...

    async def status(self, workspace: Workspace) -> InstanceStatus:
        """Report the status of the instance backing ``workspace``."""
        ...

    async def start(self, workspace: Workspace) -> None:
        """Start a stopped instance."""
        ...

    def as_server_provider(self) -> ServerProvider | None:
        """Return the remote execution capability, or None if unsupported."""
        ...
