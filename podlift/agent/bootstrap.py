# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Remote agent bootstrap over a provider's command channel."""

from __future__ import annotations

import sys
from collections.abc import Callable
from typing import TYPE_CHECKING

from loguru import logger

from podlift.agent.command import REMOTE_HELPER_LOCATION, build_remote_command
from podlift.agent.template import render_install_script
from podlift.core.exceptions import PodliftError, ProviderCommandError, TunnelError
from podlift.core.types import CommandOptions, Stream, Workspace
from podlift.tunnel.bridge import TunnelBridge, TunnelServer
from podlift.tunnel.server import LogRelayTunnelServer


if TYPE_CHECKING:
    from loguru import Logger

    from podlift.providers.base import Provider, ServerProvider


def _default_tunnel_server(workspace: Workspace, log: Logger) -> TunnelServer:
    return LogRelayTunnelServer(local_folder=workspace.source.local_folder, log=log)


class AgentBootstrapper:
    """Installs and starts the agent inside a workspace's compute.

    Renders the install script, opens a tunnel bridge and runs the script
    through the provider with the bridge as its stdin and stdout.

    Args:
        download_url: Origin the agent binary is downloaded from.
        helper_location: Path of the agent binary on the remote host.
        tunnel_server_factory: Builds the tunnel server for a workspace.
        stderr: Stream receiving the remote command's stderr.
        tunnel_grace: Seconds the tunnel server gets to finish after the
            remote command exits.
        snapshot: Ask the agent to snapshot the environment once it is up.
        log: Logger for bootstrap progress.
    """

    def __init__(
        self,
        download_url: str,
        *,
        helper_location: str = REMOTE_HELPER_LOCATION,
        tunnel_server_factory: Callable[[Workspace, Logger], TunnelServer] = _default_tunnel_server,
        stderr: Stream = None,
        tunnel_grace: float = 1.0,
        snapshot: bool = False,
        log: Logger = logger,
    ) -> None:
        self.download_url = download_url
        self.helper_location = helper_location
        self.tunnel_server_factory = tunnel_server_factory
        self.stderr = sys.stderr if stderr is None else stderr
        self.tunnel_grace = tunnel_grace
        self.snapshot = snapshot
        self._log = log
        self.last_tunnel_error: TunnelError | None = None

    async def run(self, provider: ServerProvider, workspace: Workspace) -> None:
        """Bring up the remote agent.

        Args:
            provider: Server-capable provider to run the install script with.
            workspace: Workspace to bootstrap.

        Raises:
            TemplateError: If the install script cannot be rendered.
            TunnelError: If the bridge pipes cannot be set up.
            ProviderCommandError: If the remote command fails.
        """
        self._log.info("Creating devcontainer...")
        self.last_tunnel_error = None
        command = build_remote_command(
            workspace,
            helper_location=self.helper_location,
            snapshot=self.snapshot,
        )
        script = render_install_script(
            self.download_url,
            command,
            install_path=self.helper_location,
        )

        bridge = TunnelBridge(
            self.tunnel_server_factory(workspace, self._log),
            grace=self.tunnel_grace,
            log=self._log,
        )
        async with bridge as stdio:
            options = CommandOptions(
                command=script,
                stdin=stdio.stdin,
                stdout=stdio.stdout,
                stderr=self.stderr,
            )
            try:
                await provider.command(workspace, options)
            except PodliftError:
                raise
            except Exception as exc:
                raise ProviderCommandError(f"Remote agent command failed: {exc}") from exc
            finally:
                bridge.release_remote_ends()

        if bridge.handle is not None:
            self.last_tunnel_error = await bridge.handle.error(timeout=0)


async def bootstrap_agent(
    provider: Provider,
    workspace: Workspace,
    bootstrapper: AgentBootstrapper,
    log: Logger = logger,
) -> bool:
    """Bootstrap the agent if the provider supports remote execution.

    Providers without the capability manage the agent themselves, so the
    step is skipped without error.

    Returns:
        True if the agent was bootstrapped, False if the step was skipped.
    """
    server_provider = provider.as_server_provider()
    if server_provider is None:
        log.debug("Provider has no remote execution, skipping agent bootstrap", provider=provider.name)
        return False
    await bootstrapper.run(server_provider, workspace)
    return True
