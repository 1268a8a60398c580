# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Up orchestrator: the linear sequence that brings a workspace online.

readiness wait → agent bootstrap (server providers only) → SSH config →
editor launch. The first error stops the sequence and is re-raised as is;
nothing is retried here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from podlift.agent.bootstrap import AgentBootstrapper, bootstrap_agent
from podlift.core.protocols import EditorLauncher, ReadinessWaiter, SshConfigurator
from podlift.core.types import UpState, Workspace
from podlift.editor import SSH_HOST_SUFFIX


if TYPE_CHECKING:
    from loguru import Logger

    from podlift.providers.base import Provider


class UpOrchestrator:
    """Drives one workspace through the up sequence.

    Not resumable: after a failure the caller starts over with a new
    ``up()`` call.

    Args:
        waiter: Blocks until the instance accepts connections.
        bootstrapper: Installs and starts the remote agent.
        ssh_configurator: Writes the local SSH host entry.
        editor_launcher: Opens the workspace in the editor.
        remote_user: User the SSH entry logs in as.
        log: Logger for progress messages.

    Attributes:
        state: Current state of the sequence.
        failed_step: State that was active when the sequence failed.
        agent_bootstrapped: Whether the bootstrap step ran (False when the
            provider has no remote execution).
    """

    def __init__(
        self,
        waiter: ReadinessWaiter,
        bootstrapper: AgentBootstrapper,
        ssh_configurator: SshConfigurator,
        editor_launcher: EditorLauncher,
        *,
        remote_user: str = "vscode",
        log: Logger = logger,
    ) -> None:
        self.waiter = waiter
        self.bootstrapper = bootstrapper
        self.ssh_configurator = ssh_configurator
        self.editor_launcher = editor_launcher
        self.remote_user = remote_user
        self._log = log

        self.state = UpState.READINESS_PENDING
        self.failed_step: UpState | None = None
        self.agent_bootstrapped = False

    def _transition(self, state: UpState) -> None:
        self._log.debug("Up state transition", previous=str(self.state), next=str(state))
        self.state = state

    async def up(self, workspace: Workspace, provider: Provider) -> UpState:
        """Bring the workspace online.

        Args:
            workspace: Workspace to bring up.
            provider: Provider owning its compute. Borrowed for the call.

        Returns:
            UpState.DONE.

        Raises:
            ReadinessError: If the instance never became ready.
            TemplateError: If the install script cannot be rendered.
            TunnelError: If the bootstrap tunnel cannot be set up.
            ProviderCommandError: If the remote agent command fails.
            SshConfigError: If the SSH host entry cannot be written.
            EditorLaunchError: If the editor fails to launch.
        """
        self.state = UpState.READINESS_PENDING
        self.failed_step = None
        self.agent_bootstrapped = False

        try:
            await self.waiter.wait(provider, workspace, True, self._log)

            self._transition(UpState.AGENT_BOOTSTRAPPING)
            self.agent_bootstrapped = await bootstrap_agent(
                provider, workspace, self.bootstrapper, log=self._log
            )

            self._transition(UpState.SSH_CONFIGURED)
            await self.ssh_configurator.configure(workspace.context, workspace.id, self.remote_user)
            self._log.info(f"Run 'ssh {workspace.id}{SSH_HOST_SUFFIX}' to ssh into the devcontainer")

            self._transition(UpState.EDITOR_LAUNCHED)
            self._log.info("Starting VSCode...")
            await self.editor_launcher.launch(workspace.id)
        except BaseException:
            self.failed_step = self.state
            self.state = UpState.FAILED
            raise

        self._transition(UpState.DONE)
        return self.state
