# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""podlift command line interface."""

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
import yaml
from loguru import logger
from pydantic import ValidationError
from rich.console import Console

from podlift.agent.bootstrap import AgentBootstrapper
from podlift.config import AgentConfig, Settings, load_settings
from podlift.core.exceptions import PodliftError
from podlift.core.orchestrator import UpOrchestrator
from podlift.core.types import UpState
from podlift.editor import VSCodeLauncher
from podlift.logging import configure_logging
from podlift.readiness import InstanceWaiter
from podlift.ssh_config import SshConfigWriter
from podlift.workspace import resolve_workspace


if TYPE_CHECKING:
    from loguru import Logger


console = Console()

app = typer.Typer(help="podlift: bring remote development workspaces online.")

STEP_LABELS: dict[UpState, str] = {
    UpState.READINESS_PENDING: "Waiting for the instance",
    UpState.AGENT_BOOTSTRAPPING: "Bootstrapping the agent",
    UpState.SSH_CONFIGURED: "Configuring SSH",
    UpState.EDITOR_LAUNCHED: "Launching the editor",
}


@app.callback()
def main_callback(
    log_level: Annotated[
        str,
        typer.Option("--log-level", help="Minimum log level (DEBUG, INFO, WARNING, ERROR)."),
    ] = "INFO",
) -> None:
    """
    podlift: bring remote development workspaces online.
    """
    configure_logging(log_level.upper())


def build_orchestrator(
    agent_config: AgentConfig,
    *,
    snapshot: bool = False,
    log: "Logger" = logger,
) -> UpOrchestrator:
    """Wire the up orchestrator and its collaborators from configuration.

    Args:
        agent_config: Agent and local tooling configuration.
        snapshot: Ask the remote agent to snapshot the environment.
        log: Logger shared by every step.

    Returns:
        Ready-to-run orchestrator.
    """
    return UpOrchestrator(
        waiter=InstanceWaiter(
            timeout=agent_config.readiness_timeout_seconds,
            poll_interval=agent_config.readiness_poll_interval_seconds,
        ),
        bootstrapper=AgentBootstrapper(
            agent_config.agent_download_url,
            helper_location=agent_config.remote_helper_location,
            tunnel_grace=agent_config.tunnel_grace_seconds,
            snapshot=snapshot,
            log=log,
        ),
        ssh_configurator=SshConfigWriter(
            config_path=agent_config.ssh_config_path,
            proxy_command=agent_config.ssh_proxy_command,
        ),
        editor_launcher=VSCodeLauncher(binary=agent_config.editor_binary),
        remote_user=agent_config.remote_user,
        log=log,
    )


def _safe_load_settings(config_path: Path | None) -> Settings:
    """Load settings from configuration file with error handling.

    Raises:
        typer.Exit: If settings file is not found or fails to load.
    """
    try:
        return load_settings(config_path)
    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1) from None
    except (yaml.YAMLError, ValidationError) as e:
        console.print(f"[red]Error loading settings:[/red] {e}")
        raise typer.Exit(code=1) from None


@app.command()
def up(
    workspace: Annotated[
        list[str] | None,
        typer.Argument(help="Workspace id, git repository URL, image or local folder."),
    ] = None,
    snapshot: Annotated[
        bool,
        typer.Option("--snapshot", help="If true will create a snapshot for the environment"),
    ] = False,
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Settings file (default: ~/.podlift/settings.yaml)."),
    ] = None,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", min=0, help="Abort if the workspace is not up within SECONDS."),
    ] = None,
) -> None:
    """Starts a new workspace.

    Waits for the instance, bootstraps the remote agent, configures SSH and
    opens the workspace in VS Code.
    """
    settings = _safe_load_settings(config)
    try:
        agent_config = AgentConfig()
    except ValidationError as e:
        console.print(f"[red]Error loading settings:[/red] {e}")
        raise typer.Exit(code=1) from None

    try:
        target, provider = resolve_workspace(settings, workspace or [])
    except (PodliftError, ValidationError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1) from None

    log = logger.bind(workspace=target.id)
    orchestrator = build_orchestrator(agent_config, snapshot=snapshot, log=log)

    async def _run() -> UpState:
        async with asyncio.timeout(timeout):
            return await orchestrator.up(target, provider)

    try:
        asyncio.run(_run())
    except TimeoutError:
        step = STEP_LABELS.get(orchestrator.failed_step or orchestrator.state, "Up")
        console.print(f"[red]Error:[/red] {step} timed out after {timeout}s")
        raise typer.Exit(code=1) from None
    except PodliftError as e:
        step = STEP_LABELS.get(orchestrator.failed_step or orchestrator.state, "Up")
        console.print(f"[red]Error:[/red] {step} failed: {e}")
        raise typer.Exit(code=1) from None

    console.print(f"[green]✓[/green] Workspace [bold]{target.id}[/bold] is up")


if __name__ == "__main__":
    app()
