# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""SSH-based provider for hosts reachable with the local ssh client.

All ssh interactions use asyncio.create_subprocess_exec; no SSH library
dependency.
"""

from __future__ import annotations

import asyncio
import contextlib
import shlex

from loguru import logger

from podlift.core.exceptions import ProviderCommandError
from podlift.core.types import CommandOptions, InstanceStatus, Workspace
from podlift.providers.base import ServerProvider


class SSHProvider:
    """Runs workspaces on a single host reached over SSH.

    The host is expected to be running already; ``start`` cannot power it
    on. Supports remote command execution, so the agent is bootstrapped
    through ``command``.

    Args:
        name: Provider name as configured.
        host: SSH destination (``user@host`` or a host alias).
        port: SSH port, when not the default.
        identity_file: Private key to authenticate with.
        connect_timeout: Seconds ssh waits for the connection.
    """

    def __init__(
        self,
        name: str,
        host: str,
        port: int | None = None,
        identity_file: str | None = None,
        connect_timeout: int = 10,
    ) -> None:
        self._name = name
        self.host = host
        self.port = port
        self.identity_file = identity_file
        self.connect_timeout = connect_timeout

    @property
    def name(self) -> str:
        return self._name

    def _ssh_args(self) -> list[str]:
        args = [
            "ssh",
            "-o", "BatchMode=yes",
            "-o", f"ConnectTimeout={self.connect_timeout}",
        ]
        if self.port:
            args.extend(["-p", str(self.port)])
        if self.identity_file:
            args.extend(["-i", self.identity_file])
        return args

    async def status(self, workspace: Workspace) -> InstanceStatus:
        """Probe the host with a no-op command.

        An unreachable host is reported busy: it may still be booting.
        """
        proc = await asyncio.create_subprocess_exec(
            *self._ssh_args(), self.host, "true",
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
        _, stderr = await proc.communicate()
        if proc.returncode == 0:
            return InstanceStatus.RUNNING
        logger.debug(
            "SSH host not reachable yet",
            host=self.host,
            error=stderr.decode().strip(),
        )
        return InstanceStatus.BUSY

    async def start(self, workspace: Workspace) -> None:
        logger.debug("SSH hosts are not started by podlift", host=self.host)

    def as_server_provider(self) -> ServerProvider | None:
        return self

    async def command(self, workspace: Workspace, options: CommandOptions) -> None:
        """Run a shell script on the host with the given stdio.

        Args:
            workspace: Workspace the command belongs to.
            options: Script and stdio streams.

        Raises:
            ProviderCommandError: If ssh cannot be started or the script
                exits with non-zero status.
        """
        cmd = [*self._ssh_args(), "-T", self.host, f"sh -c {shlex.quote(options.command)}"]
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=options.stdin,
                stdout=options.stdout,
                stderr=options.stderr,
            )
        except OSError as exc:
            raise ProviderCommandError(f"Failed to start ssh: {exc}") from exc

        try:
            returncode = await proc.wait()
        finally:
            if proc.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    proc.terminate()
                await proc.wait()

        if returncode != 0:
            raise ProviderCommandError(
                f"Remote command on {self.host} exited with code {returncode}",
                returncode=returncode,
            )
