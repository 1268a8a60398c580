# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Local SSH client configuration for workspaces.

Each workspace gets a ``Host <id>.devpod`` entry wrapped in marker comments
so later runs replace it instead of appending duplicates.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

from loguru import logger

from podlift.core.exceptions import SshConfigError
from podlift.editor import SSH_HOST_SUFFIX


def _markers(context: str, workspace_id: str) -> tuple[str, str]:
    key = f"{context}.{workspace_id}"
    return f"# podlift start {key}", f"# podlift end {key}"


def render_host_entry(
    context: str,
    workspace_id: str,
    remote_user: str,
    proxy_command: str,
) -> str:
    """Render the marked SSH config block for a workspace.

    Args:
        context: Owning context.
        workspace_id: Workspace identifier.
        remote_user: User to log into the devcontainer as.
        proxy_command: ProxyCommand template with ``{context}`` and
            ``{workspace_id}`` placeholders. Empty omits the line.

    Returns:
        Config block including the marker lines and a trailing newline.
    """
    start, end = _markers(context, workspace_id)
    lines = [
        start,
        f"Host {workspace_id}{SSH_HOST_SUFFIX}",
        "  ForwardAgent yes",
        "  LogLevel error",
        "  StrictHostKeyChecking no",
        "  UserKnownHostsFile /dev/null",
    ]
    if proxy_command:
        lines.append(
            f"  ProxyCommand {proxy_command.format(context=context, workspace_id=workspace_id)}"
        )
    lines.extend([f"  User {remote_user}", end])
    return "\n".join(lines) + "\n"


def replace_host_entry(existing: str, context: str, workspace_id: str, entry: str) -> str:
    """Drop any previous block for the workspace and append ``entry``.

    Raises:
        SshConfigError: If a start marker for the workspace has no matching
            end marker.
    """
    start, end = _markers(context, workspace_id)
    kept: list[str] = []
    block_start: int | None = None
    for number, line in enumerate(existing.splitlines(), start=1):
        if block_start is None and line.strip() == start:
            block_start = number
            continue
        if block_start is not None:
            if line.strip() == end:
                block_start = None
            continue
        kept.append(line)

    if block_start is not None:
        raise SshConfigError(
            f"Unterminated '{start}' block at line {block_start}: add '{end}' or remove it"
        )

    while kept and not kept[-1].strip():
        kept.pop()
    prefix = "\n".join(kept) + "\n\n" if kept else ""
    return prefix + entry


class SshConfigWriter:
    """Writes workspace host entries into an SSH client config file.

    A symlinked config is updated in place at the link target.

    Args:
        config_path: SSH config file, ``~`` is expanded.
        proxy_command: ProxyCommand template for the host entry.
    """

    def __init__(
        self,
        config_path: Path = Path("~/.ssh/config"),
        proxy_command: str = "podlift ssh --stdio --context {context} {workspace_id}",
    ) -> None:
        self.config_path = config_path.expanduser()
        self.proxy_command = proxy_command

    async def configure(self, context: str, workspace_id: str, remote_user: str) -> None:
        """Write or replace the host entry for a workspace.

        Raises:
            SshConfigError: If the config file cannot be read or written,
                or holds an unterminated block for the workspace.
        """
        entry = render_host_entry(context, workspace_id, remote_user, self.proxy_command)
        try:
            await asyncio.to_thread(self._write, context, workspace_id, entry)
        except OSError as exc:
            raise SshConfigError(f"Failed to update {self.config_path}: {exc}") from exc
        logger.debug("SSH config updated", path=str(self.config_path), host=f"{workspace_id}{SSH_HOST_SUFFIX}")

    def _write(self, context: str, workspace_id: str, entry: str) -> None:
        target = self.config_path.resolve()
        target.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        existing = target.read_text() if target.exists() else ""
        content = replace_host_entry(existing, context, workspace_id, entry)

        tmp_path = target.with_name(target.name + ".podlift.tmp")
        tmp_path.write_text(content)
        tmp_path.chmod(0o600)
        os.replace(tmp_path, target)
