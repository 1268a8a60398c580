# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Local editor launch."""

from __future__ import annotations

import asyncio

from loguru import logger

from podlift.core.exceptions import EditorLaunchError


SSH_HOST_SUFFIX = ".devpod"


def folder_uri(workspace_id: str) -> str:
    """Build the VS Code remote folder URI for a workspace."""
    return f"vscode-remote://ssh-remote+{workspace_id}{SSH_HOST_SUFFIX}/workspaces/{workspace_id}"


class VSCodeLauncher:
    """Opens a workspace in VS Code over its SSH host entry.

    Args:
        binary: VS Code executable.
    """

    def __init__(self, binary: str = "code") -> None:
        self.binary = binary

    async def launch(self, workspace_id: str) -> None:
        """Run ``code --folder-uri`` for the workspace and wait for it.

        Raises:
            EditorLaunchError: If the binary is missing or exits non-zero.
        """
        uri = folder_uri(workspace_id)
        logger.debug("Launching editor", binary=self.binary, uri=uri)
        try:
            proc = await asyncio.create_subprocess_exec(
                self.binary, "--folder-uri", uri,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise EditorLaunchError(f"Failed to start {self.binary}: {exc}") from exc

        _, stderr = await proc.communicate()
        if proc.returncode != 0:
            raise EditorLaunchError(
                f"{self.binary} exited with code {proc.returncode}: {stderr.decode().strip()}"
            )
