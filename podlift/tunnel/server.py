# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Bundled tunnel server used while the remote agent bootstraps."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from loguru import logger

from podlift.logging import AGENT_SOURCE


if TYPE_CHECKING:
    from loguru import Logger


class LogRelayTunnelServer:
    """Relays the remote agent's output into the local log.

    Reads the agent's stdout line by line until EOF. Nothing is written to
    the agent; its stdin is closed when the relay ends.

    Args:
        local_folder: Local folder the workspace is synced from, if any.
        log: Logger receiving the relayed lines.
    """

    def __init__(self, local_folder: str = "", log: Logger = logger) -> None:
        self.local_folder = local_folder
        self._log = log

    async def serve(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        if self.local_folder:
            self._log.debug("Tunnel serving local folder", folder=self.local_folder)

        agent_log = self._log.bind(source=AGENT_SOURCE)
        relayed = 0
        while line := await reader.readline():
            text = line.decode(errors="replace").rstrip()
            if text:
                relayed += 1
                agent_log.debug(text)

        writer.close()
        self._log.debug("Tunnel reached end of agent output", lines=relayed)
