"""Tests for LogRelayTunnelServer."""

import asyncio
import os

from podlift.tunnel.bridge import TunnelBridge
from podlift.tunnel.server import LogRelayTunnelServer


async def test_relays_agent_lines_to_log(log_messages: list[str]) -> None:
    bridge = TunnelBridge(LogRelayTunnelServer())
    stdio = await bridge.open()

    os.write(stdio.stdout, b"pulling image\n\n{braces} are fine\n")
    bridge.release_remote_ends()

    assert bridge.handle is not None
    assert await bridge.handle.error(timeout=1) is None
    await bridge.close()

    assert "pulling image" in log_messages
    assert "{braces} are fine" in log_messages
    assert "" not in log_messages


async def test_closes_agent_stdin_on_eof() -> None:
    bridge = TunnelBridge(LogRelayTunnelServer())
    stdio = await bridge.open()
    child_stdin = os.dup(stdio.stdin)
    try:
        bridge.release_remote_ends()
        assert bridge.handle is not None
        await bridge.handle.error(timeout=1)
        await asyncio.sleep(0)

        assert os.read(child_stdin, 1024) == b""
    finally:
        os.close(child_stdin)
        await bridge.close()


async def test_logs_local_folder(log_messages: list[str]) -> None:
    server = LogRelayTunnelServer(local_folder="/home/dev/app")
    reader = asyncio.StreamReader()
    reader.feed_eof()

    class _Writer:
        closed = False

        def close(self) -> None:
            self.closed = True

    writer = _Writer()
    await server.serve(reader, writer)  # type: ignore[arg-type]

    assert writer.closed
    assert "Tunnel serving local folder" in log_messages
