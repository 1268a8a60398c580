# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Duplex pipe bridge between a provider command and a local tunnel server.

Two OS pipes carry the traffic: remote-out (the remote command's stdout,
read by the tunnel server) and local-in (written by the tunnel server, read
as the remote command's stdin). The tunnel-side ends are attached to
asyncio transports; the provider-side ends stay plain file descriptors so
they can be handed to ``asyncio.create_subprocess_exec`` unchanged.
"""

from __future__ import annotations

import asyncio
import contextlib
import os
from dataclasses import dataclass
from types import TracebackType
from typing import TYPE_CHECKING, Protocol

from loguru import logger

from podlift.core.exceptions import TunnelError


if TYPE_CHECKING:
    from loguru import Logger


class TunnelServer(Protocol):
    """Server loop spoken over the bridge during bootstrap."""

    async def serve(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        """Serve until the remote side closes its output.

        Args:
            reader: Bytes the remote command writes to its stdout.
            writer: Bytes delivered to the remote command's stdin.
        """
        ...


@dataclass(frozen=True)
class BridgeStdio:
    """Provider-side pipe ends.

    Attributes:
        stdin: Read end of the local-in pipe, the remote command's stdin.
        stdout: Write end of the remote-out pipe, the remote command's stdout.
    """

    stdin: int
    stdout: int


class TunnelHandle:
    """Handle on the background tunnel task.

    The task never raises: a failing tunnel server is logged and its error
    becomes the task result, readable once through ``error()``.
    """

    def __init__(self, task: asyncio.Task[TunnelError | None]) -> None:
        self.task = task

    def done(self) -> bool:
        return self.task.done()

    async def error(self, timeout: float | None = None) -> TunnelError | None:
        """Wait for the tunnel task and return its error, if any.

        Args:
            timeout: Seconds to wait; None waits until the task ends.

        Returns:
            The tunnel error, or None if the server ended cleanly, was
            cancelled or is still running after ``timeout``.
        """
        done, _ = await asyncio.wait({self.task}, timeout=timeout)
        if not done or self.task.cancelled():
            return None
        return self.task.result()


class TunnelBridge:
    """Connects a provider command's stdio to a local tunnel server.

    Use as an async context manager; leaving the block closes all four pipe
    ends and stops the tunnel task, on success, error and cancellation.

    Args:
        server: Tunnel server to run against the bridge.
        grace: Seconds to let the tunnel server finish after the provider
            side closed before it is cancelled.
        log: Logger for tunnel failures and lifecycle events.
    """

    def __init__(
        self,
        server: TunnelServer,
        *,
        grace: float = 1.0,
        log: Logger = logger,
    ) -> None:
        self._server = server
        self._grace = grace
        self._log = log

        self._remote_out_writer: int | None = None
        self._local_in_reader: int | None = None
        self._read_transport: asyncio.ReadTransport | None = None
        self._writer: asyncio.StreamWriter | None = None
        self.handle: TunnelHandle | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        """True once every pipe end has been closed."""
        return (
            self._remote_out_writer is None
            and self._local_in_reader is None
            and self._read_transport is None
            and self._writer is None
        )

    async def open(self) -> BridgeStdio:
        """Create the pipes and start the tunnel server in the background.

        Returns:
            The provider-side ends to use as the remote command's stdio.

        Raises:
            TunnelError: If the pipes cannot be created or attached.
        """
        if self.handle is not None:
            raise TunnelError("Tunnel bridge is already open")

        loop = asyncio.get_running_loop()
        try:
            remote_out_reader, remote_out_writer = os.pipe()
        except OSError as exc:
            raise TunnelError(f"Failed to create tunnel pipes: {exc}") from exc
        try:
            local_in_reader, local_in_writer = os.pipe()
        except OSError as exc:
            _close_fd(remote_out_reader)
            _close_fd(remote_out_writer)
            raise TunnelError(f"Failed to create tunnel pipes: {exc}") from exc
        self._remote_out_writer = remote_out_writer
        self._local_in_reader = local_in_reader

        try:
            reader = asyncio.StreamReader()
            self._read_transport, _ = await loop.connect_read_pipe(
                lambda: asyncio.StreamReaderProtocol(reader),
                os.fdopen(remote_out_reader, "rb", buffering=0),
            )
            write_transport, write_protocol = await loop.connect_write_pipe(
                asyncio.streams.FlowControlMixin,
                os.fdopen(local_in_writer, "wb", buffering=0),
            )
        except (OSError, ValueError) as exc:
            if self._read_transport is None:
                _close_fd(remote_out_reader)
            else:
                self._read_transport.close()
                self._read_transport = None
            _close_fd(local_in_writer)
            self._close_remote_ends()
            raise TunnelError(f"Failed to attach tunnel pipes: {exc}") from exc

        self._writer = asyncio.StreamWriter(write_transport, write_protocol, None, loop)
        self.handle = TunnelHandle(
            asyncio.create_task(self._run_server(reader, self._writer), name="tunnel-server")
        )
        self._log.debug("Tunnel bridge opened")
        return BridgeStdio(stdin=local_in_reader, stdout=remote_out_writer)

    async def _run_server(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> TunnelError | None:
        try:
            await self._server.serve(reader, writer)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self._log.error("Start tunnel server failed", error=str(exc))
            return TunnelError(f"Tunnel server failed: {exc}")
        finally:
            writer.close()
        return None

    def release_remote_ends(self) -> None:
        """Close the provider-side ends once the provider call returned.

        The tunnel server then sees EOF on its reader.
        """
        self._close_remote_ends()

    def _close_remote_ends(self) -> None:
        if self._remote_out_writer is not None:
            _close_fd(self._remote_out_writer)
            self._remote_out_writer = None
        if self._local_in_reader is not None:
            _close_fd(self._local_in_reader)
            self._local_in_reader = None

    def _close_tunnel_ends(self) -> None:
        if self._read_transport is not None:
            self._read_transport.close()
            self._read_transport = None
        if self._writer is not None:
            self._writer.close()
            self._writer = None

    async def close(self, grace: float | None = None) -> None:
        """Close every pipe end and stop the tunnel task.

        Idempotent. The tunnel server gets ``grace`` seconds to finish on
        its own after the provider side is closed, then it is cancelled.

        Args:
            grace: Override for the bridge's grace period.
        """
        if self._closed:
            return
        self._closed = True
        self._close_remote_ends()

        if self.handle is not None and not self.handle.done():
            wait = self._grace if grace is None else grace
            done, _ = await asyncio.wait({self.handle.task}, timeout=wait)
            if not done:
                self._log.debug("Tunnel server still running, cancelling")
                self.handle.task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await self.handle.task

        self._close_tunnel_ends()
        # Transports release their fds on the next loop iteration.
        await asyncio.sleep(0)
        self._log.debug("Tunnel bridge closed")

    async def __aenter__(self) -> BridgeStdio:
        return await self.open()

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        # Don't linger on cancellation: the caller is already unwinding.
        cancelled = exc_type is not None and issubclass(exc_type, asyncio.CancelledError)
        await self.close(grace=0 if cancelled else None)


def _close_fd(fd: int) -> None:
    with contextlib.suppress(OSError):
        os.close(fd)
