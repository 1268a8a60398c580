"""Shared fixtures and fakes for all tests."""
import asyncio
import os
from collections.abc import Generator

import pytest
from loguru import logger

from podlift.core.types import CommandOptions, InstanceStatus, Workspace, WorkspaceSource


class FakeServerProvider:
    """Server-capable provider that runs ``command`` in-process.

    Writes ``output`` to the command's stdout, then raises ``error`` or
    blocks forever when asked to.
    """

    def __init__(
        self,
        output: bytes = b"",
        error: BaseException | None = None,
        block: bool = False,
        status: InstanceStatus = InstanceStatus.RUNNING,
    ) -> None:
        self.output = output
        self.error = error
        self.block = block
        self._status = status
        self.calls: list[CommandOptions] = []
        self.started = asyncio.Event()

    @property
    def name(self) -> str:
        return "fake-server"

    async def status(self, workspace: Workspace) -> InstanceStatus:
        return self._status

    async def start(self, workspace: Workspace) -> None:
        self._status = InstanceStatus.RUNNING

    def as_server_provider(self) -> "FakeServerProvider":
        return self

    async def command(self, workspace: Workspace, options: CommandOptions) -> None:
        self.calls.append(options)
        self.started.set()
        if self.output:
            assert isinstance(options.stdout, int)
            os.write(options.stdout, self.output)
        if self.error is not None:
            raise self.error
        if self.block:
            await asyncio.Event().wait()


class FakeBasicProvider:
    """Provider without remote execution."""

    def __init__(self, status: InstanceStatus = InstanceStatus.RUNNING) -> None:
        self._status = status

    @property
    def name(self) -> str:
        return "fake-basic"

    async def status(self, workspace: Workspace) -> InstanceStatus:
        return self._status

    async def start(self, workspace: Workspace) -> None:
        self._status = InstanceStatus.RUNNING

    def as_server_provider(self) -> None:
        return None


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Drop handlers added by configure_logging() so they don't outlive a test."""
    yield
    logger.remove()


@pytest.fixture
def git_workspace() -> Workspace:
    return Workspace(
        id="demo",
        provider="fake-server",
        source=WorkspaceSource(git_repository="https://example.com/r.git"),
    )


@pytest.fixture
def local_workspace() -> Workspace:
    return Workspace(
        id="scratch",
        provider="fake-basic",
        source=WorkspaceSource(local_folder="/home/dev/scratch"),
    )


@pytest.fixture
def log_messages() -> Generator[list[str], None, None]:
    """Capture loguru messages (message text only) at DEBUG and above."""
    messages: list[str] = []
    handler_id = logger.add(
        lambda message: messages.append(message.record["message"]),
        level="DEBUG",
    )
    yield messages
    logger.remove(handler_id)
