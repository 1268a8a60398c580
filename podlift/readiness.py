# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Instance readiness waiting."""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING

from podlift.core.exceptions import PodliftError, ReadinessError
from podlift.core.types import InstanceStatus, Workspace


if TYPE_CHECKING:
    from loguru import Logger

    from podlift.providers.base import Provider


class InstanceWaiter:
    """Polls a provider until the workspace instance is running.

    Args:
        timeout: Maximum seconds to wait.
        poll_interval: Seconds between status checks.
    """

    def __init__(self, timeout: float = 300.0, poll_interval: float = 1.0) -> None:
        self.timeout = timeout
        self.poll_interval = poll_interval

    async def wait(
        self,
        provider: Provider,
        workspace: Workspace,
        wait_for_running: bool,
        log: Logger,
    ) -> None:
        """Wait until the instance backing ``workspace`` is running.

        A stopped instance is started once when ``wait_for_running`` is set;
        otherwise a stopped instance fails immediately. Busy instances are
        polled until they settle.

        Args:
            provider: Provider owning the instance.
            workspace: Workspace to wait for.
            wait_for_running: Start a stopped instance and wait for it.
            log: Logger for progress messages.

        Raises:
            ReadinessError: If the instance does not exist, is stopped and
                may not be started, fails to start, or is not running
                after ``timeout`` seconds.
        """
        deadline = time.monotonic() + self.timeout
        started = False
        while True:
            status = await self._status(provider, workspace)
            if status == InstanceStatus.RUNNING:
                log.debug("Instance is running", provider=provider.name)
                return
            if status == InstanceStatus.NOT_FOUND:
                raise ReadinessError(
                    f"Workspace {workspace.id} has no instance at provider {provider.name}"
                )
            if status == InstanceStatus.STOPPED:
                if not wait_for_running:
                    raise ReadinessError(f"Workspace {workspace.id} is stopped")
                if not started:
                    log.info("Starting instance", provider=provider.name)
                    await self._start(provider, workspace)
                    started = True

            if time.monotonic() >= deadline:
                raise ReadinessError(
                    f"Workspace {workspace.id} not ready after {self.timeout}s (last status: {status})"
                )
            log.debug("Waiting for instance", status=str(status))
            await asyncio.sleep(self.poll_interval)

    async def _status(self, provider: Provider, workspace: Workspace) -> InstanceStatus:
        try:
            return await provider.status(workspace)
        except PodliftError:
            raise
        except (OSError, RuntimeError) as exc:
            raise ReadinessError(f"Failed to query instance status: {exc}") from exc

    async def _start(self, provider: Provider, workspace: Workspace) -> None:
        try:
            await provider.start(workspace)
        except PodliftError:
            raise
        except (OSError, RuntimeError) as exc:
            raise ReadinessError(f"Failed to start instance: {exc}") from exc
