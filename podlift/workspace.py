# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Workspace resolution from settings and CLI selectors."""

from __future__ import annotations

import re
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from podlift.config import Settings
from podlift.core.exceptions import ConfigurationError, WorkspaceNotFoundError
from podlift.core.types import Workspace, WorkspaceSource
from podlift.providers.factory import create_provider


if TYPE_CHECKING:
    from loguru import Logger

    from podlift.providers.base import Provider


_GIT_URL = re.compile(r"^(https?://|git@|ssh://)\S+?(\.git)?/?$")
_IMAGE_REF = re.compile(r"^[a-z0-9][a-z0-9._/-]*(:[\w][\w.-]*)?(@sha256:[a-f0-9]{64})?$")


def workspace_id_from(selector: str) -> str:
    """Derive a workspace id from a repository URL, image or folder path.

    ``https://github.com/acme/api.git`` becomes ``api``;
    ``python:3.12`` becomes ``python-3-12``.
    """
    name = selector.rstrip("/").rsplit("/", 1)[-1]
    name = name.removesuffix(".git")
    name = re.sub(r"[^a-z0-9-]+", "-", name.lower()).strip("-")
    return name or "workspace"


def source_from_selector(selector: str) -> WorkspaceSource | None:
    """Interpret an ad-hoc selector as a workspace source.

    Existing local folders win over image references so that ``.`` or a
    relative folder name is not mistaken for an image.

    Returns:
        The source, or None if the selector is none of git URL, existing
        folder or image reference.
    """
    if _GIT_URL.match(selector):
        return WorkspaceSource(git_repository=selector)
    path = Path(selector).expanduser()
    if path.is_dir():
        return WorkspaceSource(local_folder=str(path.resolve()))
    if _IMAGE_REF.match(selector) and (":" in selector or "/" in selector):
        return WorkspaceSource(image=selector)
    return None


def _provider_for(settings: Settings, name: str | None, workspace_id: str) -> Provider:
    provider_name = name or settings.default_provider
    if not provider_name:
        raise ConfigurationError(
            f"Workspace '{workspace_id}' names no provider and no default_provider is set"
        )
    config = settings.providers.get(provider_name)
    if config is None:
        raise ConfigurationError(f"Provider '{provider_name}' is not configured")
    return create_provider(provider_name, config)


def resolve_workspace(
    settings: Settings,
    args: Sequence[str],
    log: Logger = logger,
) -> tuple[Workspace, Provider]:
    """Resolve CLI selectors to a workspace and its provider.

    No selector brings up ``default_workspace``. A selector naming a
    configured workspace picks it. Otherwise the selector is read as a git
    URL, local folder or image and an ad-hoc workspace using the default
    provider is created.

    Args:
        settings: Loaded settings.
        args: Workspace selectors from the command line (at most one).
        log: Logger for resolution messages.

    Returns:
        Tuple of (workspace, provider).

    Raises:
        ConfigurationError: If more than one selector is given or the
            provider cannot be determined.
        WorkspaceNotFoundError: If the selector matches nothing.
    """
    if len(args) > 1:
        raise ConfigurationError(f"Expected at most one workspace selector, got {len(args)}")

    if not args:
        if not settings.default_workspace:
            raise WorkspaceNotFoundError("No workspace selected and no default_workspace is set")
        selector = settings.default_workspace
    else:
        selector = args[0]

    configured = settings.workspaces.get(selector)
    if configured is not None:
        workspace = Workspace(
            id=selector,
            context=configured.context,
            provider=configured.provider or settings.default_provider or "",
            source=configured.source,
        )
        log.debug("Resolved configured workspace", workspace=workspace.id)
        return workspace, _provider_for(settings, configured.provider, selector)

    source = source_from_selector(selector)
    if source is None:
        raise WorkspaceNotFoundError(f"Workspace '{selector}' not found")

    workspace_id = workspace_id_from(source.local_folder or selector)
    workspace = Workspace(id=workspace_id, provider=settings.default_provider or "", source=source)
    log.debug("Created ad-hoc workspace", workspace=workspace_id, selector=selector)
    return workspace, _provider_for(settings, None, workspace_id)
