# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Workspace providers.

Lazy imports keep ``podlift.providers`` cheap to import for code that only
needs the protocols.
"""

from __future__ import annotations  # noqa: I001

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from podlift.providers.base import Provider, ServerProvider
    from podlift.providers.docker import DockerProvider
    from podlift.providers.factory import create_provider
    from podlift.providers.ssh import SSHProvider

__all__ = [
    "DockerProvider",
    "Provider",
    "SSHProvider",
    "ServerProvider",
    "create_provider",
]


def __getattr__(name: str) -> object:
    if name in ("Provider", "ServerProvider"):
        from podlift.providers import base  # noqa: PLC0415

        return getattr(base, name)
    if name == "DockerProvider":
        from podlift.providers.docker import DockerProvider  # noqa: PLC0415

        return DockerProvider
    if name == "SSHProvider":
        from podlift.providers.ssh import SSHProvider  # noqa: PLC0415

        return SSHProvider
    if name == "create_provider":
        from podlift.providers.factory import create_provider  # noqa: PLC0415

        return create_provider
    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
