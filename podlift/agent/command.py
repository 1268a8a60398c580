# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Remote agent command construction."""

import shlex

from podlift.core.types import Workspace


# Where the install script places the agent binary on the remote host.
REMOTE_HELPER_LOCATION = "/tmp/podlift"


def build_remote_command(
    workspace: Workspace,
    *,
    helper_location: str = REMOTE_HELPER_LOCATION,
    snapshot: bool = False,
) -> str:
    """Build the shell command that starts the remote agent.

    At most one source flag is appended, in precedence order repository,
    image, local folder. A workspace without a source gets no flag.

    Args:
        workspace: Workspace to bring up.
        helper_location: Path of the agent binary on the remote host.
        snapshot: Ask the agent to snapshot the environment once it is up.

    Returns:
        Command line for the remote shell.
    """
    parts = ["sudo", shlex.quote(helper_location), "agent", "up", "--id", shlex.quote(workspace.id)]

    source = workspace.source
    if source.git_repository:
        parts.extend(["--repository", shlex.quote(source.git_repository)])
    elif source.image:
        parts.extend(["--image", shlex.quote(source.image)])
    elif source.local_folder:
        parts.append("--local-folder")

    if snapshot:
        parts.append("--snapshot")

    return " ".join(parts)
