# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""podlift: bring remote development workspaces online."""

from podlift.core.orchestrator import UpOrchestrator
from podlift.main import app


__version__ = "0.1.0"

__all__ = [
    "app",
    "UpOrchestrator",
    "__version__",
]
