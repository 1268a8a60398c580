# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
from podlift.core.exceptions import (
    ConfigurationError as ConfigurationError,
    PodliftError as PodliftError,
)
from podlift.core.types import (
    UpState as UpState,
    Workspace as Workspace,
    WorkspaceSource as WorkspaceSource,
)
