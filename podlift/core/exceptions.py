# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Custom exceptions for podlift."""


class PodliftError(Exception):
    """Base exception for all podlift errors."""

    pass


class ConfigurationError(PodliftError):
    """Raised when required configuration is missing or invalid."""

    pass


class WorkspaceNotFoundError(ConfigurationError):
    """Raised when a workspace selector matches no known workspace."""

    pass


class ReadinessError(PodliftError):
    """Raised when the workspace instance never became ready."""

    pass


class TemplateError(PodliftError):
    """Raised when a script template is malformed or under-specified."""

    pass


class TunnelError(PodliftError):
    """Raised when the bootstrap tunnel cannot be set up or its server fails."""

    pass


class ProviderCommandError(PodliftError):
    """Raised when remote command execution fails or exits non-zero.

    Attributes:
        returncode: Exit status of the remote command, if known.
    """

    def __init__(self, message: str, returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode


class SshConfigError(PodliftError):
    """Raised when the local SSH configuration cannot be written."""

    pass


class EditorLaunchError(PodliftError):
    """Raised when the editor cannot be started or exits non-zero."""

    pass
