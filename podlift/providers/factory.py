# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Provider construction from configuration."""

from podlift.config import ProviderConfig
from podlift.core.exceptions import ConfigurationError
from podlift.providers.base import Provider
from podlift.providers.docker import DockerProvider
from podlift.providers.ssh import SSHProvider


def create_provider(name: str, config: ProviderConfig) -> Provider:
    """Create the provider described by ``config``.

    Args:
        name: Provider name, as keyed in Settings.providers.
        config: Provider configuration.

    Returns:
        The provider instance.

    Raises:
        ConfigurationError: If the provider type is unknown or an ssh
            provider has no host.
    """
    if config.type == "ssh":
        if not config.host:
            raise ConfigurationError(f"Provider '{name}' of type ssh has no host")
        return SSHProvider(
            name,
            host=config.host,
            port=config.port,
            identity_file=config.identity_file,
        )
    if config.type == "docker":
        return DockerProvider(name, container_prefix=config.container_prefix)
    raise ConfigurationError(f"Unknown provider type '{config.type}' for provider '{name}'")
