# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Install script rendering."""

import shlex
from collections.abc import Mapping

from jinja2 import Environment, StrictUndefined
from jinja2 import TemplateError as JinjaTemplateError

from podlift.agent.command import REMOTE_HELPER_LOCATION
from podlift.agent.scripts import INSTALL_AGENT_TEMPLATE
from podlift.core.exceptions import TemplateError


# Scripts are shell, not HTML: no autoescaping, keep the trailing newline.
_env = Environment(
    undefined=StrictUndefined,
    autoescape=False,
    keep_trailing_newline=True,
)
_env.filters["shquote"] = shlex.quote


def fill_template(source: str, values: Mapping[str, str]) -> str:
    """Render a template, failing on any placeholder missing from ``values``.

    Args:
        source: Jinja2 template source.
        values: Placeholder values.

    Returns:
        Rendered text.

    Raises:
        TemplateError: If the source is malformed or a placeholder is missing.
    """
    try:
        return _env.from_string(source).render(**values)
    except JinjaTemplateError as exc:
        raise TemplateError(f"Failed to render template: {exc}") from exc


def render_install_script(
    base_url: str,
    command: str,
    template: str = INSTALL_AGENT_TEMPLATE,
    install_path: str = REMOTE_HELPER_LOCATION,
) -> str:
    """Render the agent install script.

    Args:
        base_url: Origin the agent binary is downloaded from.
        command: Agent command to run once the binary is installed.
        template: Template source, the bundled install script by default.
        install_path: Remote path the agent binary is installed to.

    Returns:
        The script to execute on the remote host.
    """
    return fill_template(
        template,
        {"BaseUrl": base_url.rstrip("/"), "Command": command, "InstallPath": install_path},
    )
