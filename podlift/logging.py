# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Logging configuration for the podlift CLI.

One line per record: time, level, the workspace being brought up, then the
message. Lines relayed from the remote agent (``source="agent"``) get an
``agent ›`` prefix so they stand apart from podlift's own progress. Any
other bound fields trail the message as ``key='value'`` pairs.
"""

import sys
from typing import TYPE_CHECKING

from loguru import logger


if TYPE_CHECKING:
    from loguru import Record


AGENT_SOURCE = "agent"


def _escape(text: str) -> str:
    """Keep user data from being read as format fields or colour tags."""
    return text.replace("{", "{{").replace("}", "}}").replace("<", r"\<")


def _log_format(record: "Record") -> str:
    """Build the loguru format string for one record.

    Args:
        record: Loguru record containing log metadata, message, and level.

    Returns:
        Format string with loguru colour tags.
    """
    fields = dict(record["extra"])
    workspace = fields.pop("workspace", None)
    from_agent = fields.get("source") == AGENT_SOURCE
    if from_agent:
        fields.pop("source")

    fmt = "<dim>{time:HH:mm:ss}</dim> <level>{level: <8}</level> "
    if workspace:
        fmt += f"<cyan>{_escape(str(workspace))}</cyan> "
    if from_agent:
        fmt += "<magenta>agent ›</magenta> <dim>{message}</dim>"
    else:
        fmt += "<level>{message}</level>"

    if fields:
        pairs = " ".join(f"{key}={value!r}" for key, value in fields.items())
        fmt += f" <dim>{_escape(pairs)}</dim>"

    fmt += "\n"
    if record["exception"]:
        fmt += "{exception}\n"
    return fmt


def configure_logging(level: str = "INFO") -> None:
    """Replace loguru's default handler with podlift's stderr format.

    Args:
        level: Minimum log level to display (e.g., "DEBUG", "INFO", "WARNING").
    """
    logger.remove()
    logger.add(sys.stderr, level=level, format=_log_format, colorize=True)
