# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Bootstrap tunnel between a provider command and a local server loop."""

from podlift.tunnel.bridge import BridgeStdio, TunnelBridge, TunnelHandle, TunnelServer
from podlift.tunnel.server import LogRelayTunnelServer


__all__ = [
    "BridgeStdio",
    "LogRelayTunnelServer",
    "TunnelBridge",
    "TunnelHandle",
    "TunnelServer",
]
