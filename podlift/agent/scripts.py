# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Script templates executed on the remote host."""

# Rendered with BaseUrl (agent download origin), InstallPath and Command
# (agent invocation, already quoted by its builder).
INSTALL_AGENT_TEMPLATE = """\
#!/bin/sh
set -e

INSTALL_PATH={{ InstallPath | default('/tmp/podlift') | shquote }}
DOWNLOAD_URL={{ BaseUrl | shquote }}

if [ ! -x "$INSTALL_PATH" ]; then
    case "$(uname -m)" in
        x86_64|amd64) ARCH="amd64" ;;
        aarch64|arm64) ARCH="arm64" ;;
        *) echo "unsupported architecture: $(uname -m)" >&2; exit 1 ;;
    esac

    if command -v curl >/dev/null 2>&1; then
        curl -fsSL "$DOWNLOAD_URL/podlift-linux-$ARCH" -o "$INSTALL_PATH"
    elif command -v wget >/dev/null 2>&1; then
        wget -q "$DOWNLOAD_URL/podlift-linux-$ARCH" -O "$INSTALL_PATH"
    else
        echo "neither curl nor wget is available" >&2
        exit 1
    fi
    chmod +x "$INSTALL_PATH"
fi

{{ Command }}
"""
