"""Suggesting the image scanning plugin after a build."""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import TextIO

SCAN_SUGGEST_MSG = (
    "Use 'docker scan' to run Snyk tests against images to find vulnerabilities "
    "and learn how to fix them"
)

_SYSTEM_PLUGIN_DIRS: tuple[str, ...] = (
    "/usr/local/lib/docker/cli-plugins",
    "/usr/local/libexec/docker/cli-plugins",
    "/usr/lib/docker/cli-plugins",
    "/usr/libexec/docker/cli-plugins",
)


def config_dir() -> Path:
    """Return the CLI configuration directory ($DOCKER_CONFIG or ~/.docker)."""
    configured = os.environ.get("DOCKER_CONFIG")
    if configured:
        return Path(configured)
    return Path.home() / ".docker"


def scan_already_invoked(config_directory: str | os.PathLike[str]) -> bool:
    """Return True if the scan plugin recorded an opt-in, or its config cannot be read."""
    filename = Path(config_directory) / "scan" / "config.json"
    if not filename.exists():
        return False
    if filename.is_dir():
        # should never happen; do not bother the user if something is off
        return True
    try:
        data = json.loads(filename.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return True
    if data is None:
        return False
    if not isinstance(data, dict):
        return True
    optin = data.get("optin")
    if optin is None:
        return False
    if not isinstance(optin, bool):
        return True
    return optin


def _plugin_file_name() -> str:
    return "docker-scan.exe" if sys.platform == "win32" else "docker-scan"


def scan_available(config_directory: str | os.PathLike[str]) -> bool:
    """Return True if a scan CLI plugin is installed."""
    name = _plugin_file_name()
    directories = [Path(config_directory) / "cli-plugins", *map(Path, _SYSTEM_PLUGIN_DIRS)]
    return any((directory / name).is_file() for directory in directories)


def display_scan_suggest_msg(stream: TextIO | None = None) -> None:
    """Print a hint about scanning new images unless disabled, unavailable or already used."""
    if os.environ.get("DOCKER_SCAN_SUGGEST") == "false":
        return
    directory = config_dir()
    if not scan_available(directory):
        return
    if scan_already_invoked(directory):
        return
    out = stream if stream is not None else sys.stderr
    out.write("\n" + SCAN_SUGGEST_MSG + "\n")