"""Resolve the npm executable name for the host platform.

Windows ships npm as a batch shim (``npm.cmd``) which ``CreateProcess`` will
not find under the bare name; every other platform uses ``npm``.
"""

from __future__ import annotations

import platform as _platform

NPM = "npm"
NPM_WINDOWS = "npm.cmd"


def is_windows(system: str | None = None) -> bool:
    system = _platform.system() if system is None else system
    return system.lower().startswith("win")


def npm_executable(system: str | None = None) -> str:
    """Return the npm executable name for *system* (default: this host)."""
    return NPM_WINDOWS if is_windows(system) else NPM
