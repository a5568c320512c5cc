"""Host operating system detection.

Maps the running host onto the OS identifiers used by pipeline variants and
artifact names ("osx", "linux").
"""

from __future__ import annotations

import platform as _platform

__all__ = ["detect_os_id", "os_id_for"]

_SYSTEM_TO_OS_ID = {
    "darwin": "osx",
    "linux": "linux",
    "windows": "windows",
}


def os_id_for(system: str) -> str:
    """Return the variant OS identifier for a `platform.system()` value."""
    key = system.strip().lower()
    return _SYSTEM_TO_OS_ID.get(key, key)


def detect_os_id() -> str:
    return os_id_for(_platform.system())
