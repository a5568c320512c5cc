"""Platform layer: subprocess execution and host detection."""

from .detection import detect_os_id, os_id_for
from .process import ProcessError, merged_env, run, run_silent

__all__ = [
    "ProcessError",
    "detect_os_id",
    "merged_env",
    "os_id_for",
    "run",
    "run_silent",
]
