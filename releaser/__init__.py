"""Release pipeline orchestrator for compiled binaries."""

__version__ = "0.1.0"
