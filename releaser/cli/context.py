from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from releaser.core.config import PipelineConfig, resolve_config
from releaser.core.errors import ErrorCode
from releaser.core.result import Err
from releaser.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    workspace_root: Path
    config: PipelineConfig
    console: ConsoleProtocol


def build_context(config_path: Path | None = None) -> CLIContext:
    console = RichConsole()
    result = resolve_config(config_path, os.environ)
    if isinstance(result, Err):
        console.error(result.error.message)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    root = config_path.resolve().parent if config_path is not None else Path.cwd().resolve()
    return CLIContext(workspace_root=root, config=result.value, console=console)
