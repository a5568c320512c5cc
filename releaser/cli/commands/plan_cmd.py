"""Plan command - list the steps each variant would run."""

from __future__ import annotations

from pathlib import Path

import typer

from releaser.cli.context import build_context
from releaser.output.console import Style
from releaser.pipeline.steps import STEPS, StepContext


def plan(
    config: Path | None = typer.Option(
        None, "--config", help="Path to releaser.toml", show_default=False
    ),
) -> None:
    """Print the step commands for every variant."""
    ctx = build_context(config)
    cfg = ctx.config

    ctx.console.print(f"binary: {cfg.bin_name}", Style.BOLD)
    ctx.console.print(f"release branch: {cfg.release_branch}", Style.DIM)
    env = " ".join(f"{k}={v}" for k, v in cfg.build_env().items())
    ctx.console.print(f"env: {env}", Style.DIM)

    for spec in cfg.variants:
        step_ctx = StepContext(config=cfg, variant=spec, workspace_root=ctx.workspace_root)
        ctx.console.header(f"{spec.name} ({spec.os_id})")
        for i, step in enumerate(STEPS, start=1):
            ctx.console.print(f"{i:>2}. {step.id:<14} {step.describe(step_ctx)}")
