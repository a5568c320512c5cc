"""Variant command - one OS build job, no publish."""

from __future__ import annotations

from pathlib import Path

import typer

from releaser.cli.commands._helpers import TAG_ENV, exit_with_code
from releaser.cli.context import build_context
from releaser.core.errors import ErrorCode
from releaser.output.console import Style
from releaser.output.errors import failure_exit_code, print_step_failure
from releaser.pipeline.model import Trigger
from releaser.pipeline.runner import run_variant
from releaser.pipeline.steps import StepContext
from releaser.platform.detection import detect_os_id


def variant(
    os_id: str | None = typer.Argument(
        None, help="Variant OS identifier (default: this host)", show_default=False
    ),
    tag: str | None = typer.Option(
        None, "--tag", envvar=TAG_ENV, help="Tag of the triggering event", show_default=False
    ),
    config: Path | None = typer.Option(
        None, "--config", help="Path to releaser.toml", show_default=False
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print steps without running them"),
) -> None:
    """Run the gated steps for one variant."""
    ctx = build_context(config)

    if not Trigger(branch="", tag=tag, commit="").tag_blank:
        ctx.console.warning(f"tag '{tag}' is set; release builds only run for untagged pushes")
        exit_with_code(failure_exit_code("skipped_by_gate"))

    wanted = os_id or detect_os_id()
    spec = ctx.config.variant(wanted)
    if spec is None:
        ctx.console.error(f"unknown variant: {wanted}")
        known = ", ".join(v.os_id for v in ctx.config.variants)
        ctx.console.print(f"Available: {known}", Style.DIM)
        exit_with_code(int(ErrorCode.USER_ERROR))

    outcome = run_variant(
        StepContext(config=ctx.config, variant=spec, workspace_root=ctx.workspace_root),
        console=ctx.console,
        dry_run=dry_run,
    )
    if outcome.failure is not None:
        print_step_failure(outcome.failure, ctx.console, os_id=spec.os_id)
        exit_with_code(failure_exit_code(outcome.failure.kind))
