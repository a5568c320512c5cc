"""Run command - full pipeline for every configured variant."""

from __future__ import annotations

from pathlib import Path

import typer

from releaser.cli.commands._helpers import (
    BRANCH_ENV,
    COMMIT_ENV,
    TAG_ENV,
    finish,
    make_publisher,
    resolve_trigger,
)
from releaser.cli.context import build_context
from releaser.pipeline.orchestrator import run_pipeline


def run(
    branch: str | None = typer.Option(
        None,
        "--branch",
        envvar=BRANCH_ENV,
        help="Branch of the triggering event",
        show_default=False,
    ),
    tag: str | None = typer.Option(
        None, "--tag", envvar=TAG_ENV, help="Tag of the triggering event", show_default=False
    ),
    commit: str | None = typer.Option(
        None,
        "--commit",
        envvar=COMMIT_ENV,
        help="Commit used in the release name",
        show_default=False,
    ),
    config: Path | None = typer.Option(
        None, "--config", help="Path to releaser.toml", show_default=False
    ),
    repo: str | None = typer.Option(
        None, "--repo", help="OWNER/NAME to publish to", show_default=False
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print steps without running them"),
) -> None:
    """Build, check and publish all variants."""
    ctx = build_context(config)
    trigger = resolve_trigger(ctx, branch=branch, tag=tag, commit=commit)
    outcome = run_pipeline(
        ctx.config,
        trigger,
        workspace_root=ctx.workspace_root,
        console=ctx.console,
        publisher=make_publisher(ctx, repo=repo),
        dry_run=dry_run,
    )
    finish(outcome, ctx)
