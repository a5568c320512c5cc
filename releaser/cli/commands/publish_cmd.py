"""Publish command - release the artifacts collected by the variant jobs."""

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
from releaser.pipeline.orchestrator import publish_collected


def publish(
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
    dry_run: bool = typer.Option(False, "--dry-run", help="Show the release without publishing"),
) -> None:
    """Publish collected artifacts as a draft release.

    Run this once all variant jobs have succeeded.
    """
    ctx = build_context(config)
    trigger = resolve_trigger(ctx, branch=branch, tag=tag, commit=commit)
    outcome = publish_collected(
        ctx.config,
        trigger,
        workspace_root=ctx.workspace_root,
        console=ctx.console,
        publisher=make_publisher(ctx, repo=repo),
        dry_run=dry_run,
    )
    finish(outcome, ctx)
