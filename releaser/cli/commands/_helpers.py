"""Shared helpers for CLI commands."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, NoReturn

import typer

from releaser.core.errors import ErrorCode
from releaser.core.result import Err
from releaser.git import current_branch, head_commit
from releaser.output.console import Style
from releaser.output.errors import outcome_exit_code, print_outcome
from releaser.pipeline.model import PipelineOutcome, Trigger
from releaser.pipeline.publish import GhPublisher

if TYPE_CHECKING:
    from releaser.cli.context import CLIContext


BRANCH_ENV = "CI_BRANCH"
TAG_ENV = "CI_TAG"
COMMIT_ENV = "CI_COMMIT"


def exit_with_code(code: int) -> NoReturn:
    raise typer.Exit(code=code)


def resolve_trigger(
    ctx: CLIContext,
    *,
    branch: str | None,
    tag: str | None,
    commit: str | None,
) -> Trigger:
    """Build the trigger from options, falling back to the local checkout."""
    if branch is None:
        res = current_branch(ctx.workspace_root)
        if isinstance(res, Err):
            ctx.console.error(f"cannot determine branch: {res.error.message}")
            ctx.console.print(f"hint: pass --branch or set {BRANCH_ENV}", Style.DIM)
            exit_with_code(int(ErrorCode.ENV_ERROR))
        branch = res.value

    if commit is None:
        res = head_commit(ctx.workspace_root)
        if isinstance(res, Err):
            ctx.console.error(f"cannot determine commit: {res.error.message}")
            ctx.console.print(f"hint: pass --commit or set {COMMIT_ENV}", Style.DIM)
            exit_with_code(int(ErrorCode.ENV_ERROR))
        commit = res.value

    return Trigger(branch=branch, tag=tag, commit=commit)


def make_publisher(ctx: CLIContext, *, repo: str | None) -> GhPublisher:
    token = os.environ.get(ctx.config.token_env) or None
    return GhPublisher(workspace_root=ctx.workspace_root, token=token, repo=repo)


def finish(outcome: PipelineOutcome, ctx: CLIContext) -> None:
    """Print the summary and exit non-zero unless the pipeline succeeded."""
    print_outcome(outcome, ctx.console)
    code = outcome_exit_code(outcome)
    if code != int(ErrorCode.OK):
        exit_with_code(code)
