"""Failure presentation and exit code mapping."""

from __future__ import annotations

from typing import TYPE_CHECKING

from releaser.core.errors import ErrorCode
from releaser.output.console import Style
from releaser.pipeline.errors import FailureKind, StepFailure
from releaser.pipeline.model import PipelineOutcome, PipelineStatus

if TYPE_CHECKING:
    from releaser.output.console import ConsoleProtocol

__all__ = [
    "failure_exit_code",
    "outcome_exit_code",
    "print_outcome",
    "print_step_failure",
]


def print_step_failure(failure: StepFailure, console: ConsoleProtocol, *, os_id: str) -> None:
    """Show the failing step and its captured tool output, unabridged."""
    console.error(f"[{os_id}] {failure.step}: {failure.kind} (exit {failure.returncode})")
    for line in failure.output.splitlines():
        console.print(line, Style.DIM)


def failure_exit_code(kind: FailureKind) -> int:
    match kind:
        case "toolchain_unavailable" | "skipped_by_gate":
            return int(ErrorCode.ENV_ERROR)
        case "format_violation" | "lint_violation" | "test_failure":
            return int(ErrorCode.CHECK_ERROR)
        case "build_failure" | "post_process_failure":
            return int(ErrorCode.BUILD_ERROR)
        case "publish_failure":
            return int(ErrorCode.PUBLISH_ERROR)
        case "not_on_release_branch":
            return int(ErrorCode.OK)


def outcome_exit_code(outcome: PipelineOutcome) -> int:
    if outcome.ok:
        return int(ErrorCode.OK)
    if outcome.reason is not None:
        return failure_exit_code(outcome.reason)
    return int(ErrorCode.BUILD_ERROR)


def print_outcome(outcome: PipelineOutcome, console: ConsoleProtocol) -> None:
    """Per-variant summary followed by the release result."""
    console.header("Summary")
    for v in outcome.variants:
        if v.ok and v.artifact is not None:
            console.print(f"{v.variant.os_id}: {v.state} -> {v.artifact.name}", Style.SUCCESS)
        else:
            console.print(f"{v.variant.os_id}: {v.state} at {v.failed_step}", Style.ERROR)

    for v in outcome.failed_variants:
        if v.failure is not None:
            print_step_failure(v.failure, console, os_id=v.variant.os_id)

    match outcome.status:
        case PipelineStatus.PUBLISHED:
            if outcome.release is not None:
                release = outcome.release
                console.success(f"published draft '{release.name}' ({release.tag})")
        case PipelineStatus.NOT_PUBLISHED:
            console.info(outcome.detail or "not on release branch: release not published")
        case PipelineStatus.SKIPPED_BY_GATE:
            console.warning("skipped: trigger tag is not blank")
        case PipelineStatus.VARIANT_FAILED:
            suffix = f" ({outcome.detail})" if outcome.detail else ""
            console.error(f"release not published: a variant failed{suffix}")
        case PipelineStatus.PUBLISH_FAILED:
            console.error(f"publish failed: {outcome.detail}")
