"""Run one variant through the gated steps.

Each step maps the current RunState to a new one or to a StepFailure. The
loop stops at the first failure: later steps never run and no artifact is
produced. Nothing is retried.
"""

from __future__ import annotations

from dataclasses import dataclass

from releaser.core.result import Err, Ok, Result
from releaser.output.console import ConsoleProtocol, Style
from releaser.pipeline.errors import StepFailure
from releaser.pipeline.model import Artifact, StepResult, VariantOutcome, VariantState
from releaser.pipeline.steps import STEPS, CommandExecutor, Step, StepContext, default_executor


@dataclass(frozen=True, slots=True)
class RunState:
    state: VariantState = VariantState.PENDING
    results: tuple[StepResult, ...] = ()

    def advance(self, state: VariantState, result: StepResult) -> RunState:
        return RunState(state=state, results=(*self.results, result))


def execute_step(
    step: Step,
    ctx: StepContext,
    *,
    executor: CommandExecutor,
    dry_run: bool = False,
) -> Result[StepResult, StepFailure]:
    """Run a single step and translate its exit status."""
    if dry_run:
        return Ok(StepResult(step=step.id, returncode=0))

    if step.command is not None:
        result = executor(
            step.command(ctx),
            cwd=ctx.workspace_root,
            env=ctx.env,
            timeout=ctx.config.step_timeout,
        )
        if isinstance(result, Err):
            error = result.error
            return Err(
                StepFailure(
                    kind=step.failure_kind,
                    step=step.id,
                    returncode=error.returncode,
                    output=error.output,
                )
            )
        return Ok(StepResult(step=step.id, returncode=0))

    if step.action is None:
        raise ValueError(f"step {step.id} has neither command nor action")

    outcome = step.action(ctx)
    if isinstance(outcome, Err):
        return Err(
            StepFailure(kind=step.failure_kind, step=step.id, returncode=1, output=outcome.error)
        )
    return Ok(StepResult(step=step.id, returncode=0))


def run_variant(
    ctx: StepContext,
    *,
    console: ConsoleProtocol,
    executor: CommandExecutor = default_executor,
    steps: tuple[Step, ...] = STEPS,
    dry_run: bool = False,
) -> VariantOutcome:
    """Run every step for one variant, stopping at the first failure."""
    variant = ctx.variant
    console.header(f"{variant.name} ({variant.os_id})")

    current = RunState()
    for step in steps:
        console.print(f"[{variant.os_id}] {step.id}: {step.describe(ctx)}", Style.DIM)
        result = execute_step(step, ctx, executor=executor, dry_run=dry_run)
        if isinstance(result, Err):
            failure = result.error
            console.error(f"[{variant.os_id}] {failure.pretty()}")
            return VariantOutcome(
                variant=variant,
                state=VariantState.FAILED,
                results=(
                    *current.results,
                    StepResult(step=step.id, returncode=failure.returncode, output=failure.output),
                ),
                failure=failure,
            )
        current = current.advance(step.state, result.value)

    console.success(f"[{variant.os_id}] {ctx.artifact_path.name}")
    return VariantOutcome(
        variant=variant,
        state=VariantState.DONE,
        results=current.results,
        artifact=Artifact(variant=variant, path=ctx.artifact_path),
    )
