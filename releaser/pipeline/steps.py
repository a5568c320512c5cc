"""Gated steps of a variant run.

A variant executes STEPS in order. Tool steps build a command line from the
StepContext and are judged by exit status only; the two file steps (artifact
directory, collect) run in-process.
"""

from __future__ import annotations

import shutil
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from releaser.core.config import PipelineConfig, VariantSpec
from releaser.core.result import Err, Ok, Result
from releaser.pipeline.errors import FailureKind
from releaser.pipeline.model import VariantState
from releaser.platform.process import ProcessError, merged_env, run_silent

__all__ = [
    "STEPS",
    "CommandExecutor",
    "Step",
    "StepContext",
    "default_executor",
    "step_by_id",
]


@dataclass(frozen=True, slots=True)
class StepContext:
    """Everything a step needs; built once per variant run."""

    config: PipelineConfig
    variant: VariantSpec
    workspace_root: Path

    @property
    def artifacts_dir(self) -> Path:
        return self.workspace_root / self.config.artifacts_dir

    @property
    def binary_relpath(self) -> str:
        return f"target/release/{self.config.bin_name}"

    @property
    def binary_path(self) -> Path:
        return self.workspace_root / "target" / "release" / self.config.bin_name

    @property
    def artifact_path(self) -> Path:
        return self.artifacts_dir / self.config.artifact_name(self.variant.os_id)

    @property
    def env(self) -> dict[str, str]:
        return self.config.build_env()


class CommandExecutor(Protocol):
    def __call__(
        self,
        cmd: list[str],
        *,
        cwd: Path,
        env: dict[str, str] | None,
        timeout: float | None,
    ) -> Result[None, ProcessError]: ...


def default_executor(
    cmd: list[str],
    *,
    cwd: Path,
    env: dict[str, str] | None,
    timeout: float | None,
) -> Result[None, ProcessError]:
    return run_silent(cmd, cwd, merged_env(env), timeout=timeout)


@dataclass(frozen=True, slots=True)
class Step:
    """A named gated step.

    Exactly one of `command` (external tool) or `action` (in-process file
    operation) is set. `state` is the variant state while the step runs and
    `failure_kind` the outcome recorded when it fails.
    """

    id: str
    state: VariantState
    failure_kind: FailureKind
    command: Callable[[StepContext], list[str]] | None = None
    action: Callable[[StepContext], Result[None, str]] | None = None

    def describe(self, ctx: StepContext) -> str:
        if self.command is not None:
            return " ".join(self.command(ctx))
        return _ACTION_DESCRIPTIONS[self.id](ctx)


def _create_artifacts_dir(ctx: StepContext) -> Result[None, str]:
    try:
        ctx.artifacts_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return Err(f"cannot create {ctx.artifacts_dir}: {e}")
    return Ok(None)


def _collect_artifact(ctx: StepContext) -> Result[None, str]:
    if not ctx.binary_path.is_file():
        return Err(f"binary not found: {ctx.binary_path}")
    try:
        ctx.artifacts_dir.mkdir(parents=True, exist_ok=True)
        shutil.copy2(ctx.binary_path, ctx.artifact_path)
    except OSError as e:
        return Err(f"cannot copy {ctx.binary_path} to {ctx.artifact_path}: {e}")
    return Ok(None)


_ACTION_DESCRIPTIONS: dict[str, Callable[[StepContext], str]] = {
    "artifacts-dir": lambda ctx: f"mkdir -p {ctx.config.artifacts_dir}",
    "collect": lambda ctx: (
        f"cp {ctx.binary_relpath} "
        f"{ctx.config.artifacts_dir}/{ctx.config.artifact_name(ctx.variant.os_id)}"
    ),
}


STEPS: tuple[Step, ...] = (
    Step(
        id="toolchain",
        state=VariantState.INSTALLING,
        failure_kind="toolchain_unavailable",
        command=lambda ctx: ["rustup", "component", "add", "rustfmt", "clippy"],
    ),
    Step(
        id="compressor",
        state=VariantState.INSTALLING,
        failure_kind="toolchain_unavailable",
        command=lambda ctx: list(ctx.variant.compressor_install),
    ),
    Step(
        id="artifacts-dir",
        state=VariantState.INSTALLING,
        failure_kind="toolchain_unavailable",
        action=_create_artifacts_dir,
    ),
    Step(
        id="fmt",
        state=VariantState.FORMATTING,
        failure_kind="format_violation",
        command=lambda ctx: ["cargo", "fmt", "--all", "--", "--check"],
    ),
    Step(
        id="clippy",
        state=VariantState.LINTING,
        failure_kind="lint_violation",
        command=lambda ctx: ["cargo", "clippy"],
    ),
    Step(
        id="test",
        state=VariantState.TESTING,
        failure_kind="test_failure",
        command=lambda ctx: ["cargo", "test", "--all"],
    ),
    Step(
        id="build",
        state=VariantState.BUILDING,
        failure_kind="build_failure",
        command=lambda ctx: ["cargo", "build", "--release"],
    ),
    Step(
        id="strip",
        state=VariantState.STRIPPING,
        failure_kind="post_process_failure",
        command=lambda ctx: ["strip", ctx.binary_relpath],
    ),
    # A compression failure is fatal: every published artifact is compressed.
    Step(
        id="compress",
        state=VariantState.COMPRESSING,
        failure_kind="post_process_failure",
        command=lambda ctx: ["upx", "--ultra-brute", ctx.binary_relpath],
    ),
    Step(
        id="collect",
        state=VariantState.COLLECTED,
        failure_kind="post_process_failure",
        action=_collect_artifact,
    ),
)


def step_by_id(step_id: str) -> Step | None:
    for step in STEPS:
        if step.id == step_id:
            return step
    return None
