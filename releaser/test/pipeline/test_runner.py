from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from releaser.core.config import PipelineConfig
from releaser.core.result import Err, Ok, Result
from releaser.output.console import MockConsole
from releaser.pipeline.model import VariantState
from releaser.pipeline.runner import execute_step, run_variant
from releaser.pipeline.steps import STEPS, StepContext, step_by_id
from releaser.platform.process import ProcessError, run_silent


@dataclass
class FakeExecutor:
    """Records commands; `cargo build` drops a binary like the real build."""

    root: Path
    bin_name: str = "seeker"
    fail_on: tuple[str, ...] | None = None
    calls: list[list[str]] = field(default_factory=list)
    envs: list[dict[str, str] | None] = field(default_factory=list)
    timeouts: list[float | None] = field(default_factory=list)

    def __call__(
        self,
        cmd: list[str],
        *,
        cwd: Path,
        env: dict[str, str] | None,
        timeout: float | None,
    ) -> Result[None, ProcessError]:
        assert cwd == self.root
        self.calls.append(cmd)
        self.envs.append(env)
        self.timeouts.append(timeout)
        if self.fail_on is not None and tuple(cmd) == self.fail_on:
            return Err(ProcessError(tuple(cmd), 1, "", f"{cmd[0]}: broken\n"))
        if cmd[:3] == ["cargo", "build", "--release"]:
            out = self.root / "target" / "release"
            out.mkdir(parents=True, exist_ok=True)
            (out / self.bin_name).write_bytes(b"\x7fELF")
        return Ok(None)


def _ctx(tmp_path: Path, os_id: str = "linux") -> StepContext:
    config = PipelineConfig(bin_name="seeker")
    variant = config.variant(os_id)
    assert variant is not None
    return StepContext(config=config, variant=variant, workspace_root=tmp_path)


COMMAND_STEPS = [s.id for s in STEPS if s.command is not None]


class TestSuccess:
    def test_all_steps_produce_artifact(self, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path)
        executor = FakeExecutor(root=tmp_path)

        outcome = run_variant(ctx, console=MockConsole(), executor=executor)

        assert outcome.ok
        assert outcome.state == VariantState.DONE
        assert outcome.failure is None
        assert outcome.artifact is not None
        assert outcome.artifact.name == "seeker-linux"
        assert outcome.artifact.path == tmp_path / "artifacts" / "seeker-linux"
        assert outcome.artifact.path.read_bytes() == b"\x7fELF"
        assert [r.step for r in outcome.results] == [s.id for s in STEPS]

    def test_commands_in_order(self, tmp_path: Path) -> None:
        executor = FakeExecutor(root=tmp_path)
        run_variant(_ctx(tmp_path), console=MockConsole(), executor=executor)

        assert executor.calls == [
            ["rustup", "component", "add", "rustfmt", "clippy"],
            ["sudo", "apt-get", "install", "-y", "upx"],
            ["cargo", "fmt", "--all", "--", "--check"],
            ["cargo", "clippy"],
            ["cargo", "test", "--all"],
            ["cargo", "build", "--release"],
            ["strip", "target/release/seeker"],
            ["upx", "--ultra-brute", "target/release/seeker"],
        ]

    def test_osx_uses_brew(self, tmp_path: Path) -> None:
        executor = FakeExecutor(root=tmp_path)
        outcome = run_variant(_ctx(tmp_path, "osx"), console=MockConsole(), executor=executor)

        assert ["brew", "install", "upx"] in executor.calls
        assert outcome.artifact is not None
        assert outcome.artifact.name == "seeker-osx"

    def test_env_and_timeout_passed_through(self, tmp_path: Path) -> None:
        executor = FakeExecutor(root=tmp_path)
        run_variant(_ctx(tmp_path), console=MockConsole(), executor=executor)

        for env in executor.envs:
            assert env is not None
            assert env["OPENSSL_STATIC"] == "yes"
            assert env["DNS"] == "8.8.8.8"
        assert set(executor.timeouts) == {PipelineConfig(bin_name="x").step_timeout}

    def test_existing_artifacts_dir_is_fine(self, tmp_path: Path) -> None:
        (tmp_path / "artifacts").mkdir()
        outcome = run_variant(
            _ctx(tmp_path), console=MockConsole(), executor=FakeExecutor(root=tmp_path)
        )

        assert outcome.ok

    def test_dry_run_executes_nothing(self, tmp_path: Path) -> None:
        executor = FakeExecutor(root=tmp_path)
        console = MockConsole()

        outcome = run_variant(_ctx(tmp_path), console=console, executor=executor, dry_run=True)

        assert outcome.ok
        assert executor.calls == []
        assert not (tmp_path / "artifacts").exists()
        assert console.find("cargo build --release")


class TestFailure:
    @pytest.mark.parametrize("step_id", COMMAND_STEPS)
    def test_first_failure_halts_variant(self, tmp_path: Path, step_id: str) -> None:
        ctx = _ctx(tmp_path)
        step = step_by_id(step_id)
        assert step is not None and step.command is not None
        executor = FakeExecutor(root=tmp_path, fail_on=tuple(step.command(ctx)))

        outcome = run_variant(ctx, console=MockConsole(), executor=executor)

        assert outcome.state == VariantState.FAILED
        assert not outcome.ok
        assert outcome.artifact is None
        assert outcome.failure is not None
        assert outcome.failure.kind == step.failure_kind
        assert outcome.failure.step == step_id
        assert "broken" in outcome.failure.output
        assert outcome.results[-1].step == step_id
        assert not outcome.results[-1].ok
        assert executor.calls[-1] == step.command(ctx)
        assert not ctx.artifact_path.exists()

    @pytest.mark.parametrize(
        ("step_id", "kind"),
        [
            ("toolchain", "toolchain_unavailable"),
            ("compressor", "toolchain_unavailable"),
            ("fmt", "format_violation"),
            ("clippy", "lint_violation"),
            ("test", "test_failure"),
            ("build", "build_failure"),
            ("strip", "post_process_failure"),
            ("compress", "post_process_failure"),
        ],
    )
    def test_failure_kinds(self, tmp_path: Path, step_id: str, kind: str) -> None:
        ctx = _ctx(tmp_path)
        step = step_by_id(step_id)
        assert step is not None and step.command is not None
        executor = FakeExecutor(root=tmp_path, fail_on=tuple(step.command(ctx)))

        outcome = run_variant(ctx, console=MockConsole(), executor=executor)

        assert outcome.failure is not None
        assert outcome.failure.kind == kind

    def test_artifacts_dir_blocked(self, tmp_path: Path) -> None:
        (tmp_path / "artifacts").write_text("not a directory", encoding="utf-8")
        executor = FakeExecutor(root=tmp_path)

        outcome = run_variant(_ctx(tmp_path), console=MockConsole(), executor=executor)

        assert outcome.failure is not None
        assert outcome.failure.step == "artifacts-dir"
        assert outcome.failure.kind == "toolchain_unavailable"
        assert ["cargo", "fmt", "--all", "--", "--check"] not in executor.calls

    def test_missing_binary_fails_collect(self, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path)
        collect = step_by_id("collect")
        assert collect is not None

        result = execute_step(collect, ctx, executor=FakeExecutor(root=tmp_path))

        assert isinstance(result, Err)
        assert result.error.kind == "post_process_failure"
        assert "binary not found" in result.error.output

    def test_failure_is_reported(self, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path)
        console = MockConsole()
        executor = FakeExecutor(root=tmp_path, fail_on=("cargo", "clippy"))

        run_variant(ctx, console=console, executor=executor)

        assert console.has_error()
        assert console.find("clippy failed (exit 1): lint_violation")

    def test_stdout_diff_reaches_failure_output(self, tmp_path: Path) -> None:
        fmt_diff = (
            "print('Diff in src/main.rs at line 3:'); print('-fn  main() {}'); raise SystemExit(1)"
        )

        def fmt_writes_stdout(
            cmd: list[str], *, cwd: Path, env: dict[str, str] | None, timeout: float | None
        ) -> Result[None, ProcessError]:
            del env
            if cmd[:2] == ["cargo", "fmt"]:
                return run_silent([sys.executable, "-c", fmt_diff], cwd, timeout=timeout)
            return Ok(None)

        outcome = run_variant(_ctx(tmp_path), console=MockConsole(), executor=fmt_writes_stdout)

        assert outcome.failure is not None
        assert outcome.failure.kind == "format_violation"
        assert outcome.failure.output == "Diff in src/main.rs at line 3:\n-fn  main() {}"
        assert outcome.results[-1].output == outcome.failure.output
