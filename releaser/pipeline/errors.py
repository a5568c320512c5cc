"""Failure taxonomy of the release pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

FailureKind = Literal[
    "toolchain_unavailable",
    "format_violation",
    "lint_violation",
    "test_failure",
    "build_failure",
    "post_process_failure",
    "publish_failure",
    "not_on_release_branch",
    "skipped_by_gate",
]

PublishErrorKind = Literal["gh_missing", "publish_failed", "no_artifacts"]


@dataclass(frozen=True, slots=True)
class StepFailure:
    """First failing step of a variant run.

    The tool output is kept verbatim so it can be shown as-is.
    """

    kind: FailureKind
    step: str
    returncode: int
    output: str = ""

    def pretty(self) -> str:
        return f"{self.step} failed (exit {self.returncode}): {self.kind}"


@dataclass(frozen=True, slots=True)
class PublishError:
    kind: PublishErrorKind
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message
