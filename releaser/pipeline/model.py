from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from releaser.core.config import VariantSpec
from releaser.pipeline.errors import FailureKind, StepFailure


class VariantState(Enum):
    """Progress of one variant run.

    States advance strictly in declaration order; FAILED is terminal.
    """

    PENDING = "pending"
    INSTALLING = "installing"
    FORMATTING = "formatting"
    LINTING = "linting"
    TESTING = "testing"
    BUILDING = "building"
    STRIPPING = "stripping"
    COMPRESSING = "compressing"
    COLLECTED = "collected"
    DONE = "done"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


class PipelineStatus(Enum):
    PUBLISHED = "published"
    NOT_PUBLISHED = "not_published"
    VARIANT_FAILED = "variant_failed"
    SKIPPED_BY_GATE = "skipped_by_gate"
    PUBLISH_FAILED = "publish_failed"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class StepResult:
    step: str
    returncode: int
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@dataclass(frozen=True, slots=True)
class Artifact:
    """Compiled, stripped and compressed binary of one variant."""

    variant: VariantSpec
    path: Path

    @property
    def name(self) -> str:
        return self.path.name


@dataclass(frozen=True, slots=True)
class VariantOutcome:
    variant: VariantSpec
    state: VariantState
    results: tuple[StepResult, ...] = ()
    artifact: Artifact | None = None
    failure: StepFailure | None = None

    @property
    def ok(self) -> bool:
        return self.state == VariantState.DONE

    @property
    def failed_step(self) -> str | None:
        return self.failure.step if self.failure else None


@dataclass(frozen=True, slots=True)
class ReleaseDescriptor:
    tag: str
    name: str
    file_glob: str
    draft: bool = True
    overwrite: bool = True
    # Commit the release tag is created on; None lets the host pick its default branch.
    target: str | None = None


@dataclass(frozen=True, slots=True)
class Trigger:
    """The event that started the pipeline.

    Attributes:
        branch: Branch the event occurred on.
        tag: Git tag of the event ("" or None when the push was untagged).
        commit: Commit identifier used in the release name.
    """

    branch: str
    tag: str | None
    commit: str

    @property
    def tag_blank(self) -> bool:
        return not (self.tag or "").strip()


@dataclass(frozen=True, slots=True)
class PipelineOutcome:
    status: PipelineStatus
    variants: tuple[VariantOutcome, ...] = ()
    release: ReleaseDescriptor | None = None
    reason: FailureKind | None = None
    published_files: tuple[Path, ...] = field(default_factory=tuple)
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.status in (PipelineStatus.PUBLISHED, PipelineStatus.NOT_PUBLISHED)

    @property
    def artifacts(self) -> tuple[Artifact, ...]:
        return tuple(v.artifact for v in self.variants if v.artifact is not None)

    @property
    def failed_variants(self) -> tuple[VariantOutcome, ...]:
        return tuple(v for v in self.variants if not v.ok)
