"""Release pipeline: gated variant runs, release gate and publish."""

from .errors import FailureKind, PublishError, StepFailure
from .model import (
    Artifact,
    PipelineOutcome,
    PipelineStatus,
    ReleaseDescriptor,
    StepResult,
    Trigger,
    VariantOutcome,
    VariantState,
)
from .orchestrator import publish_collected, run_pipeline
from .publish import GhPublisher, Publisher
from .release import RELEASE_TAG, build_descriptor, release_name, should_publish
from .runner import run_variant
from .steps import STEPS, Step, StepContext

__all__ = [
    "Artifact",
    "FailureKind",
    "GhPublisher",
    "PipelineOutcome",
    "PipelineStatus",
    "PublishError",
    "Publisher",
    "RELEASE_TAG",
    "ReleaseDescriptor",
    "STEPS",
    "Step",
    "StepContext",
    "StepFailure",
    "StepResult",
    "Trigger",
    "VariantOutcome",
    "VariantState",
    "build_descriptor",
    "publish_collected",
    "release_name",
    "run_pipeline",
    "run_variant",
    "should_publish",
]
