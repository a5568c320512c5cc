"""Release descriptor and publish gate."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from releaser.core.config import PipelineConfig
from releaser.pipeline.model import ReleaseDescriptor

# The incoming git tag is discarded; every build lands on the same draft.
RELEASE_TAG = "preview"
RELEASE_NAME_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def release_name(commit: str, now: datetime) -> str:
    return f"{commit}@{now.strftime(RELEASE_NAME_TIME_FORMAT)}"


def build_descriptor(config: PipelineConfig, *, commit: str, now: datetime) -> ReleaseDescriptor:
    return ReleaseDescriptor(
        tag=RELEASE_TAG,
        name=release_name(commit, now),
        file_glob=config.artifact_glob,
        draft=True,
        overwrite=True,
        target=commit or None,
    )


def should_publish(*, tag_blank: bool, on_release_branch: bool, all_succeeded: bool) -> bool:
    return tag_blank and on_release_branch and all_succeeded


def collect_artifacts(artifacts_dir: Path, file_glob: str) -> list[Path]:
    """Files in the artifact directory matching the glob, sorted by name."""
    if not artifacts_dir.is_dir():
        return []
    return sorted(p for p in artifacts_dir.glob(file_glob) if p.is_file())
