"""Pipeline orchestration: variants, join, release gate, publish.

Variants share no state. Each one runs its gated steps to completion or to
its first failure, independently of the others, and only its VariantOutcome
reaches the join. Publishing is all-or-nothing across variants.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime
from pathlib import Path

from releaser.core.config import PipelineConfig, VariantSpec
from releaser.core.result import Err
from releaser.output.console import ConsoleProtocol, Style
from releaser.pipeline.model import (
    PipelineOutcome,
    PipelineStatus,
    Trigger,
    VariantOutcome,
)
from releaser.pipeline.publish import Publisher
from releaser.pipeline.release import build_descriptor, collect_artifacts, should_publish
from releaser.pipeline.runner import run_variant
from releaser.pipeline.steps import CommandExecutor, StepContext, default_executor

Clock = Callable[[], datetime]


def _gate_refused(trigger: Trigger, console: ConsoleProtocol) -> PipelineOutcome:
    console.warning(f"tag '{trigger.tag}' is set; release builds only run for untagged pushes")
    return PipelineOutcome(status=PipelineStatus.SKIPPED_BY_GATE, reason="skipped_by_gate")


def _missing_artifacts(config: PipelineConfig, workspace_root: Path) -> tuple[str, ...]:
    """OS ids of configured variants with no artifact in the artifact directory."""
    artifacts_dir = workspace_root / config.artifacts_dir
    return tuple(
        v.os_id
        for v in config.variants
        if not (artifacts_dir / config.artifact_name(v.os_id)).is_file()
    )


def run_pipeline(
    config: PipelineConfig,
    trigger: Trigger,
    *,
    workspace_root: Path,
    console: ConsoleProtocol,
    publisher: Publisher,
    executor: CommandExecutor = default_executor,
    clock: Clock = datetime.now,
    variants: Sequence[VariantSpec] | None = None,
    dry_run: bool = False,
) -> PipelineOutcome:
    """Run every variant, then publish if the release gate allows it."""
    if not trigger.tag_blank:
        return _gate_refused(trigger, console)

    selected = tuple(variants) if variants is not None else config.variants
    outcomes = tuple(
        run_variant(
            StepContext(config=config, variant=v, workspace_root=workspace_root),
            console=console,
            executor=executor,
            dry_run=dry_run,
        )
        for v in selected
    )

    return publish_collected(
        config,
        trigger,
        workspace_root=workspace_root,
        console=console,
        publisher=publisher,
        clock=clock,
        variants=outcomes,
        dry_run=dry_run,
    )


def publish_collected(
    config: PipelineConfig,
    trigger: Trigger,
    *,
    workspace_root: Path,
    console: ConsoleProtocol,
    publisher: Publisher,
    clock: Clock = datetime.now,
    variants: tuple[VariantOutcome, ...] = (),
    dry_run: bool = False,
) -> PipelineOutcome:
    """Aggregate step: compute the release and publish collected artifacts.

    With no variant outcomes (variants ran as separate CI jobs), a variant
    counts as succeeded only if its artifact is in the artifact directory.
    """
    if not trigger.tag_blank:
        return _gate_refused(trigger, console)

    missing = () if variants else _missing_artifacts(config, workspace_root)
    all_succeeded = all(v.ok for v in variants) and not missing
    on_release_branch = trigger.branch == config.release_branch

    if not should_publish(
        tag_blank=trigger.tag_blank,
        on_release_branch=on_release_branch,
        all_succeeded=all_succeeded,
    ):
        if missing:
            names = ", ".join(missing)
            console.error(f"no artifact for variant(s): {names}; nothing is published")
            return PipelineOutcome(
                status=PipelineStatus.VARIANT_FAILED,
                detail=f"missing artifact(s) for {names}",
            )
        if not all_succeeded:
            first = next(v for v in variants if not v.ok)
            failed = ", ".join(v.variant.os_id for v in variants if not v.ok)
            console.error(f"variant(s) failed: {failed}; nothing is published")
            return PipelineOutcome(
                status=PipelineStatus.VARIANT_FAILED,
                variants=variants,
                reason=first.failure.kind if first.failure else None,
            )

        release = build_descriptor(config, commit=trigger.commit, now=clock())
        console.info(
            f"branch '{trigger.branch}' is not '{config.release_branch}'; "
            f"artifacts kept in {config.artifacts_dir}/"
        )
        return PipelineOutcome(
            status=PipelineStatus.NOT_PUBLISHED,
            variants=variants,
            release=release,
            reason="not_on_release_branch",
        )

    release = build_descriptor(config, commit=trigger.commit, now=clock())
    files = collect_artifacts(workspace_root / config.artifacts_dir, release.file_glob)
    console.header(f"Release {release.tag}: {release.name}")
    for f in files:
        console.print(f"  {f.name}", Style.DIM)

    if dry_run:
        console.info("dry run: release not published")
        return PipelineOutcome(
            status=PipelineStatus.NOT_PUBLISHED,
            variants=variants,
            release=release,
            detail="dry run",
        )

    result = publisher.publish(release, files)
    if isinstance(result, Err):
        return PipelineOutcome(
            status=PipelineStatus.PUBLISH_FAILED,
            variants=variants,
            release=release,
            reason="publish_failure",
            detail=result.error.pretty(),
        )

    console.success(f"draft release {release.tag} published ({len(files)} file(s))")
    return PipelineOutcome(
        status=PipelineStatus.PUBLISHED,
        variants=variants,
        release=release,
        published_files=tuple(files),
    )
