"""Publish artifacts as a draft GitHub release through the gh CLI.

The credential is handed to gh as GH_TOKEN and never inspected. Publishing
is a single external side effect: failures are reported, not retried.
"""

from __future__ import annotations

import shutil
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from releaser.core.result import Err, Ok, Result
from releaser.pipeline.errors import PublishError
from releaser.pipeline.model import ReleaseDescriptor
from releaser.platform.process import merged_env
from releaser.platform.process import run as run_process

GH_TIMEOUT_SECONDS = 60.0
GH_UPLOAD_TIMEOUT_SECONDS = 30 * 60.0


class Publisher(Protocol):
    def publish(
        self, release: ReleaseDescriptor, files: Sequence[Path]
    ) -> Result[None, PublishError]: ...


def ensure_gh_available() -> Result[None, PublishError]:
    if shutil.which("gh") is None:
        return Err(
            PublishError(
                kind="gh_missing",
                message="gh: missing",
                hint="Install GitHub CLI: https://cli.github.com/",
            )
        )
    return Ok(None)


@dataclass(frozen=True, slots=True)
class GhPublisher:
    """Release-hosting adapter backed by `gh release`.

    Attributes:
        workspace_root: Directory gh runs in (selects the repository).
        token: Release API credential, exported as GH_TOKEN when set.
        repo: Optional OWNER/NAME to target instead of the checkout's remote.
    """

    workspace_root: Path
    token: str | None = None
    repo: str | None = None

    def _env(self) -> dict[str, str] | None:
        if not self.token:
            return None
        return merged_env({"GH_TOKEN": self.token})

    def _cmd(self, *args: str) -> list[str]:
        cmd = ["gh", "release", *args]
        if self.repo:
            cmd += ["--repo", self.repo]
        return cmd

    def release_exists(self, tag: str) -> bool:
        result = run_process(
            self._cmd("view", tag),
            cwd=self.workspace_root,
            env=self._env(),
            timeout=GH_TIMEOUT_SECONDS,
        )
        return isinstance(result, Ok)

    def _delete(self, tag: str) -> Result[None, PublishError]:
        result = run_process(
            self._cmd("delete", tag, "--yes", "--cleanup-tag"),
            cwd=self.workspace_root,
            env=self._env(),
            timeout=GH_TIMEOUT_SECONDS,
        )
        if isinstance(result, Err):
            return Err(
                PublishError(
                    kind="publish_failed",
                    message=f"failed to replace existing release: {tag}",
                    hint=result.error.stderr.strip() or None,
                )
            )
        return Ok(None)

    def publish(
        self, release: ReleaseDescriptor, files: Sequence[Path]
    ) -> Result[None, PublishError]:
        available = ensure_gh_available()
        if isinstance(available, Err):
            return available

        if not files:
            return Err(
                PublishError(
                    kind="no_artifacts",
                    message=f"no artifacts match {release.file_glob}",
                )
            )

        # Overwrite replaces the whole release so stale assets never linger.
        if release.overwrite and self.release_exists(release.tag):
            deleted = self._delete(release.tag)
            if isinstance(deleted, Err):
                return deleted

        args = ["create", release.tag, "--title", release.name, "--notes", ""]
        if release.draft:
            args.append("--draft")
        if release.target:
            args += ["--target", release.target]
        args += [str(f) for f in files]

        result = run_process(
            self._cmd(*args),
            cwd=self.workspace_root,
            env=self._env(),
            timeout=GH_UPLOAD_TIMEOUT_SECONDS,
        )
        if isinstance(result, Err):
            return Err(
                PublishError(
                    kind="publish_failed",
                    message=f"gh release create failed (exit {result.error.returncode})",
                    hint=result.error.stderr.strip() or None,
                )
            )
        return Ok(None)
