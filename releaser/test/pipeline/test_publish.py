from __future__ import annotations

from pathlib import Path

import pytest

from releaser.core.result import Err, Ok, Result
from releaser.pipeline import publish as pub_mod
from releaser.pipeline.model import ReleaseDescriptor
from releaser.platform.process import ProcessError

RELEASE = ReleaseDescriptor(tag="preview", name="abc@2024-01-02 03:04:05", file_glob="seeker-*")


class FakeGh:
    """Minimal in-memory stand-in for `gh release` keyed by tag."""

    def __init__(self, *, fail_create: bool = False) -> None:
        self.releases: dict[str, list[str]] = {}
        self.calls: list[list[str]] = []
        self.envs: list[dict[str, str] | None] = []
        self.fail_create = fail_create

    def __call__(
        self,
        cmd: list[str],
        *,
        cwd: Path,
        env: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        del cwd
        del timeout
        self.calls.append(cmd)
        self.envs.append(env)
        action, tag = cmd[2], cmd[3]
        if action == "view":
            if tag in self.releases:
                return Ok(tag)
            return Err(ProcessError(tuple(cmd), 1, "", "release not found"))
        if action == "delete":
            del self.releases[tag]
            return Ok("")
        if action == "create":
            if self.fail_create:
                return Err(ProcessError(tuple(cmd), 1, "", "HTTP 401: Bad credentials"))
            if tag in self.releases:
                return Err(ProcessError(tuple(cmd), 1, "", "a release with the same tag exists"))
            self.releases[tag] = [a for a in cmd if a.startswith("/")]
            return Ok("https://example.invalid/releases/preview")
        raise AssertionError(f"unexpected gh call: {cmd}")


@pytest.fixture
def gh_present(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(pub_mod.shutil, "which", lambda name: f"/usr/bin/{name}")


def _files(tmp_path: Path, *names: str) -> list[Path]:
    out: list[Path] = []
    for name in names:
        p = tmp_path / name
        p.write_bytes(b"bin")
        out.append(p)
    return out


@pytest.mark.usefixtures("gh_present")
class TestGhPublisher:
    def test_creates_draft_release(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        gh = FakeGh()
        monkeypatch.setattr(pub_mod, "run_process", gh)
        files = _files(tmp_path, "seeker-linux", "seeker-osx")

        result = pub_mod.GhPublisher(workspace_root=tmp_path, token="s3cret").publish(
            RELEASE, files
        )

        assert isinstance(result, Ok)
        create = gh.calls[-1]
        assert create[:4] == ["gh", "release", "create", "preview"]
        assert "--draft" in create
        assert create[create.index("--title") + 1] == "abc@2024-01-02 03:04:05"
        assert create[-2:] == [str(f) for f in files]
        assert gh.releases["preview"] == [str(f) for f in files]

    def test_target_commit_passed(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        gh = FakeGh()
        monkeypatch.setattr(pub_mod, "run_process", gh)
        release = ReleaseDescriptor(
            tag="preview",
            name="a1b2c3d@2024-01-02 03:04:05",
            file_glob="seeker-*",
            target="a1b2c3d",
        )

        pub_mod.GhPublisher(workspace_root=tmp_path).publish(
            release, _files(tmp_path, "seeker-linux")
        )

        create = gh.calls[-1]
        assert create[create.index("--target") + 1] == "a1b2c3d"

    def test_no_target_leaves_default_branch(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        gh = FakeGh()
        monkeypatch.setattr(pub_mod, "run_process", gh)

        pub_mod.GhPublisher(workspace_root=tmp_path).publish(
            RELEASE, _files(tmp_path, "seeker-linux")
        )

        assert "--target" not in gh.calls[-1]

    def test_token_exported_as_gh_token(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        gh = FakeGh()
        monkeypatch.setattr(pub_mod, "run_process", gh)

        pub_mod.GhPublisher(workspace_root=tmp_path, token="s3cret").publish(
            RELEASE, _files(tmp_path, "seeker-linux")
        )

        for env in gh.envs:
            assert env is not None
            assert env["GH_TOKEN"] == "s3cret"

    def test_no_token_uses_ambient_auth(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        gh = FakeGh()
        monkeypatch.setattr(pub_mod, "run_process", gh)

        pub_mod.GhPublisher(workspace_root=tmp_path).publish(
            RELEASE, _files(tmp_path, "seeker-linux")
        )

        assert gh.envs == [None, None]

    def test_republish_replaces_files(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        gh = FakeGh()
        monkeypatch.setattr(pub_mod, "run_process", gh)
        publisher = pub_mod.GhPublisher(workspace_root=tmp_path)

        first = _files(tmp_path, "seeker-linux", "seeker-osx")
        assert isinstance(publisher.publish(RELEASE, first), Ok)

        newer = tmp_path / "new"
        newer.mkdir()
        second = _files(newer, "seeker-linux")
        assert isinstance(publisher.publish(RELEASE, second), Ok)

        assert list(gh.releases) == ["preview"]
        assert gh.releases["preview"] == [str(second[0])]
        assert ["gh", "release", "delete", "preview", "--yes", "--cleanup-tag"] in gh.calls

    def test_create_failure_not_retried(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        gh = FakeGh(fail_create=True)
        monkeypatch.setattr(pub_mod, "run_process", gh)

        result = pub_mod.GhPublisher(workspace_root=tmp_path, token="bad").publish(
            RELEASE, _files(tmp_path, "seeker-linux")
        )

        assert isinstance(result, Err)
        assert result.error.kind == "publish_failed"
        assert result.error.hint == "HTTP 401: Bad credentials"
        assert sum(1 for c in gh.calls if c[2] == "create") == 1

    def test_no_files(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        gh = FakeGh()
        monkeypatch.setattr(pub_mod, "run_process", gh)

        result = pub_mod.GhPublisher(workspace_root=tmp_path).publish(RELEASE, [])

        assert isinstance(result, Err)
        assert result.error.kind == "no_artifacts"
        assert gh.calls == []

    def test_repo_option(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        gh = FakeGh()
        monkeypatch.setattr(pub_mod, "run_process", gh)

        pub_mod.GhPublisher(workspace_root=tmp_path, repo="owner/seeker").publish(
            RELEASE, _files(tmp_path, "seeker-linux")
        )

        for call in gh.calls:
            assert call[-2:] == ["--repo", "owner/seeker"]


def test_gh_missing(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(pub_mod.shutil, "which", lambda name: None)

    result = pub_mod.GhPublisher(workspace_root=tmp_path).publish(
        RELEASE, _files(tmp_path, "seeker-linux")
    )

    assert isinstance(result, Err)
    assert result.error.kind == "gh_missing"
    assert result.error.pretty() == (
        "gh: missing (hint: Install GitHub CLI: https://cli.github.com/)"
    )
