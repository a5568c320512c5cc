"""Read-only git queries used to resolve the trigger.

CI usually provides the branch and commit through the environment. When it
does not, they are read from the local checkout:

    match head_commit(root):
        case Ok(sha):
            ...
        case Err(e):
            console.error(e.message)
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from releaser.core.result import Err, Ok, Result
from releaser.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0

__all__ = ["GitError", "current_branch", "head_commit"]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


def _rev_parse(root: Path, args: list[str]) -> Result[str, GitError]:
    cmd = ["git", "rev-parse", *args]
    result = run_process(cmd, cwd=root, timeout=_GIT_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return Err(
            GitError(
                command=" ".join(cmd),
                message=result.error.stderr.strip() or str(result.error),
                returncode=result.error.returncode,
            )
        )

    value = result.value.strip()
    if not value:
        return Err(GitError(command=" ".join(cmd), message="git returned no output"))
    return Ok(value)


def head_commit(root: Path) -> Result[str, GitError]:
    """Full SHA of HEAD."""
    return _rev_parse(root, ["HEAD"])


def current_branch(root: Path) -> Result[str, GitError]:
    """Name of the checked-out branch.

    A detached HEAD yields an error: the release gate needs a real branch.
    """
    result = _rev_parse(root, ["--abbrev-ref", "HEAD"])
    if isinstance(result, Ok) and result.value == "HEAD":
        return Err(GitError(command="git rev-parse --abbrev-ref HEAD", message="detached HEAD"))
    return result
