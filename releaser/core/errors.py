"""Process exit codes for the releaser CLI.

A pipeline run exits 0 only when every step of every variant succeeded.
Otherwise the code tells CI which family of step broke first.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable:
    - 0: Success (including a release skipped because of the branch)
    - 1: User error (bad option, invalid config file)
    - 2: Environment error (toolchain unavailable, trigger gate refused)
    - 3: Check error (format, lint or tests failed)
    - 4: Build error (compile, strip or compress failed)
    - 5: Publish error (release API unreachable or rejected)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    CHECK_ERROR = 3
    BUILD_ERROR = 4
    PUBLISH_ERROR = 5
