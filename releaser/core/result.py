"""Result type for explicit error handling.

Every gated step, tool invocation and config load returns a Result instead
of raising. Callers branch on the outcome:

    match execute_step(step, ctx, executor=executor):
        case Ok(result):
            ...
        case Err(failure):
            print_step_failure(failure, console, os_id=os_id)
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """Successful result carrying a value."""

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    """Failed result carrying an error payload."""

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]
