"""Result type for explicit error handling.

Every fallible step of the publish pipeline returns a ``Result`` instead of
raising, so the CLI layer decides the exit code in one place.

Usage:
    def find_release(tag: str) -> Result[RemoteRelease, PublishError]:
        if not tag:
            return Err(PublishError(kind="usage", message="tag is required"))
        return Ok(RemoteRelease.absent(tag))

    match find_release("v1.0.0"):
        case Ok(release):
            print(release.state)
        case Err(error):
            print(error.message)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """A successful result carrying ``value``."""

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """A failed result carrying ``error``."""

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Union[Ok[T], Err[E]]
