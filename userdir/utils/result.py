"""
Tagged success/failure result for boundary callers.

Directory operations raise typed exceptions; callers that want to branch on
the error kind explicitly wrap the call with ``capture``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from .exceptions import CacheIntegrityError, ErrorKind, UserDirectoryError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    ok: bool
    value: Optional[T] = None
    kind: Optional[ErrorKind] = None
    message: Optional[str] = None

    @classmethod
    def success(cls, value: T = None) -> "Result[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "Result[T]":
        return cls(ok=False, kind=kind, message=message)


def capture(func: Callable[..., T], *args: Any, **kwargs: Any) -> Result[T]:
    """
    Run a directory operation and fold domain errors into a failure result.

    CacheIntegrityError is an invariant violation, not an outcome, so it is
    re-raised instead of being turned into a failure.
    """
    try:
        return Result.success(func(*args, **kwargs))
    except CacheIntegrityError:
        raise
    except UserDirectoryError as e:
        return Result.failure(e.kind, e.message)
