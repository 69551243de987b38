"""Outcome of a state-changing operation.

Optimistic updates report success or failure through OperationResult instead
of raising: on failure the state has already been reverted and `previous`
holds the value it was reverted to.
"""

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

from cookalong.models.errors import CookalongError

T = TypeVar("T")


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    ok: bool
    value: Optional[T] = None
    previous: Any = None
    error: Optional[CookalongError] = None
    message: Optional[str] = None
    # True when the operation did nothing (already in the requested state)
    noop: bool = False

    @classmethod
    def success(cls, value: Optional[T] = None, *, previous: Any = None) -> "OperationResult[T]":
        return cls(ok=True, value=value, previous=previous)

    @classmethod
    def unchanged(cls, value: Optional[T] = None) -> "OperationResult[T]":
        return cls(ok=True, value=value, noop=True)

    @classmethod
    def failure(
        cls,
        message: str,
        *,
        error: Optional[CookalongError] = None,
        previous: Any = None,
    ) -> "OperationResult[T]":
        return cls(ok=False, error=error, message=message, previous=previous)

    def __bool__(self) -> bool:
        return self.ok
