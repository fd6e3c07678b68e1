"""Settlement records produced by AsyncResult.all_settled()."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, TypeVar

from faultline.foundation.errors import ErrorHolder, make_unchecked

from .result import Result, _ERR, _OK

T = TypeVar("T")
E = TypeVar("E")


class SettledKind(StrEnum):
    """Which of the three channels an AsyncResult settled through."""
    OK = "ok"
    FAILURE = "failure"
    REJECTED = "rejected"


@dataclass(slots=True, frozen=True)
class Settled(Generic[T, E]):
    """Outcome of one member of AsyncResult.all_settled().

    Similar to JavaScript's Promise.allSettled() records, with the failure
    channel split in two.

    Attributes:
        kind: 'ok', 'failure' or 'rejected'
        value: The Ok value, the ErrorHolder of a failure, or the exception
            a rejected member raised
    """

    kind: SettledKind
    value: T | ErrorHolder[E] | BaseException

    @property
    def is_ok(self) -> bool:
        return self.kind is SettledKind.OK

    @property
    def is_failure(self) -> bool:
        return self.kind is SettledKind.FAILURE

    @property
    def is_rejected(self) -> bool:
        return self.kind is SettledKind.REJECTED

    def to_result(self) -> Result[T, E]:
        """Fold back into a Result. A rejection becomes an unchecked Err."""
        if self.kind is SettledKind.OK:
            return Result(self.value, _OK)  # type: ignore[arg-type]
        if self.kind is SettledKind.FAILURE:
            return Result(self.value, _ERR)  # type: ignore[arg-type]
        return Result(make_unchecked(self.value), _ERR)

    @classmethod
    def from_outcome(cls, outcome: Result[T, E] | BaseException) -> Settled[T, E]:
        """Build a record from a settled Result or a rejection."""
        if isinstance(outcome, BaseException):
            return cls(SettledKind.REJECTED, outcome)
        return cls(SettledKind.OK if outcome._is_ok else SettledKind.FAILURE, outcome._value)
