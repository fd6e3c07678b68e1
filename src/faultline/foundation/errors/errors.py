"""Exceptions raised by faultline itself.

Failures normally travel as values inside Result. These exceptions cover the
few places where a value has to become a real exception again, plus the
aggregate payload produced when every branch of an ``any`` fails.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .types import ErrorHolder


class ErrorCode(StrEnum):
    """Machine-readable classification of faultline's own errors."""
    UNWRAP_FAILED = "UNWRAP_FAILED"
    ALL_FAILED = "ALL_FAILED"


class FaultlineError(Exception):
    """Base class for faultline exceptions."""

    code: ErrorCode = ErrorCode.UNWRAP_FAILED


class UnwrapError(FaultlineError):
    """Raised when a failure payload that is not an exception gets unwrapped.

    Python can only raise BaseException instances, so value_or_raise() and
    value_or_reject() hand arbitrary payloads over inside this exception.
    """

    __slots__ = ("error",)
    code = ErrorCode.UNWRAP_FAILED

    def __init__(self, error: object) -> None:
        self.error = error
        super().__init__(f"Unwrapped failure payload: {error!r}")


class AggregateError(FaultlineError):
    """Every branch failed. Holds each branch's ErrorHolder, tags intact."""

    __slots__ = ("errors",)
    code = ErrorCode.ALL_FAILED

    def __init__(self, errors: Iterable[ErrorHolder[object]], message: str = "All results failed") -> None:
        self.errors: tuple[ErrorHolder[object], ...] = tuple(errors)
        super().__init__(f"{message} ({len(self.errors)} errors)")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AggregateError):
            return NotImplemented
        return self.errors == other.errors

    def __hash__(self) -> int:
        return hash(self.errors)
