"""Error holders distinguishing checked from unchecked failures.

Every failed Result carries its payload inside an ErrorHolder. The holder's
kind records where the failure came from:

- CHECKED: built explicitly via Err(); the payload type is tracked by the
  Result's error type parameter.
- UNCHECKED: captured automatically from a raised exception or a rejected
  awaitable; the payload is opaque.

Example:
    >>> holder = make_checked(ValueError("bad input"))
    >>> holder.is_checked
    True
    >>> match holder:
    ...     case ErrorHolder(ErrorKind.CHECKED, ValueError() as e):
    ...         print(e)
    bad input
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, NoReturn, Never, TypeVar

from .errors import UnwrapError

E = TypeVar("E")


class ErrorKind(StrEnum):
    """Origin of a failure payload."""
    CHECKED = "checked"
    UNCHECKED = "unchecked"


@dataclass(frozen=True, slots=True)
class ErrorHolder(Generic[E]):
    """Immutable wrapper tagging a failure payload as checked or unchecked.

    Attributes:
        kind: CHECKED for explicit Err() payloads, UNCHECKED for captured ones
        error: The payload. Typed as E when checked, arbitrary when unchecked.
    """

    kind: ErrorKind
    error: E

    @property
    def is_checked(self) -> bool:
        return self.kind is ErrorKind.CHECKED

    @property
    def is_unchecked(self) -> bool:
        return self.kind is ErrorKind.UNCHECKED

    def raise_(self) -> NoReturn:
        """Raise the payload through Python's exception mechanism.

        Exceptions are raised as-is. Anything else cannot be raised directly,
        so it is carried by an UnwrapError.
        """
        if isinstance(self.error, BaseException):
            raise self.error
        raise UnwrapError(self.error)

    def __repr__(self) -> str:
        return f"ErrorHolder({self.kind.value}, {self.error!r})"


# ═══════════════════════════════════════════════════════════════════════════════
# Constructors
# ═══════════════════════════════════════════════════════════════════════════════


def make_checked(error: E) -> ErrorHolder[E]:
    """Wrap an explicitly produced failure."""
    return ErrorHolder(ErrorKind.CHECKED, error)


def make_unchecked(error: object) -> ErrorHolder[Never]:
    """Wrap a captured exception or rejection payload."""
    return ErrorHolder(ErrorKind.UNCHECKED, error)  # type: ignore[arg-type]


def is_error_holder(it: object) -> bool:
    return isinstance(it, ErrorHolder)
