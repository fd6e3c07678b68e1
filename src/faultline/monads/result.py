"""Result type for type-safe, Promise-shaped error handling.

A Result is either Ok (holding a value) or Err (holding an ErrorHolder). The
method set follows Promise conventions rather than strict monadic naming:

- then_: map and flat_map in one (plain returns wrap in Ok, Results pass through)
- catch_: recovery (plain returns wrap in Ok, like Promise.catch)
- finally_: cleanup that can only replace the result with a new Err

Failures are tagged. Err() builds a CHECKED failure whose type is tracked by E.
An exception raised inside a combinator callback is captured as an UNCHECKED
failure (see FaultlineSettings.callback_errors for the alternative mode).

Example:
    >>> def parse(s: str) -> Result[int, ValueError]:
    ...     return Ok(int(s)) if s.isdigit() else Err(ValueError(s))
    >>> parse("21").then_(lambda n: n * 2)
    Ok(42)
    >>> parse("x").catch_known(lambda e: 0)
    Ok(0)

Performance notes:
- Uses __slots__ for minimal memory footprint
- Direct attribute access (no method calls) in hot paths
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Generic,
    Never,
    ParamSpec,
    TypeVar,
)

from faultline.foundation.config import get_settings
from faultline.foundation.errors import AggregateError, ErrorHolder, make_checked, make_unchecked

if TYPE_CHECKING:
    from collections.abc import Generator, Iterable

T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type
U = TypeVar("U")  # Mapped success type
F = TypeVar("F")  # Mapped error type
X = TypeVar("X", bound=BaseException)
P = ParamSpec("P")

logger = logging.getLogger("faultline.result")

# Sentinels for faster Ok/Err construction
_OK = True
_ERR = False

MAX_CHAIN = 7
MAX_COMPOSE = 11


class Result(Generic[T, E]):
    """Discriminated union representing success (Ok) or failure (Err).

    The Err payload is always an ErrorHolder, so callers can tell a failure
    they produced on purpose (checked) from one captured out of a raised
    exception (unchecked).

    Examples:
        >>> Ok(42).then_(lambda x: x * 2).value_or_raise()
        84
        >>> Err(KeyError("id")).then_(lambda x: x * 2).err()
        ErrorHolder(checked, KeyError('id'))
        >>> Ok(5).then_(lambda x: Ok(x * 2) if x > 0 else Err(ValueError("neg")))
        Ok(10)

    Notes:
        - Immutable: every combinator returns a new Result (or self, unchanged)
        - Iterating a Result yields it once; this is the hook used by
          ``x = yield from result`` inside Result.run
    """

    __slots__ = ("_value", "_is_ok")
    __match_args__ = ("_value",)

    def __init__(self, value: T | ErrorHolder[E], is_ok: bool) -> None:
        """Private constructor. Use Ok(), Err() or ErrUnchecked() instead."""
        self._value = value
        self._is_ok = is_ok

    # ─── Type Checking ───────────────────────────────────────────────

    def is_ok(self) -> bool:
        """Check if Result is Ok variant."""
        return self._is_ok

    def is_err(self) -> bool:
        """Check if Result is Err variant."""
        return not self._is_ok

    def ok(self) -> T | None:
        """Value if Ok, None if Err."""
        return self._value if self._is_ok else None  # type: ignore[return-value]

    def err(self) -> ErrorHolder[E] | None:
        """ErrorHolder if Err, None if Ok."""
        return self._value if not self._is_ok else None  # type: ignore[return-value]

    # ─── Value Extraction ──────────────────────────────────────────────

    def value_or_fallback(self, on_failure: Callable[[ErrorHolder[E]], U]) -> T | U:
        """Return the Ok value, or compute a fallback from the ErrorHolder."""
        return self._value if self._is_ok else on_failure(self._value)  # type: ignore[return-value,arg-type]

    def value_or_raise(self) -> T:
        """Return the Ok value, or raise the failure payload.

        Checked and unchecked payloads are both re-raised as themselves.
        Payloads that are not exceptions are raised inside an UnwrapError.
        """
        if self._is_ok:
            return self._value  # type: ignore[return-value]
        self._value.raise_()  # type: ignore[union-attr]

    # ─── Chaining ──────────────────────────────────────────────────────

    def then_(
        self,
        on_ok: Callable[[T], U | Result[U, F]],
        on_err: Callable[[ErrorHolder[E]], U | Result[U, F]] | None = None,
    ) -> Result[U, E | F]:
        """Chain Result-returning (or plain) functions, like Promise.then().

        If Ok, the value runs through on_ok. If Err, the ErrorHolder runs
        through on_err when given; otherwise this Result is returned as-is.
        Plain return values are wrapped in Ok.
        """
        if self._is_ok:
            return _call("then_", on_ok, self._value)
        if on_err is None:
            return self  # type: ignore[return-value]
        return _call("then_", on_err, self._value)

    def catch_(self, on_err: Callable[[ErrorHolder[E]], U | Result[U, F]]) -> Result[T | U, F]:
        """Recover from (or transform) a failure, like Promise.catch().

        NB: a plain return value becomes Ok, even if it is an exception
        object. Return Err(...) to stay on the failure track.
        """
        if self._is_ok:
            return self  # type: ignore[return-value]
        return _call("catch_", on_err, self._value)

    def catch_known(self, on_err: Callable[[E], U | Result[U, F]]) -> Result[T | U, F]:
        """Like catch_, but only for checked failures.

        The callback receives the unwrapped error. Unchecked failures pass
        through untouched, which makes it easy to handle every failure the
        type checker knows about and leave the rest to value_or_fallback().
        """
        if self._is_ok or not self._value.is_checked:  # type: ignore[union-attr]
            return self  # type: ignore[return-value]
        return _call("catch_known", on_err, self._value.error)  # type: ignore[union-attr]

    def catch_known_instance_of(
        self,
        cls: type[X],
        on_err: Callable[[X], U | Result[U, F]],
    ) -> Result[T | U, E | F]:
        """Like catch_known, but only when the checked error is an instance of cls.

        Pass a single class. Anything else (Ok, unchecked failures, checked
        failures of other types) is returned unchanged.
        """
        _check_single_class(cls)
        if self._is_ok:
            return self  # type: ignore[return-value]
        holder: ErrorHolder[E] = self._value  # type: ignore[assignment]
        if holder.is_checked and isinstance(holder.error, cls):
            return _call("catch_known_instance_of", on_err, holder.error)
        return self  # type: ignore[return-value]

    def catch_instance_of(
        self,
        cls: type[X],
        on_err: Callable[[X], U | Result[U, F]],
    ) -> Result[T | U, E | F]:
        """Alias of catch_known_instance_of: only checked failures are matched."""
        return self.catch_known_instance_of(cls, on_err)

    def finally_(self, cb: Callable[[], object]) -> Result[T, E | F]:
        """Run cb regardless of outcome, like Promise.finally().

        The original Result is kept unless cb returns an Err (which replaces
        it) or raises (captured per the callback error mode). Awaitables
        returned by cb get no special treatment.
        """

        def step(_: object) -> Result[Any, Any]:
            out = cb()
            return out if isinstance(out, Result) and not out._is_ok else self

        return self.then_(step, step)

    def then_chain(self, *callbacks: Callable[[Any, tuple[Any, ...]], Any]) -> Result[Any, Any]:
        """Pipe the value through 1 to 7 callbacks, keeping a history.

        Each callback is called as ``cb(value, history)``, where history is the
        tuple of every earlier value in the chain (oldest first). Stops at the
        first failure.

        Example:
            >>> Ok(2).then_chain(lambda v, h: v + 1, lambda v, h: (v, h))
            Ok((3, (2,)))
        """
        if not 1 <= len(callbacks) <= MAX_CHAIN:
            raise ValueError(f"then_chain() takes 1 to {MAX_CHAIN} callbacks, got {len(callbacks)}")
        if not self._is_ok:
            return self
        value: Any = self._value
        history: tuple[Any, ...] = ()
        for cb in callbacks:
            step = _call("then_chain", cb, value, history)
            if not step._is_ok:
                return step
            history = (*history, value)
            value = step._value
        return Result(value, _OK)

    # ─── Collection & Composition ─────────────────────────────────────

    @staticmethod
    def all(results: Iterable[Result[Any, E]]) -> Result[list[Any], E]:
        """Ok with every value if all are Ok, else the first Err (list order)."""
        values: list[Any] = []
        for r in results:
            if not r._is_ok:
                return r  # type: ignore[return-value]
            values.append(r._value)
        return Result(values, _OK)

    @staticmethod
    def any(results: Iterable[Result[T, Any]]) -> Result[T, AggregateError]:
        """First Ok in list order, else Err(AggregateError) of every holder."""
        holders: list[ErrorHolder[Any]] = []
        for r in results:
            if r._is_ok:
                return r  # type: ignore[return-value]
            holders.append(r._value)  # type: ignore[arg-type]
        return Result(make_checked(AggregateError(holders)), _ERR)

    @staticmethod
    def compose(*fns: Callable[[Any], Any]) -> Callable[[Any], Result[Any, Any]]:
        """Compose 1 to 11 functions left-to-right with then_.

        ``compose(f1, f2)(x)`` is equivalent to ``f1(x).then_(f2)``, with f1
        called under the callback error mode like any other callback.
        """
        if not 1 <= len(fns) <= MAX_COMPOSE:
            raise ValueError(f"compose() takes 1 to {MAX_COMPOSE} functions, got {len(fns)}")

        def composed(v: Any) -> Result[Any, Any]:
            result = _call("compose", fns[0], v)
            for fn in fns[1:]:
                result = result.then_(fn)
            return result

        return composed

    @staticmethod
    def run(fn: Callable[[], Generator[Result[Any, Any], Any, U | Result[U, Any]]]) -> Result[U, Any]:
        """Run a generator as straight-line code that stops at the first Err.

        Each ``yield`` (or ``yield from``) hands over a Result. Ok values are
        sent back into the generator; an Err ends the composition and becomes
        the return value, after the generator's ``finally`` blocks have run.
        Exceptions raised by the generator's own code are not captured: they
        propagate to the caller of run().

        Example:
            >>> def full_name():
            ...     first = yield Ok("Ada")
            ...     last = yield from Ok("Lovelace")
            ...     return f"{first} {last}"
            >>> Result.run(full_name)
            Ok('Ada Lovelace')
        """
        from .run import drive
        return drive(fn)

    @staticmethod
    def wrap(fn: Callable[P, U]) -> Callable[P, Result[U, Never]]:
        """Turn a function that might raise into one returning a Result."""

        @wraps(fn)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> Result[U, Never]:
            try:
                return Result(fn(*args, **kwargs), _OK)
            except Exception as exc:
                return _captured(exc, "wrap")

        return wrapper

    @staticmethod
    def from_func(fn: Callable[[], U | Result[U, F]]) -> Result[U, F]:
        """Call fn now, capturing a raised exception as an unchecked Err."""
        try:
            return _to_result(fn())
        except Exception as exc:
            return _captured(exc, "from_func")

    # ─── Dunder Methods ──────────────────────────────────────────────────

    __bool__ = lambda self: self._is_ok  # noqa: E731
    __hash__ = lambda self: hash((self._is_ok, self._value))  # noqa: E731

    def __repr__(self) -> str:
        if self._is_ok:
            return f"Ok({self._value!r})"
        holder: ErrorHolder[E] = self._value  # type: ignore[assignment]
        return f"{'Err' if holder.is_checked else 'ErrUnchecked'}({holder.error!r})"

    __str__ = __repr__

    def __eq__(self, other: object) -> bool:
        return self._is_ok == other._is_ok and self._value == other._value if isinstance(other, Result) else NotImplemented

    def __iter__(self) -> Generator[Result[T, E], Any, T]:
        """Yield self once, then return whatever value is sent back.

        Makes ``value = yield from result`` work inside Result.run and
        AsyncResult.run, with the type of ``value`` inferred as T.
        """
        return (yield self)


# ═══════════════════════════════════════════════════════════════════════════════
# Constructors
# ═══════════════════════════════════════════════════════════════════════════════


def Ok(value: T) -> Result[T, Never]:  # noqa: N802
    """Construct Ok variant (success)."""
    return Result(value, _OK)


def Err(error: X) -> Result[Never, X]:  # noqa: N802
    """Construct a checked Err variant.

    The payload should be an exception, since value_or_raise() raises it.
    Other payloads are accepted at runtime and raised inside UnwrapError.
    """
    return Result(make_checked(error), _ERR)


def ErrUnchecked(error: object) -> Result[Never, Never]:  # noqa: N802
    """Construct an unchecked Err variant (an opaque, captured failure)."""
    return Result(make_unchecked(error), _ERR)


def is_result(it: object) -> bool:
    return isinstance(it, Result)


# ═══════════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════════


def _to_result(it: U | Result[U, F]) -> Result[U, F]:
    """Pass Results through, wrap anything else in Ok."""
    return it if isinstance(it, Result) else Result(it, _OK)


def _captured(exc: Exception, where: str, log: logging.Logger = logger) -> Result[Never, Never]:
    """Record a captured callback exception as an unchecked Err."""
    if get_settings().log_captured:
        log.warning(f"Captured {type(exc).__name__} raised in {where} callback", exc_info=exc)
    else:
        log.debug(f"Captured {type(exc).__name__} raised in {where} callback: {exc}")
    return Result(make_unchecked(exc), _ERR)


def _call(where: str, cb: Callable[..., Any], *args: Any) -> Result[Any, Any]:
    """Invoke a combinator callback under the configured error mode."""
    if not get_settings().captures_callback_errors:
        return _to_result(cb(*args))
    try:
        return _to_result(cb(*args))
    except Exception as exc:
        return _captured(exc, where)


def _check_single_class(cls: object) -> None:
    if isinstance(cls, tuple) or not isinstance(cls, type):
        raise TypeError(f"expected a single exception class, got {cls!r}")
