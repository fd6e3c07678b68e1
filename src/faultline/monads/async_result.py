"""AsyncResult: a Result that is still being computed.

An AsyncResult wraps an asyncio awaitable that eventually settles in one of
three ways:

- fulfilled with Ok(value)
- fulfilled with Err(holder), checked or unchecked
- rejected: awaiting the source raised, i.e. the async machinery itself failed

The third channel is kept apart from Err so callers can tell "the computation
failed" from "the thing running the computation broke". Every combinator
accepts an optional ``on_rejection`` handler for it; without one a rejection
rejects the resulting AsyncResult too, it is never swallowed.

Awaiting an AsyncResult gives back the settled Result (or raises the
rejection). Settlement is shared: any number of combinators and awaiters may
hang off the same AsyncResult.

Example:
    >>> async def fetch_user(uid: int) -> Result[dict, LookupError]:
    ...     ...
    >>> name = await (
    ...     AsyncResult(fetch_user(7))
    ...     .then_(lambda user: user["name"])
    ...     .catch_known(lambda e: "anonymous")
    ...     .value_or_reject()
    ... )
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable
from typing import TYPE_CHECKING, Any, Callable, Generic, Never, TypeVar, Union

from faultline.foundation.config import get_settings
from faultline.foundation.errors import AggregateError, ErrorHolder, make_checked, make_unchecked

from .result import MAX_CHAIN, MAX_COMPOSE, Result, X, _captured, _check_single_class, _ERR, _OK
from .types import Settled

if TYPE_CHECKING:
    from collections.abc import Generator, Iterable

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")
F = TypeVar("F")

logger = logging.getLogger("faultline.async_result")


class AsyncResult(Generic[T, E]):
    """Pending Result with a separate rejection channel.

    Construct with any ResultPromisable: a plain value, a Result, another
    AsyncResult, or an awaitable resolving to one of those.

    When an event loop is running, the source starts settling right away
    (like a Promise). Outside a loop, it starts on first await.
    Settlement is bound to the loop it starts on: an AsyncResult built
    outside a loop must not be awaited from a second loop before it has
    settled. Once settled it can be awaited anywhere.
    """

    __slots__ = ("_source", "_future")

    def __init__(self, source: ResultPromisable[T, E]) -> None:
        self._source = source
        self._future: asyncio.Future[Result[T, E]] | None = None
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return
        self._future = asyncio.ensure_future(_settle(source))

    def _settled(self) -> asyncio.Future[Result[T, E]]:
        """Shared future for this AsyncResult's settlement."""
        if self._future is None:
            self._future = asyncio.ensure_future(_settle(self._source))
        return self._future

    def __await__(self) -> Generator[Any, None, Result[T, E]]:
        return self._settled().__await__()

    def __iter__(self) -> Generator[AsyncResult[T, E], Any, T]:
        """See Result.__iter__. Lets ``yield from`` work in AsyncResult.run."""
        return (yield self)

    def __repr__(self) -> str:
        fut = self._future
        if fut is None or not fut.done():
            return "AsyncResult(<pending>)"
        if fut.cancelled():
            return "AsyncResult(<cancelled>)"
        exc = fut.exception()
        return f"AsyncResult(<rejected {exc!r}>)" if exc is not None else f"AsyncResult({fut.result()!r})"

    # ─── Value Extraction ──────────────────────────────────────────────

    async def value_or_fallback(
        self,
        on_failure: Callable[[ErrorHolder[E]], U | Awaitable[U]],
        on_rejection: Callable[[Exception], U | Awaitable[U]] | None = None,
    ) -> T | U:
        """Ok value, else on_failure(holder) for an Err, else on_rejection(exc).

        Without on_rejection, a rejection is re-raised. Awaitables returned
        by either handler are awaited.
        """
        try:
            result = await self
        except Exception as exc:
            if on_rejection is None:
                raise
            return await _resolve(on_rejection(exc))
        if result._is_ok:
            return result._value  # type: ignore[return-value]
        return await _resolve(on_failure(result._value))  # type: ignore[arg-type]

    async def value_or_reject(self) -> T:
        """Ok value, else raise the failure payload or the rejection."""
        return (await self).value_or_raise()

    # ─── Chaining ──────────────────────────────────────────────────────

    def then_(
        self,
        on_ok: Callable[[T], ResultPromisable[U, F]],
        on_err: Callable[[ErrorHolder[E]], ResultPromisable[U, F]] | None = None,
        on_rejection: Callable[[Exception], ResultPromisable[U, F]] | None = None,
    ) -> AsyncResult[U, E | F]:
        """Async analog of Result.then_, plus an optional rejection handler."""

        async def on_result(result: Result[T, E]) -> Result[Any, Any]:
            if result._is_ok:
                return await _call("then_", on_ok, result._value)
            if on_err is None:
                return result
            return await _call("then_", on_err, result._value)

        return self._chain("then_", on_result, on_rejection)

    def catch_(
        self,
        on_err: Callable[[ErrorHolder[E]], ResultPromisable[U, F]],
        on_rejection: Callable[[Exception], ResultPromisable[U, F]] | None = None,
    ) -> AsyncResult[T | U, F]:
        """Async analog of Result.catch_, plus an optional rejection handler."""

        async def on_result(result: Result[T, E]) -> Result[Any, Any]:
            if result._is_ok:
                return result
            return await _call("catch_", on_err, result._value)

        return self._chain("catch_", on_result, on_rejection)

    def catch_known(
        self,
        on_err: Callable[[E], ResultPromisable[U, F]],
        on_rejection: Callable[[Exception], ResultPromisable[U, F]] | None = None,
    ) -> AsyncResult[T | U, F]:
        """Like catch_, but on_err only sees checked failures (unwrapped)."""

        async def on_result(result: Result[T, E]) -> Result[Any, Any]:
            holder = result._value
            if result._is_ok or not holder.is_checked:  # type: ignore[union-attr]
                return result
            return await _call("catch_known", on_err, holder.error)  # type: ignore[union-attr]

        return self._chain("catch_known", on_result, on_rejection)

    def catch_known_instance_of(
        self,
        cls: type[X],
        on_err: Callable[[X], ResultPromisable[U, F]],
        on_rejection: Callable[[Exception], ResultPromisable[U, F]] | None = None,
    ) -> AsyncResult[T | U, E | F]:
        """Like catch_known, but only for checked errors that are instances of cls.

        A rejection goes to on_rejection regardless of cls.
        """
        _check_single_class(cls)

        async def on_result(result: Result[T, E]) -> Result[Any, Any]:
            holder = result._value
            if not result._is_ok and holder.is_checked and isinstance(holder.error, cls):  # type: ignore[union-attr]
                return await _call("catch_known_instance_of", on_err, holder.error)  # type: ignore[union-attr]
            return result

        return self._chain("catch_known_instance_of", on_result, on_rejection)

    def catch_instance_of(
        self,
        cls: type[X],
        on_err: Callable[[X], ResultPromisable[U, F]],
        on_rejection: Callable[[Exception], ResultPromisable[U, F]] | None = None,
    ) -> AsyncResult[T | U, E | F]:
        """Alias of catch_known_instance_of."""
        return self.catch_known_instance_of(cls, on_err, on_rejection)

    def finally_(self, cb: Callable[[], object]) -> AsyncResult[T, E | F]:
        """Run cb once the result settles, whichever channel it settles through.

        The original settlement (including a rejection) is kept unless cb
        returns or resolves to an Err, which replaces it. Whatever cb returns
        is awaited first.
        """

        async def step() -> Result[Any, Any]:
            rejection: Exception | None = None
            result: Result[Any, Any] | None = None
            try:
                result = await self
            except Exception as exc:
                rejection = exc
            cleanup = await _call("finally_", cb)
            if not cleanup._is_ok:
                return cleanup
            if rejection is not None:
                raise rejection
            return result  # type: ignore[return-value]

        return AsyncResult(step())

    def then_chain(
        self,
        *callbacks: Callable[[Any, tuple[Any, ...]], Any],
        on_rejection: Callable[[Exception], ResultPromisable[Any, Any]] | None = None,
    ) -> AsyncResult[Any, Any]:
        """Async analog of Result.then_chain. Callbacks may return awaitables."""
        if not 1 <= len(callbacks) <= MAX_CHAIN:
            raise ValueError(f"then_chain() takes 1 to {MAX_CHAIN} callbacks, got {len(callbacks)}")

        async def on_result(result: Result[T, E]) -> Result[Any, Any]:
            if not result._is_ok:
                return result
            value: Any = result._value
            history: tuple[Any, ...] = ()
            for cb in callbacks:
                step = await _call("then_chain", cb, value, history)
                if not step._is_ok:
                    return step
                history = (*history, value)
                value = step._value
            return Result(value, _OK)

        return self._chain("then_chain", on_result, on_rejection)

    def _chain(
        self,
        where: str,
        on_result: Callable[[Result[T, E]], Awaitable[Result[Any, Any]]],
        on_rejection: Callable[[Exception], ResultPromisable[Any, Any]] | None,
    ) -> AsyncResult[Any, Any]:
        """Attach a continuation; route rejections to on_rejection or onwards."""

        async def step() -> Result[Any, Any]:
            try:
                result = await self
            except Exception as exc:
                if on_rejection is None:
                    raise
                return await _call(where, on_rejection, exc)
            return await on_result(result)

        return AsyncResult(step())

    # ─── Collection & Composition ─────────────────────────────────────

    @staticmethod
    def all(items: Iterable[ResultPromisable[Any, E]]) -> AsyncResult[list[Any], E]:
        """Wait for every member; fail fast on the first rejection.

        With no rejection, the first Err in list order wins; otherwise the
        values come back in input order.
        """
        members = _members(items)

        async def step() -> Result[list[Any], E]:
            try:
                results = await asyncio.gather(*(m._settled() for m in members))
            except Exception as exc:
                logger.debug(f"all(): member rejected with {type(exc).__name__}")
                raise
            return Result.all(results)

        return AsyncResult(step())

    @staticmethod
    def any(items: Iterable[ResultPromisable[T, Any]]) -> AsyncResult[T, AggregateError]:
        """First member to settle as Ok, in settlement order.

        If none does, an Err(AggregateError) bundling every failure in
        settlement order; a rejection contributes an unchecked holder.
        """
        members = _members(items)

        async def step() -> Result[T, AggregateError]:
            holders: list[ErrorHolder[Any]] = []
            for settled in asyncio.as_completed([m._settled() for m in members]):
                try:
                    result = await settled
                except Exception as exc:
                    holders.append(make_unchecked(exc))
                    continue
                if result._is_ok:
                    return result
                holders.append(result._value)  # type: ignore[arg-type]
            return Result(make_checked(AggregateError(holders)), _ERR)

        return AsyncResult(step())

    @staticmethod
    def all_settled(items: Iterable[ResultPromisable[Any, Any]]) -> AsyncResult[list[Settled[Any, Any]], Never]:
        """Wait for every member; one Settled record each, in input order.

        Never fails: rejections are recorded, not propagated.
        """
        members = _members(items)

        async def step() -> Result[list[Settled[Any, Any]], Never]:
            outcomes = await asyncio.gather(*(m._settled() for m in members), return_exceptions=True)
            return Result([Settled.from_outcome(o) for o in outcomes], _OK)

        return AsyncResult(step())

    @staticmethod
    def race(items: Iterable[ResultPromisable[Any, Any]]) -> AsyncResult[Any, Any]:
        """Whichever member settles first, through whichever channel.

        Losing members are left running.

        Raises:
            ValueError: If no members are given
        """
        members = _members(items)
        if not members:
            raise ValueError("race() requires at least one member")

        async def step() -> Result[Any, Any]:
            futures = [m._settled() for m in members]
            done, _ = await asyncio.wait(futures, return_when=asyncio.FIRST_COMPLETED)
            winner = next(f for f in futures if f in done)
            return winner.result()

        return AsyncResult(step())

    @staticmethod
    def compose(*fns: Callable[[Any], ResultPromisable[Any, Any]]) -> Callable[[Any], AsyncResult[Any, Any]]:
        """Compose 1 to 11 functions left-to-right with AsyncResult.then_.

        ``compose(f1, f2)(x)`` is equivalent to ``wrap_async(f1(x)).then_(f2)``:
        x reaches f1 as-is, even when it is a Result or an awaitable.
        """
        if not 1 <= len(fns) <= MAX_COMPOSE:
            raise ValueError(f"compose() takes 1 to {MAX_COMPOSE} functions, got {len(fns)}")

        def composed(v: Any) -> AsyncResult[Any, Any]:
            result: AsyncResult[Any, Any] = AsyncResult(_call("compose", fns[0], v))
            for fn in fns[1:]:
                result = result.then_(fn)
            return result

        return composed

    @staticmethod
    def run(fn: Callable[[], Generator[Any, Any, Any]]) -> AsyncResult[Any, Any]:
        """Do-notation over Results and AsyncResults (see Result.run).

        The body is a plain (synchronous) generator function. Yielded
        AsyncResults are awaited; an Err or a rejection stops the body after
        its ``finally`` blocks run. A rejection rejects the returned
        AsyncResult, as does an exception raised by the body itself.

        Example:
            >>> def get_user():
            ...     first = yield AsyncResult(fetch_first_name())
            ...     last = yield from lookup_last_name(first)   # a Result
            ...     return {"first": first, "last": last}
            >>> user = await AsyncResult.run(get_user).value_or_reject()
        """
        from .run import drive_async
        return AsyncResult(drive_async(fn))

    @staticmethod
    def from_func(fn: Callable[[], ResultPromisable[T, E]]) -> AsyncResult[T, E]:
        """Call fn (typically an ``async def``) now and wrap what it returns.

        A synchronous raise inside fn is captured as an unchecked Err.
        """
        try:
            source = fn()
        except Exception as exc:
            return AsyncResult(_captured(exc, "from_func", logger))
        return AsyncResult(source)


# ═══════════════════════════════════════════════════════════════════════════════
# Type Aliases
# ═══════════════════════════════════════════════════════════════════════════════

# Anything an AsyncResult can be built from, or a callback may return.
ResultPromisable = Union[
    U,
    Result[U, F],
    AsyncResult[U, F],
    Awaitable[Union[U, Result[U, F], AsyncResult[U, F]]],
]


# ═══════════════════════════════════════════════════════════════════════════════
# Constructors
# ═══════════════════════════════════════════════════════════════════════════════


def wrap_async(source: ResultPromisable[T, E]) -> AsyncResult[T, E]:
    """Wrap a value, Result or awaitable as an AsyncResult."""
    return source if isinstance(source, AsyncResult) else AsyncResult(source)


def is_async_result(it: object) -> bool:
    return isinstance(it, AsyncResult)


# ═══════════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════════


async def _settle(it: ResultPromisable[T, E]) -> Result[T, E]:
    """Resolve anything promisable to a Result. Awaitables are awaited once."""
    if isinstance(it, AsyncResult):
        return await it
    if isinstance(it, Result):
        return it
    if inspect.isawaitable(it):
        it = await it
        if isinstance(it, AsyncResult):
            return await it
        if isinstance(it, Result):
            return it
    return Result(it, _OK)


async def _resolve(it: U | Awaitable[U]) -> U:
    return await it if inspect.isawaitable(it) else it  # type: ignore[return-value]


async def _call(where: str, cb: Callable[..., Any], *args: Any) -> Result[Any, Any]:
    """Invoke a callback and settle its return under the configured error mode.

    In capture mode, a raise inside cb or a rejection of what it returned
    becomes an unchecked Err. In propagate mode, either one rejects.
    """
    if not get_settings().captures_callback_errors:
        return await _settle(cb(*args))
    try:
        return await _settle(cb(*args))
    except Exception as exc:
        return _captured(exc, where, logger)


def _members(items: Iterable[ResultPromisable[Any, Any]]) -> list[AsyncResult[Any, Any]]:
    return [it if isinstance(it, AsyncResult) else AsyncResult(it) for it in items]
