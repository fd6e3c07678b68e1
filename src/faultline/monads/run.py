"""Generator runners behind Result.run and AsyncResult.run.

The body passed to run() is a plain generator function. Every ``yield``
suspends it on a Result (or AsyncResult); the runner decides whether to
resume it with the unwrapped value or to stop:

    def get_user():
        first = yield get_first_name()          # Result[str, LookupError]
        last = yield from get_last_name()        # same, typed via Result.__iter__
        return {"first": first, "last": last}

    Result.run(get_user)

If any step is an Err, the composition stops and that Err is the outcome.
The runner throws a private BaseException into the body at the suspended
yield: ``finally`` blocks run, ``except Exception`` blocks do not. A failed
step is not an exception, so it can never be caught by the body.

Cleanup code may still yield steps of its own (``finally: yield release()``).
Those are driven like any other step. An Ok resumes the cleanup; an Err
stops it the same way, and the first failure stays the outcome.

Exceptions raised by the body itself are different: they mean the body is
broken, not that a step failed, so they propagate unchanged.
"""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any, Callable

from .async_result import AsyncResult, _settle
from .result import Result, _to_result

if TYPE_CHECKING:
    from collections.abc import Generator

logger = logging.getLogger("faultline.run")

Body = Callable[[], "Generator[Any, Any, Any]"]
Stopped = Result[Any, Any] | BaseException


class _Halt(BaseException):
    """Thrown into a body to stop it at a failed step."""


def _invalid_yield(yielded: object, *, allow_async: bool) -> TypeError:
    expected = "Result or AsyncResult" if allow_async else "Result"
    return TypeError(f"run() body must yield a {expected}, got {type(yielded).__name__}")


def _halt(gen: Generator[Any, Any, Any], stopped: Stopped | None, outcome: Stopped) -> Stopped:
    """Record why the body stops; the first failure wins over cleanup failures."""
    name = getattr(gen, "__name__", "generator")
    if stopped is None:
        logger.debug(f"run() stopping {name}: {outcome!r}")
        return outcome
    logger.debug(f"run() ignoring failed cleanup step in {name}: {outcome!r}")
    return stopped


def drive(fn: Body) -> Result[Any, Any]:
    """Run a synchronous do-notation body to completion or first Err."""
    gen = fn()
    if not inspect.isgenerator(gen):
        return _to_result(gen)

    stopped: Result[Any, Any] | None = None
    value: Any = None
    error: BaseException | None = None
    while True:
        try:
            yielded = gen.send(value) if error is None else gen.throw(error)
        except StopIteration as stop:
            return _to_result(stop.value) if stopped is None else stopped
        except _Halt:
            return stopped  # type: ignore[return-value]
        value, error = None, None

        if not isinstance(yielded, Result):
            error = _invalid_yield(yielded, allow_async=False)
        elif yielded._is_ok:
            value = yielded._value
        else:
            stopped = _halt(gen, stopped, yielded)  # type: ignore[assignment]
            error = _Halt()


async def drive_async(fn: Body) -> Result[Any, Any]:
    """Run a do-notation body whose steps may be Results or AsyncResults.

    A rejected AsyncResult step stops the body like an Err does. Once the
    body's cleanup has run, the rejection is re-raised so the AsyncResult
    wrapping this coroutine rejects too.
    """
    gen = fn()
    if not inspect.isgenerator(gen):
        return await _settle(gen)

    stopped: Stopped | None = None
    value: Any = None
    error: BaseException | None = None
    while True:
        try:
            yielded = gen.send(value) if error is None else gen.throw(error)
        except StopIteration as stop:
            if stopped is None:
                return await _settle(stop.value)
            break
        except _Halt:
            break
        value, error = None, None

        outcome: Stopped
        if isinstance(yielded, AsyncResult):
            try:
                outcome = await yielded
            except BaseException as exc:
                outcome = exc
        elif isinstance(yielded, Result):
            outcome = yielded
        else:
            error = _invalid_yield(yielded, allow_async=True)
            continue

        if isinstance(outcome, Result) and outcome._is_ok:
            value = outcome._value
            continue
        stopped = _halt(gen, stopped, outcome)
        error = _Halt()

    if isinstance(stopped, BaseException):
        raise stopped
    return stopped  # type: ignore[return-value]
