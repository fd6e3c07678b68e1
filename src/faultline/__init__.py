"""Faultline - type-aware failures as values, sync and async.

Replaces uncaught exceptions and unhandled awaitable failures with values the
type checker can track and the caller has to handle. The API borrows the
Promise vocabulary (then_/catch_/finally_) and tags every failure as checked
(created on purpose with Err) or unchecked (captured from a raised exception).

Quick Start:
    >>> from faultline import Ok, Err, Result
    >>>
    >>> def parse_port(raw: str) -> Result[int, ValueError]:
    ...     if not raw.isdigit():
    ...         return Err(ValueError(f"not a port: {raw!r}"))
    ...     return Ok(int(raw))
    >>>
    >>> parse_port("8080").then_(lambda p: p + 1)
    Ok(8081)
    >>> parse_port("http").catch_known(lambda e: 80)
    Ok(80)

Do-notation:
    >>> def endpoint():
    ...     host = yield Ok("localhost")
    ...     port = yield parse_port("8080")
    ...     return f"{host}:{port}"
    >>> Result.run(endpoint)
    Ok('localhost:8080')

Async (three channels: Ok, Err, rejection):
    >>> from faultline import AsyncResult
    >>>
    >>> async def main():
    ...     fastest = AsyncResult.race([AsyncResult(fetch_a()), AsyncResult(fetch_b())])
    ...     return await fastest.value_or_fallback(
    ...         lambda holder: None,
    ...         lambda exc: None,
    ...     )

Configuration (environment, FAULTLINE_ prefix):
    FAULTLINE_CALLBACK_ERRORS=capture|propagate
    FAULTLINE_LOG_CAPTURED=true
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = [
    # Results
    "Result", "Ok", "Err", "ErrUnchecked", "is_result",
    "AsyncResult", "ResultPromisable", "wrap_async", "is_async_result",
    "Settled", "SettledKind",
    # Failure payloads
    "ErrorHolder", "ErrorKind", "make_checked", "make_unchecked", "is_error_holder",
    "ErrorCode", "FaultlineError", "AggregateError", "UnwrapError",
    # Config
    "FaultlineSettings", "get_settings", "clear_settings_cache",
]


def __getattr__(name: str):
    """Lazy imports to avoid circular dependencies."""
    if name in ("Result", "Ok", "Err", "ErrUnchecked", "is_result",
                "AsyncResult", "ResultPromisable", "wrap_async", "is_async_result",
                "Settled", "SettledKind"):
        from . import monads
        return getattr(monads, name)

    if name in ("ErrorHolder", "ErrorKind", "make_checked", "make_unchecked", "is_error_holder",
                "ErrorCode", "FaultlineError", "AggregateError", "UnwrapError"):
        from .foundation import errors
        return getattr(errors, name)

    if name in ("FaultlineSettings", "get_settings", "clear_settings_cache"):
        from .foundation import config
        return getattr(config, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
