"""Result and AsyncResult: failures as values, with Promise-shaped chaining.

Provides:
- Result/Ok/Err/ErrUnchecked: synchronous success-or-failure values
- AsyncResult: the same surface over asyncio, with a separate rejection channel
- run(): generator-based do-notation that stops at the first failure
- Settled: per-member records from AsyncResult.all_settled()

Example:
    >>> from faultline.monads import Result, Ok, Err
    >>>
    >>> def divide(a: int, b: int) -> Result[float, ZeroDivisionError]:
    ...     if b == 0:
    ...         return Err(ZeroDivisionError("division by zero"))
    ...     return Ok(a / b)
    >>>
    >>> result = (
    ...     divide(10, 2)
    ...     .then_(lambda x: x * 2)
    ...     .then_(lambda x: Ok(x + 1))
    ... )
    >>> assert result.value_or_raise() == 11.0
"""

from .async_result import AsyncResult, ResultPromisable, is_async_result, wrap_async
from .result import Err, ErrUnchecked, Ok, Result, is_result
from .run import drive, drive_async
from .types import Settled, SettledKind

__all__ = [
    # Core types
    "Result",
    "Ok",
    "Err",
    "ErrUnchecked",
    "is_result",
    # Async
    "AsyncResult",
    "ResultPromisable",
    "wrap_async",
    "is_async_result",
    "Settled",
    "SettledKind",
    # Runners
    "drive",
    "drive_async",
]
