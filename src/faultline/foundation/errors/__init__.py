"""Failure payload types and faultline's own exceptions.

- ErrorHolder/ErrorKind: checked vs. unchecked failure tagging
- ErrorCode/FaultlineError: library exceptions
- AggregateError: bundle of holders when every branch fails
- UnwrapError: carrier for non-exception payloads being raised
"""

from .errors import AggregateError, ErrorCode, FaultlineError, UnwrapError
from .types import ErrorHolder, ErrorKind, is_error_holder, make_checked, make_unchecked

__all__ = [
    # Holders
    "ErrorHolder", "ErrorKind", "make_checked", "make_unchecked", "is_error_holder",
    # Exceptions
    "ErrorCode", "FaultlineError", "AggregateError", "UnwrapError",
]
