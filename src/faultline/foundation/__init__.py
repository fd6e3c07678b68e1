"""Foundation - building blocks shared by the Result types.

Contains: error holders, library exceptions, config.
"""

from __future__ import annotations

__all__ = [
    # Errors
    "ErrorHolder", "ErrorKind", "make_checked", "make_unchecked", "is_error_holder",
    "ErrorCode", "FaultlineError", "AggregateError", "UnwrapError",
    # Config
    "FaultlineSettings", "CallbackErrorMode", "get_settings", "clear_settings_cache",
]


def __getattr__(name: str):
    """Lazy imports to avoid circular dependencies."""
    if name in ("ErrorHolder", "ErrorKind", "make_checked", "make_unchecked", "is_error_holder",
                "ErrorCode", "FaultlineError", "AggregateError", "UnwrapError"):
        from . import errors
        return getattr(errors, name)

    if name in ("FaultlineSettings", "CallbackErrorMode", "get_settings", "clear_settings_cache"):
        from . import config
        return getattr(config, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
