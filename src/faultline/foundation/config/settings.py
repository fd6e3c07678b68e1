"""Environment-based configuration using pydantic-settings.

The callback error mode is a process-wide choice. Every combinator reads it
from the cached settings object, so one deployment never mixes modes.

Example:
    >>> from faultline.foundation.config import get_settings
    >>> get_settings().callback_errors
    'capture'

    # Or with environment variables:
    # FAULTLINE_CALLBACK_ERRORS=propagate
    # FAULTLINE_LOG_CAPTURED=true
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

CallbackErrorMode = Literal["capture", "propagate"]


class FaultlineSettings(BaseSettings):
    """Root settings for faultline.

    Example environment variables:
        FAULTLINE_CALLBACK_ERRORS=propagate
        FAULTLINE_LOG_CAPTURED=true
    """

    model_config = SettingsConfigDict(
        env_prefix="FAULTLINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_default=True,
    )

    callback_errors: CallbackErrorMode = Field(
        default="capture",
        description=(
            "capture: exceptions raised by combinator callbacks become unchecked Errs. "
            "propagate: they escape synchronously, or reject the resulting AsyncResult."
        ),
    )
    log_captured: bool = Field(
        default=False,
        description="Log captured callback exceptions at WARNING with traceback instead of DEBUG",
    )

    @field_validator("callback_errors", mode="before")
    @classmethod
    def _normalize_mode(cls, v: str) -> str:
        return v.strip().lower() if isinstance(v, str) else v

    @computed_field
    @property
    def captures_callback_errors(self) -> bool:
        return self.callback_errors == "capture"


@lru_cache(maxsize=1)
def get_settings() -> FaultlineSettings:
    """Get the global settings instance (cached)."""
    return FaultlineSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    The next get_settings() call reloads configuration from the environment.
    """
    get_settings.cache_clear()
