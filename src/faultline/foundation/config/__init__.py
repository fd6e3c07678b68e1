"""Configuration management using pydantic-settings."""

from .settings import CallbackErrorMode, FaultlineSettings, clear_settings_cache, get_settings

__all__ = [
    "CallbackErrorMode",
    "FaultlineSettings",
    "clear_settings_cache",
    "get_settings",
]
