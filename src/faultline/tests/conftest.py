"""Shared fixtures for faultline tests."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from faultline.foundation.config import clear_settings_cache


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run every test against default settings, unaffected by the environment."""
    monkeypatch.delenv("FAULTLINE_CALLBACK_ERRORS", raising=False)
    monkeypatch.delenv("FAULTLINE_LOG_CAPTURED", raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def propagate_mode(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Switch callback error handling to propagate mode for one test."""
    monkeypatch.setenv("FAULTLINE_CALLBACK_ERRORS", "propagate")
    clear_settings_cache()
    yield
    clear_settings_cache()
