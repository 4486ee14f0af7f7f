"""Shared fixtures for sctopology tests."""

from __future__ import annotations

import logging
import os

import pytest
import structlog


def _drop_event(_logger: object, _method: str, _event_dict: dict) -> dict:
    raise structlog.DropEvent


@pytest.fixture(autouse=True)
def _quiet_structlog():
    """Discard log output; ``structlog.testing.capture_logs`` still sees events."""
    structlog.configure(
        processors=[_drop_event],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove SCTOPOLOGY_* variables inherited from the calling shell."""
    for key in list(os.environ):
        if key.startswith("SCTOPOLOGY_"):
            monkeypatch.delenv(key, raising=False)
