"""Pytest configuration and fixtures.

Provides environment isolation and a fresh leak detector per test. All
fixtures here are autouse unless noted.
"""

from __future__ import annotations

import os

import pytest

from explicit_exceptions import leaks
from explicit_exceptions.config import ENV_PREFIX, Settings
from explicit_exceptions.leaks import LeakDetector
from tests.helpers import RecordingSink, collect

# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def block_dotenv(monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests."""
    monkeypatch.setattr(
        "explicit_exceptions.config.load_dotenv", lambda *_args, **_kwargs: False
    )


@pytest.fixture(autouse=True)
def isolate_env(monkeypatch):
    """Clear EXPLICIT_EXCEPTIONS_* variables so tests see schema defaults."""
    for key in list(os.environ.keys()):
        if key.startswith(ENV_PREFIX):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Leak Detection
# =============================================================================


@pytest.fixture
def leak_sink() -> RecordingSink:
    """Return the sink installed on the per-test detector."""
    return RecordingSink()


@pytest.fixture(autouse=True)
def leak_detector(monkeypatch, leak_sink) -> LeakDetector:
    """Install a fresh process-wide detector with a recording sink.

    Settle garbage first so results leaked by earlier tests report to their
    own detector, not this one.
    """
    collect()
    detector = LeakDetector(settings=Settings(), sink=leak_sink)
    monkeypatch.setattr(leaks, "_detector", detector)
    return detector
