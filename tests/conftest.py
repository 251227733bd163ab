"""Shared fixtures: a fresh fake engine and fast preroll polling."""

from __future__ import annotations

import pytest

import config
from events import EventManager
from fakes import FakeEngine


@pytest.fixture(autouse=True)
def _fast_config(monkeypatch):
    monkeypatch.setattr(config, "QUIET", False)
    monkeypatch.setattr(config, "PREROLL_POLL_INTERVAL", 0.0)
    monkeypatch.setattr(config, "PREROLL_POLL_LIMIT", 5)
    EventManager.clear()
    yield
    EventManager.clear()


@pytest.fixture
def engine():
    return FakeEngine()
