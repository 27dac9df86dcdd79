"""Shared pytest fixtures for the frame timeline test suite.

Playback runs on a ManualScheduler so every test controls time explicitly.
"""

from __future__ import annotations

import logging

import pytest

from frame_timeline.config import Settings
from frame_timeline.events import ENTER_FRAME, SETUP, TEARDOWN
from frame_timeline.scheduler import ManualScheduler
from frame_timeline.timeline_engine import Timeline


class EventRecorder:
    """Collects (event, frame, direction) tuples emitted by a timeline."""

    def __init__(self, timeline: Timeline):
        self.events = []
        for name in (SETUP, ENTER_FRAME, TEARDOWN):
            timeline.on(name, self._record(name))

    def _record(self, name):
        def handler(frame, direction):
            self.events.append((name, frame, direction))

        return handler

    def of(self, name):
        return [(frame, direction) for event, frame, direction in self.events if event == name]

    @property
    def entered(self):
        return self.of(ENTER_FRAME)


class CallbackRecorder:
    """Builds frame callbacks that remember the directions they were called with."""

    def __init__(self):
        self.calls = {}

    def at(self, frame):
        def callback(direction):
            self.calls.setdefault(frame, []).append(direction)

        return callback


# ---------------------------------------------------------------------------
# Settings / scheduler
# ---------------------------------------------------------------------------

@pytest.fixture()
def settings() -> Settings:
    return Settings(_env_file=None, default_interval_ms=0)


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


# ---------------------------------------------------------------------------
# Timeline + recorders
# ---------------------------------------------------------------------------

@pytest.fixture()
def timeline(scheduler, settings) -> Timeline:
    return Timeline(10, scheduler=scheduler, settings=settings)


@pytest.fixture()
def recorder(timeline) -> EventRecorder:
    return EventRecorder(timeline)


@pytest.fixture()
def callbacks() -> CallbackRecorder:
    return CallbackRecorder()


@pytest.fixture()
def restore_logging():
    """Put the root logger back the way pytest configured it."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
