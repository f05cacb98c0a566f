"""Shared pytest fixtures for StretchTimer tests."""

import os
import sys

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication  # noqa: E402

from stretchtimer.database.db import configure_engine, init_db  # noqa: E402
from stretchtimer.timer.engine import IntervalConfig, IntervalSession  # noqa: E402

from helpers import RecordingAudio, RecordingDevice  # noqa: E402


@pytest.fixture(scope="session")
def qapp():
    """A single QApplication instance shared across the entire test run."""
    app = QApplication.instance() or QApplication(sys.argv)
    app.setQuitOnLastWindowClosed(False)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture
def audio():
    return RecordingAudio()


@pytest.fixture
def device():
    """One recorder standing in for both the wake lock and orientation lock."""
    return RecordingDevice()


@pytest.fixture
def session(qapp, audio, device):
    """30 s work, 5 s rest, 3 rounds, 10 s warmup."""
    s = IntervalSession(
        IntervalConfig(work_seconds=30, rest_seconds=5, total_rounds=3),
        audio=audio,
        wake_lock=device,
        orientation_lock=device,
    )
    yield s
    s.shutdown()


@pytest.fixture
def bare_session(qapp):
    """Session with no collaborators at all."""
    s = IntervalSession(IntervalConfig(work_seconds=4, rest_seconds=2, total_rounds=2))
    yield s
    s.shutdown()
