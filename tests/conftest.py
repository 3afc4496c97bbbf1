"""Shared pytest fixtures for BoostTimer tests."""

import os
import sys
import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication

from boosttimer.database.db import configure_engine, init_db
from boosttimer.surface.projector import SurfaceProjector
from boosttimer.timer.engine import TimerEngine


@pytest.fixture(scope="session")
def qapp():
    """A single QApplication instance shared across the entire test run."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture
def engine(qapp):
    """Fresh TimerEngine; tests drive ticks by calling ``_on_tick``."""
    return TimerEngine(parent=None)


@pytest.fixture
def projector(engine):
    """A surface projector bound to ``engine``, not yet attached."""
    return SurfaceProjector(engine, name="test")
