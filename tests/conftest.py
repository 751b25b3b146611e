import os
import sys

import pytest

# Ensure repository root importable early
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from delve.config import SimConfig  # noqa: E402
from delve.services.turn_service import TurnScheduler  # noqa: E402
from tests.factories import make_state, open_level, three_room_level  # noqa: E402


@pytest.fixture(autouse=True)
def _clean_delve_env(monkeypatch):
    """Keep DELVE_* variables from the developer's shell out of every test.

    Variables a test leaks through .env loading are dropped afterwards too.
    """
    for key in list(os.environ):
        if key.startswith("DELVE_"):
            monkeypatch.delenv(key, raising=False)
    yield
    for key in list(os.environ):
        if key.startswith("DELVE_"):
            os.environ.pop(key, None)


@pytest.fixture()
def three_room_state():
    return make_state(three_room_level())


@pytest.fixture()
def open_state():
    return make_state(open_level())


@pytest.fixture()
def frames():
    return []


@pytest.fixture()
def scheduler_for(frames):
    """Build a started ``TurnScheduler`` that records every frame into ``frames``."""

    def _build(state):
        sched = TurnScheduler(state, render_sink=frames.append)
        sched.start()
        return sched

    return _build


@pytest.fixture()
def sim_config():
    return SimConfig()
