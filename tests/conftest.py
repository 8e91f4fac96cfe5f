# tests/conftest.py

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure the project root is on sys.path for `import labyrinth` without installing.
PROJECT_ROOT = Path(__file__).resolve().parents[1]

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from labyrinth.game_state import Camera  # noqa: E402
from labyrinth.maps import test_map  # noqa: E402
from labyrinth.navigation import NavigationFacade  # noqa: E402
from labyrinth.transition import TransitionController  # noqa: E402


def drive(controller: TransitionController, max_ticks: int = 10_000) -> int:
    """Tick until the active transition ends; returns the number of ticks."""
    ticks = 0
    while controller.is_active():
        assert ticks < max_ticks, "transition never terminated"
        controller.tick()
        ticks += 1
    return ticks


@pytest.fixture
def fixed_maze():
    return test_map.load()


@pytest.fixture
def nav(fixed_maze):
    """Facade over the fixed test map with the clock stopped (tick by hand)."""
    facade = NavigationFacade(fixed_maze, start_clock=False)
    yield facade
    facade.shutdown()


@pytest.fixture
def camera() -> Camera:
    return Camera(0.0, 0.0, 3.0, 0.0)
