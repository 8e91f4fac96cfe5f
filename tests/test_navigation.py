# tests/test_navigation.py
"""
NavigationFacade tests over the fixed 7x7 test map.

    #####E#      start (6, 3) = world (0, 3), facing -Z
    #     #      exit  (0, 5) = world (2, -3)
    # #####
    #   # #
    ### # #
    #     #
    ###S###
"""

from __future__ import annotations

import threading
import time

import numpy as np
import pytest

from conftest import drive
from labyrinth.maze import GridMaze
from labyrinth.maps import test_map
from labyrinth.navigation import Move, NavigationFacade, Turn
from labyrinth.transition import TransitionKind

ROUTE = [
    Move.FORWARD, Move.FORWARD, Move.FORWARD,
    Turn.LEFT, Move.FORWARD, Move.FORWARD,
    Turn.RIGHT, Move.FORWARD, Move.FORWARD,
    Turn.RIGHT, Move.FORWARD, Move.FORWARD, Move.FORWARD, Move.FORWARD,
    Turn.LEFT, Move.FORWARD,
]


def act(nav: NavigationFacade, action):
    if isinstance(action, Move):
        return nav.try_move(action)
    return nav.try_rotate(action)


def test_camera_starts_on_maze_start(nav) -> None:
    assert nav.current_pose() == (0.0, 0.0, 3.0, 0.0)
    assert not nav.is_busy()


def test_move_forward_into_open_cell(nav) -> None:
    ok, msg = nav.try_move(Move.FORWARD)

    assert ok, msg
    assert nav.is_busy()
    assert nav.controller.kind == TransitionKind.TRANSLATE_FORWARD

    drive(nav.controller)
    assert not nav.is_busy()
    assert nav.current_pose() == (0.0, 0.0, 2.0, 0.0)


def test_move_backward_off_the_grid_is_rejected(nav) -> None:
    ok, msg = nav.try_move(Move.BACKWARD)

    assert not ok
    assert "wall" in msg.lower()
    assert not nav.is_busy()
    assert nav.current_pose() == (0.0, 0.0, 3.0, 0.0)


def test_move_into_wall_is_rejected(nav) -> None:
    for _ in range(3):
        assert nav.try_move(Move.FORWARD)[0]
        drive(nav.controller)
    pose = nav.current_pose()
    assert pose == (0.0, 0.0, 0.0, 0.0)

    ok, _ = nav.try_move(Move.FORWARD)  # cell (2, 3) is a wall

    assert not ok
    assert not nav.is_busy()
    assert nav.current_pose() == pose


def test_requests_while_busy_are_dropped(nav) -> None:
    assert nav.try_rotate(Turn.LEFT)[0]
    target = nav.controller.target

    ok, msg = nav.try_rotate(Turn.RIGHT)
    assert not ok
    assert "progress" in msg
    assert not nav.try_move(Move.FORWARD)[0]
    assert nav.controller.target == target
    assert nav.controller.kind == TransitionKind.ROTATE_LEFT

    drive(nav.controller)
    assert nav.current_pose().yaw == 90.0


def test_turn_right_then_left_returns_to_start_heading(nav) -> None:
    assert nav.try_rotate(Turn.RIGHT)[0]
    drive(nav.controller)
    assert nav.current_pose().yaw == 270.0

    assert nav.try_rotate(Turn.LEFT)[0]
    drive(nav.controller)
    assert nav.current_pose().yaw == 0.0


def test_unknown_directions_are_rejected(nav) -> None:
    assert nav.try_move("sideways")[0] is False  # type: ignore[arg-type]
    assert nav.try_rotate(Move.FORWARD)[0] is False  # type: ignore[arg-type]
    assert not nav.is_busy()


def test_walk_to_exit_notifies_once(fixed_maze) -> None:
    exits = []
    nav = NavigationFacade(fixed_maze, on_exit_reached=lambda: exits.append(nav.current_pose()),
                           start_clock=False)

    for action in ROUTE[:-1]:
        ok, msg = act(nav, action)
        assert ok, f"{action}: {msg}"
        drive(nav.controller)
    assert exits == []
    assert nav.current_pose() == (2.0, 0.0, -2.0, 0.0)

    ok, _ = nav.try_move(Move.FORWARD)

    assert ok
    assert nav.is_busy()
    # Notified before the camera started moving
    assert exits == [(2.0, 0.0, -2.0, 0.0)]

    drive(nav.controller)
    assert nav.current_pose() == (2.0, 0.0, -3.0, 0.0)
    assert len(exits) == 1
    nav.shutdown()


def test_exit_found(nav) -> None:
    assert nav.exit_found((2.0, 0.0, -3.0))
    assert not nav.exit_found((2.0, 1.0, -3.0))
    assert not nav.exit_found((0.0, 0.0, 3.0))


def test_new_game_refused_while_busy(nav) -> None:
    assert nav.try_rotate(Turn.LEFT)[0]

    ok, _ = nav.new_game()
    assert not ok
    assert nav.maze.width == 7


def test_new_game_resets_to_new_start() -> None:
    maze = GridMaze((7, 7), rng=np.random.default_rng(5))
    nav = NavigationFacade(maze, start_clock=False)
    assert nav.try_move(Move.FORWARD)[0]
    drive(nav.controller)

    ok, msg = nav.new_game((9, 11))

    assert ok, msg
    assert (nav.maze.width, nav.maze.height) == (9, 11)
    start_x, start_z, angle = nav.maze.start_point()
    assert nav.current_pose() == (start_x, 0.0, start_z, angle)
    nav.shutdown()


def test_facade_generates_an_ungenerated_maze() -> None:
    maze = GridMaze((5, 5), rng=np.random.default_rng(0))
    nav = NavigationFacade(maze, start_clock=False)

    assert maze.generated
    x, z, _ = maze.start_point()
    assert nav.current_pose().position == (x, 0.0, z)


def test_view_projection_follows_pose(nav) -> None:
    matrices = nav.view_projection(aspect=1.5)

    assert matrices.view.shape == (4, 4)
    # A point one unit ahead of the camera sits on the view axis
    ahead = matrices.view @ np.array([0.0, 0.0, 2.0, 1.0], dtype=np.float32)
    assert np.allclose(ahead, [0.0, 0.0, -1.0, 1.0])

    matrices, viewport = nav.minimap_projection(1000, 600)
    assert viewport == (200, 200)


def test_with_real_clock_and_context_manager() -> None:
    maze = test_map.load()
    nav_ref = None
    with NavigationFacade(maze) as nav:
        nav_ref = nav
        assert nav.controller.is_running
        assert nav.try_move(Move.FORWARD)[0]

        deadline = time.monotonic() + 5.0
        while nav.is_busy() and time.monotonic() < deadline:
            time.sleep(0.005)
        assert nav.current_pose() == (0.0, 0.0, 2.0, 0.0)

    assert not nav_ref.controller.is_running


def test_pause_and_resume_passthrough(nav) -> None:
    nav.pause()
    assert nav.controller.is_suspended()
    nav.resume()
    assert not nav.controller.is_suspended()


@pytest.mark.parametrize("action", [Turn.LEFT, Turn.RIGHT])
def test_rotation_uses_configured_step(nav, action) -> None:
    nav.rotation_step = 1.0
    assert nav.try_rotate(action)[0]
    assert abs(nav.controller.step) == 1.0
    assert drive(nav.controller) == 90


def _race(nav: NavigationFacade, actions):
    """Fire every action from its own thread at once; returns the results."""
    barrier = threading.Barrier(len(actions))
    results = [None] * len(actions)

    def worker(i, action):
        barrier.wait()
        results[i] = act(nav, action)

    threads = [threading.Thread(target=worker, args=(i, a)) for i, a in enumerate(actions)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5.0)
    return results


def test_concurrent_requests_start_one_transition(nav) -> None:
    for _ in range(20):
        results = _race(nav, [Move.FORWARD, Turn.LEFT, Turn.RIGHT, Move.FORWARD] * 2)

        assert sum(ok for ok, _ in results) == 1
        drive(nav.controller)
        nav.reset_to_start()


def test_concurrent_requests_at_exit_notify_only_for_started_move(fixed_maze) -> None:
    exits = []
    nav = NavigationFacade(fixed_maze, on_exit_reached=lambda: exits.append(True),
                           start_clock=False)
    actions = [Move.FORWARD, Turn.LEFT, Turn.RIGHT, Move.FORWARD, Turn.LEFT, Move.FORWARD]

    for _ in range(20):
        exits.clear()
        nav.camera.set_pose(2.0, 0.0, -2.0, 0.0)

        results = _race(nav, actions)

        started = [action for action, (ok, _) in zip(actions, results) if ok]
        assert len(started) == 1
        assert len(exits) == (1 if started[0] is Move.FORWARD else 0)
        drive(nav.controller)
    nav.shutdown()
