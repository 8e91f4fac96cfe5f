"""Main entry point for labyrinth: a headless console driver.

Generates a maze, starts the transition clock and feeds move/turn requests
to the navigation facade, printing the pose after every finished transition.

Commands (one per line):
    w / s   move forward / backward
    a / d   turn left / right
    n       new maze
    p / r   pause / resume the transition clock
    q       quit
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import Iterable, List, Optional, Tuple

import numpy as np

from . import config
from .game_state import Camera
from .logging_config import configure_logging
from .maps import test_map
from .maze import Cell, GridMaze
from .navigation import Move, NavigationFacade, Turn
from .transition import TransitionController

log = logging.getLogger("labyrinth")

# Grid step (d_row, d_col) -> yaw that faces it
STEP_YAW = {
    (-1, 0): 0.0,
    (0, -1): 90.0,
    (1, 0): 180.0,
    (0, 1): 270.0,
}

KEY_ACTIONS = {
    "w": Move.FORWARD,
    "s": Move.BACKWARD,
    "a": Turn.LEFT,
    "d": Turn.RIGHT,
}


def plan_route(path: List[Cell], yaw: float) -> List[object]:
    """Turn a cell path into Turn/Move requests starting from ``yaw``."""
    actions: List[object] = []
    for (r0, c0), (r1, c1) in zip(path, path[1:]):
        wanted = STEP_YAW[(r1 - r0, c1 - c0)]
        diff = (wanted - yaw) % 360.0
        if diff == 90.0:
            actions.append(Turn.LEFT)
        elif diff == 270.0:
            actions.append(Turn.RIGHT)
        elif diff == 180.0:
            actions.extend([Turn.LEFT, Turn.LEFT])
        yaw = wanted
        actions.append(Move.FORWARD)
    return actions


def wait_until_idle(nav: NavigationFacade, timeout: float = 10.0) -> bool:
    """Poll until the current transition finishes. Returns False on timeout."""
    deadline = time.monotonic() + timeout
    while nav.is_busy():
        if time.monotonic() > deadline:
            return False
        time.sleep(nav.controller.period_s)
    return True


def format_pose(nav: NavigationFacade) -> str:
    x, y, z, yaw = nav.current_pose()
    row, col = nav.maze.world_to_grid(x, z)
    return f"pose x={x:.2f} y={y:.2f} z={z:.2f} yaw={yaw:.1f} cell=({row}, {col})"


def perform(nav: NavigationFacade, action) -> Tuple[bool, str]:
    if isinstance(action, Move):
        return nav.try_move(action)
    return nav.try_rotate(action)


def autoplay(nav: NavigationFacade, out=sys.stdout) -> bool:
    """Walk the shortest route from start to exit through the facade."""
    path = nav.maze.shortest_path()
    if not path:
        print("No route to the exit.", file=out)
        return False

    for action in plan_route(path, nav.current_pose().yaw):
        ok, msg = perform(nav, action)
        print(msg, file=out)
        if not ok or not wait_until_idle(nav):
            return False
        print(format_pose(nav), file=out)
    return True


def interactive(nav: NavigationFacade, lines: Iterable[str], out=sys.stdout) -> None:
    """Read commands until 'q' or end of input."""
    print(nav.maze.to_text(), file=out)
    print(format_pose(nav), file=out)

    for line in lines:
        cmd = line.strip().lower()
        if not cmd:
            continue
        if cmd == "q":
            break
        if cmd == "n":
            ok, msg = nav.new_game()
            print(msg, file=out)
            if ok:
                print(nav.maze.to_text(), file=out)
        elif cmd == "p":
            nav.pause()
            print("Paused.", file=out)
        elif cmd == "r":
            nav.resume()
            print("Resumed.", file=out)
        elif cmd in KEY_ACTIONS:
            ok, msg = perform(nav, KEY_ACTIONS[cmd])
            print(msg, file=out)
            if ok and not nav.controller.is_suspended():
                wait_until_idle(nav)
        else:
            print(f"Unknown command: {cmd!r}", file=out)
            continue
        print(format_pose(nav), file=out)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Walk a randomly generated maze.")
    parser.add_argument("--width", type=int, default=config.DIMENSION[0])
    parser.add_argument("--height", type=int, default=config.DIMENSION[1])
    parser.add_argument("--seed", type=int, default=None, help="seed for reproducible mazes")
    parser.add_argument("--fixed", action="store_true", help="use the built-in 7x7 test map")
    parser.add_argument("--period", type=float, default=config.CLOCK_PERIOD_S,
                        help="transition clock period in seconds")
    parser.add_argument("--autoplay", action="store_true", help="walk to the exit automatically")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main driver loop."""
    args = build_parser().parse_args(argv)
    configure_logging(getattr(logging, args.log_level))

    if args.fixed:
        maze = test_map.load(logger=log.getChild("maze"))
    else:
        maze = GridMaze((args.width, args.height), rng=np.random.default_rng(args.seed),
                        logger=log.getChild("maze"))

    controller = TransitionController(Camera(), period_s=args.period,
                                      logger=log.getChild("transition"))
    exits = []

    with NavigationFacade(maze, on_exit_reached=lambda: exits.append(True),
                          controller=controller, logger=log.getChild("navigation")) as nav:
        if args.autoplay:
            print(maze.to_text())
            ok = autoplay(nav)
        else:
            interactive(nav, sys.stdin)
            ok = True

    if exits:
        print(config.EXIT_MESSAGE)
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
