"""Navigation facade: turns move/turn requests into maze-checked transitions."""

from __future__ import annotations

import enum
import logging
import threading
from typing import Callable, Optional, Sequence, Tuple

import numpy as np

from . import config
from .game_state import Camera, Pose
from .maze import GridMaze
from .projection import ViewProjection, camera_view_projection, minimap_projection
from .transition import TransitionController, TransitionKind


class Move(enum.Enum):
    FORWARD = "forward"
    BACKWARD = "backward"


class Turn(enum.Enum):
    LEFT = "left"
    RIGHT = "right"


_MOVE_KINDS = {
    Move.FORWARD: (TransitionKind.TRANSLATE_FORWARD, 1.0),
    Move.BACKWARD: (TransitionKind.TRANSLATE_BACKWARD, -1.0),
}

_TURN_KINDS = {
    Turn.LEFT: TransitionKind.ROTATE_LEFT,
    Turn.RIGHT: TransitionKind.ROTATE_RIGHT,
}


class NavigationFacade:
    """Walks a camera through a GridMaze one cell or one quarter turn at a time.

    Requests never block: a request made while a transition is running, or a
    move into a wall, is refused and reported as ``(False, reason)``.

    Args:
        maze: the maze to walk; generated here if it has not been yet.
        on_exit_reached: called once whenever a move heads onto the exit cell.
        controller: optional pre-built controller (its camera is adopted).
        start_clock: start the controller's clock thread right away.
        logger: optional logger; defaults to this module's logger.
    """

    def __init__(
        self,
        maze: GridMaze,
        on_exit_reached: Optional[Callable[[], None]] = None,
        controller: Optional[TransitionController] = None,
        rotation_step: float = config.ROTATION_STEP,
        translation_step: float = config.TRANSLATION_STEP,
        start_clock: bool = True,
        logger: Optional[logging.Logger] = None,
    ):
        self._log = logger if logger is not None else logging.getLogger(__name__)
        self.maze = maze
        if not self.maze.generated:
            self.maze.generate()

        if controller is None:
            controller = TransitionController(Camera(), logger=self._log)
        self.controller = controller
        self.camera = controller.camera

        self.on_exit_reached = on_exit_reached
        # Serializes requests so check, notify and start act as one step
        self._request_lock = threading.RLock()
        self.rotation_step = float(rotation_step)
        self.translation_step = float(translation_step)

        self.reset_to_start()
        if start_clock:
            self.controller.start_clock()

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def try_rotate(self, direction: Turn) -> Tuple[bool, str]:
        """Start a quarter turn left or right."""
        if direction not in _TURN_KINDS:
            return False, f"Unknown turn direction: {direction!r}"

        with self._request_lock:
            if self.controller.is_active():
                return False, "Transition in progress."
            if not self.controller.start_transition(_TURN_KINDS[direction], self.rotation_step):
                return False, "Transition in progress."
        return True, f"Turning {direction.value}."

    def try_move(self, direction: Move) -> Tuple[bool, str]:
        """Start a one-cell move forward or backward if the target cell is open."""
        if direction not in _MOVE_KINDS:
            return False, f"Unknown move direction: {direction!r}"
        kind, sign = _MOVE_KINDS[direction]

        with self._request_lock:
            if self.controller.is_active():
                return False, "Transition in progress."

            target = self.camera.position_along_look(sign * config.MOVE_DISTANCE)
            if not self.maze.is_walkable(target[0], target[2]):
                self._log.info("Not walkable: (%s, %s)", target[0], target[2])
                return False, "Blocked by a wall."

            if self.exit_found(target):
                self._log.info(config.EXIT_MESSAGE)
                if self.on_exit_reached is not None:
                    self.on_exit_reached()

            if not self.controller.start_transition(kind, self.translation_step):
                return False, "Transition in progress."
        return True, f"Moving {direction.value}."

    def exit_found(self, position: Sequence[float]) -> bool:
        """Whether ``position`` (x, y, z) is exactly the maze exit."""
        end_x, end_z, _ = self.maze.end_point()
        return position[0] == end_x and position[1] == 0 and position[2] == end_z

    def is_busy(self) -> bool:
        return self.controller.is_active()

    def current_pose(self) -> Pose:
        return self.camera.pose()

    # ------------------------------------------------------------------
    # Game lifecycle
    # ------------------------------------------------------------------

    def reset_to_start(self) -> Pose:
        """Place the camera on the maze start, facing into the maze."""
        start_x, start_z, start_angle = self.maze.start_point()
        return self.camera.set_pose(start_x, config.CAMERA_HEIGHT, start_z, start_angle)

    def new_game(self, dimension: Optional[Sequence[int]] = None) -> Tuple[bool, str]:
        """Regenerate the maze and put the camera back on the start."""
        with self._request_lock:
            if self.controller.is_active():
                return False, "Cannot regenerate while a transition is in progress."

            self.maze.generate(dimension)
            self.reset_to_start()
        return True, f"New {self.maze.width}x{self.maze.height} maze."

    def pause(self) -> None:
        self.controller.pause()

    def resume(self) -> None:
        self.controller.resume()

    def shutdown(self) -> None:
        self.controller.shutdown()

    def __enter__(self) -> "NavigationFacade":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    # ------------------------------------------------------------------
    # Matrices for an external renderer
    # ------------------------------------------------------------------

    def view_projection(self, aspect: float) -> ViewProjection:
        """First-person view/projection matrices for the current pose."""
        return camera_view_projection(self.camera, aspect)

    def minimap_projection(self, surface_width: int, surface_height: int) -> Tuple[ViewProjection, Tuple[int, int]]:
        """Top-down minimap matrices and viewport size in pixels."""
        return minimap_projection((self.maze.width, self.maze.height), surface_width, surface_height)

    def wall_map(self) -> np.ndarray:
        """Read-only grid of the current maze (0 = wall, 1 = open)."""
        return self.maze.grid
