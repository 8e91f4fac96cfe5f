"""
labyrinth: perfect-maze generation and smooth grid navigation.

Provides:
- GridMaze: random-walk spanning-tree maze with world/grid coordinate mapping
- Camera / Pose: thread-safe first-person pose
- TransitionController: fixed-rate clock animating moves and turns
- NavigationFacade: maze-checked move/turn requests and exit detection
"""

from __future__ import annotations

from .game_state import Camera, Pose
from .maze import GridMaze, OPEN, WALL, normalize_dimension
from .navigation import Move, NavigationFacade, Turn
from .projection import Orthographic, Perspective, ViewProjection, update_view_and_projection
from .transition import TransitionController, TransitionKind

__all__ = [
    "Camera",
    "Pose",
    "GridMaze",
    "OPEN",
    "WALL",
    "normalize_dimension",
    "Move",
    "Turn",
    "NavigationFacade",
    "Orthographic",
    "Perspective",
    "ViewProjection",
    "update_view_and_projection",
    "TransitionController",
    "TransitionKind",
]
