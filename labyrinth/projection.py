"""View and projection matrices for the first-person camera and the minimap.

Matrices follow the OpenGL convention (right-handed view space, camera
looking down -Z, clip-space depth in [-1, 1]) and are returned as float32
4x4 numpy arrays in row-major order; transpose before uploading to a
column-major API.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple, Union

import numpy as np

from . import config
from .game_state import Camera

UP_Y = (0.0, 1.0, 0.0)
# Looking straight down, +Y up would be parallel to the view direction
UP_NEG_Z = (0.0, 0.0, -1.0)


@dataclass(frozen=True)
class Perspective:
    aspect: float
    fov_y: float = config.FOV_Y  # degrees
    near: float = config.Z_NEAR
    far: float = config.Z_FAR


@dataclass(frozen=True)
class Orthographic:
    left: float
    right: float
    bottom: float
    top: float
    near: float = config.Z_NEAR
    far: float = config.Z_FAR


Projection = Union[Perspective, Orthographic]


@dataclass(frozen=True)
class ViewProjection:
    view: np.ndarray
    projection: np.ndarray
    pv: np.ndarray  # projection @ view


def projection_matrix(projection: Projection) -> np.ndarray:
    """Projection matrix for either variant."""
    if not isinstance(projection, (Perspective, Orthographic)):
        raise TypeError(f"Unknown projection: {projection!r}")
    near, far = projection.near, projection.far

    if isinstance(projection, Perspective):
        f = 1.0 / math.tan(math.radians(projection.fov_y) / 2.0)
        return np.array([
            [f / projection.aspect, 0.0, 0.0, 0.0],
            [0.0, f, 0.0, 0.0],
            [0.0, 0.0, (far + near) / (near - far), 2.0 * far * near / (near - far)],
            [0.0, 0.0, -1.0, 0.0],
        ], dtype=np.float32)

    l, r, b, t = projection.left, projection.right, projection.bottom, projection.top
    return np.array([
        [2.0 / (r - l), 0.0, 0.0, -(r + l) / (r - l)],
        [0.0, 2.0 / (t - b), 0.0, -(t + b) / (t - b)],
        [0.0, 0.0, -2.0 / (far - near), -(far + near) / (far - near)],
        [0.0, 0.0, 0.0, 1.0],
    ], dtype=np.float32)


def look_at(eye: Sequence[float], center: Sequence[float], up: Sequence[float]) -> np.ndarray:
    """View matrix for a camera at ``eye`` looking at ``center``."""
    eye_v = np.asarray(eye, dtype=np.float64)
    forward = np.asarray(center, dtype=np.float64) - eye_v
    norm = np.linalg.norm(forward)
    if norm == 0.0:
        raise ValueError("eye and center must differ")
    forward /= norm

    side = np.cross(forward, np.asarray(up, dtype=np.float64))
    side_norm = np.linalg.norm(side)
    if side_norm == 0.0:
        raise ValueError("up vector is parallel to the view direction")
    side /= side_norm
    true_up = np.cross(side, forward)

    view = np.identity(4, dtype=np.float64)
    view[0, :3] = side
    view[1, :3] = true_up
    view[2, :3] = -forward
    view[0, 3] = -side.dot(eye_v)
    view[1, 3] = -true_up.dot(eye_v)
    view[2, 3] = forward.dot(eye_v)
    return view.astype(np.float32)


def update_view_and_projection(
    projection: Projection,
    eye: Sequence[float],
    center: Sequence[float],
    up: Sequence[float] = UP_Y,
) -> ViewProjection:
    """Compute view, projection and their product in one call."""
    view = look_at(eye, center, up)
    proj = projection_matrix(projection)
    return ViewProjection(view=view, projection=proj, pv=proj @ view)


def camera_view_projection(camera: Camera, aspect: float) -> ViewProjection:
    """Perspective matrices looking along the camera's facing vector."""
    pose = camera.pose()
    look = camera.look_direction()
    eye = pose.position
    center = (eye[0] + look[0], eye[1] + look[1], eye[2] + look[2])
    return update_view_and_projection(Perspective(aspect=aspect), eye, center, UP_Y)


def minimap_bounds(dimension: Sequence[int]) -> Orthographic:
    """Orthographic volume covering the whole maze plus a thin border."""
    width, height = float(dimension[0]), float(dimension[1])
    border = max(width, height) / 100.0 * config.MINIMAP_BORDER_PERCENT
    half_x = width / 2.0 + border
    half_z = height / 2.0 + border
    return Orthographic(left=-half_x, right=half_x, bottom=-half_z, top=half_z)


def minimap_viewport(bounds: Orthographic, surface_width: int, surface_height: int) -> Tuple[int, int]:
    """Minimap size in pixels, keeping the maze aspect ratio."""
    ratio = bounds.right / bounds.top
    if ratio >= 1:
        # landscape or square map
        width = surface_width // config.MINIMAP_LANDSCAPE_FRACTION
        height = int(width / ratio)
    else:
        # portrait map
        height = surface_height // config.MINIMAP_PORTRAIT_FRACTION
        width = int(height * ratio)
    return width, height


def minimap_projection(
    dimension: Sequence[int], surface_width: int, surface_height: int
) -> Tuple[ViewProjection, Tuple[int, int]]:
    """Top-down minimap matrices and its viewport size."""
    bounds = minimap_bounds(dimension)
    matrices = update_view_and_projection(
        bounds, (0.0, config.MINIMAP_HEIGHT, 0.0), (0.0, 0.0, 0.0), UP_NEG_Z
    )
    return matrices, minimap_viewport(bounds, surface_width, surface_height)
