"""Game state management: the camera pose walked through the maze."""

import math
import threading
from typing import NamedTuple, Sequence, Tuple

from . import config

Vec3 = Tuple[float, float, float]


class Pose(NamedTuple):
    """Immutable snapshot of the camera pose."""
    x: float
    y: float
    z: float
    yaw: float  # degrees in [0, 360), 0 = facing -Z

    @property
    def position(self) -> Vec3:
        return (self.x, self.y, self.z)


def wrap_degrees(angle: float) -> float:
    """Keep an angle in the [0, 360) range."""
    return angle % 360.0


def facing_vector(yaw: float, decimals: int = config.LOOK_DIRECTION_DECIMALS) -> Vec3:
    """Unit facing vector on the XZ plane for a yaw in degrees.

    Yaw 0 looks down -Z and positive yaw turns counter-clockwise, so yaw 90
    looks down -X. Components are rounded so axis-aligned yaws give exact
    -1/0/1 values instead of 1e-16 noise.
    """
    rad = math.radians(yaw)
    x = round(-math.sin(rad), decimals)
    z = round(-math.cos(rad), decimals)
    # round() keeps the sign of tiny negatives; fold -0.0 into 0.0
    return (x + 0.0, 0.0, z + 0.0)


class Camera:
    """Thread-safe camera pose: position plus yaw around the Y axis.

    Every read returns a fresh tuple and every mutation happens under one
    lock, so a reader on another thread sees either the pose before an
    update or the pose after it.
    """

    def __init__(self, x: float = 0.0, y: float = config.CAMERA_HEIGHT, z: float = 0.0,
                 yaw: float = 0.0):
        self._lock = threading.Lock()
        self._position: Vec3 = (float(x), float(y), float(z))
        self._yaw = 0.0
        self._look: Vec3 = (0.0, 0.0, -1.0)
        self.set_rotation_y(yaw)

    def position(self) -> Vec3:
        with self._lock:
            return self._position

    def rotation_y(self) -> float:
        with self._lock:
            return self._yaw

    def look_direction(self) -> Vec3:
        with self._lock:
            return self._look

    def pose(self) -> Pose:
        with self._lock:
            x, y, z = self._position
            return Pose(x, y, z, self._yaw)

    def set_position(self, position: Sequence[float]) -> Vec3:
        """Move the camera to ``position`` (x, y, z) and return it."""
        if position is None or len(position) != 3:
            raise ValueError(f"Position must have 3 components, got {position!r}")
        new_position = (float(position[0]), float(position[1]), float(position[2]))
        with self._lock:
            self._position = new_position
            return new_position

    def set_rotation_y(self, yaw: float) -> float:
        """Set the yaw in degrees and recompute the facing vector."""
        yaw = wrap_degrees(float(yaw))
        look = facing_vector(yaw)
        with self._lock:
            self._yaw = yaw
            self._look = look
            return yaw

    def set_pose(self, x: float, y: float, z: float, yaw: float) -> Pose:
        """Set position and yaw together."""
        yaw = wrap_degrees(float(yaw))
        look = facing_vector(yaw)
        with self._lock:
            self._position = (float(x), float(y), float(z))
            self._yaw = yaw
            self._look = look
            return Pose(self._position[0], self._position[1], self._position[2], yaw)

    def position_along_look(self, alpha: float) -> Vec3:
        """Point ``alpha`` units along the facing vector (negative = behind)."""
        with self._lock:
            return self._along(alpha)

    def translate_along_look(self, alpha: float) -> Vec3:
        """Move ``alpha`` units along the facing vector and return the new position."""
        with self._lock:
            self._position = self._along(alpha)
            return self._position

    def rotate_by(self, delta: float) -> float:
        """Add ``delta`` degrees to the yaw and return the new yaw."""
        with self._lock:
            yaw = wrap_degrees(self._yaw + delta)
            self._yaw = yaw
            self._look = facing_vector(yaw)
            return yaw

    def rotation_with_offset(self, offset: float) -> float:
        """Current yaw plus ``offset``, wrapped into [0, 360)."""
        with self._lock:
            return wrap_degrees(self._yaw + offset)

    def _along(self, alpha: float) -> Vec3:
        px, py, pz = self._position
        lx, ly, lz = self._look
        return (px + lx * alpha, py + ly * alpha, pz + lz * alpha)

    def __repr__(self) -> str:
        x, y, z, yaw = self.pose()
        return f"Camera(x={x}, y={y}, z={z}, yaw={yaw})"
