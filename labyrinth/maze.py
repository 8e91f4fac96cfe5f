"""Maze generation and queries: GridMaze with grid/world coordinate mapping.

The grid is a numpy array indexed ``grid[row, col]`` where ``0`` is a wall and
``1`` is open floor. Path nodes ("junctions") live at odd row/odd column
indices; the cells between two junctions are opened when the spanning tree
connects them.

World space centers the grid on the origin: column maps to ``x`` and row maps
to ``z``, one world unit per cell.
"""

from __future__ import annotations

import logging
import math
from collections import deque
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np

from . import config

# Cells (grid[row, col])
WALL: int = 0
OPEN: int = 1

Cell = Tuple[int, int]  # (row, col)

# Junction neighbors are two cells away: N, S, W, E
NEIGHBOR_OFFSETS: Tuple[Cell, ...] = ((-2, 0), (2, 0), (0, -2), (0, 2))

START_ANGLE = 0.0
END_ANGLE = 180.0


def normalize_dimension(dimension: Sequence[int]) -> Tuple[int, int]:
    """Clamp (width, height) to the minimum size and bump even values to odd."""
    width, height = (int(v) for v in dimension)

    width = max(width, config.MIN_DIMENSION)
    height = max(height, config.MIN_DIMENSION)

    if width % 2 == 0:
        width += 1
    if height % 2 == 0:
        height += 1
    return width, height


@dataclass(frozen=True)
class MazeLayout:
    """One generated maze. Replaced as a whole on regeneration."""

    grid: np.ndarray
    start: Cell
    end: Cell
    start_angle: float = START_ANGLE
    end_angle: float = END_ANGLE

    @property
    def height(self) -> int:
        return int(self.grid.shape[0])

    @property
    def width(self) -> int:
        return int(self.grid.shape[1])


def _random_odd(rng: np.random.Generator, size: int) -> int:
    """Uniform odd index in [1, size - 2]."""
    return 2 * int(rng.integers(0, (size - 1) // 2)) + 1


def _neighbors(grid: np.ndarray, cell: Cell, value: int, rng: np.random.Generator) -> List[Cell]:
    """Junction neighbors of ``cell`` holding ``value``, in shuffled order."""
    height, width = grid.shape
    row, col = cell

    found: List[Cell] = []
    for d_row, d_col in NEIGHBOR_OFFSETS:
        n_row, n_col = row + d_row, col + d_col
        if not (1 <= n_row <= height - 2 and 1 <= n_col <= width - 2):
            continue
        if grid[n_row, n_col] == value:
            found.append((n_row, n_col))

    rng.shuffle(found)
    return found


def carve_spanning_tree(width: int, height: int, rng: np.random.Generator) -> MazeLayout:
    """Random-walk (Aldous-Broder) spanning tree over the junction cells.

    Every junction ends up connected to every other one through open cells,
    so any two of them are joined by exactly one simple path.
    """
    grid = np.full((height, width), WALL, dtype=np.int8)

    anchor: Cell = (height - 2, _random_odd(rng, width))
    grid[anchor] = OPEN
    visited = 1
    total = ((height - 1) // 2) * ((width - 1) // 2)

    current = anchor
    while visited < total:
        unvisited = _neighbors(grid, current, WALL, rng)

        # Stranded: walk to a random visited neighbor and keep going
        if not unvisited:
            seen = _neighbors(grid, current, OPEN, rng)
            current = seen[int(rng.integers(0, len(seen)))]
            continue

        nxt = unvisited[0]
        grid[(current[0] + nxt[0]) // 2, (current[1] + nxt[1]) // 2] = OPEN
        grid[nxt] = OPEN
        visited += 1
        current = nxt

    # Start sits in the border row right below the anchor, facing into the maze
    start: Cell = (anchor[0] + 1, anchor[1])
    grid[start] = OPEN

    end: Cell = (0, _random_odd(rng, width))
    grid[end] = OPEN

    grid.setflags(write=False)
    return MazeLayout(grid=grid, start=start, end=end)


class GridMaze:
    """Perfect maze over an odd-by-odd grid.

    Args:
        dimension: (width, height) in cells; normalized to odd values >= 5.
        rng: optional numpy Generator for reproducible mazes.
        logger: optional logger; defaults to this module's logger.
    """

    def __init__(
        self,
        dimension: Sequence[int] = config.DIMENSION,
        rng: Optional[np.random.Generator] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.width, self.height = normalize_dimension(dimension)
        self._rng = rng if rng is not None else np.random.default_rng()
        self._log = logger if logger is not None else logging.getLogger(__name__)
        self._layout: Optional[MazeLayout] = None

    @classmethod
    def from_layout(
        cls,
        rows: Sequence[Sequence[int]],
        start: Cell,
        end: Cell,
        start_angle: float = START_ANGLE,
        end_angle: float = END_ANGLE,
        logger: Optional[logging.Logger] = None,
    ) -> "GridMaze":
        """Build a maze from a fixed grid (0 = wall, 1 = open)."""
        grid = np.array(rows, dtype=np.int8)
        if grid.ndim != 2 or grid.size == 0:
            raise ValueError("Layout must be a non-empty 2D grid")
        if not np.isin(grid, (WALL, OPEN)).all():
            raise ValueError("Layout cells must be 0 (wall) or 1 (open)")

        height, width = grid.shape
        for name, (row, col) in (("start", start), ("end", end)):
            if not (0 <= row < height and 0 <= col < width):
                raise ValueError(f"{name} cell {(row, col)} is outside the {width}x{height} grid")
            if grid[row, col] != OPEN:
                raise ValueError(f"{name} cell {(row, col)} is a wall")

        maze = cls((width, height), logger=logger)
        # Fixed layouts may be any size; keep the grid's own dimensions
        maze.width, maze.height = width, height
        grid.setflags(write=False)
        maze._layout = MazeLayout(
            grid=grid,
            start=(int(start[0]), int(start[1])),
            end=(int(end[0]), int(end[1])),
            start_angle=float(start_angle),
            end_angle=float(end_angle),
        )
        return maze

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def generate(self, dimension: Optional[Sequence[int]] = None) -> np.ndarray:
        """Generate a new maze, optionally at a new size, and return its grid."""
        width, height = (
            normalize_dimension(dimension) if dimension is not None else (self.width, self.height)
        )

        layout = carve_spanning_tree(width, height, self._rng)

        # Swap in one step so queries never see a half-built maze
        self.width, self.height = width, height
        self._layout = layout

        if self._log.isEnabledFor(logging.DEBUG):
            self._log.debug("Generated %dx%d maze:\n%s", width, height, self.to_text())
        return self.grid

    @property
    def generated(self) -> bool:
        return self._layout is not None

    def _require_layout(self) -> MazeLayout:
        if self._layout is None:
            raise RuntimeError("Maze has not been generated yet; call generate() first")
        return self._layout

    # ------------------------------------------------------------------
    # Coordinate mapping
    # ------------------------------------------------------------------

    def grid_to_world(self, row: int, col: int) -> Tuple[float, float]:
        """Center of cell (row, col) in world space as (x, z)."""
        x = col - self.width / 2 + 0.5
        z = row - self.height / 2 + 0.5
        return x, z

    def world_to_grid(self, x: float, z: float) -> Cell:
        """Cell (row, col) containing world position (x, z). May be out of bounds."""
        row = math.floor(z + self.height / 2 - 0.5)
        col = math.floor(x + self.width / 2 - 0.5)
        return row, col

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.height and 0 <= col < self.width

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def grid(self) -> np.ndarray:
        """Read-only view of the current grid."""
        return self._require_layout().grid

    def is_open(self, row: int, col: int) -> bool:
        """Whether (row, col) is open floor. Out-of-bounds cells are not."""
        if not self.in_bounds(row, col):
            return False
        return bool(self._require_layout().grid[row, col] == OPEN)

    def is_walkable(self, x: float, z: float) -> bool:
        """Whether world position (x, z) falls on an open cell."""
        row, col = self.world_to_grid(x, z)
        return self.is_open(row, col)

    def start_cell(self) -> Cell:
        return self._require_layout().start

    def end_cell(self) -> Cell:
        return self._require_layout().end

    def start_point(self) -> Tuple[float, float, float]:
        """Start as (x, z, facing angle in degrees)."""
        layout = self._require_layout()
        x, z = self.grid_to_world(*layout.start)
        return x, z, layout.start_angle

    def end_point(self) -> Tuple[float, float, float]:
        """End as (x, z, facing angle in degrees)."""
        layout = self._require_layout()
        x, z = self.grid_to_world(*layout.end)
        return x, z, layout.end_angle

    def junction_cells(self) -> Iterator[Cell]:
        """All path-node cells (odd row, odd column)."""
        for row in range(1, self.height - 1, 2):
            for col in range(1, self.width - 1, 2):
                yield row, col

    def wall_cells(self) -> List[Cell]:
        rows, cols = np.nonzero(self._require_layout().grid == WALL)
        return [(int(r), int(c)) for r, c in zip(rows, cols)]

    def wall_coordinates(self) -> List[Tuple[float, float]]:
        """World (x, z) of every wall cell, for placing wall geometry."""
        return [self.grid_to_world(row, col) for row, col in self.wall_cells()]

    def num_walls(self) -> int:
        return int(np.count_nonzero(self._require_layout().grid == WALL))

    def open_neighbors(self, cell: Cell) -> List[Cell]:
        """Adjacent (one step, 4-neighborhood) open cells."""
        row, col = cell
        return [
            (row + dr, col + dc)
            for dr, dc in ((-1, 0), (1, 0), (0, -1), (0, 1))
            if self.is_open(row + dr, col + dc)
        ]

    def shortest_path(self, start: Optional[Cell] = None, goal: Optional[Cell] = None) -> List[Cell]:
        """BFS path of cells from ``start`` to ``goal`` (defaults: maze start/end).

        Returns [] if the goal cannot be reached.
        """
        start = start if start is not None else self.start_cell()
        goal = goal if goal is not None else self.end_cell()
        if not (self.is_open(*start) and self.is_open(*goal)):
            return []

        came_from = {start: start}
        queue = deque([start])
        while queue:
            cell = queue.popleft()
            if cell == goal:
                break
            for nxt in self.open_neighbors(cell):
                if nxt not in came_from:
                    came_from[nxt] = cell
                    queue.append(nxt)
        else:
            return []

        path = [goal]
        while path[-1] != start:
            path.append(came_from[path[-1]])
        path.reverse()
        return path

    def to_text(self, wall: str = "#", floor: str = " ") -> str:
        """Render the grid as text, marking start 'S' and end 'E'."""
        layout = self._require_layout()
        lines = []
        for row in range(self.height):
            chars = []
            for col in range(self.width):
                if (row, col) == layout.start:
                    chars.append("S")
                elif (row, col) == layout.end:
                    chars.append("E")
                else:
                    chars.append(floor if layout.grid[row, col] == OPEN else wall)
            lines.append("".join(chars))
        return "\n".join(lines)

    def __str__(self) -> str:
        if self._layout is None:
            return f"GridMaze({self.width}x{self.height}, not generated)"
        return self.to_text()
