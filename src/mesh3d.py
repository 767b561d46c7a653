"""Grid topology for the square cloth."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple

import numpy as np

from spring3d import SpringKind


class Pinning(Enum):
    """Which grid nodes are kinematically pinned.

    ``TOP_ROW`` hangs the cloth from its whole upper edge, ``TOP_CORNERS``
    only from the two upper corners.
    """

    TOP_ROW = "top-row"
    TOP_CORNERS = "top-corners"
    NONE = "none"


@dataclass
class Mesh3D:
    """Square grid of ``subdivisions + 1`` nodes per side on the XY plane.

    Nodes are stored row-major starting at the top-left corner: ``x`` grows
    to the right (+X) and ``y`` grows downwards (-Y).  The mesh only holds
    the seed positions and the connectivity; simulation state lives in the
    cloth's nodes.
    """

    size: float
    subdivisions: int
    positions: np.ndarray
    edges: List[Tuple[int, int, SpringKind]]
    fixed: np.ndarray
    faces: List[Tuple[int, int, int]] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.positions = np.asarray(self.positions, dtype=np.float64)
        if self.positions.ndim != 2 or self.positions.shape[1] != 3:
            raise ValueError("positions must be an (N, 3) array")
        if self.positions.shape[0] != self.nodes_per_side ** 2:
            raise ValueError("positions must hold (subdivisions + 1)**2 nodes")

        if len(self.edges) == 0:
            raise ValueError("At least one edge is required for the simulation")

        self.fixed = np.asarray(self.fixed, dtype=bool)
        if self.fixed.shape != (self.n_vertices,):
            raise ValueError("fixed must hold one flag per node")

        self.faces = [tuple(face) for face in self.faces]

    @property
    def n_vertices(self) -> int:
        return self.positions.shape[0]

    @property
    def nodes_per_side(self) -> int:
        return self.subdivisions + 1

    @property
    def spacing(self) -> float:
        return self.size / self.subdivisions

    def index(self, x: int, y: int) -> int:
        """Linear index of grid node ``(x, y)``."""

        n = self.nodes_per_side
        if not (0 <= x < n and 0 <= y < n):
            raise IndexError(f"grid coordinate ({x}, {y}) outside 0..{n - 1}")
        return y * n + x

    def coords(self, index: int) -> Tuple[int, int]:
        """Grid coordinate ``(x, y)`` of a linear index."""

        if not 0 <= index < self.n_vertices:
            raise IndexError(f"node index {index} outside 0..{self.n_vertices - 1}")
        y, x = divmod(index, self.nodes_per_side)
        return x, y

    def edges_of_kind(self, kind: SpringKind) -> List[Tuple[int, int]]:
        return [(i, j) for i, j, edge_kind in self.edges if edge_kind is kind]

    @staticmethod
    def build_square(
        size: float,
        subdivisions: int,
        pinning: Pinning = Pinning.TOP_ROW,
        flexion: bool = True,
    ) -> "Mesh3D":
        """Builds a square cloth grid centered at the origin.

        Structural springs join each node to its right and lower neighbour,
        shear springs to the lower-right and upper-right diagonals, and
        flexion springs (when enabled) to the nodes two cells to the right
        and two cells below.
        """

        if not (np.isfinite(size) and size > 0):
            raise ValueError("size must be positive")
        if int(subdivisions) != subdivisions or subdivisions < 1:
            raise ValueError("subdivisions must be an integer >= 1")
        subdivisions = int(subdivisions)
        pinning = Pinning(pinning)

        grid_n = subdivisions + 1
        step = size / subdivisions
        half = size / 2.0

        positions: List[Tuple[float, float, float]] = []
        edges: List[Tuple[int, int, SpringKind]] = []
        faces: List[Tuple[int, int, int]] = []

        for iy in range(grid_n):
            for ix in range(grid_n):
                positions.append((ix * step - half, half - iy * step, 0.0))

        def idx(ix: int, iy: int) -> int:
            return iy * grid_n + ix

        last = subdivisions
        for iy in range(grid_n):
            for ix in range(grid_n):
                here = idx(ix, iy)
                if ix < last:
                    edges.append((here, idx(ix + 1, iy), SpringKind.STRUCTURAL))
                if iy < last:
                    edges.append((here, idx(ix, iy + 1), SpringKind.STRUCTURAL))
                if ix < last and iy < last:
                    edges.append((here, idx(ix + 1, iy + 1), SpringKind.SHEAR))
                if iy > 0 and ix < last:
                    edges.append((here, idx(ix + 1, iy - 1), SpringKind.SHEAR))
                if flexion:
                    if ix < last - 1:
                        edges.append((here, idx(ix + 2, iy), SpringKind.FLEXION))
                    if iy < last - 1:
                        edges.append((here, idx(ix, iy + 2), SpringKind.FLEXION))

                if ix < last and iy < last:
                    v0 = here
                    v1 = idx(ix + 1, iy)
                    v2 = idx(ix, iy + 1)
                    v3 = idx(ix + 1, iy + 1)
                    faces.append((v0, v1, v2))
                    faces.append((v2, v1, v3))

        fixed = np.zeros(grid_n * grid_n, dtype=bool)
        if pinning is Pinning.TOP_ROW:
            fixed[:grid_n] = True
        elif pinning is Pinning.TOP_CORNERS:
            fixed[idx(0, 0)] = True
            fixed[idx(last, 0)] = True

        return Mesh3D(size, subdivisions, np.array(positions), edges, fixed, faces)

    @staticmethod
    def expected_spring_count(subdivisions: int, flexion: bool = True) -> dict[SpringKind, int]:
        """Number of springs of each kind ``build_square`` creates."""

        d = subdivisions
        counts = {
            SpringKind.STRUCTURAL: 2 * d * (d + 1),
            SpringKind.SHEAR: 2 * d * d,
            SpringKind.FLEXION: 2 * (d + 1) * (d - 1) if flexion else 0,
        }
        return counts
