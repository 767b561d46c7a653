"""Mass-spring cloth simulation."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from forces3d import ForceGenerator, uniform
from mesh3d import Mesh3D, Pinning
from node3d import Node
from spring3d import Spring, SpringKind

logger = logging.getLogger(__name__)


@dataclass
class Cloth3D:
    """Square sheet of nodes joined by structural, shear and flexion springs.

    ``mass`` is the total mass of the sheet, shared evenly by its
    ``(density + 1) ** 2`` nodes.  Every spring gets the same ``stiffness``,
    ``damping`` and ``max_deformation``.
    """

    side_length: float
    density: int
    mass: float
    stiffness: float
    damping: float
    max_deformation: float
    pinning: Pinning = Pinning.TOP_ROW
    flexion: bool = True
    mesh: Mesh3D = field(init=False, repr=False)
    nodes: List[Node] = field(init=False, repr=False)
    springs: List[Spring] = field(init=False, repr=False)
    forces: List[ForceGenerator] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        for name in ("side_length", "mass", "stiffness", "damping", "max_deformation"):
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"{name} must be a finite number")
        if not self.side_length > 0:
            raise ValueError("side_length must be positive")
        if isinstance(self.density, bool) or int(self.density) != self.density or self.density < 1:
            raise ValueError("density must be an integer >= 1")
        if not self.mass > 0:
            raise ValueError("mass must be positive")
        if self.stiffness < 0:
            raise ValueError("stiffness must be >= 0")
        if self.damping < 0:
            raise ValueError("damping must be >= 0")
        if not self.max_deformation >= 1.0:
            raise ValueError("max_deformation must be >= 1.0")

        self.density = int(self.density)
        self.pinning = Pinning(self.pinning)
        self.mesh = Mesh3D.build_square(
            self.side_length, self.density, pinning=self.pinning, flexion=self.flexion
        )

        node_mass = self.mass / self.mesh.n_vertices
        self.nodes = [
            Node(position, node_mass, fixed=fixed)
            for position, fixed in zip(self.mesh.positions, self.mesh.fixed)
        ]

        spacing = self.structural_length
        self.springs = [
            Spring(
                i,
                j,
                kind.rest_length(spacing),
                self.stiffness,
                self.damping,
                self.max_deformation,
                kind,
            )
            for i, j, kind in self.mesh.edges
        ]

        self.forces = []
        self.time = 0.0
        self.steps = 0
        self.update_normals()

        logger.info(
            "Built cloth: %d nodes (%d fixed), %d springs, node mass %.4g",
            len(self.nodes),
            int(self.mesh.fixed.sum()),
            len(self.springs),
            node_mass,
        )

    # ------------------------------------------------------------------

    @property
    def nodes_per_side(self) -> int:
        return self.density + 1

    @property
    def structural_length(self) -> float:
        return self.side_length / self.density

    @property
    def faces(self) -> list[tuple[int, int, int]]:
        return self.mesh.faces

    def index(self, x: int, y: int) -> int:
        return self.mesh.index(x, y)

    def node_at(self, x: int, y: int) -> Node:
        return self.nodes[self.mesh.index(x, y)]

    def add_force(self, force) -> ForceGenerator:
        """Register an external force.

        ``force`` is either a constant 3D vector or a callable mapping a node
        to its force vector.  Generators run in registration order on every
        node at every step.
        """

        if callable(force):
            generator = force
        else:
            try:
                generator = uniform(force)
            except (TypeError, ValueError) as exc:
                raise TypeError(
                    "force must be a 3D vector or a callable taking a node"
                ) from exc
        self.forces.append(generator)
        return generator

    def update(self, dt: float) -> None:
        """Advance the simulation by ``dt`` seconds."""

        if not math.isfinite(dt) or dt < 0:
            raise ValueError(f"dt must be a finite, non-negative number of seconds, got {dt!r}")

        nodes = self.nodes
        for spring in self.springs:
            spring.shorten(nodes)
            spring.add_forces(nodes)

        for node in nodes:
            for generator in self.forces:
                node.add_force(generator(node))
            node.apply_force(dt)

        self.update_normals()
        self.time += dt
        self.steps += 1

    def update_normals(self) -> int:
        """Recompute every node normal from its grid neighbours.

        The horizontal tangent runs towards the right neighbour and the
        vertical one towards the lower neighbour; on the last column and row
        the backward difference is used so the orientation stays the same
        across the sheet.  Returns the number of nodes whose tangents were
        degenerate and kept their previous normal.
        """

        n = self.nodes_per_side
        last = self.density
        nodes = self.nodes
        degenerate = 0

        for y in range(n):
            for x in range(n):
                here = nodes[y * n + x].position
                if x < last:
                    horizontal = nodes[y * n + x + 1].position - here
                else:
                    horizontal = here - nodes[y * n + x - 1].position
                if y < last:
                    vertical = nodes[(y + 1) * n + x].position - here
                else:
                    vertical = here - nodes[(y - 1) * n + x].position

                if not nodes[y * n + x].update_normal(np.cross(horizontal, vertical)):
                    degenerate += 1

        if degenerate:
            logger.debug("Kept previous normal on %d degenerate nodes", degenerate)
        return degenerate

    def reset(self) -> None:
        """Put every node back at its seed position, at rest."""

        for node, position in zip(self.nodes, self.mesh.positions):
            node.position = position.copy()
            node.velocity[:] = 0.0
            node.force[:] = 0.0
        self.time = 0.0
        self.steps = 0
        self.update_normals()

    # -- read back ------------------------------------------------------

    def positions(self) -> np.ndarray:
        return np.array([node.position for node in self.nodes])

    def velocities(self) -> np.ndarray:
        return np.array([node.velocity for node in self.nodes])

    def normals(self) -> np.ndarray:
        return np.array([node.normal for node in self.nodes])

    def fixed_mask(self) -> np.ndarray:
        return np.array([node.fixed for node in self.nodes], dtype=bool)

    # -- diagnostics ----------------------------------------------------

    def spring_count(self, kind: Optional[SpringKind] = None) -> int:
        if kind is None:
            return len(self.springs)
        return sum(1 for spring in self.springs if spring.kind is kind)

    def kinetic_energy(self) -> float:
        return sum(node.kinetic_energy for node in self.nodes)

    def elastic_energy(self) -> float:
        return sum(spring.elastic_energy(self.nodes) for spring in self.springs)

    def max_strain(self) -> float:
        """Largest relative stretch over all springs."""

        return max(spring.strain(self.nodes) for spring in self.springs)
