"""Damped springs with a super-elastic length limit."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

import numpy as np

from node3d import Node


class SpringKind(Enum):
    STRUCTURAL = "structural"
    SHEAR = "shear"
    FLEXION = "flexion"

    def rest_length(self, spacing: float) -> float:
        """Resting length of this kind of spring on a grid with ``spacing``."""

        if self is SpringKind.SHEAR:
            return spacing * math.sqrt(2.0)
        if self is SpringKind.FLEXION:
            return 2.0 * spacing
        return spacing


@dataclass
class Spring:
    """Hooke spring between two nodes of an arena, addressed by index.

    Springs never own nodes; every operation takes the node sequence the
    indices point into.
    """

    i: int
    j: int
    rest_length: float
    stiffness: float
    damping: float
    max_deformation: float = 1.1
    kind: SpringKind = SpringKind.STRUCTURAL
    max_length: float = field(init=False)

    def __post_init__(self) -> None:
        if self.i == self.j:
            raise ValueError("spring ends must be distinct nodes")
        if self.i < 0 or self.j < 0:
            raise ValueError("spring ends must be non-negative node indices")
        for name in ("rest_length", "stiffness", "damping", "max_deformation"):
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"{name} must be a finite number")
        if not self.rest_length > 0:
            raise ValueError("rest_length must be positive")
        if self.stiffness < 0:
            raise ValueError("stiffness must be >= 0")
        if self.damping < 0:
            raise ValueError("damping must be >= 0")
        if not self.max_deformation >= 1.0:
            raise ValueError("max_deformation must be >= 1.0")

        self.rest_length = float(self.rest_length)
        self.max_length = self.rest_length * float(self.max_deformation)

    @property
    def ends(self) -> tuple[int, int]:
        return self.i, self.j

    def length(self, nodes: Sequence[Node]) -> float:
        return float(np.linalg.norm(nodes[self.j].position - nodes[self.i].position))

    def add_forces(self, nodes: Sequence[Node]) -> None:
        """Accumulate elastic and damping forces on both ends.

        Damping opposes each end's own velocity, not the relative velocity
        of the pair.
        """

        first, second = nodes[self.i], nodes[self.j]
        delta = second.position - first.position
        length = float(np.linalg.norm(delta))

        # Coincident ends have no direction; only damping applies.
        if length == 0.0:
            elastic = np.zeros(3)
        else:
            elastic = delta * (self.stiffness * (length - self.rest_length) / length)

        first.add_force(elastic - self.damping * first.velocity)
        second.add_force(-elastic - self.damping * second.velocity)

    def shorten(self, nodes: Sequence[Node]) -> float:
        """Pull the ends together until the spring is at most ``max_length``.

        Returns the excess length that was removed, 0.0 when the spring was
        already within bounds.
        """

        first, second = nodes[self.i], nodes[self.j]
        delta = second.position - first.position
        length = float(np.linalg.norm(delta))
        extra = length - self.max_length
        if extra <= 0.0:
            return 0.0

        direction = delta / length
        if first.fixed and second.fixed:
            return 0.0
        if first.fixed:
            second.position -= direction * extra
        elif second.fixed:
            first.position += direction * extra
        else:
            first.position += direction * (extra / 2.0)
            second.position -= direction * (extra / 2.0)
        return extra

    def strain(self, nodes: Sequence[Node]) -> float:
        return self.length(nodes) / self.rest_length - 1.0

    def elastic_energy(self, nodes: Sequence[Node]) -> float:
        stretch = self.length(nodes) - self.rest_length
        return 0.5 * self.stiffness * stretch * stretch
