"""Point masses of the cloth grid."""
from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np


def _as_vector(value, name: str) -> np.ndarray:
    vector = np.array(value, dtype=np.float64)
    if vector.shape != (3,):
        raise ValueError(f"{name} must be a 3D vector")
    return vector


@dataclass(eq=False)
class Node:
    """A point mass carrying its own position, velocity and surface normal.

    ``force`` is per-step scratch space: sources add into it with
    :meth:`add_force` and :meth:`apply_force` always leaves it zeroed.
    """

    position: np.ndarray
    mass: float
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))
    force: np.ndarray = field(default_factory=lambda: np.zeros(3))
    normal: np.ndarray = field(default_factory=lambda: np.array([0.0, 0.0, 1.0]))
    fixed: bool = False

    def __post_init__(self) -> None:
        self.position = _as_vector(self.position, "position")
        self.velocity = _as_vector(self.velocity, "velocity")
        self.force = _as_vector(self.force, "force")
        self.normal = _as_vector(self.normal, "normal")
        if not (np.isfinite(self.mass) and self.mass > 0):
            raise ValueError("mass must be positive")
        self.mass = float(self.mass)
        self.fixed = bool(self.fixed)

    def add_force(self, vec) -> None:
        self.force += vec

    def apply_force(self, dt: float) -> None:
        """Integrate one step with semi-implicit Euler and clear the force."""

        if self.fixed:
            self.force[:] = 0.0
            self.velocity[:] = 0.0
            return

        self.velocity += self.force * (dt / self.mass)
        self.position += self.velocity * dt
        self.force[:] = 0.0

    def update_normal(self, candidate: np.ndarray) -> bool:
        """Store the normalised candidate.

        A zero-length candidate leaves the previous normal in place and
        returns ``False``.
        """

        norm = np.linalg.norm(candidate)
        if norm == 0.0 or not np.isfinite(norm):
            return False
        self.normal = np.asarray(candidate, dtype=np.float64) / norm
        return True

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.velocity))

    @property
    def kinetic_energy(self) -> float:
        return 0.5 * self.mass * float(np.dot(self.velocity, self.velocity))
