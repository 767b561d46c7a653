"""External force generators.

A generator is any callable taking a :class:`~node3d.Node` and returning the
force vector it contributes for the current step.  Generators are registered
per cloth with :meth:`cloth3d.Cloth3D.add_force`.
"""
from __future__ import annotations

from typing import Callable

import numpy as np

from node3d import Node

ForceGenerator = Callable[[Node], np.ndarray]


def _vector(value, name: str) -> np.ndarray:
    vector = np.array(value, dtype=np.float64)
    if vector.shape != (3,):
        raise ValueError(f"{name} must be a 3D vector")
    return vector


def uniform(force) -> ForceGenerator:
    """The same force on every node, whatever its state."""

    vector = _vector(force, "force")

    def generator(_: Node) -> np.ndarray:
        return vector

    return generator


def gravity(acceleration=(0.0, -9.8, 0.0)) -> ForceGenerator:
    """Weight of each node, ``mass * acceleration``."""

    vector = _vector(acceleration, "acceleration")

    def generator(node: Node) -> np.ndarray:
        return node.mass * vector

    return generator


def wind(velocity: np.ndarray, coefficient: float = 1.0) -> ForceGenerator:
    """Aerodynamic push of a wind field along the node normals.

    The force on a node is the component of the air velocity relative to
    the node along its normal, ``n * c * dot(wind - v, n)``.  ``velocity``
    is read on every call, so mutating the array in place changes the wind
    for later steps.
    """

    if not isinstance(velocity, np.ndarray) or velocity.shape != (3,):
        velocity = _vector(velocity, "velocity")
    if coefficient < 0:
        raise ValueError("coefficient must be >= 0")

    def generator(node: Node) -> np.ndarray:
        relative = velocity - node.velocity
        return node.normal * (coefficient * float(np.dot(relative, node.normal)))

    return generator


def linear_drag(coefficient: float) -> ForceGenerator:
    """Viscous drag opposing each node's velocity."""

    if coefficient < 0:
        raise ValueError("coefficient must be >= 0")

    def generator(node: Node) -> np.ndarray:
        return -coefficient * node.velocity

    return generator
