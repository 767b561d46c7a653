"""Settings for a complete simulation run."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

import numpy as np

import forces3d
from cloth3d import Cloth3D
from fixed_step import FixedStepDriver
from mesh3d import Pinning

logger = logging.getLogger(__name__)


def parse_vector(text: str) -> np.ndarray:
    """Parses ``"x,y,z"`` into a vector."""

    parts = [part.strip() for part in str(text).split(",")]
    if len(parts) != 3:
        raise ValueError(f"expected three comma separated numbers, got {text!r}")
    try:
        return np.array([float(part) for part in parts], dtype=np.float64)
    except ValueError as exc:
        raise ValueError(f"expected three comma separated numbers, got {text!r}") from exc


@dataclass
class SimulationConfig:
    """Cloth, forces and stepping parameters of a run.

    The defaults reproduce the hanging-cloth demo: a 3 x 3 sheet of 31 x 31
    nodes pulled down by a constant force and pushed by an adjustable wind.
    ``gravity`` is a force applied as-is to every node, not an acceleration.
    """

    side_length: float = 3.0
    density: int = 30
    mass: float = 10.0
    stiffness: float = 100.0
    damping: float = 0.05
    max_deformation: float = 1.1
    pinning: Pinning = Pinning.TOP_ROW
    flexion: bool = True
    gravity: np.ndarray = field(default_factory=lambda: np.array([0.0, -1.0, 0.0]))
    wind: np.ndarray = field(default_factory=lambda: np.zeros(3))
    wind_coefficient: float = 1.0
    dt: float = 0.002
    max_frame_time: float = 0.017
    frames: int = 600
    frame_time: float = 1 / 60.0
    jitter: float = 0.25

    def __post_init__(self) -> None:
        self.gravity = self._vector(self.gravity, "gravity")
        self.wind = self._vector(self.wind, "wind")
        self.pinning = Pinning(self.pinning)
        if self.wind_coefficient < 0:
            raise ValueError("wind_coefficient must be >= 0")
        if not (math.isfinite(self.dt) and self.dt > 0):
            raise ValueError("dt must be positive")
        if not (math.isfinite(self.max_frame_time) and self.max_frame_time > 0):
            raise ValueError("max_frame_time must be positive")
        if self.frames < 0:
            raise ValueError("frames must be >= 0")
        if not (math.isfinite(self.frame_time) and self.frame_time > 0):
            raise ValueError("frame_time must be positive")
        if not 0.0 <= self.jitter < 1.0:
            raise ValueError("jitter must be in the range [0, 1)")

    @staticmethod
    def _vector(value, name: str) -> np.ndarray:
        if isinstance(value, str):
            return parse_vector(value)
        vector = np.array(value, dtype=np.float64)
        if vector.shape != (3,):
            raise ValueError(f"{name} must be a 3D vector")
        return vector

    def build_cloth(self) -> Cloth3D:
        """Creates the cloth with gravity and wind registered."""

        cloth = Cloth3D(
            self.side_length,
            self.density,
            self.mass,
            self.stiffness,
            self.damping,
            self.max_deformation,
            pinning=self.pinning,
            flexion=self.flexion,
        )
        if np.any(self.gravity):
            cloth.add_force(self.gravity)
        cloth.add_force(forces3d.wind(self.wind, self.wind_coefficient))
        logger.debug(
            "Registered gravity %s and wind %s (coefficient %g)",
            self.gravity,
            self.wind,
            self.wind_coefficient,
        )
        return cloth

    def build_driver(self, cloth: Cloth3D) -> FixedStepDriver:
        return FixedStepDriver(cloth, dt=self.dt, max_frame_time=self.max_frame_time)
