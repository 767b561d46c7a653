"""Fixed-timestep driver for the cloth simulation."""
from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from cloth3d import Cloth3D

logger = logging.getLogger(__name__)


@dataclass
class FixedStepDriver:
    """Turns variable frame times into whole steps of ``dt`` seconds.

    Frame time is clamped to ``max_frame_time`` before it is added to the
    accumulator, so a stalled caller can never ask for an unbounded step.
    Whatever is left over after the last whole step carries into the next
    frame.  After every :meth:`advance` the accumulator lies in ``[0, dt)``.
    """

    target: Cloth3D
    dt: float = 0.002
    max_frame_time: float = 0.017
    clock: Callable[[], float] = field(default=time.perf_counter, repr=False)
    accumulator: float = field(init=False, default=0.0)
    simulated_time: float = field(init=False, default=0.0)
    total_steps: int = field(init=False, default=0)
    _last_time: Optional[float] = field(init=False, default=None, repr=False)

    def __post_init__(self) -> None:
        if not (math.isfinite(self.dt) and self.dt > 0):
            raise ValueError("dt must be positive")
        if not (math.isfinite(self.max_frame_time) and self.max_frame_time > 0):
            raise ValueError("max_frame_time must be positive")
        if not callable(getattr(self.target, "update", None)):
            raise ValueError("target must provide an update(dt) method")

    @property
    def alpha(self) -> float:
        """Fraction of a step left in the accumulator, for interpolation."""

        return self.accumulator / self.dt

    def advance(self, frame_time: float) -> int:
        """Consume ``frame_time`` seconds and run the whole steps it covers.

        Returns the number of steps taken.
        """

        if math.isnan(frame_time) or frame_time < 0:
            raise ValueError(f"frame_time must be >= 0, got {frame_time!r}")
        if frame_time > self.max_frame_time:
            logger.debug(
                "Frame time %.4fs clamped to %.4fs", frame_time, self.max_frame_time
            )
            frame_time = self.max_frame_time

        self.accumulator += frame_time
        steps = 0
        while self.accumulator >= self.dt:
            self.target.update(self.dt)
            self.accumulator -= self.dt
            self.simulated_time += self.dt
            steps += 1

        self.total_steps += steps
        return steps

    def tick(self, now: Optional[float] = None) -> int:
        """Advance by the wall-clock time elapsed since the previous tick.

        The first call only starts the clock.
        """

        if now is None:
            now = self.clock()
        last, self._last_time = self._last_time, now
        if last is None:
            return 0
        return self.advance(max(now - last, 0.0))

    def reset(self) -> None:
        self.accumulator = 0.0
        self.simulated_time = 0.0
        self.total_steps = 0
        self._last_time = None
