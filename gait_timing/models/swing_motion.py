# gait_timing/models/swing_motion.py
from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

DEFAULT_LIFT_HEIGHT = 0.03


@dataclass
class StateLin3d:
    p: np.ndarray = field(default_factory=lambda: np.zeros(3))  # position
    v: np.ndarray = field(default_factory=lambda: np.zeros(3))  # velocity
    a: np.ndarray = field(default_factory=lambda: np.zeros(3))  # acceleration


def _blend(s: float):
    """h(s) = 3s^2 - 2s^3 and its first two derivatives w.r.t. s."""
    return 3.0 * s**2 - 2.0 * s**3, 6.0 * s - 6.0 * s**2, 6.0 - 12.0 * s


def _bump(s: float):
    """b(s) = 16 s^2 (1-s)^2, peaks at 1 for s=0.5, and its derivatives."""
    b = 16.0 * (s**2 - 2.0 * s**3 + s**4)
    db = 16.0 * (2.0 * s - 6.0 * s**2 + 4.0 * s**3)
    ddb = 16.0 * (2.0 - 12.0 * s + 12.0 * s**2)
    return b, db, ddb


class SwingMotion:
    """
    Foot motion through the air from a liftoff to a touchdown position.

    With normalized phase s = tau / T:
        p(s) = p0 + (p1 - p0) h(s) + lift_height b(s) e_z
        h(s) = 3s^2 - 2s^3          (zero velocity at liftoff and touchdown)
        b(s) = 16 s^2 (1 - s)^2     (apex of lift_height at s = 0.5)

    Changing T rescales the same curve in time, so at a fixed local time tau
        dp/dT = -(tau / T) v(tau)
    """

    def __init__(self, start: np.ndarray, goal: np.ndarray, duration: float,
                 lift_height: float = DEFAULT_LIFT_HEIGHT):
        self.set_endpoints(start, goal)
        self.set_duration(duration)
        self.lift_height = float(lift_height)

    def set_endpoints(self, start: np.ndarray, goal: np.ndarray):
        self.start = np.asarray(start, dtype=float).reshape(3,).copy()
        self.goal = np.asarray(goal, dtype=float).reshape(3,).copy()

    def set_duration(self, duration: float):
        duration = float(duration)
        if duration <= 0.0:
            raise ValueError(f"swing duration must be positive, got {duration}")
        self.T = duration

    def get_duration(self) -> float:
        return self.T

    def _phase(self, t_local: float) -> float:
        return float(np.clip(t_local / self.T, 0.0, 1.0))

    def get_state(self, t_local: float) -> StateLin3d:
        s = self._phase(t_local)
        h, dh, ddh = _blend(s)
        b, db, ddb = _bump(s)

        delta = self.goal - self.start
        ez = np.array([0.0, 0.0, 1.0])

        p = self.start + h * delta + self.lift_height * b * ez
        v = (dh * delta + self.lift_height * db * ez) / self.T
        a = (ddh * delta + self.lift_height * ddb * ez) / self.T**2
        return StateLin3d(p, v, a)

    def get_derivative_wrt_duration(self, t_local: float) -> np.ndarray:
        """dp/dT holding the local time fixed."""
        s = self._phase(t_local)
        return -s * self.get_state(t_local).v

    def get_weights(self, t_local: float) -> tuple[float, float]:
        """(dp/dstart, dp/dgoal) as scalar multiples of identity."""
        h, _, _ = _blend(self._phase(t_local))
        return 1.0 - h, h
