# gait_timing/variables/footholds.py
from __future__ import annotations

import logging

import numpy as np

from gait_timing.variables.variable_set import NO_BOUND, Bounds, VariableSet

logger = logging.getLogger(__name__)


def footholds_name(ee) -> str:
    return f"ee_footholds_{int(ee)}"


class FootholdVariables(VariableSet):
    """
    Free contact positions of one EndeffectorMotion stacked as
        x = [c_1; c_2; ...; c_K]   shape (3K,)
    The initial contact c_0 is fixed and not part of x.
    """

    def __init__(self, motion, axis_bounds: list[Bounds] | None = None):
        super().__init__(3 * motion.get_n_free_contacts(), footholds_name(motion.ee))
        self.motion = motion
        if axis_bounds is None:
            axis_bounds = [NO_BOUND] * 3
        if len(axis_bounds) != 3:
            raise ValueError("axis_bounds needs one Bounds per axis (x, y, z)")
        self.axis_bounds = list(axis_bounds)

    def get_values(self) -> np.ndarray:
        free = self.motion.get_free_contact_positions()
        if not free:
            return np.zeros(0)
        return np.concatenate(free)

    def set_variables(self, x: np.ndarray):
        x = self._check_length(x)
        for k, pos in enumerate(x.reshape(-1, 3)):
            self.motion.set_contact_position(k + 1, pos)
        logger.debug("%s: footholds set to %s", self.name, x.reshape(-1, 3).tolist())

    def get_bounds(self) -> list[Bounds]:
        return self.axis_bounds * self.motion.get_n_free_contacts()
