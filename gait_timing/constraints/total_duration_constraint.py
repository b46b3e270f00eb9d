# gait_timing/constraints/total_duration_constraint.py
from __future__ import annotations

import numpy as np
import scipy.sparse as sp

from gait_timing.constraints.constraint import Constraint
from gait_timing.variables.variable_set import Bounds, VariableComposite


class TotalDurationConstraint(Constraint):
    """
    Keeps the derived last phase of a schedule at least min_duration long:
        sum(T_0..T_{N-2}) <= t_total - min_duration
    This is what makes ContactSchedule.set_variables() safe during a solve.
    """

    def __init__(self, schedule, min_duration: float | None = None):
        super().__init__(1, f"total_duration_{int(schedule.ee)}")
        self.schedule = schedule
        if min_duration is None:
            min_duration = schedule.phase_duration_bounds.lower
        self.min_duration = max(float(min_duration), 0.0)

    def get_values(self) -> np.ndarray:
        return np.array([np.sum(self.schedule.get_values())])

    def get_bounds(self) -> list[Bounds]:
        return [Bounds(-np.inf, self.schedule.get_total_time() - self.min_duration)]

    def get_jacobian(self, variables: VariableComposite) -> sp.csc_matrix:
        n = self.schedule.get_rows()
        offset = variables.get_offset(self.schedule.name)
        return sp.csc_matrix(
            (np.ones(n), (np.zeros(n, dtype=int), offset + np.arange(n))),
            shape=(1, variables.get_rows()),
        )
