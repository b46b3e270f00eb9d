# gait_timing/constraints/foothold_constraint.py
from __future__ import annotations

import numpy as np
import scipy.sparse as sp

from gait_timing.constraints.constraint import Constraint
from gait_timing.models.endeffectors import Endeffectors
from gait_timing.variables.contact_schedule import schedule_name
from gait_timing.variables.footholds import footholds_name
from gait_timing.variables.variable_set import EQUALITY_BOUND, Bounds, VariableComposite


class FootholdConstraint(Constraint):
    """
    Keeps each endeffector close to a nominal stance at a fixed time t:
        g_ee = p_ee(t) - p_nominal_ee,   3 rows per endeffector

    Rows are stacked in container order E0..EN, which may be a subset of
    the robot's feet (e.g. a single leg). Bounds are [0, 0] (equality) unless given either
    per axis (3 Bounds, repeated for every endeffector) or per row.
    """

    def __init__(self, motions: Endeffectors, nominal_stance: Endeffectors, t: float,
                 bounds: list[Bounds] | None = None, name: str = "foothold"):
        if motions.get_count() != nominal_stance.get_count():
            raise ValueError("one nominal position per endeffector motion required")
        n_rows = 3 * motions.get_count()
        super().__init__(n_rows, name)

        self.motions = motions
        self.nominal_stance = Endeffectors.from_values(
            np.asarray(p, dtype=float).reshape(3,) for p in nominal_stance
        )
        self.t = float(t)

        if bounds is None:
            bounds = [EQUALITY_BOUND] * n_rows
        elif len(bounds) == 3:
            bounds = list(bounds) * motions.get_count()
        elif len(bounds) != n_rows:
            raise ValueError(f"expected 3 or {n_rows} bounds, got {len(bounds)}")
        self._bounds = list(bounds)

    def get_values(self) -> np.ndarray:
        g = np.zeros(self.get_rows())
        for ee, motion in self.motions.items():
            row = 3 * int(ee)
            g[row:row + 3] = motion.get_state(self.t).p - self.nominal_stance.at(ee)
        return g

    def get_bounds(self) -> list[Bounds]:
        return list(self._bounds)

    def get_jacobian(self, variables: VariableComposite) -> sp.csc_matrix:
        rows, cols, data = [], [], []

        def place(block: sp.spmatrix, row0: int, col0: int):
            block = block.tocoo()
            rows.append(block.row + row0)
            cols.append(block.col + col0)
            data.append(block.data)

        for ee, motion in self.motions.items():
            row = 3 * int(ee)

            # variable sets are named after the motion's own endeffector
            name = footholds_name(motion.ee)
            if variables.has(name):
                place(motion.get_jacobian_wrt_free_contacts(self.t), row, variables.get_offset(name))

            name = schedule_name(motion.ee)
            if variables.has(name) and motion.get_schedule() is not None:
                place(motion.get_jacobian_wrt_durations(self.t), row, variables.get_offset(name))

        shape = (self.get_rows(), variables.get_rows())
        if not data:
            return sp.csc_matrix(shape)
        return sp.csc_matrix(
            (np.concatenate(data), (np.concatenate(rows), np.concatenate(cols))),
            shape=shape,
        )
