# gait_timing/variables/contact_schedule.py
from __future__ import annotations

import logging
import weakref

import numpy as np
import scipy.sparse as sp

from gait_timing.linalg import dense_to_structural_csc
from gait_timing.variables.variable_set import Bounds, VariableSet

logger = logging.getLogger(__name__)


class InfeasiblePhaseDurationError(AssertionError):
    """Derived duration of the last phase is not positive."""


def schedule_name(ee) -> str:
    return f"ee_schedule_{int(ee)}"


class ContactSchedule(VariableSet):
    """
    Phase durations [T_0, ..., T_{N-1}] (stance, swing, stance, ...) of one
    endeffector as optimization variables.

    The total time is fixed, so only T_0..T_{N-2} are variables and
        T_{N-1} = t_total - sum(T_0..T_{N-2})

    Observers (anything with update_phase_durations()) are held as weak
    references and called synchronously after every write.
    """

    def __init__(self, ee, durations, min_duration: float, max_duration: float):
        durations = [float(d) for d in durations]
        if len(durations) < 2:
            raise ValueError(f"contact schedule needs at least 2 phases, got {len(durations)}")
        if any(d <= 0.0 for d in durations):
            raise ValueError(f"phase durations must be positive, got {durations}")
        if min_duration > max_duration:
            raise ValueError("min_duration must not exceed max_duration")

        # -1 since last phase-duration is not optimized over, but comes from total time
        super().__init__(len(durations) - 1, schedule_name(ee))
        self.ee = ee
        self.durations = durations
        self.t_total = float(np.sum(durations))
        self.phase_duration_bounds = Bounds(float(min_duration), float(max_duration))
        self._observers = []

    def add_observer(self, observer):
        self._observers.append(weakref.ref(observer))

    def update_observers(self):
        alive = []
        for ref in self._observers:
            observer = ref()
            if observer is None:
                continue
            observer.update_phase_durations()
            alive.append(ref)
        self._observers = alive

    def get_phase_durations(self) -> list[float]:
        return list(self.durations)

    def get_total_time(self) -> float:
        return self.t_total

    def get_values(self) -> np.ndarray:
        return np.array(self.durations[:self.get_rows()], dtype=float)

    def check_variables(self, x: np.ndarray) -> np.ndarray:
        x = self._check_length(x)
        t_last = self.t_total - float(np.sum(x))
        if not t_last > 0.0:
            raise InfeasiblePhaseDurationError(
                f"{self.name}: last phase duration {t_last} <= 0 for durations {x.tolist()} "
                f"and total time {self.t_total}"
            )
        return x

    def set_variables(self, x: np.ndarray):
        x = self.check_variables(x)
        t_last = self.t_total - float(np.sum(x))
        self.durations = [float(d) for d in x] + [t_last]
        logger.debug("%s: durations set to %s", self.name, self.durations)
        self.update_observers()

    # names used by callers that think in terms of the variable vector
    get_variable_values = get_values
    set_variable_values = set_variables

    def get_bounds(self) -> list[Bounds]:
        return [self.phase_duration_bounds] * self.get_rows()

    def get_jacobian_of_time_dependent_quantity(self, current_phase: int,
                                                dq_dT: np.ndarray,
                                                q_dot: np.ndarray) -> sp.csc_matrix:
        """
        Derivative of a quantity q w.r.t. the optimized durations, where q
        depends on time only through its phase and the local time in it.

        Args:
            current_phase: phase the quantity is evaluated in
            dq_dT: dq/dT_current at fixed local time (stretching that phase)
            q_dot: dq/dt, velocity of the quantity

        Returns (dim, N-1) csc with all entries stored, so the pattern does
        not change when t_global falls into a different phase.
        """
        dq_dT = np.asarray(dq_dT, dtype=float).reshape(-1)
        q_dot = np.asarray(q_dot, dtype=float).reshape(-1)
        if dq_dT.shape != q_dot.shape:
            raise ValueError("dq_dT and q_dot dimension mismatch")
        n_phases = len(self.durations)
        if not 0 <= current_phase < n_phases:
            raise IndexError(f"phase {current_phase} out of range for {n_phases} phases")

        jac = np.zeros((q_dot.shape[0], self.get_rows()))
        in_last_phase = current_phase == n_phases - 1

        # duration of current phase expands and compresses the motion
        if not in_last_phase:
            jac[:, current_phase] = dq_dT

        for phase in range(current_phase):
            # each previous duration shifts the motion along the time axis
            jac[:, phase] = -q_dot
            # total time is fixed, so in the last phase it also compresses it
            if in_last_phase:
                jac[:, phase] -= dq_dT

        return dense_to_structural_csc(jac)
