# gait_timing/variables/ee_motion.py
from __future__ import annotations

import logging

import numpy as np
import scipy.sparse as sp

from gait_timing.linalg import dense_to_structural_csc
from gait_timing.models.swing_motion import DEFAULT_LIFT_HEIGHT, StateLin3d, SwingMotion

logger = logging.getLogger(__name__)


def phase_at_time(phase_ends: np.ndarray, t: float) -> int:
    """
    Index of the phase containing t given cumulative phase end times.
    Intervals are half-open [start, end), a time on a boundary belongs to the
    later phase; the last phase is closed at the end. Clamps outside [0, T].
    """
    idx = int(np.searchsorted(phase_ends, t, side="right"))
    return min(idx, len(phase_ends) - 1)


class EndeffectorMotion:
    """
    Motion of one(!) endeffector stepping multiple times.

    Built incrementally before optimization:
        set_initial_position(p0)
        add_stance_phase(T) / add_swing_phase(T, goal) ...

    Phase boundaries come from the attached ContactSchedule once one is
    attached, otherwise from the durations given while building.
    """

    def __init__(self, ee=0):
        self.ee = ee
        self.contacts = []            # (3,) per touchdown, first one fixed
        self.phase_is_stance = []
        self.phase_motion = []        # SwingMotion for swing phases, None for stance
        self._phase_contact = []      # contact held (stance) or lifted off from (swing)
        self._durations = []
        self._phase_ends = np.zeros(0)
        self._schedule = None

    # --- construction -------------------------------------------------------

    def set_initial_position(self, pos: np.ndarray):
        if self.phase_is_stance:
            raise RuntimeError("initial position must be set before any phase is added")
        self.contacts = [np.asarray(pos, dtype=float).reshape(3,).copy()]

    def _require_initial_position(self):
        if not self.contacts:
            raise RuntimeError("set_initial_position() must be called before adding phases")
        if self._schedule is not None:
            raise RuntimeError("cannot add phases after a contact schedule is attached")

    def add_stance_phase(self, duration: float):
        self._require_initial_position()
        self._append_phase(duration, True, None)

    def add_swing_phase(self, duration: float, goal: np.ndarray,
                        lift_height: float = DEFAULT_LIFT_HEIGHT):
        self._require_initial_position()
        goal = np.asarray(goal, dtype=float).reshape(3,).copy()
        motion = SwingMotion(self.contacts[-1], goal, duration, lift_height)
        self._append_phase(duration, False, motion)
        self.contacts.append(goal)

    def _append_phase(self, duration: float, is_stance: bool, motion):
        duration = float(duration)
        if duration <= 0.0:
            raise ValueError(f"phase duration must be positive, got {duration}")
        self.phase_is_stance.append(is_stance)
        self.phase_motion.append(motion)
        self._phase_contact.append(len(self.contacts) - 1)
        self._durations.append(duration)
        self._phase_ends = np.cumsum(self._durations)

    # --- schedule coupling --------------------------------------------------

    def attach_schedule(self, schedule):
        """Observe a schedule; its durations drive the phase boundaries."""
        if len(schedule.get_phase_durations()) != self.get_n_phases():
            raise ValueError(
                f"schedule has {len(schedule.get_phase_durations())} phases, "
                f"motion has {self.get_n_phases()}"
            )
        self._schedule = schedule
        schedule.add_observer(self)
        self.update_phase_durations()

    def get_schedule(self):
        return self._schedule

    def update_phase_durations(self):
        """Called by the schedule after every write of its durations."""
        self._durations = [float(d) for d in self._schedule.get_phase_durations()]
        self._phase_ends = np.cumsum(self._durations)
        for motion, duration in zip(self.phase_motion, self._durations):
            if motion is not None:
                motion.set_duration(duration)
        logger.debug("ee %s: phase ends %s", self.ee, self._phase_ends)

    # --- contact positions --------------------------------------------------

    def set_contact_position(self, index: int, pos: np.ndarray):
        if not 0 <= index < len(self.contacts):
            raise IndexError(f"contact {index} out of range for {len(self.contacts)} contacts")
        self.contacts[index] = np.asarray(pos, dtype=float).reshape(3,).copy()
        for phase, motion in enumerate(self.phase_motion):
            if motion is None:
                continue
            c = self._phase_contact[phase]
            if c == index or c + 1 == index:
                motion.set_endpoints(self.contacts[c], self.contacts[c + 1])

    def get_contacts(self) -> list[np.ndarray]:
        return [c.copy() for c in self.contacts]

    def get_free_contact_positions(self) -> list[np.ndarray]:
        """Those not fixed by the start stance."""
        return [c.copy() for c in self.contacts[1:]]

    def get_n_free_contacts(self) -> int:
        return max(len(self.contacts) - 1, 0)

    # --- queries ------------------------------------------------------------

    def get_n_phases(self) -> int:
        return len(self.phase_is_stance)

    def get_phase_durations(self) -> list[float]:
        return list(self._durations)

    def get_total_time(self) -> float:
        return float(self._phase_ends[-1]) if self._durations else 0.0

    def get_phase(self, t_global: float) -> int:
        if not self._durations:
            raise RuntimeError("motion has no phases")
        return phase_at_time(self._phase_ends, t_global)

    def get_phase_start(self, phase: int) -> float:
        return float(self._phase_ends[phase] - self._durations[phase])

    def get_contact_index(self, phase: int) -> int:
        """Contact held during a stance phase or lifted off from in a swing."""
        return self._phase_contact[phase]

    def is_in_contact(self, t_global: float) -> bool:
        return self.phase_is_stance[self.get_phase(t_global)]

    def get_state(self, t_global: float) -> StateLin3d:
        phase = self.get_phase(t_global)
        if self.phase_is_stance[phase]:
            return StateLin3d(p=self.contacts[self.get_contact_index(phase)].copy())
        t_local = t_global - self.get_phase_start(phase)
        return self.phase_motion[phase].get_state(t_local)

    # --- sensitivities ------------------------------------------------------

    def get_derivative_wrt_duration(self, t_global: float) -> np.ndarray:
        """dp/dT of the phase t_global falls in, holding its start fixed."""
        phase = self.get_phase(t_global)
        if self.phase_is_stance[phase]:
            return np.zeros(3)
        t_local = t_global - self.get_phase_start(phase)
        return self.phase_motion[phase].get_derivative_wrt_duration(t_local)

    def get_jacobian_wrt_durations(self, t_global: float) -> sp.csc_matrix:
        """(3, N-1) derivative of the position w.r.t. the schedule variables."""
        if self._schedule is None:
            raise RuntimeError("no contact schedule attached")
        phase = self.get_phase(t_global)
        return self._schedule.get_jacobian_of_time_dependent_quantity(
            phase,
            self.get_derivative_wrt_duration(t_global),
            self.get_state(t_global).v,
        )

    def get_jacobian_wrt_free_contacts(self, t_global: float) -> sp.csc_matrix:
        """
        (3, 3*n_free) derivative of the position w.r.t. the free contacts
        stacked as [c_1; c_2; ...]. Every entry is stored since the active
        contact changes when phase durations move.
        """
        jac = np.zeros((3, 3 * self.get_n_free_contacts()))
        phase = self.get_phase(t_global)
        c = self.get_contact_index(phase)

        if self.phase_is_stance[phase]:
            weights = {c: 1.0}
        else:
            t_local = t_global - self.get_phase_start(phase)
            w_start, w_goal = self.phase_motion[phase].get_weights(t_local)
            weights = {c: w_start, c + 1: w_goal}

        for idx, w in weights.items():
            if idx == 0:
                continue  # initial contact is fixed
            col = 3 * (idx - 1)
            jac[:, col:col + 3] = w * np.eye(3)

        return dense_to_structural_csc(jac)
