# gait_timing/planning/gait_builder.py
from __future__ import annotations

import logging

import numpy as np

from gait_timing.constraints.total_duration_constraint import TotalDurationConstraint
from gait_timing.models.endeffectors import BIPED_MAP, QUAD_MAP, BipedFoot, Endeffectors, QuadFoot, reverse
from gait_timing.models.swing_motion import DEFAULT_LIFT_HEIGHT
from gait_timing.variables.contact_schedule import ContactSchedule
from gait_timing.variables.ee_motion import EndeffectorMotion
from gait_timing.variables.footholds import FootholdVariables
from gait_timing.variables.variable_set import VariableComposite

logger = logging.getLogger(__name__)


def _append_stance(timeline: list, duration: float):
    # consecutive stance segments of one foot form a single phase
    if timeline and timeline[-1][0]:
        timeline[-1][1] += duration
    else:
        timeline.append([True, duration, None])


def build_alternating_gait(
        nominal: Endeffectors,
        swing_groups: list[list[int]],
        n_steps: int,
        stance: float,
        swing: float,
        step_length: float,
        lift_height: float = DEFAULT_LIFT_HEIGHT,
):
    """
    Gait in which groups of feet swing in turn:
        start with all feet on ground (stance)
        group 0 swings, all feet on ground, group 1 swings, ...
        end with all feet on ground

    Each swinging foot moves step_length forward in x.
    Returns (Endeffectors of EndeffectorMotion, T_total).
    """
    if n_steps < 0:
        raise ValueError("n_steps must be non-negative")
    if not swing_groups:
        raise ValueError("at least one swing group is required")

    pos = [np.asarray(p, dtype=float).reshape(3,).copy() for p in nominal]
    timelines = [[] for _ in pos]
    t = 0.0

    for tl in timelines:
        _append_stance(tl, stance)
    t += stance

    for k in range(n_steps):
        group = swing_groups[k % len(swing_groups)]
        for ee, tl in enumerate(timelines):
            if ee in group:
                pos[ee] = pos[ee] + np.array([step_length, 0.0, 0.0])
                tl.append([False, swing, pos[ee].copy()])
            else:
                _append_stance(tl, swing)
        t += swing

        for tl in timelines:
            _append_stance(tl, stance)
        t += stance

    motions = Endeffectors(len(pos))
    for ee, tl in zip(motions.get_ees_ordered(), timelines):
        motion = EndeffectorMotion(ee)
        motion.set_initial_position(nominal.at(ee))
        for is_stance, duration, goal in tl:
            if is_stance:
                motion.add_stance_phase(duration)
            else:
                motion.add_swing_phase(duration, goal, lift_height)
        motions.set(ee, motion)

    logger.debug("built %d-foot gait, %d steps, T_total=%.3f", len(pos), n_steps, t)
    return motions, t


def biped_nominal_stance(step_width: float, x0: float = 0.0, height: float = 0.0) -> Endeffectors:
    ee_of = reverse(BIPED_MAP)
    nominal = Endeffectors(2)
    nominal.set(ee_of[BipedFoot.L], np.array([x0, +step_width / 2.0, height]))
    nominal.set(ee_of[BipedFoot.R], np.array([x0, -step_width / 2.0, height]))
    return nominal


def build_biped_walk(
        n_steps: int,
        stance: float,
        swing: float,
        step_length: float,
        step_width: float,
        x0: float = 0.0,
        height: float = 0.0,
        lift_height: float = DEFAULT_LIFT_HEIGHT,
):
    """
    alternating walk:
        start with both feet on ground
        first single support = left (right up)
        then alternate
    """
    ee_of = reverse(BIPED_MAP)
    nominal = biped_nominal_stance(step_width, x0, height)
    groups = [[int(ee_of[BipedFoot.R])], [int(ee_of[BipedFoot.L])]]
    return build_alternating_gait(nominal, groups, n_steps, stance, swing, step_length, lift_height)


def quadruped_nominal_stance(length: float, width: float, x0: float = 0.0, height: float = 0.0) -> Endeffectors:
    ee_of = reverse(QUAD_MAP)
    hx, hy = length / 2.0, width / 2.0
    nominal = Endeffectors(4)
    nominal.set(ee_of[QuadFoot.LF], np.array([x0 + hx, +hy, height]))
    nominal.set(ee_of[QuadFoot.RF], np.array([x0 + hx, -hy, height]))
    nominal.set(ee_of[QuadFoot.LH], np.array([x0 - hx, +hy, height]))
    nominal.set(ee_of[QuadFoot.RH], np.array([x0 - hx, -hy, height]))
    return nominal


def build_quadruped_trot(
        n_steps: int,
        stance: float,
        swing: float,
        step_length: float,
        length: float = 0.6,
        width: float = 0.4,
        x0: float = 0.0,
        height: float = 0.0,
        lift_height: float = DEFAULT_LIFT_HEIGHT,
):
    """Diagonal pairs LF-RH and RF-LH swing in turn."""
    ee_of = reverse(QUAD_MAP)
    nominal = quadruped_nominal_stance(length, width, x0, height)
    groups = [
        [int(ee_of[QuadFoot.LF]), int(ee_of[QuadFoot.RH])],
        [int(ee_of[QuadFoot.RF]), int(ee_of[QuadFoot.LH])],
    ]
    return build_alternating_gait(nominal, groups, n_steps, stance, swing, step_length, lift_height)


def build_schedules(motions: Endeffectors, min_duration: float, max_duration: float) -> Endeffectors:
    """
    One ContactSchedule per foot, attached to its motion.
    Feet that never swing have a single phase and get None.
    """
    schedules = Endeffectors(motions.get_count())
    for ee, motion in motions.items():
        if motion.get_n_phases() < 2:
            logger.debug("ee %s never swings, timing not optimized", int(ee))
            continue
        schedule = ContactSchedule(ee, motion.get_phase_durations(), min_duration, max_duration)
        motion.attach_schedule(schedule)
        schedules.set(ee, schedule)
    return schedules


def build_variables(motions: Endeffectors, schedules: Endeffectors | None = None) -> VariableComposite:
    """Global decision vector: footholds of every foot, then their schedules."""
    variables = VariableComposite()
    for motion in motions:
        if motion.get_n_free_contacts() > 0:
            variables.add(FootholdVariables(motion))
    if schedules is not None:
        for schedule in schedules:
            if schedule is not None:
                variables.add(schedule)
    return variables


def build_total_duration_constraints(schedules: Endeffectors) -> list[TotalDurationConstraint]:
    return [TotalDurationConstraint(s) for s in schedules if s is not None]
