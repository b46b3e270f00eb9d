# scripts/test_timing_sqp.py
from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest

_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from gait_timing.constraints.constraint import ConstraintComposite
from gait_timing.constraints.foothold_constraint import FootholdConstraint
from gait_timing.constraints.total_duration_constraint import TotalDurationConstraint
from gait_timing.control.timing_sqp import TimingSqpSolver
from gait_timing.models.endeffectors import EndeffectorID, Endeffectors
from gait_timing.planning.gait_builder import (
    build_biped_walk,
    build_schedules,
    build_total_duration_constraints,
    build_variables,
)
from gait_timing.variables.variable_set import NO_BOUND, Bounds, VariableComposite


def _setup(optimize_timing: bool):
    motions, T = build_biped_walk(n_steps=2, stance=0.4, swing=0.3, step_length=0.15, step_width=0.2)
    schedules = build_schedules(motions, 0.1, 2.0) if optimize_timing else None
    variables = build_variables(motions, schedules)

    target = Endeffectors.from_values(m.get_contacts()[-1] + np.array([0.05, -0.02, 0.0]) for m in motions)
    constraints = ConstraintComposite([FootholdConstraint(motions, target, T)])
    if schedules is not None:
        for c in build_total_duration_constraints(schedules):
            constraints.add(c)
    return motions, schedules, variables, constraints, target, T


def test_moves_final_footholds_onto_target():
    motions, _, variables, constraints, target, _ = _setup(optimize_timing=False)
    solver = TimingSqpSolver(variables, constraints, tol=1e-4)
    res = solver.solve()

    assert res.success, res.status
    assert res.violation < 1e-4
    for ee, m in motions.items():
        assert np.allclose(m.get_contacts()[-1], target.at(ee), atol=1e-3)
    assert np.allclose(res.x, variables.get_values())


def test_timing_variables_keep_total_time():
    motions, schedules, variables, constraints, target, T = _setup(optimize_timing=True)
    solver = TimingSqpSolver(variables, constraints, tol=1e-4)
    res = solver.solve()

    assert res.success, res.status
    for ee, m in motions.items():
        assert np.allclose(m.get_contacts()[-1], target.at(ee), atol=1e-3)
        assert m.get_total_time() == pytest.approx(T)
    for s in schedules:
        assert np.sum(s.get_phase_durations()) == pytest.approx(s.get_total_time())
        assert s.get_phase_durations()[-1] > 0.0


def test_feasible_start_returns_immediately():
    motions, T = build_biped_walk(n_steps=2, stance=0.4, swing=0.3, step_length=0.15, step_width=0.2)
    variables = build_variables(motions)
    target = Endeffectors.from_values(m.get_contacts()[-1] for m in motions)
    constraints = ConstraintComposite([FootholdConstraint(motions, target, T)])

    res = TimingSqpSolver(variables, constraints).solve()
    assert res.success
    assert res.iterations == 0


def test_mid_swing_target_moves_phase_durations():
    motions, T = build_biped_walk(n_steps=2, stance=0.4, swing=0.3, step_length=0.15, step_width=0.2)
    schedules = build_schedules(motions, 0.1, 2.0)
    right = motions.at(EndeffectorID.E1)     # stance 0.4, swing 0.3, stance 1.1
    schedule = schedules.at(EndeffectorID.E1)
    variables = VariableComposite([schedule])

    t_mid = 0.55
    goal = right.get_state(t_mid).p + np.array([0.03, 0.0, 0.0])
    x_only = [Bounds(0.0, 0.0), NO_BOUND, NO_BOUND]
    constraints = ConstraintComposite([
        FootholdConstraint(Endeffectors.from_values([right]), Endeffectors.from_values([goal]),
                           t_mid, bounds=x_only),
        TotalDurationConstraint(schedule),
    ])
    before = schedule.get_phase_durations()

    res = TimingSqpSolver(variables, constraints, max_iter=30, tol=1e-4).solve()

    assert res.success, res.status
    after = schedule.get_phase_durations()
    assert not np.allclose(after, before, atol=1e-3)
    assert right.get_state(t_mid).p[0] == pytest.approx(goal[0], abs=1e-3)
    assert np.sum(after) == pytest.approx(T)
    assert right.get_total_time() == pytest.approx(T)
    assert after[-1] >= 0.1 - 1e-6
    assert right.get_phase_durations() == pytest.approx(after)


def test_rejects_empty_problem():
    with pytest.raises(ValueError):
        TimingSqpSolver(VariableComposite(), ConstraintComposite())
    motions, T = build_biped_walk(n_steps=2, stance=0.4, swing=0.3, step_length=0.15, step_width=0.2)
    with pytest.raises(ValueError):
        TimingSqpSolver(build_variables(motions), ConstraintComposite(), rho=0.0)


def main():
    test_moves_final_footholds_onto_target()
    test_timing_variables_keep_total_time()
    test_feasible_start_returns_immediately()
    test_mid_swing_target_moves_phase_durations()
    test_rejects_empty_problem()
    print("OK: timing SQP verified.")


if __name__ == "__main__":
    main()
