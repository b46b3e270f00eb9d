# scripts/test_gait_builder.py
from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest

_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from gait_timing.models.endeffectors import BipedFoot, BIPED_MAP, QUAD_MAP, QuadFoot, reverse
from gait_timing.planning.gait_builder import (
    build_biped_walk,
    build_quadruped_trot,
    build_schedules,
    build_variables,
)


def test_biped_walk_phases():
    motions, T = build_biped_walk(n_steps=2, stance=0.4, swing=0.3, step_length=0.15, step_width=0.2)
    ee_of = reverse(BIPED_MAP)
    L = motions.at(ee_of[BipedFoot.L])
    R = motions.at(ee_of[BipedFoot.R])

    assert T == pytest.approx(0.4 + 0.3 + 0.4 + 0.3 + 0.4)
    # right swings first, then left; consecutive stances are merged
    assert R.phase_is_stance == [True, False, True]
    assert R.get_phase_durations() == pytest.approx([0.4, 0.3, 1.1])
    assert L.phase_is_stance == [True, False, True]
    assert L.get_phase_durations() == pytest.approx([1.1, 0.3, 0.4])
    for m in motions:
        assert m.get_total_time() == pytest.approx(T)

    assert np.allclose(L.get_contacts()[0], [0.0, 0.1, 0.0])
    assert np.allclose(R.get_free_contact_positions()[0], [0.15, -0.1, 0.0])
    assert not R.is_in_contact(0.55)
    assert L.is_in_contact(0.55)


def test_quadruped_trot_diagonal_pairs():
    motions, T = build_quadruped_trot(n_steps=3, stance=0.2, swing=0.25, step_length=0.1)
    ee_of = reverse(QUAD_MAP)
    t_first_swing = 0.2 + 0.125
    t_second_swing = 0.2 + 0.25 + 0.2 + 0.125

    assert not motions.at(ee_of[QuadFoot.LF]).is_in_contact(t_first_swing)
    assert not motions.at(ee_of[QuadFoot.RH]).is_in_contact(t_first_swing)
    assert motions.at(ee_of[QuadFoot.RF]).is_in_contact(t_first_swing)
    assert motions.at(ee_of[QuadFoot.LH]).is_in_contact(t_first_swing)

    assert motions.at(ee_of[QuadFoot.RF]).is_in_contact(t_second_swing) is False
    assert motions.at(ee_of[QuadFoot.LF]).is_in_contact(t_second_swing) is True

    # LF-RH swing twice in three steps
    lf = motions.at(ee_of[QuadFoot.LF])
    assert lf.get_n_free_contacts() == 2
    assert np.allclose(lf.get_free_contact_positions()[-1], [0.3 + 0.2, 0.2, 0.0])
    for m in motions:
        assert m.get_total_time() == pytest.approx(T)


def test_schedules_and_variables():
    motions, T = build_biped_walk(n_steps=2, stance=0.4, swing=0.3, step_length=0.15, step_width=0.2)
    schedules = build_schedules(motions, 0.1, 2.0)
    variables = build_variables(motions, schedules)

    names = [s.name for s in variables.get_sets()]
    assert names == ["ee_footholds_0", "ee_footholds_1", "ee_schedule_0", "ee_schedule_1"]
    assert variables.get_rows() == 3 + 3 + 2 + 2
    for ee, m in motions.items():
        assert m.get_schedule() is schedules.at(ee)
        assert schedules.at(ee).get_total_time() == pytest.approx(T)

    x = variables.get_values()
    variables.set_variables(x)
    assert np.allclose(variables.get_values(), x)


def test_foot_that_never_swings_has_no_schedule():
    motions, _ = build_biped_walk(n_steps=1, stance=0.4, swing=0.3, step_length=0.15, step_width=0.2)
    schedules = build_schedules(motions, 0.1, 2.0)
    ee_of = reverse(BIPED_MAP)
    assert schedules.at(ee_of[BipedFoot.L]) is None
    assert schedules.at(ee_of[BipedFoot.R]) is not None

    variables = build_variables(motions, schedules)
    assert [s.name for s in variables.get_sets()] == ["ee_footholds_1", "ee_schedule_1"]


def main():
    test_biped_walk_phases()
    test_quadruped_trot_diagonal_pairs()
    test_schedules_and_variables()
    test_foot_that_never_swings_has_no_schedule()
    print("OK: gait builder verified.")


if __name__ == "__main__":
    main()
