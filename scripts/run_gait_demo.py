import logging
import os
import sys
from pathlib import Path

import numpy as np

_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from gait_timing.config import load_config
from gait_timing.constraints.constraint import ConstraintComposite
from gait_timing.constraints.foothold_constraint import FootholdConstraint
from gait_timing.control.timing_sqp import TimingSqpSolver
from gait_timing.models.endeffectors import Endeffectors, QUAD_MAP, QuadFoot, reverse
from gait_timing.planning.gait_builder import (
    build_quadruped_trot,
    build_schedules,
    build_total_duration_constraints,
    build_variables,
    quadruped_nominal_stance,
)
from gait_timing.variables.variable_set import Bounds
from gait_timing.viz.plot_ee_motion import plot_ee_motion, sample_motions


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    schedule_cfg, walk_cfg = load_config({
        "schedule": {"min_phase_duration": 0.1, "max_phase_duration": 1.5, "lift_height": 0.08},
        "walk": {"n_steps": 4, "stance": 0.2, "swing": 0.3, "step_length": 0.12},
    })

    motions, T = build_quadruped_trot(
        n_steps=walk_cfg.n_steps,
        stance=walk_cfg.stance,
        swing=walk_cfg.swing,
        step_length=walk_cfg.step_length,
        height=walk_cfg.height,
        lift_height=schedule_cfg.lift_height,
    )
    schedules = None
    if schedule_cfg.optimize_timing:
        schedules = build_schedules(motions, schedule_cfg.min_phase_duration, schedule_cfg.max_phase_duration)
    variables = build_variables(motions, schedules)

    # Goal: end the walk in the nominal stance 0.35 m ahead of the start,
    # footholds on flat ground within a small box around it.
    goal = quadruped_nominal_stance(length=0.6, width=0.4, x0=0.35, height=walk_cfg.height)
    box = [Bounds(-0.02, 0.02), Bounds(-0.02, 0.02), Bounds(0.0, 0.0)]
    constraints = ConstraintComposite([FootholdConstraint(motions, goal, T, bounds=box, name="final_stance")])

    # Mid-walk: LF must be nearly down on its first foothold late in the swing.
    # Footholds and durations are both free, the solver may move either.
    lf = Endeffectors.from_values([motions.at(reverse(QUAD_MAP)[QuadFoot.LF])])
    t_late_swing = walk_cfg.stance + 0.9 * walk_cfg.swing
    lf_goal = Endeffectors.from_values([np.array([0.3 + walk_cfg.step_length, 0.2, walk_cfg.height])])
    near = [Bounds(-0.02, 0.02), Bounds(-0.02, 0.02), Bounds(0.0, 0.01)]
    constraints.add(FootholdConstraint(lf, lf_goal, t_late_swing, bounds=near, name="lf_touchdown"))

    if schedules is not None:
        for c in build_total_duration_constraints(schedules):
            constraints.add(c)

    print("variables:", variables.get_rows(), "constraints:", constraints.get_rows())
    print("initial violation:", constraints.get_violation())

    solver = TimingSqpSolver(variables, constraints, rho=1.0, max_iter=30, tol=1e-4)
    res = solver.solve()

    print("Done.")
    print("T:", T, "iterations:", res.iterations, "status:", res.status)
    print("final violation:", res.violation)
    for ee, m in motions.items():
        print(f"{QUAD_MAP[ee].name}: durations={np.round(m.get_phase_durations(), 3).tolist()} "
              f"last foothold={np.round(m.get_contacts()[-1], 3).tolist()}")

    os.makedirs("results/plots", exist_ok=True)
    names = [QUAD_MAP[ee].name for ee in motions.get_ees_ordered()]
    plot_ee_motion(sample_motions(motions), "results/plots/ee_motion.png", names=names)


if __name__ == "__main__":
    main()
