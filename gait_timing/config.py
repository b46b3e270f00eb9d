# gait_timing/config.py
from __future__ import annotations

import logging
from dataclasses import dataclass, fields

from gait_timing.models.swing_motion import DEFAULT_LIFT_HEIGHT

logger = logging.getLogger(__name__)


@dataclass
class ScheduleConfig:
    min_phase_duration: float = 0.1   # [s]
    max_phase_duration: float = 2.0   # [s]
    lift_height: float = DEFAULT_LIFT_HEIGHT  # swing apex [m]
    optimize_timing: bool = True


@dataclass
class WalkConfig:
    n_steps: int = 4
    stance: float = 0.4        # [s]
    swing: float = 0.3         # [s]
    step_length: float = 0.15  # [m]
    step_width: float = 0.20   # [m], biped lateral foot distance, unused by the trot
    height: float = 0.0        # ground height [m]


def _from_section(cls, section: dict):
    known = {f.name for f in fields(cls)}
    unknown = set(section) - known
    if unknown:
        raise ValueError(f"unknown {cls.__name__} keys: {sorted(unknown)}")
    return cls(**section)


def load_config(config: dict) -> tuple[ScheduleConfig, WalkConfig]:
    """
    Build configs from a nested mapping with optional sections
    'schedule' and 'walk'. Missing sections fall back to defaults.
    """
    if "schedule" not in config:
        logger.warning("Missing 'schedule' section in configuration, using defaults")
    if "walk" not in config:
        logger.warning("Missing 'walk' section in configuration, using defaults")

    schedule = _from_section(ScheduleConfig, dict(config.get("schedule", {})))
    walk = _from_section(WalkConfig, dict(config.get("walk", {})))

    if schedule.min_phase_duration > schedule.max_phase_duration:
        raise ValueError("min_phase_duration must not exceed max_phase_duration")
    return schedule, walk
