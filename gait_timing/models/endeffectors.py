# gait_timing/models/endeffectors.py
from __future__ import annotations

import copy
from enum import IntEnum

import numpy as np


class EndeffectorID(IntEnum):
    E0 = 0
    E1 = 1
    E2 = 2
    E3 = 3
    E4 = 4
    E5 = 5


MAX_ENDEFFECTORS = len(EndeffectorID)


class Endeffectors:
    """
    Assigns one value to each endeffector E0..E(n-1).

    Common values are xyz-positions (np.ndarray (3,)), contact flags (bool)
    or per-foot objects such as motions and schedules.
    The count is fixed at construction or changed explicitly via set_count().
    """

    def __init__(self, n_ee: int = 0, value=None):
        self._ee = []
        self.set_count(n_ee, value)

    @classmethod
    def from_values(cls, values) -> "Endeffectors":
        values = list(values)
        ret = cls(len(values))
        for i, v in enumerate(values):
            ret._ee[i] = v
        return ret

    def set_count(self, n_ee: int, value=None):
        n_ee = int(n_ee)
        if not 0 <= n_ee <= MAX_ENDEFFECTORS:
            raise ValueError(f"endeffector count must be in [0, {MAX_ENDEFFECTORS}], got {n_ee}")
        if n_ee < len(self._ee):
            del self._ee[n_ee:]
        else:
            self._ee.extend(copy.deepcopy(value) for _ in range(n_ee - len(self._ee)))

    def set_all(self, value):
        for i in range(len(self._ee)):
            self._ee[i] = copy.deepcopy(value)

    def get_count(self) -> int:
        return len(self._ee)

    def get_ees_ordered(self) -> list[EndeffectorID]:
        return [EndeffectorID(i) for i in range(len(self._ee))]

    def _index(self, ee) -> int:
        idx = int(ee)
        if not 0 <= idx < len(self._ee):
            raise IndexError(f"endeffector {ee!r} out of range for count {len(self._ee)}")
        return idx

    def at(self, ee):
        return self._ee[self._index(ee)]

    def set(self, ee, value):
        self._ee[self._index(ee)] = value

    __getitem__ = at
    __setitem__ = set

    def __len__(self) -> int:
        return len(self._ee)

    def __iter__(self):
        return iter(self._ee)

    def items(self):
        return zip(self.get_ees_ordered(), self._ee)

    def to_impl(self) -> tuple:
        """Read-only copy of the underlying values, ordered E0->EN."""
        return tuple(copy.deepcopy(self._ee))

    def _check_same_count(self, other: "Endeffectors"):
        if other.get_count() != self.get_count():
            raise ValueError(f"endeffector count mismatch: {self.get_count()} vs {other.get_count()}")

    def __sub__(self, rhs: "Endeffectors") -> "Endeffectors":
        self._check_same_count(rhs)
        return Endeffectors.from_values(a - b for a, b in zip(self._ee, rhs._ee))

    def __truediv__(self, scalar: float) -> "Endeffectors":
        return Endeffectors.from_values(a / scalar for a in self._ee)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Endeffectors):
            return NotImplemented
        if other.get_count() != self.get_count():
            return False
        return all(np.array_equal(a, b) for a, b in zip(self._ee, other._ee))

    def __ne__(self, other) -> bool:
        eq = self.__eq__(other)
        if eq is NotImplemented:
            return eq
        return not eq

    __hash__ = None

    # contact-flag helpers, meaningful for boolean values
    def invert(self) -> "Endeffectors":
        """Copy with every flag flipped."""
        return Endeffectors.from_values(not bool(v) for v in self._ee)

    def get_true_count(self) -> int:
        return sum(1 for v in self._ee if bool(v))

    def __repr__(self) -> str:
        return f"Endeffectors({self._ee!r})"

    def __str__(self) -> str:
        return ", ".join(str(v) for v in self._ee)


# some specific morphologies
class BipedFoot(IntEnum):
    L = 0
    R = 1


BIPED_MAP = {
    EndeffectorID.E0: BipedFoot.L,
    EndeffectorID.E1: BipedFoot.R,
}


class QuadFoot(IntEnum):
    RF = 0
    LF = 1
    LH = 2
    RH = 3


QUAD_MAP = {
    EndeffectorID.E0: QuadFoot.LH,
    EndeffectorID.E1: QuadFoot.LF,
    EndeffectorID.E2: QuadFoot.RH,
    EndeffectorID.E3: QuadFoot.RF,
}


class RotorID(IntEnum):
    L = 0
    R = 1
    F = 2
    H = 3


ROTOR_MAP = {
    EndeffectorID.E0: RotorID.L,
    EndeffectorID.E1: RotorID.F,
    EndeffectorID.E2: RotorID.R,
    EndeffectorID.E3: RotorID.H,
}


def reverse(mapping: dict) -> dict:
    """Inverse lookup, e.g. QuadFoot -> EndeffectorID."""
    return {v: k for k, v in mapping.items()}
