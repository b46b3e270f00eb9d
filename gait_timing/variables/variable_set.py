# gait_timing/variables/variable_set.py
from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Bounds:
    lower: float = -np.inf
    upper: float = np.inf


NO_BOUND = Bounds()
EQUALITY_BOUND = Bounds(0.0, 0.0)


class VariableSet:
    """
    Block of optimization variables the solver reads and writes each iteration.

    Concrete sets provide:
        get_rows()        number of variables
        get_values()      current values, 1D (rows,)
        set_variables(x)  write values, 1D (rows,)
        check_variables(x) raise if x would be rejected by set_variables
        get_bounds()      list of Bounds, one per row
    """

    def __init__(self, n_rows: int, name: str):
        self.n_rows = int(n_rows)
        self.name = name

    def get_rows(self) -> int:
        return self.n_rows

    def get_values(self) -> np.ndarray:
        raise NotImplementedError

    def set_variables(self, x: np.ndarray):
        raise NotImplementedError

    def get_bounds(self) -> list[Bounds]:
        raise NotImplementedError

    def check_variables(self, x: np.ndarray) -> np.ndarray:
        return self._check_length(x)

    def _check_length(self, x: np.ndarray) -> np.ndarray:
        x = np.asarray(x, dtype=float).reshape(-1)
        if x.shape[0] != self.get_rows():
            raise ValueError(f"{self.name}: expected {self.get_rows()} values, got {x.shape[0]}")
        return x


class VariableComposite:
    """
    Ordered stack of variable sets forming the global decision vector:
        x = [x_set0; x_set1; ...]
    """

    def __init__(self, sets=()):
        self._sets = []
        for s in sets:
            self.add(s)

    def add(self, var_set: VariableSet):
        if self.has(var_set.name):
            raise ValueError(f"duplicate variable set name '{var_set.name}'")
        self._sets.append(var_set)

    def has(self, name: str) -> bool:
        return any(s.name == name for s in self._sets)

    def get(self, name: str) -> VariableSet:
        for s in self._sets:
            if s.name == name:
                return s
        raise KeyError(name)

    def get_offset(self, name: str) -> int:
        offset = 0
        for s in self._sets:
            if s.name == name:
                return offset
            offset += s.get_rows()
        raise KeyError(name)

    def get_sets(self) -> list[VariableSet]:
        return list(self._sets)

    def get_rows(self) -> int:
        return sum(s.get_rows() for s in self._sets)

    def get_values(self) -> np.ndarray:
        if not self._sets:
            return np.zeros(0)
        return np.concatenate([np.asarray(s.get_values(), dtype=float).reshape(-1) for s in self._sets])

    def _split(self, x: np.ndarray) -> list[np.ndarray]:
        x = np.asarray(x, dtype=float).reshape(-1)
        if x.shape[0] != self.get_rows():
            raise ValueError(f"expected {self.get_rows()} values, got {x.shape[0]}")
        offsets = np.cumsum([0] + [s.get_rows() for s in self._sets])
        return [x[a:b] for a, b in zip(offsets[:-1], offsets[1:])]

    def set_variables(self, x: np.ndarray):
        """All sets are checked before any is written, a rejected x changes nothing."""
        chunks = self._split(x)
        for s, chunk in zip(self._sets, chunks):
            s.check_variables(chunk)
        for s, chunk in zip(self._sets, chunks):
            s.set_variables(chunk)

    def get_bounds(self) -> list[Bounds]:
        bounds = []
        for s in self._sets:
            bounds.extend(s.get_bounds())
        return bounds

    def get_bound_vectors(self) -> tuple[np.ndarray, np.ndarray]:
        bounds = self.get_bounds()
        lower = np.array([b.lower for b in bounds], dtype=float)
        upper = np.array([b.upper for b in bounds], dtype=float)
        return lower, upper
