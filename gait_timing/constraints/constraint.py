# gait_timing/constraints/constraint.py
from __future__ import annotations

import numpy as np
import scipy.sparse as sp

from gait_timing.variables.variable_set import Bounds, VariableComposite


class Constraint:
    """
    Block of constraint rows lb <= g(x) <= ub.

    Concrete constraints provide:
        get_values()           g(x), 1D (rows,)
        get_bounds()           list of Bounds, one per row
        get_jacobian(vars)     dg/dx as csc, shape (rows, vars.get_rows())
    The Jacobian pattern must not depend on the current iterate.
    """

    def __init__(self, n_rows: int, name: str):
        self.n_rows = int(n_rows)
        self.name = name

    def get_rows(self) -> int:
        return self.n_rows

    def get_values(self) -> np.ndarray:
        raise NotImplementedError

    def get_bounds(self) -> list[Bounds]:
        raise NotImplementedError

    def get_jacobian(self, variables: VariableComposite) -> sp.csc_matrix:
        raise NotImplementedError


class ConstraintComposite:
    """Stacks constraints row-wise: g = [g_0; g_1; ...]."""

    def __init__(self, constraints=()):
        self._constraints = list(constraints)

    def add(self, constraint: Constraint):
        self._constraints.append(constraint)

    def get_rows(self) -> int:
        return sum(c.get_rows() for c in self._constraints)

    def get_values(self) -> np.ndarray:
        if not self._constraints:
            return np.zeros(0)
        return np.concatenate([np.asarray(c.get_values(), dtype=float).reshape(-1) for c in self._constraints])

    def get_bounds(self) -> list[Bounds]:
        bounds = []
        for c in self._constraints:
            bounds.extend(c.get_bounds())
        return bounds

    def get_bound_vectors(self) -> tuple[np.ndarray, np.ndarray]:
        bounds = self.get_bounds()
        lower = np.array([b.lower for b in bounds], dtype=float)
        upper = np.array([b.upper for b in bounds], dtype=float)
        return lower, upper

    def get_jacobian(self, variables: VariableComposite) -> sp.csc_matrix:
        if not self._constraints:
            return sp.csc_matrix((0, variables.get_rows()))
        return sp.vstack([c.get_jacobian(variables) for c in self._constraints], format="csc")

    def get_violation(self) -> float:
        """Largest distance of g(x) outside its bounds (0 if feasible)."""
        if not self._constraints:
            return 0.0
        g = self.get_values()
        lower, upper = self.get_bound_vectors()
        return float(np.max(np.maximum(lower - g, 0.0) + np.maximum(g - upper, 0.0)))
