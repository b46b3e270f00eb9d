# gait_timing/control/timing_sqp.py
from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
import scipy.sparse as sp
import osqp

from gait_timing.constraints.constraint import ConstraintComposite
from gait_timing.variables.variable_set import VariableComposite

logger = logging.getLogger(__name__)


@dataclass
class SqpResult:
    x: np.ndarray
    iterations: int
    violation: float
    success: bool
    status: str


class TimingSqpSolver:
    """
    Sequential QP driving footholds and phase durations onto the constraints.

    Each iteration linearizes g(x) around the current iterate and solves

        min  0.5 rho ||dx||^2
        s.t. lb - g(x) <= J dx <= ub - g(x)
             xl - x    <=   dx <= xu - x

    with OSQP, then writes x + dx back into the variable sets (which in turn
    notifies the endeffector motions).

    OSQP requires that matrix updates keep the same sparsity pattern, so
    A = [J; I] is set up once with every J entry stored and later
    iterations only mutate its data.
    """

    def __init__(self,
                 variables: VariableComposite,
                 constraints: ConstraintComposite,
                 rho: float = 1.0,
                 max_iter: int = 20,
                 tol: float = 1e-4,
                 eps: float = 1e-7,
                 verbose: bool = False):
        if rho <= 0.0:
            raise ValueError("rho must be positive")
        self.variables = variables
        self.constraints = constraints
        self.rho = float(rho)
        self.max_iter = int(max_iter)
        self.tol = float(tol)
        self.verbose = bool(verbose)

        self.n = variables.get_rows()
        self.m_c = constraints.get_rows()
        if self.n == 0:
            raise ValueError("no optimization variables")

        # P is diagonal (upper triangular storage is the diagonal itself)
        P0 = sp.eye(self.n, format="csc") * self.rho
        q0 = np.zeros(self.n)

        # A pattern: fully stored constraint Jacobian on top of identity.
        self._A_pattern = sp.csc_matrix(np.vstack((np.ones((self.m_c, self.n)), np.eye(self.n))))
        A0 = self._A_pattern.copy()
        A0.data[:] = self._A_data(np.zeros((self.m_c, self.n)))
        m = self.m_c + self.n
        l0 = -np.inf * np.ones(m)
        u0 = np.inf * np.ones(m)

        self.prob = osqp.OSQP()
        self.prob.setup(P=P0, q=q0, A=A0, l=l0, u=u0,
                        eps_abs=eps, eps_rel=eps, verbose=self.verbose)

    def _A_data(self, J: np.ndarray) -> np.ndarray:
        # CSC data is column-major: column j holds J[:, j] then the identity entry
        return np.vstack((J, np.ones((1, self.n)))).ravel(order="F")

    def step(self) -> tuple[np.ndarray, bool, str]:
        """Solve one linearized QP and apply the step."""
        x = self.variables.get_values()
        xl, xu = self.variables.get_bound_vectors()

        g = self.constraints.get_values()
        lb, ub = self.constraints.get_bound_vectors()
        J = self.constraints.get_jacobian(self.variables).toarray()
        if J.shape != (self.m_c, self.n):
            raise ValueError(f"constraint Jacobian shape {J.shape} != {(self.m_c, self.n)}")

        l = np.hstack((lb - g, xl - x))
        u = np.hstack((ub - g, xu - x))

        self.prob.update(Ax=self._A_data(J), l=l, u=u)
        res = self.prob.solve()

        ok = (res.info.status_val in (1, 2))  # solved or solved inaccurate
        if not ok:
            return x, False, res.info.status

        dx = np.asarray(res.x, dtype=float)
        x_new = x + dx
        self.variables.set_variables(x_new)
        return x_new, True, res.info.status

    def solve(self) -> SqpResult:
        x = self.variables.get_values()
        status = "not started"
        for it in range(self.max_iter):
            violation = self.constraints.get_violation()
            logger.debug("sqp iter %d: violation %.3e", it, violation)
            if violation < self.tol:
                return SqpResult(x, it, violation, True, status)

            x, ok, status = self.step()
            if not ok:
                logger.warning("QP subproblem failed at iteration %d: %s", it, status)
                return SqpResult(x, it, violation, False, status)

        violation = self.constraints.get_violation()
        success = violation < self.tol
        if not success:
            logger.warning("sqp stopped after %d iterations, violation %.3e", self.max_iter, violation)
        return SqpResult(x, self.max_iter, violation, success, status)
