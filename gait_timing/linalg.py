# gait_timing/linalg.py
from __future__ import annotations

import numpy as np
import scipy.sparse as sp


def full_pattern_csc(n_rows: int, n_cols: int) -> sp.csc_matrix:
    """
    CSC matrix storing every (i, j) entry, data initialized to zero.
    nnz stays n_rows * n_cols whatever values are written later.
    """
    pattern = sp.csc_matrix(np.ones((n_rows, n_cols), dtype=float))
    pattern.data[:] = 0.0
    return pattern


def dense_to_structural_csc(dense: np.ndarray) -> sp.csc_matrix:
    """
    Convert a dense block to CSC but also regard 0.0 as a stored element,
    because entries that are zero now may turn nonzero at a later iterate.

    CSC data of a full pattern is column-major:
        col0 rows 0..m-1, then col1 rows 0..m-1, ...
    """
    dense = np.atleast_2d(np.asarray(dense, dtype=float))
    M = full_pattern_csc(*dense.shape)
    M.data[:] = dense.ravel(order="F")
    return M
