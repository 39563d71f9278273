"""Dense linear system solver used by every solver in the package."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .config import SINGULAR_PIVOT_TOLERANCE
from .types import SingularMatrixError


def solve_linear_system(
    matrix: Sequence[Sequence[float]] | np.ndarray,
    rhs: Sequence[float] | np.ndarray,
    tolerance: float = SINGULAR_PIVOT_TOLERANCE,
) -> np.ndarray:
    """Solve Ax = b using Gaussian elimination with partial pivoting.

    Args:
        matrix: Square coefficient matrix A (n x n)
        rhs: Right-hand side vector b (length n)
        tolerance: Pivot magnitude below which A is treated as singular

    Returns:
        Solution vector x as a float array

    Raises:
        SingularMatrixError: If a pivot falls below ``tolerance``
        ValueError: If the shapes of A and b do not match
    """
    A = np.array(matrix, dtype=float)
    b = np.array(rhs, dtype=float).reshape(-1)
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise ValueError(f"Coefficient matrix must be square, got shape {A.shape}")
    n = A.shape[0]
    if b.shape[0] != n:
        raise ValueError(f"Right-hand side has length {b.shape[0]}, expected {n}")

    # Work on augmented matrix copy
    M = np.hstack([A, b[:, None]])

    for col in range(n):
        pivot_row = col + int(np.argmax(np.abs(M[col:, col])))
        if pivot_row != col:
            M[[col, pivot_row]] = M[[pivot_row, col]]

        if abs(M[col, col]) < tolerance:
            raise SingularMatrixError()

        for row in range(col + 1, n):
            factor = M[row, col] / M[col, col]
            M[row, col:] -= factor * M[col, col:]

    # Back substitution
    x = np.zeros(n)
    for i in range(n - 1, -1, -1):
        x[i] = (M[i, n] - M[i, i + 1 : n] @ x[i + 1 :]) / M[i, i]
    return x
