"""Least-squares fit of an axis-aligned ellipse to four or more points.

Minimises the algebraic residuals r_i = (x_i-h)²/a² + (y_i-k)²/b² - 1 over
(h, k, a, b) with a dedicated Levenberg-Marquardt loop that uses the
analytic Jacobian. Several initialisations are tried and the one with the
smallest RMS residual wins.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

import numpy as np

from . import formatting
from .config import GEOMETRY_PRECISION
from .deadline import Deadline
from .exact import ensure_finite
from .linalg import solve_linear_system
from .logging_config import get_logger
from .quality import ellipse_r_squared
from .types import DataPoint, EquationKind, ErrorCode, FitError, FitResult, SingularMatrixError

logger = get_logger("ellipse_fit")

MAX_ITERATIONS = 300
INITIAL_DAMPING = 1e-3
DAMPING_DECREASE = 0.3
DAMPING_INCREASE = 3.0
MIN_DAMPING = 1e-15
MAX_DAMPING = 1e3
ABANDON_DAMPING = 1e2
MIN_SEMI_AXIS = 0.01
CONVERGED_ERROR = 1e-14
STALLED_CHANGE = 1e-12


def _residuals(x: np.ndarray, y: np.ndarray, params: np.ndarray) -> np.ndarray:
    h, k, a, b = params
    return (x - h) ** 2 / (a * a) + (y - k) ** 2 / (b * b) - 1.0


def _jacobian(x: np.ndarray, y: np.ndarray, params: np.ndarray) -> np.ndarray:
    h, k, a, b = params
    dx = x - h
    dy = y - k
    return np.column_stack(
        [
            -2.0 * dx / (a * a),
            -2.0 * dy / (b * b),
            -2.0 * dx * dx / (a**3),
            -2.0 * dy * dy / (b**3),
        ]
    )


def initial_estimates(x: np.ndarray, y: np.ndarray) -> list[np.ndarray]:
    """Starting (h, k, a, b) guesses, in the order they are tried."""
    x_mean, y_mean = float(np.mean(x)), float(np.mean(y))
    std_x, std_y = float(np.std(x)), float(np.std(y))
    x_min, x_max = float(np.min(x)), float(np.max(x))
    y_min, y_max = float(np.min(y)), float(np.max(y))

    # Points 1 and 3 bracket x, points 2 and 4 bracket y
    first_four = [
        (x[0] + x[2]) / 2.0,
        (y[1] + y[3]) / 2.0,
        max(abs(x[2] - x[0]) / 2.0, 0.1),
        max(abs(y[3] - y[1]) / 2.0, 0.1),
    ]
    return [
        np.array([x_mean, y_mean, max(std_x * 1.5, 0.1), max(std_y * 1.5, 0.1)]),
        np.array(
            [
                (x_min + x_max) / 2.0,
                (y_min + y_max) / 2.0,
                max((x_max - x_min) / 2.0, 0.1),
                max((y_max - y_min) / 2.0, 0.1),
            ]
        ),
        np.array(first_four, dtype=float),
        np.array([x_mean, y_mean, max(std_x * 2.5, 0.5), max(std_y * 2.5, 0.5)]),
    ]


def refine_ellipse(
    x: np.ndarray, y: np.ndarray, initial: np.ndarray, deadline: Optional[Deadline] = None
) -> np.ndarray:
    """Run the ellipse LM loop from one initialisation and return (h, k, a, b)."""
    params = initial.astype(float).copy()
    damping = INITIAL_DAMPING
    previous_error = math.inf
    n = x.shape[0]

    for _ in range(MAX_ITERATIONS):
        if deadline is not None and deadline.expired():
            break
        residuals = _residuals(x, y, params)
        error = float(np.sum(residuals**2)) / n
        if error < CONVERGED_ERROR or abs(previous_error - error) < STALLED_CHANGE:
            break

        jacobian = _jacobian(x, y, params)
        normal = jacobian.T @ jacobian + damping * np.eye(4)
        try:
            delta = solve_linear_system(normal, -(jacobian.T @ residuals))
        except SingularMatrixError:
            damping = min(damping * DAMPING_INCREASE, MAX_DAMPING)
            if damping > ABANDON_DAMPING:
                break
            continue

        trial = params + delta
        trial[2] = max(MIN_SEMI_AXIS, trial[2])
        trial[3] = max(MIN_SEMI_AXIS, trial[3])
        trial_error = float(np.sum(_residuals(x, y, trial) ** 2)) / n

        if trial_error < error:
            params = trial
            damping = max(damping * DAMPING_DECREASE, MIN_DAMPING)
            previous_error = error
        else:
            damping = min(damping * DAMPING_INCREASE, MAX_DAMPING)
            if damping > ABANDON_DAMPING:
                break

    return params


def solve_ellipse_approx(
    points: Sequence[DataPoint], use_fractions: bool = True, deadline: Optional[Deadline] = None
) -> FitResult:
    """Best-fit axis-aligned ellipse (x-h)²/a² + (y-k)²/b² = 1 for 4+ points."""
    kind = EquationKind.ELLIPSE_APPROX
    if len(points) < kind.min_points:
        raise FitError(
            f"Need at least {kind.min_points} points for ellipse approximation",
            ErrorCode.WRONG_POINT_COUNT,
        )
    deadline = deadline or Deadline()
    x = np.array([p.x for p in points], dtype=float)
    y = np.array([p.y for p in points], dtype=float)

    best: Optional[np.ndarray] = None
    best_rms = math.inf
    with np.errstate(all="ignore"):
        for index, initial in enumerate(initial_estimates(x, y)):
            if best is not None and deadline.expired():
                break
            params = refine_ellipse(x, y, initial, deadline)
            rms = math.sqrt(float(np.sum(_residuals(x, y, params) ** 2)) / len(points))
            valid = bool(np.all(np.isfinite(params))) and params[2] > 0 and params[3] > 0
            logger.debug(f"ellipse init {index}: rms={rms:.3g} valid={valid}")
            if valid and rms < best_rms:
                best, best_rms = params, rms

    if best is None:
        raise FitError("Unable to fit ellipse: no valid ellipse solution found", ErrorCode.NO_VALID_FIT)

    h, k, a, b = (float(v) for v in best)
    coefficients = {"h": h, "k": k, "a": a, "b": b}
    ensure_finite(coefficients)

    return FitResult(
        ok=True,
        kind=kind.value,
        coefficients=coefficients,
        equation=formatting.build_ellipse_equation(h, k, a, b, use_fractions, GEOMETRY_PRECISION),
        machine_equation=formatting.ellipse_machine_equation(
            h, k, a, b, use_fractions, GEOMETRY_PRECISION
        ),
        r_squared=ellipse_r_squared(points, h, k, a, b),
    )
