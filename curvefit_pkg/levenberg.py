"""Generic Levenberg-Marquardt least-squares driver."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from .deadline import Deadline
from .linalg import solve_linear_system
from .types import SingularMatrixError

Model = Callable[[np.ndarray, np.ndarray], np.ndarray]


@dataclass(frozen=True)
class LMOptions:
    """Tuning parameters for one Levenberg-Marquardt run."""

    damping: float = 1.0
    max_iterations: int = 100
    error_tolerance: float = 1e-9
    gradient_difference: float = 1e-7
    damping_step_up: float = 11.0
    damping_step_down: float = 9.0
    min_damping: float = 1e-10
    max_damping: float = 1e16
    min_relative_improvement: float = 1e-12


@dataclass
class LMResult:
    parameters: np.ndarray
    error: float
    iterations: int


def _sum_squares(y: np.ndarray, predicted: np.ndarray) -> float:
    if not np.all(np.isfinite(predicted)):
        return float("inf")
    return float(np.sum((y - predicted) ** 2))


def numeric_jacobian(
    model: Model, x: np.ndarray, params: np.ndarray, base: np.ndarray, step: float
) -> np.ndarray:
    """Forward-difference Jacobian of the model with respect to its parameters."""
    jacobian = np.empty((x.shape[0], params.shape[0]))
    for j in range(params.shape[0]):
        shifted = params.copy()
        shifted[j] += step
        jacobian[:, j] = (model(x, shifted) - base) / step
    return jacobian


def levenberg_marquardt(
    model: Model,
    x,
    y,
    initial,
    options: LMOptions = LMOptions(),
    deadline: Optional[Deadline] = None,
) -> LMResult:
    """Minimise sum((y - model(x, p))²) starting from ``initial``.

    One damped step is tried per iteration. An accepted step divides the
    damping by ``damping_step_down``; a rejected or singular step multiplies
    it by ``damping_step_up``. A trial whose model output is not finite is
    rejected.

    Args:
        model: Callable (x array, parameter array) -> predicted y array
        x: Sample x values
        y: Sample y values
        initial: Starting parameters
        options: Damping, tolerances and iteration cap
        deadline: Optional time budget checked on every iteration

    Returns:
        LMResult with the best parameters found and their squared error
        (infinite if the model is not finite at ``initial``)
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    params = np.asarray(initial, dtype=float).copy()
    damping = options.damping

    with np.errstate(all="ignore"):
        predicted = model(x, params)
        error = _sum_squares(y, predicted)
        if not np.isfinite(error):
            return LMResult(params, error, 0)

        iterations = 0
        while iterations < options.max_iterations:
            if deadline is not None and deadline.expired():
                break
            if error <= options.error_tolerance:
                break
            iterations += 1

            jacobian = numeric_jacobian(model, x, params, predicted, options.gradient_difference)
            if not np.all(np.isfinite(jacobian)):
                break
            residual = y - predicted
            normal = jacobian.T @ jacobian + damping * np.eye(params.shape[0])
            gradient = jacobian.T @ residual

            try:
                delta = solve_linear_system(normal, gradient)
            except SingularMatrixError:
                delta = None

            trial_error = float("inf")
            if delta is not None and np.all(np.isfinite(delta)):
                trial = params + delta
                trial_predicted = model(x, trial)
                trial_error = _sum_squares(y, trial_predicted)

            if trial_error < error:
                improvement = (error - trial_error) / max(error, 1e-300)
                params, predicted, error = trial, trial_predicted, trial_error
                damping = max(damping / options.damping_step_down, options.min_damping)
                if improvement < options.min_relative_improvement:
                    break
            else:
                damping *= options.damping_step_up
                if damping > options.max_damping:
                    break

    return LMResult(params, error, iterations)
