"""Dispatch of equation kinds to their solvers.

Every solver takes ``(points, use_fractions, deadline)`` and either returns
a successful FitResult or raises FitError. ``solve_equation`` is the
boundary that turns errors into failed results.
"""

from __future__ import annotations

from functools import partial
from typing import Callable, Optional, Sequence

from . import approximation, ellipse_fit, exact
from .deadline import Deadline
from .logging_config import get_logger
from .types import DataPoint, EquationKind, ErrorCode, FitError, FitResult

logger = get_logger("solver")

Solver = Callable[[Sequence[DataPoint], bool, Optional[Deadline]], FitResult]


def _exact(function: Callable[..., FitResult]) -> Solver:
    """Adapt an exact solver, which needs no deadline."""

    def run(points: Sequence[DataPoint], use_fractions: bool, deadline: Optional[Deadline]) -> FitResult:
        return function(points, use_fractions=use_fractions)

    return run


def _approximate(function: Callable[..., FitResult]) -> Solver:
    def run(points: Sequence[DataPoint], use_fractions: bool, deadline: Optional[Deadline]) -> FitResult:
        return function(points, use_fractions=use_fractions, deadline=deadline)

    return run


_SOLVERS: dict[EquationKind, Solver] = {
    EquationKind.LINEAR: _exact(partial(exact.solve_polynomial, degree=1)),
    EquationKind.QUADRATIC: _exact(partial(exact.solve_polynomial, degree=2)),
    EquationKind.CUBIC: _exact(partial(exact.solve_polynomial, degree=3)),
    EquationKind.CIRCLE: _exact(exact.solve_circle),
    EquationKind.ELLIPSE: _exact(exact.solve_ellipse),
    EquationKind.CONIC: _exact(exact.solve_conic),
    EquationKind.SINE: _approximate(approximation.solve_sine),
    EquationKind.LOG: _approximate(approximation.solve_log),
    EquationKind.EXPONENTIAL: _approximate(approximation.solve_exponential),
    EquationKind.ELLIPSE_APPROX: _approximate(ellipse_fit.solve_ellipse_approx),
}

_missing = set(EquationKind) - set(_SOLVERS)
if _missing:
    raise RuntimeError(f"No solver registered for: {sorted(k.value for k in _missing)}")


def solve_equation(
    kind: EquationKind,
    points: Sequence[DataPoint],
    use_fractions: bool = True,
    deadline: Optional[Deadline] = None,
) -> FitResult:
    """Fit ``kind`` to ``points``.

    Args:
        kind: Equation kind to fit
        points: Validated data points
        use_fractions: Format coefficients as fractions where possible
        deadline: Time budget for approximation kinds (a fresh one by default)

    Returns:
        FitResult; failures carry ``error`` and ``error_code`` instead of raising
    """
    try:
        result = _SOLVERS[kind](points, use_fractions, deadline)
    except FitError as e:
        logger.debug(f"{kind.value} fit failed [{e.code}]: {e.message}")
        return FitResult.failure(kind, e.message, e.code)
    except Exception as e:
        logger.exception(f"Unexpected error while fitting {kind.value}")
        return FitResult.failure(kind, f"Internal error: {e}", ErrorCode.INTERNAL_ERROR)

    logger.debug(f"{kind.value} fit: {result.equation}")
    return result
