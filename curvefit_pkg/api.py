"""Public API for curvefit - returns structured objects without side effects."""

from __future__ import annotations

from typing import Any, Iterable, Optional

from .deadline import Deadline
from .logging_config import get_logger
from .parser import coerce_points
from .solver import solve_equation
from .types import EquationKind, ErrorCode, FitError, FitResult, ValidationError

logger = get_logger("api")


def fit_curve(
    kind: EquationKind | str,
    points: Iterable[Any],
    use_fractions: bool = True,
    *,
    deadline: Optional[Deadline] = None,
) -> FitResult:
    """Fit a curve of the given kind to a set of points.

    Args:
        kind: An EquationKind or its string value (e.g. "quadratic")
        points: DataPoints, (x, y) pairs, {"x": .., "y": ..} mappings or a
            point-list string
        use_fractions: Show coefficients as fractions where possible
        deadline: Time budget for approximation kinds

    Returns:
        FitResult; errors are reported on the result, never raised

    Example:
        >>> from curvefit_pkg.api import fit_curve
        >>> result = fit_curve("linear", [(0, 1), (1, 3)])
        >>> print(result.equation)
        y = 2x + 1
        >>> fit_curve("circle", [(0, 0), (1, 1), (2, 2)]).error_code
        'DEGENERATE_GEOMETRY'
    """
    kind_label = kind.value if isinstance(kind, EquationKind) else str(kind)
    try:
        resolved = EquationKind.parse(kind)
        data = coerce_points(points)
    except FitError as e:
        return FitResult.failure(kind_label, e.message, e.code)
    except ValidationError as e:
        return FitResult.failure(kind_label, e.message, e.code)
    except Exception as e:
        logger.exception("Unexpected error while reading fit input")
        return FitResult.failure(kind_label, f"Internal error: {e}", ErrorCode.INTERNAL_ERROR)

    return solve_equation(resolved, data, use_fractions, deadline)


def list_equation_kinds() -> list[dict[str, Any]]:
    """Describe every supported equation kind and its point requirement.

    Example:
        >>> from curvefit_pkg.api import list_equation_kinds
        >>> list_equation_kinds()[0]
        {'kind': 'linear', 'exact': True, 'points': 2}
    """
    return [
        {"kind": kind.value, "exact": kind.is_exact, "points": kind.min_points}
        for kind in EquationKind
    ]
