"""curvefit package: exact and least-squares curve fitting for 2D point sets."""

from .api import fit_curve, list_equation_kinds
from .deadline import Deadline
from .types import DataPoint, EquationKind, ErrorCode, FitResult

__all__ = [
    "config",
    "types",
    "linalg",
    "exact",
    "approximation",
    "ellipse_fit",
    "levenberg",
    "quality",
    "formatting",
    "deadline",
    "solver",
    "parser",
    "api",
    "cli",
    "logging_config",
    "fit_curve",
    "list_equation_kinds",
    "Deadline",
    "DataPoint",
    "EquationKind",
    "ErrorCode",
    "FitResult",
]
