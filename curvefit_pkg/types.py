"""Type definitions, result dataclasses and error types for the fitting engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class DataPoint:
    """A single (x, y) sample."""

    x: float
    y: float

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


class EquationKind(str, Enum):
    """Curve families the engine can fit."""

    LINEAR = "linear"
    QUADRATIC = "quadratic"
    CUBIC = "cubic"
    CIRCLE = "circle"
    ELLIPSE = "ellipse"
    CONIC = "conic"
    SINE = "sine"
    LOG = "log"
    EXPONENTIAL = "exponential"
    ELLIPSE_APPROX = "ellipse_approx"

    @property
    def is_exact(self) -> bool:
        return self in _EXACT_POINT_COUNTS

    @property
    def min_points(self) -> int:
        """Exact point count for exact kinds, minimum count for approximations."""
        if self.is_exact:
            return _EXACT_POINT_COUNTS[self]
        return _APPROXIMATION_MIN_POINTS[self]

    @classmethod
    def parse(cls, value: EquationKind | str) -> EquationKind:
        """Resolve an EquationKind from an enum member or its string value.

        Raises:
            FitError: If the value does not name a known equation kind
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise FitError(
                f"Unknown equation type: {value!r}", ErrorCode.UNKNOWN_EQUATION
            ) from None


_EXACT_POINT_COUNTS = {
    EquationKind.LINEAR: 2,
    EquationKind.QUADRATIC: 3,
    EquationKind.CUBIC: 4,
    EquationKind.CIRCLE: 3,
    EquationKind.ELLIPSE: 4,
    EquationKind.CONIC: 5,
}

_APPROXIMATION_MIN_POINTS = {
    EquationKind.SINE: 3,
    EquationKind.LOG: 3,
    EquationKind.EXPONENTIAL: 3,
    EquationKind.ELLIPSE_APPROX: 4,
}


class ErrorCode:
    """Error codes surfaced on FitResult.error_code."""

    DUPLICATE_POINTS = "DUPLICATE_POINTS"
    WRONG_POINT_COUNT = "WRONG_POINT_COUNT"
    DEGENERATE_GEOMETRY = "DEGENERATE_GEOMETRY"
    NON_POSITIVE_DOMAIN = "NON_POSITIVE_DOMAIN"
    INVALID_COEFFICIENTS = "INVALID_COEFFICIENTS"
    NO_VALID_FIT = "NO_VALID_FIT"
    INVALID_POINT = "INVALID_POINT"
    UNKNOWN_EQUATION = "UNKNOWN_EQUATION"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # Point list parsing
    EMPTY_INPUT = "EMPTY_INPUT"
    TOO_LONG = "TOO_LONG"
    TOO_MANY_POINTS = "TOO_MANY_POINTS"
    UNREADABLE_FILE = "UNREADABLE_FILE"


@dataclass
class FitResult:
    """Result of fitting a curve to a point set.

    Either ``error`` is set (and coefficients/equation are empty) or
    ``equation`` holds the fitted curve. Coefficient values are always finite.
    """

    ok: bool
    kind: str
    coefficients: dict[str, float] = field(default_factory=dict)
    equation: str = ""
    machine_equation: str | None = None
    r_squared: float | None = None
    classification: str | None = None
    error: str | None = None
    error_code: str | None = None

    @classmethod
    def failure(cls, kind: EquationKind | str, message: str, code: str) -> FitResult:
        """Build an error result with no coefficients."""
        kind_value = kind.value if isinstance(kind, EquationKind) else str(kind)
        return cls(ok=False, kind=kind_value, error=message, error_code=code)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {"ok": self.ok, "kind": self.kind}
        if not self.ok:
            result_dict["error"] = self.error
            result_dict["error_code"] = self.error_code
            return result_dict
        result_dict["coefficients"] = dict(self.coefficients)
        result_dict["equation"] = self.equation
        if self.machine_equation is not None:
            result_dict["machine_equation"] = self.machine_equation
        if self.r_squared is not None:
            result_dict["r_squared"] = self.r_squared
        if self.classification is not None:
            result_dict["classification"] = self.classification
        return result_dict

    def __repr__(self) -> str:
        """Return string representation of the result."""
        if not self.ok:
            return (
                f"FitResult(ok=False, kind={self.kind!r}, "
                f"error_code={self.error_code!r}, error={self.error!r})"
            )
        parts = [f"ok={self.ok}", f"kind={self.kind!r}", f"equation={self.equation!r}"]
        if self.r_squared is not None:
            parts.append(f"r_squared={self.r_squared:.6g}")
        if self.classification is not None:
            parts.append(f"classification={self.classification!r}")
        return f"FitResult({', '.join(parts)})"


class ValidationError(Exception):
    """Raised when input validation fails."""

    def __init__(self, message: str, code: str = "VALIDATION_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class FitError(Exception):
    """Raised inside a solver when a fit cannot be produced."""

    def __init__(self, message: str, code: str = ErrorCode.DEGENERATE_GEOMETRY):
        self.message = message
        self.code = code
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class SingularMatrixError(FitError):
    """Raised by the linear solver when a pivot is numerically zero."""

    def __init__(self, message: str = "Nearly singular matrix in linear system"):
        super().__init__(message, ErrorCode.DEGENERATE_GEOMETRY)
