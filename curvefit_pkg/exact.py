"""Exact solvers.

Each solver builds a square linear system from exactly as many points as
the curve family has free parameters and solves it with
``linalg.solve_linear_system``. Solvers raise ``FitError`` for invalid
input or geometry; ``solver.solve_equation`` turns that into an error result.

Families:
    - Polynomials of degree 1-3: y = ax³ + bx² + cx + d
    - Circle: x² + y² + Dx + Ey + F = 0
    - Axis-aligned ellipse: Ax² + By² + Cx + Dy = 1
    - General conic: Ax² + Bxy + Cy² + Dx + Ey + F = 0
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from . import formatting
from .config import (
    COEFFICIENT_ZERO_TOLERANCE,
    CONIC_CLASSIFY_TOLERANCE,
    CONIC_PRECISION,
    CONSISTENCY_TOLERANCE,
    GEOMETRY_PRECISION,
)
from .linalg import solve_linear_system
from .logging_config import get_logger
from .types import DataPoint, EquationKind, ErrorCode, FitError, FitResult, SingularMatrixError

logger = get_logger("exact")

POLYNOMIAL_NAMES = ("a", "b", "c", "d")
CONIC_NAMES = ("A", "B", "C", "D", "E", "F")
CONIC_TERMS = ("x²", "xy", "y²", "x", "y", "")

# Ratio of smallest to largest singular value below which the conic
# design matrix is treated as rank deficient
CONIC_RANK_TOLERANCE = 1e-10


def check_duplicates(points: Sequence[DataPoint]) -> None:
    """Raise DUPLICATE_POINTS if two points share identical coordinates."""
    seen: set[tuple[float, float]] = set()
    for point in points:
        key = point.as_tuple()
        if key in seen:
            raise FitError(
                f"Duplicate point ({point.x:g}, {point.y:g}): exact equations need distinct points",
                ErrorCode.DUPLICATE_POINTS,
            )
        seen.add(key)


def check_point_count(points: Sequence[DataPoint], required: int, label: str) -> None:
    if len(points) != required:
        raise FitError(
            f"Need exactly {required} points for {label} equation",
            ErrorCode.WRONG_POINT_COUNT,
        )


def ensure_finite(coefficients: dict[str, float]) -> None:
    """Raise INVALID_COEFFICIENTS if any coefficient is NaN or infinite."""
    bad = [name for name, value in coefficients.items() if not math.isfinite(value)]
    if bad:
        raise FitError(
            f"Solver produced non-finite coefficients: {', '.join(bad)}",
            ErrorCode.INVALID_COEFFICIENTS,
        )


# Polynomials


def solve_polynomial(
    points: Sequence[DataPoint], degree: int, use_fractions: bool = True
) -> FitResult:
    """Fit the polynomial of the given degree through exactly degree + 1 points.

    Args:
        points: Sample points
        degree: Polynomial degree (1, 2 or 3)
        use_fractions: Format coefficients as fractions

    Returns:
        FitResult with coefficients a, b, ... highest power first

    Raises:
        FitError: On duplicates, wrong count or repeated x values
    """
    kind = {1: EquationKind.LINEAR, 2: EquationKind.QUADRATIC, 3: EquationKind.CUBIC}[degree]
    check_duplicates(points)
    check_point_count(points, degree + 1, kind.value)

    matrix = [[p.x ** (degree - j) for j in range(degree + 1)] for p in points]
    rhs = [p.y for p in points]
    try:
        solution = solve_linear_system(matrix, rhs)
    except SingularMatrixError:
        raise FitError(
            f"Cannot fit {kind.value} equation: points must have distinct x values",
            ErrorCode.DEGENERATE_GEOMETRY,
        ) from None

    coefficients = {POLYNOMIAL_NAMES[i]: float(v) for i, v in enumerate(solution)}
    ensure_finite(coefficients)

    values = list(coefficients.values())
    return FitResult(
        ok=True,
        kind=kind.value,
        coefficients=coefficients,
        equation=formatting.build_polynomial_equation(values, use_fractions),
        machine_equation=formatting.polynomial_machine_equation(values, use_fractions),
    )


# Circle


def solve_circle(points: Sequence[DataPoint], use_fractions: bool = True) -> FitResult:
    """Fit a circle through three points.

    More than three points are accepted when they all lie on the same
    circle: the system is solved in the least-squares sense and every point
    must satisfy the result to within CONSISTENCY_TOLERANCE.
    """
    check_duplicates(points)
    if len(points) < 3:
        raise FitError("Need at least 3 points for circle equation", ErrorCode.WRONG_POINT_COUNT)

    design = np.array([[p.x, p.y, 1.0] for p in points])
    rhs = np.array([-(p.x**2 + p.y**2) for p in points])
    try:
        if len(points) == 3:
            D, E, F = solve_linear_system(design, rhs)
        else:
            D, E, F = solve_linear_system(design.T @ design, design.T @ rhs)
    except SingularMatrixError:
        raise FitError(
            "Cannot fit circle: points may be collinear", ErrorCode.DEGENERATE_GEOMETRY
        ) from None

    if len(points) > 3:
        residual = np.abs(design @ np.array([D, E, F]) - rhs)
        scale = max(1.0, float(np.max(np.abs(rhs))))
        if float(np.max(residual)) > CONSISTENCY_TOLERANCE * scale:
            raise FitError(
                "Cannot fit circle: the extra points do not lie on one circle",
                ErrorCode.WRONG_POINT_COUNT,
            )

    h = -D / 2.0
    k = -E / 2.0
    r_sq = h * h + k * k - F
    if not r_sq > 0.0:
        raise FitError(
            "Cannot fit circle: points may be collinear", ErrorCode.DEGENERATE_GEOMETRY
        )
    r = math.sqrt(r_sq)

    coefficients = {"h": float(h), "k": float(k), "r": float(r)}
    ensure_finite(coefficients)
    logger.debug(f"Circle center=({h:.6g}, {k:.6g}) r={r:.6g}")

    return FitResult(
        ok=True,
        kind=EquationKind.CIRCLE.value,
        coefficients=coefficients,
        equation=formatting.build_circle_equation(h, k, r, use_fractions, GEOMETRY_PRECISION),
        machine_equation=formatting.circle_machine_equation(
            h, k, r, use_fractions, GEOMETRY_PRECISION
        ),
    )


# Axis-aligned ellipse


def solve_ellipse(points: Sequence[DataPoint], use_fractions: bool = True) -> FitResult:
    """Fit an axis-aligned ellipse Ax² + By² + Cx + Dy = 1 through 4 points."""
    check_duplicates(points)
    check_point_count(points, 4, "ellipse")

    matrix = [[p.x**2, p.y**2, p.x, p.y] for p in points]
    try:
        A, B, C, D = solve_linear_system(matrix, [1.0] * 4)
    except SingularMatrixError:
        raise FitError(
            "Cannot fit ellipse: points do not determine an axis-aligned ellipse",
            ErrorCode.DEGENERATE_GEOMETRY,
        ) from None

    if not (A > 0 and B > 0):
        raise FitError(
            "Cannot fit ellipse: points do not lie on an axis-aligned ellipse",
            ErrorCode.DEGENERATE_GEOMETRY,
        )

    h = -C / (2.0 * A)
    k = -D / (2.0 * B)
    const = 1.0 + C * C / (4.0 * A) + D * D / (4.0 * B)
    if not const > 0:
        raise FitError(
            "Cannot fit ellipse: degenerate ellipse (non-positive radius)",
            ErrorCode.DEGENERATE_GEOMETRY,
        )
    a = math.sqrt(const / A)
    b = math.sqrt(const / B)

    coefficients = {"h": float(h), "k": float(k), "a": float(a), "b": float(b)}
    ensure_finite(coefficients)

    return FitResult(
        ok=True,
        kind=EquationKind.ELLIPSE.value,
        coefficients=coefficients,
        equation=formatting.build_ellipse_equation(h, k, a, b, use_fractions, GEOMETRY_PRECISION),
        machine_equation=formatting.ellipse_machine_equation(
            h, k, a, b, use_fractions, GEOMETRY_PRECISION
        ),
    )


# General conic


def classify_conic(A: float, B: float, C: float, tolerance: float = CONIC_CLASSIFY_TOLERANCE) -> str:
    """Name the conic type from its normalised quadratic coefficients."""
    discriminant = B * B - 4.0 * A * C
    if abs(discriminant) < tolerance:
        return "Parabola"
    if discriminant > 0:
        return "Hyperbola"
    if abs(A - C) < tolerance and abs(B) < tolerance:
        return "Circle"
    return "Ellipse"


def _uncenter_conic(
    scaled: Sequence[float], cx: float, cy: float, s: float
) -> np.ndarray:
    """Map A'u² + B'uv + C'v² + D'u + E'v + F' = 0 back to x, y.

    Here u = (x - cx) / s and v = (y - cy) / s; the result is multiplied
    through by s².
    """
    A, B, C, D, E, F = scaled
    return np.array(
        [
            A,
            B,
            C,
            -2.0 * A * cx - B * cy + D * s,
            -2.0 * C * cy - B * cx + E * s,
            A * cx * cx + B * cx * cy + C * cy * cy - D * s * cx - E * s * cy + F * s * s,
        ]
    )


def _conic_null_space(u: np.ndarray, v: np.ndarray) -> np.ndarray:
    """Homogeneous solution of the 5x6 conic design matrix via SVD."""
    design = np.column_stack([u * u, u * v, v * v, u, v, np.ones_like(u)])
    _, singular_values, vt = np.linalg.svd(design)
    # Rank below 5 means a one-parameter family of conics passes through the points
    if singular_values[-1] < CONIC_RANK_TOLERANCE * singular_values[0]:
        raise FitError(
            "Cannot fit conic: points do not determine a unique conic (4 or more may be collinear)",
            ErrorCode.DEGENERATE_GEOMETRY,
        )
    return vt[-1]


def solve_conic(points: Sequence[DataPoint], use_fractions: bool = True) -> FitResult:
    """Fit a general conic through 5 points and classify it.

    The system is solved in coordinates centred on the centroid and scaled
    by the largest absolute centred coordinate, then mapped back and
    normalised so the largest coefficient has magnitude 1 and the first
    non-zero coefficient is positive.
    """
    check_duplicates(points)
    check_point_count(points, 5, "conic")

    xs = np.array([p.x for p in points], dtype=float)
    ys = np.array([p.y for p in points], dtype=float)
    cx, cy = float(np.mean(xs)), float(np.mean(ys))
    s = float(max(np.max(np.abs(xs - cx)), np.max(np.abs(ys - cy))))
    if s == 0.0:
        s = 1.0
    u = (xs - cx) / s
    v = (ys - cy) / s

    matrix = np.column_stack([u * u, u * v, v * v, u, v])
    try:
        A, B, C, D, E = solve_linear_system(matrix, np.ones(5))
        scaled = [A, B, C, D, E, -1.0]
    except SingularMatrixError:
        logger.debug("Centred conic system singular, falling back to SVD null space")
        scaled = list(_conic_null_space(u, v))

    coeffs = _uncenter_conic(scaled, cx, cy, s)
    largest = float(np.max(np.abs(coeffs)))
    if not math.isfinite(largest) or largest < COEFFICIENT_ZERO_TOLERANCE:
        raise FitError("Cannot fit conic: degenerate solution", ErrorCode.DEGENERATE_GEOMETRY)
    coeffs = coeffs / largest

    for value in coeffs:
        if abs(value) > COEFFICIENT_ZERO_TOLERANCE:
            if value < 0:
                coeffs = -coeffs
            break

    coefficients = {name: float(value) for name, value in zip(CONIC_NAMES, coeffs)}
    ensure_finite(coefficients)

    if (
        abs(coefficients["A"]) < COEFFICIENT_ZERO_TOLERANCE
        and abs(coefficients["B"]) < COEFFICIENT_ZERO_TOLERANCE
        and abs(coefficients["C"]) < COEFFICIENT_ZERO_TOLERANCE
    ):
        raise FitError(
            "Cannot fit conic: points are collinear", ErrorCode.DEGENERATE_GEOMETRY
        )

    classification = classify_conic(coefficients["A"], coefficients["B"], coefficients["C"])
    body = formatting.join_terms(list(zip(coeffs, CONIC_TERMS)), use_fractions, CONIC_PRECISION)
    logger.debug(f"Conic classified as {classification}")

    return FitResult(
        ok=True,
        kind=EquationKind.CONIC.value,
        coefficients=coefficients,
        equation=f"{classification}: {body} = 0",
        machine_equation=formatting.conic_machine_equation(coeffs, use_fractions, CONIC_PRECISION),
        classification=classification,
    )
