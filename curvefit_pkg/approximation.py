"""Nonlinear approximations: sine, logarithm and exponential.

All three families share one pipeline. A data-driven estimate seeds an
ordered list of initial guesses; each guess is refined with
Levenberg-Marquardt and the candidate with the highest R² wins. The search
stops early once a candidate explains the data almost perfectly, and it
stops trying new guesses once the deadline expires. When no guess yields a
usable fit a relaxed LM run from the primary estimate is tried, and failing
that the primary estimate itself is returned with R² = 0.

Model forms (all with parameters a, b, c, d):
    - sine:        y = a·sin(bx + c) + d
    - log:         y = a·ln(bx + c) + d
    - exponential: y = a·e^(bx + c) + d
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Sequence

import numpy as np

from . import formatting
from .config import EARLY_EXIT_R_SQUARED
from .deadline import Deadline
from .exact import ensure_finite
from .levenberg import LMOptions, Model, levenberg_marquardt
from .logging_config import get_logger
from .quality import clamp_unit, r_squared
from .types import DataPoint, EquationKind, ErrorCode, FitError, FitResult

logger = get_logger("approximation")

PARAMETER_NAMES = ("a", "b", "c", "d")

FALLBACK_OPTIONS = LMOptions(damping=1.0, max_iterations=50, error_tolerance=1e-6)

# Substituted for any non-finite entry of the last-resort estimate
DEFAULT_PARAMETERS = np.array([1.0, 1.0, 0.0, 0.0])

MAX_FLOAT = float(np.finfo(float).max)


def _always_valid(x: np.ndarray, params: np.ndarray) -> bool:
    return True


@dataclass(frozen=True)
class ModelFamily:
    """A curve family: its model function, LM settings and domain check."""

    kind: EquationKind
    model: Model
    options: LMOptions
    is_valid: Callable[[np.ndarray, np.ndarray], bool] = _always_valid


@dataclass
class Candidate:
    parameters: np.ndarray
    r_squared: float


def _sine_model(x: np.ndarray, p: np.ndarray) -> np.ndarray:
    a, b, c, d = p
    return a * np.sin(b * x + c) + d


def _log_model(x: np.ndarray, p: np.ndarray) -> np.ndarray:
    a, b, c, d = p
    argument = b * x + c
    with np.errstate(all="ignore"):
        return np.where(argument > 0, a * np.log(np.where(argument > 0, argument, 1.0)) + d, np.nan)


def _log_domain_ok(x: np.ndarray, p: np.ndarray) -> bool:
    return bool(np.all(p[1] * x + p[2] > 0))


def _exponential_model(x: np.ndarray, p: np.ndarray) -> np.ndarray:
    a, b, c, d = p
    return a * np.exp(b * x + c) + d


def _finite_at(family: ModelFamily, x: np.ndarray, params: np.ndarray) -> bool:
    with np.errstate(all="ignore"):
        return bool(np.all(np.isfinite(params)) and np.all(np.isfinite(family.model(x, params))))


SINE = ModelFamily(
    EquationKind.SINE,
    _sine_model,
    LMOptions(damping=1.8, max_iterations=200, error_tolerance=1e-9, gradient_difference=1e-8),
)
LOG = ModelFamily(
    EquationKind.LOG,
    _log_model,
    LMOptions(damping=1.8, max_iterations=180, error_tolerance=1e-9, gradient_difference=1e-7),
    _log_domain_ok,
)
EXPONENTIAL = ModelFamily(
    EquationKind.EXPONENTIAL,
    _exponential_model,
    LMOptions(damping=2.2, max_iterations=160, error_tolerance=1e-9, gradient_difference=1e-7),
)


def _score(family: ModelFamily, x: np.ndarray, y: np.ndarray, params: np.ndarray) -> float:
    """R² of the parameters, or NaN if they leave the family's domain."""
    if not family.is_valid(x, params) or not _finite_at(family, x, params):
        return math.nan
    with np.errstate(all="ignore"):
        return r_squared(y, family.model(x, params))


def search_best_fit(
    family: ModelFamily,
    x: np.ndarray,
    y: np.ndarray,
    guesses: Iterable[Sequence[float]],
    deadline: Deadline,
) -> Optional[Candidate]:
    """Refine each guess with LM and keep the candidate with the best R².

    Guesses that are invalid or non-finite are skipped. Returns None if no
    guess produced a finite, non-negative R².
    """
    best: Optional[Candidate] = None
    for index, guess in enumerate(guesses):
        if deadline.expired():
            logger.debug(f"{family.kind.value}: deadline expired after {index} guesses")
            break
        params = np.asarray(guess, dtype=float)
        if not family.is_valid(x, params) or not _finite_at(family, x, params):
            continue

        result = levenberg_marquardt(family.model, x, y, params, family.options, deadline)
        score = _score(family, x, y, result.parameters)
        if not math.isfinite(score) or score < 0:
            continue
        if best is None or score > best.r_squared:
            best = Candidate(result.parameters, score)
            logger.debug(f"{family.kind.value}: guess {index} improved R² to {score:.6f}")
        if best.r_squared > EARLY_EXIT_R_SQUARED:
            logger.debug(f"{family.kind.value}: early exit at guess {index}")
            break
    return best


def fit_family(
    family: ModelFamily,
    points: Sequence[DataPoint],
    guesses: Sequence[Sequence[float]],
    use_fractions: bool,
    deadline: Deadline,
    fallback_seed: Optional[Sequence[float]] = None,
) -> FitResult:
    """Run the guess search for a family and build the result."""
    x = np.array([p.x for p in points], dtype=float)
    y = np.array([p.y for p in points], dtype=float)
    primary = np.asarray(fallback_seed if fallback_seed is not None else guesses[0], dtype=float)
    primary = np.where(np.isfinite(primary), primary, DEFAULT_PARAMETERS)

    best = search_best_fit(family, x, y, guesses, deadline)
    if best is None:
        logger.debug(f"{family.kind.value}: no guess converged, running relaxed fit")
        relaxed = levenberg_marquardt(family.model, x, y, primary, FALLBACK_OPTIONS)
        score = _score(family, x, y, relaxed.parameters)
        if math.isfinite(score):
            best = Candidate(relaxed.parameters, clamp_unit(score))
        else:
            logger.warning(f"{family.kind.value}: returning initial estimate, fit did not converge")
            best = Candidate(primary, 0.0)

    return build_result(family.kind, best.parameters, clamp_unit(best.r_squared), use_fractions)


def build_result(
    kind: EquationKind, params: Sequence[float], r2: float, use_fractions: bool
) -> FitResult:
    coefficients = {name: float(v) for name, v in zip(PARAMETER_NAMES, params)}
    ensure_finite(coefficients)
    a, b, c, d = (coefficients[name] for name in PARAMETER_NAMES)

    if kind is EquationKind.SINE:
        equation = formatting.build_transcendental_equation("sin", a, b, c, d, use_fractions)
    elif kind is EquationKind.LOG:
        equation = formatting.build_transcendental_equation("ln", a, b, c, d, use_fractions)
    else:
        equation = formatting.build_transcendental_equation(
            "e^", a, b, c, d, use_fractions, open_paren="e^("
        )

    return FitResult(
        ok=True,
        kind=kind.value,
        coefficients=coefficients,
        equation=equation,
        machine_equation=formatting.transcendental_machine_equation(
            kind.value, a, b, c, d, use_fractions
        ),
        r_squared=r2,
    )


def _require_points(points: Sequence[DataPoint], kind: EquationKind, label: str) -> None:
    if len(points) < kind.min_points:
        raise FitError(
            f"Need at least {kind.min_points} points for {label} approximation",
            ErrorCode.WRONG_POINT_COUNT,
        )


def _ranges(values: np.ndarray) -> tuple[float, float, float]:
    """Minimum, maximum and span; the span saturates at the largest float."""
    lo, hi = float(np.min(values)), float(np.max(values))
    span = 2.0 * (hi / 2.0 - lo / 2.0)
    return lo, hi, min(span, MAX_FLOAT)


def _midpoint(lo: float, hi: float) -> float:
    return lo / 2.0 + hi / 2.0


def _mean(values: np.ndarray) -> float:
    """Mean of the values, rescaled when the plain sum overflows."""
    mean = float(np.mean(values))
    if math.isfinite(mean):
        return mean
    scale = float(np.max(np.abs(values)))
    return float(np.mean(values / scale)) * scale


# Sine


def sine_guesses(x: np.ndarray, y: np.ndarray) -> list[list[float]]:
    """Primary sine estimate followed by its variations."""
    y_min, y_max, y_range = _ranges(y)
    _, _, x_range = _ranges(x)
    if x_range == 0:
        x_range = 1.0

    d0 = _mean(y)
    a0 = y_range / 2.0
    b0 = 2.0 * math.pi / (x_range * 0.5)

    shifted = y - d0
    crossings = int(np.sum(shifted[1:] * shifted[:-1] < 0))
    if crossings > 2:
        estimate = 2.0 * math.pi / (2.0 * x_range / crossings)
        if estimate > 0 and math.isfinite(estimate):
            b0 = estimate

    c0 = 0.0
    best_error = math.inf
    for step in range(32):
        phase = step * math.pi / 16
        error = float(np.sum((y - (a0 * np.sin(b0 * x + phase) + d0)) ** 2))
        if error < best_error:
            best_error = error
            c0 = phase

    guesses = [[a0, b0, c0, d0]]
    guesses += [[a0 * f, b0, c0, d0] for f in (0.5, 1.2, 1.5, 2.0)]
    guesses += [[a0, b0 * f, c0, d0] for f in (0.5, 1.5, 2.0, 3.0)]
    guesses += [[a0, b0, step * math.pi / 4, d0] for step in range(8)]
    guesses.append([-a0, b0, c0 + math.pi, d0])
    guesses.append([-a0 * 1.2, b0, c0 + math.pi, d0])
    guesses.append([a0, b0, c0, _midpoint(y_min, y_max)])
    guesses.append([a0, b0, c0, 0.0])
    return guesses


def solve_sine(
    points: Sequence[DataPoint], use_fractions: bool = True, deadline: Optional[Deadline] = None
) -> FitResult:
    _require_points(points, EquationKind.SINE, "sine")
    x = np.array([p.x for p in points], dtype=float)
    y = np.array([p.y for p in points], dtype=float)
    with np.errstate(all="ignore"):
        guesses = sine_guesses(x, y)
    return fit_family(SINE, points, guesses, use_fractions, deadline or Deadline())


# Logarithm


def solve_log(
    points: Sequence[DataPoint], use_fractions: bool = True, deadline: Optional[Deadline] = None
) -> FitResult:
    """Fit y = a·ln(bx + c) + d; every x must be positive."""
    _require_points(points, EquationKind.LOG, "logarithmic")
    x = np.array([p.x for p in points], dtype=float)
    y = np.array([p.y for p in points], dtype=float)
    if np.any(x <= 0):
        raise FitError(
            "Logarithmic fit requires all x values to be positive",
            ErrorCode.NON_POSITIVE_DOMAIN,
        )

    # Ordinary least squares of y on ln(x)
    ln_x = np.log(x)
    n = len(points)
    denominator = n * float(np.sum(ln_x * ln_x)) - float(np.sum(ln_x)) ** 2
    if abs(denominator) < 1e-10:
        logger.debug("log: x values have no spread, returning ln(x) + mean(y)")
        return build_result(EquationKind.LOG, [1.0, 1.0, 0.0, _mean(y)], 0.0, use_fractions)

    a0 = (n * float(np.sum(ln_x * y)) - float(np.sum(ln_x)) * float(np.sum(y))) / denominator
    d0 = (float(np.sum(y)) - a0 * float(np.sum(ln_x))) / n
    x_min = float(np.min(x))

    guesses = [
        [a0, 1.0, 0.0, d0],
        [a0, 0.5, 0.0, d0],
        [a0, 2.0, 0.0, d0],
        [a0 * 1.5, 1.0, 0.0, d0],
        [a0, 1.0, x_min * 0.1, d0],
        [a0, 1.0, x_min * 0.5, d0],
    ]
    return fit_family(LOG, points, guesses, use_fractions, deadline or Deadline())


# Exponential


def _log_linear(x: np.ndarray, ln_y: np.ndarray) -> Optional[tuple[float, float]]:
    """Slope and intercept of ln_y against x, or None if x has no spread."""
    n = x.shape[0]
    denominator = n * float(np.sum(x * x)) - float(np.sum(x)) ** 2
    if abs(denominator) < 1e-10:
        return None
    slope = (n * float(np.sum(x * ln_y)) - float(np.sum(x)) * float(np.sum(ln_y))) / denominator
    intercept = (float(np.sum(ln_y)) - slope * float(np.sum(x))) / n
    return slope, intercept


def _log_linear_guess(x: np.ndarray, values: np.ndarray, offset: float) -> Optional[list[float]]:
    """Guess (e^intercept, slope, 0, offset) from ln(values) against x."""
    if not np.all(values > 0):
        return None
    fit = _log_linear(x, np.log(values))
    if fit is None:
        return None
    slope, intercept = fit
    with np.errstate(over="ignore"):
        scale = float(np.exp(intercept))
    if not (math.isfinite(scale) and math.isfinite(slope)):
        return None
    return [scale, slope, 0.0, offset]


def exponential_guesses(
    x: np.ndarray, y: np.ndarray
) -> tuple[list[list[float]], list[float]]:
    """Ordered exponential guesses and the seed for the relaxed fallback."""
    y_min, y_max, y_range = _ranges(y)
    _, _, x_range = _ranges(x)
    if x_range == 0:
        x_range = 1.0

    log_linear = _log_linear_guess(x, y, 0.0)
    offset = 0.9 * y_min
    shifted_fit = _log_linear_guess(x, y - offset, offset)

    growing = [y_range, 1.0 / x_range, 0.0, y_min]
    guesses = [g for g in (log_linear, shifted_fit) if g is not None]
    guesses += [
        growing,
        [y_range, -1.0 / x_range, 0.0, y_max],
        [y_range * 0.5, 2.0 / x_range, 0.0, y_min],
        [y_range * 2.0, 0.5 / x_range, 0.0, y_min],
        [_midpoint(y_min, y_max), 0.1, 0.0, _midpoint(y_min, y_max)],
    ]
    guesses = [g for g in guesses if all(math.isfinite(v) for v in g)]
    seed = log_linear or shifted_fit or growing
    return guesses, seed


def solve_exponential(
    points: Sequence[DataPoint], use_fractions: bool = True, deadline: Optional[Deadline] = None
) -> FitResult:
    _require_points(points, EquationKind.EXPONENTIAL, "exponential")
    x = np.array([p.x for p in points], dtype=float)
    y = np.array([p.y for p in points], dtype=float)
    with np.errstate(all="ignore"):
        guesses, seed = exponential_guesses(x, y)
    return fit_family(
        EXPONENTIAL, points, guesses, use_fractions, deadline or Deadline(), fallback_seed=seed
    )
