"""Coefficient and equation formatting.

Human-readable equations use Unicode superscripts (``x²``) and either
small fractions or short decimals for coefficients. Machine equations are
LaTeX strings for graphing displays; they are rendered with SymPy from the
same formatted coefficient text, so identical inputs and flags always give
identical strings.
"""

from __future__ import annotations

from fractions import Fraction
from typing import Sequence

import sympy as sp

from .config import (
    COEFFICIENT_ZERO_TOLERANCE,
    FRACTION_MAX_DENOMINATOR,
    FRACTION_TOLERANCE,
    OUTPUT_PRECISION,
)

X, Y = sp.symbols("x y")

SUPERSCRIPTS = {2: "²", 3: "³"}


def format_number(value: float, precision: int = OUTPUT_PRECISION) -> str:
    """Format a float as a short decimal.

    Integers (within 10^-precision) print without a decimal point. Values
    that round to at most three decimal places keep their short form;
    everything else prints with ``precision`` fixed decimals.

    Args:
        value: Number to format
        precision: Number of decimal places for the fixed form

    Returns:
        Formatted string
    """
    if abs(value - round(value)) < 10 ** (-precision):
        return str(int(round(value)))

    rounded = round(value, precision + 2)
    text = repr(rounded)
    if "e" not in text and "." in text:
        decimals = text.split(".")[1]
        if len(decimals) <= min(3, precision):
            return text

    return f"{value:.{precision}f}"


def to_fraction(value: float, tolerance: float = FRACTION_TOLERANCE) -> str:
    """Format a float as the simplest nearby fraction.

    Uses the smallest denominator up to FRACTION_MAX_DENOMINATOR whose
    fraction lies within ``tolerance``; falls back to a decimal.

    Args:
        value: Number to format
        tolerance: Absolute tolerance for accepting a fraction

    Returns:
        String like "3", "-1/3" or "0.1234"
    """
    if abs(value - round(value)) < tolerance:
        return str(int(round(value)))

    sign = "-" if value < 0 else ""
    magnitude = abs(value)

    for denominator in range(2, FRACTION_MAX_DENOMINATOR + 1):
        numerator = round(magnitude * denominator)
        if abs(magnitude - numerator / denominator) < tolerance:
            frac = Fraction(numerator, denominator)
            if frac.denominator == 1:
                return f"{sign}{frac.numerator}"
            return f"{sign}{frac.numerator}/{frac.denominator}"

    return format_number(value)


def format_value(value: float, use_fractions: bool, precision: int = OUTPUT_PRECISION) -> str:
    """Format a bare value using the fraction or decimal rules."""
    return to_fraction(value) if use_fractions else format_number(value, precision)


def format_coefficient(
    value: float,
    show_sign: bool = False,
    use_fractions: bool = True,
    precision: int = OUTPUT_PRECISION,
) -> str:
    """Format a coefficient, optionally as a signed term joiner.

    Args:
        value: Coefficient value
        show_sign: If True, return " + v" or " - |v|" for use between terms
        use_fractions: Use fractions instead of decimals
        precision: Decimal precision when not using fractions

    Returns:
        Formatted coefficient; "" (signed) or "0" (unsigned) for zero
    """
    if abs(value) < COEFFICIENT_ZERO_TOLERANCE:
        return "" if show_sign else "0"

    if not show_sign:
        return format_value(value, use_fractions, precision)

    magnitude = format_value(abs(value), use_fractions, precision)
    if _is_zero_text(magnitude):
        return ""
    return f" + {magnitude}" if value > 0 else f" - {magnitude}"


def _is_zero_text(text: str) -> bool:
    return text.lstrip("-") in ("0", "")


def squared(text: str) -> str:
    """Append "²", parenthesising anything but a plain integer."""
    if text.isdigit():
        return f"{text}²"
    return f"({text})²"


def join_terms(
    terms: Sequence[tuple[float, str]],
    use_fractions: bool,
    precision: int = OUTPUT_PRECISION,
) -> str:
    """Join (coefficient, variable part) pairs into a signed sum.

    Zero terms are dropped and unit coefficients print as a bare variable.
    Returns "0" when every term vanishes.
    """
    pieces: list[str] = []
    for coef, term in terms:
        if abs(coef) < COEFFICIENT_ZERO_TOLERANCE:
            continue
        magnitude = format_value(abs(coef), use_fractions, precision)
        if _is_zero_text(magnitude):
            continue
        if term and magnitude == "1":
            magnitude = ""
        if not pieces:
            pieces.append(f"{'-' if coef < 0 else ''}{magnitude}{term}")
        else:
            pieces.append(f" {'-' if coef < 0 else '+'} {magnitude}{term}")
    return "".join(pieces) if pieces else "0"


def build_polynomial_equation(
    coefficients: Sequence[float], use_fractions: bool = True
) -> str:
    """Build "y = ax³ + bx² + cx + d" from coefficients, highest power first."""
    degree = len(coefficients) - 1
    terms = []
    for i, coef in enumerate(coefficients):
        power = degree - i
        if power == 0:
            term = ""
        elif power == 1:
            term = "x"
        else:
            term = "x" + SUPERSCRIPTS.get(power, f"^{power}")
        terms.append((coef, term))
    return "y = " + join_terms(terms, use_fractions)


def shifted(variable: str, center: float, use_fractions: bool, precision: int) -> str:
    """Render "(x - h)²"; a zero shift renders as "x²"."""
    offset = format_coefficient(-center, True, use_fractions, precision)
    if not offset:
        return f"{variable}²"
    return f"({variable}{offset})²"


def build_circle_equation(
    h: float, k: float, r: float, use_fractions: bool, precision: int
) -> str:
    """Build "(x - h)² + (y - k)² = r²"."""
    radius = format_coefficient(r, False, use_fractions, precision)
    return (
        f"{shifted('x', h, use_fractions, precision)} + "
        f"{shifted('y', k, use_fractions, precision)} = {squared(radius)}"
    )


def build_ellipse_equation(
    h: float, k: float, a: float, b: float, use_fractions: bool, precision: int
) -> str:
    """Build "(x - h)²/a² + (y - k)²/b² = 1"."""
    a_text = format_coefficient(a, False, use_fractions, precision)
    b_text = format_coefficient(b, False, use_fractions, precision)
    return (
        f"{shifted('x', h, use_fractions, precision)}/{squared(a_text)} + "
        f"{shifted('y', k, use_fractions, precision)}/{squared(b_text)} = 1"
    )


def build_transcendental_equation(
    function: str,
    a: float,
    b: float,
    c: float,
    d: float,
    use_fractions: bool = True,
    open_paren: str | None = None,
) -> str:
    """Build "y = a * f(bx + c) + d" for sin, ln or e^.

    Args:
        function: Function prefix, e.g. "sin", "ln" or "e^"
        a, b, c, d: Model coefficients
        use_fractions: Use fractions instead of decimals
        open_paren: Override for the opening text (defaults to function + "(")
    """
    opening = open_paren if open_paren is not None else f"{function}("
    a_text = format_coefficient(a, False, use_fractions)
    if _is_zero_text(a_text):
        return "y = " + format_coefficient(d, False, use_fractions)

    if a_text == "1":
        equation = "y = " + opening
    elif a_text == "-1":
        equation = "y = -" + opening
    else:
        equation = f"y = {a_text} * {opening}"

    b_text = format_coefficient(b, False, use_fractions)
    if b_text == "1":
        equation += "x"
    elif b_text == "-1":
        equation += "-x"
    else:
        equation += f"{b_text}x"

    equation += format_coefficient(c, True, use_fractions)
    equation += ")"
    equation += format_coefficient(d, True, use_fractions)
    return equation


# Machine (LaTeX) equations


def sympy_number(value: float, use_fractions: bool, precision: int = OUTPUT_PRECISION) -> sp.Expr:
    """Convert a coefficient to the SymPy number matching its formatted text."""
    if abs(value) < COEFFICIENT_ZERO_TOLERANCE:
        return sp.Integer(0)
    text = format_value(value, use_fractions, precision)
    if "." in text:
        return sp.Float(text)
    return sp.Rational(text)


def latex_equation(lhs: sp.Expr, rhs: sp.Expr) -> str:
    return f"{sp.latex(lhs)} = {sp.latex(rhs, ln_notation=True)}"


def polynomial_machine_equation(coefficients: Sequence[float], use_fractions: bool = True) -> str:
    degree = len(coefficients) - 1
    expr = sp.Add(
        *[
            sympy_number(coef, use_fractions) * X ** (degree - i)
            for i, coef in enumerate(coefficients)
        ]
    )
    return latex_equation(Y, expr)


def transcendental_machine_equation(
    kind: str, a: float, b: float, c: float, d: float, use_fractions: bool = True
) -> str:
    """LaTeX for a·f(bx + c) + d where kind is "sine", "log" or "exponential"."""
    function = {"sine": sp.sin, "log": sp.log, "exponential": sp.exp}[kind]
    argument = sympy_number(b, use_fractions) * X + sympy_number(c, use_fractions)
    expr = sympy_number(a, use_fractions) * function(argument) + sympy_number(d, use_fractions)
    return latex_equation(Y, expr)


def conic_machine_equation(coefficients: Sequence[float], use_fractions: bool, precision: int) -> str:
    A, B, C, D, E, F = (sympy_number(v, use_fractions, precision) for v in coefficients)
    expr = A * X**2 + B * X * Y + C * Y**2 + D * X + E * Y + F
    return f"{sp.latex(expr)} = 0"


def _latex_shift(variable: str, center: float, use_fractions: bool, precision: int) -> str:
    """LaTeX for (x - h)², keeping the shift unexpanded."""
    symbol = sp.Symbol(variable)
    offset = -sympy_number(center, use_fractions, precision)
    if offset == 0:
        return sp.latex(symbol**2)
    return sp.latex(sp.Pow(sp.Add(symbol, offset, evaluate=False), 2, evaluate=False))


def _latex_squared(value: float, use_fractions: bool, precision: int) -> str:
    """LaTeX for a radius or semi-axis squared, without evaluating the power."""
    return sp.latex(sp.Pow(sympy_number(value, use_fractions, precision), 2, evaluate=False))


def circle_machine_equation(
    h: float, k: float, r: float, use_fractions: bool, precision: int
) -> str:
    return (
        f"{_latex_shift('x', h, use_fractions, precision)} + "
        f"{_latex_shift('y', k, use_fractions, precision)} = "
        f"{_latex_squared(r, use_fractions, precision)}"
    )


def ellipse_machine_equation(
    h: float, k: float, a: float, b: float, use_fractions: bool, precision: int
) -> str:
    x_term = _latex_shift("x", h, use_fractions, precision)
    y_term = _latex_shift("y", k, use_fractions, precision)
    return (
        rf"\frac{{{x_term}}}{{{_latex_squared(a, use_fractions, precision)}}}"
        rf" + \frac{{{y_term}}}{{{_latex_squared(b, use_fractions, precision)}}}"
        " = 1"
    )
