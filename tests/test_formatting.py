"""Unit tests for coefficient and equation formatting."""

import math

import pytest

from curvefit_pkg.formatting import (
    build_circle_equation,
    build_ellipse_equation,
    build_polynomial_equation,
    build_transcendental_equation,
    circle_machine_equation,
    ellipse_machine_equation,
    format_coefficient,
    format_number,
    polynomial_machine_equation,
    to_fraction,
    transcendental_machine_equation,
)


class TestToFraction:
    def test_integers(self):
        assert to_fraction(3.0) == "3"
        assert to_fraction(-2.00000001) == "-2"

    def test_simple_fractions(self):
        assert to_fraction(0.5) == "1/2"
        assert to_fraction(-1 / 3) == "-1/3"
        assert to_fraction(0.75) == "3/4"

    def test_falls_back_to_decimal(self):
        assert to_fraction(math.pi) == "3.1416"


class TestFormatNumber:
    def test_integer(self):
        assert format_number(4.0) == "4"

    def test_short_decimals_kept(self):
        assert format_number(2.5) == "2.5"
        assert format_number(0.125) == "0.125"
        assert format_number(-2.75) == "-2.75"

    def test_long_decimals_fixed(self):
        assert format_number(1 / 3) == "0.3333"
        assert format_number(2 / 3, precision=6) == "0.666667"

    def test_near_zero(self):
        assert format_number(1e-7) == "0"


class TestFormatCoefficient:
    def test_zero(self):
        assert format_coefficient(0.0, show_sign=True) == ""
        assert format_coefficient(1e-12, show_sign=False) == "0"

    def test_signed(self):
        assert format_coefficient(2.5, show_sign=True, use_fractions=False) == " + 2.5"
        assert format_coefficient(-0.5, show_sign=True, use_fractions=True) == " - 1/2"

    def test_unsigned(self):
        assert format_coefficient(-0.25, use_fractions=True) == "-1/4"
        assert format_coefficient(-0.25, use_fractions=False) == "-0.25"


class TestPolynomialEquation:
    def test_linear(self):
        assert build_polynomial_equation([2, 1]) == "y = 2x + 1"
        assert build_polynomial_equation([3, -1]) == "y = 3x - 1"

    def test_unit_coefficients_are_bare(self):
        assert build_polynomial_equation([1, 0, -4]) == "y = x² - 4"
        assert build_polynomial_equation([-1, 0]) == "y = -x"

    def test_cubic_terms(self):
        assert build_polynomial_equation([1, 0, 0, 0]) == "y = x³"
        assert build_polynomial_equation([2, -3, 0, 1]) == "y = 2x³ - 3x² + 1"

    def test_all_zero(self):
        assert build_polynomial_equation([0, 0, 0]) == "y = 0"

    def test_decimal_mode(self):
        assert build_polynomial_equation([0.5, 1.25], use_fractions=False) == "y = 0.5x + 1.25"


class TestShiftedForms:
    def test_circle(self):
        assert build_circle_equation(1, -2, 3, True, 6) == "(x - 1)² + (y + 2)² = 3²"

    def test_circle_at_origin(self):
        assert build_circle_equation(0, 0, 2, True, 6) == "x² + y² = 2²"

    def test_ellipse(self):
        assert build_ellipse_equation(1, -2, 3, 2, True, 6) == "(x - 1)²/3² + (y + 2)²/2² = 1"

    def test_fractional_radius_is_parenthesised(self):
        assert build_circle_equation(0, 0, 1.5, True, 6) == "x² + y² = (3/2)²"
        assert build_circle_equation(0, 0, 1.5, False, 6) == "x² + y² = (1.5)²"

    def test_fractional_semi_axis_is_parenthesised(self):
        assert build_ellipse_equation(0, 0, 1.5, 1, True, 6) == "x²/(3/2)² + y²/1² = 1"
        assert build_ellipse_equation(1, 0, 0.1, 2, True, 6) == "(x - 1)²/(1/10)² + y²/2² = 1"

    def test_shift_that_rounds_to_zero(self):
        assert build_circle_equation(1e-7, -1e-7, 2, True, 6) == "x² + y² = 2²"

    def test_circle_latex_keeps_fraction_squared(self):
        latex = circle_machine_equation(0, 0, 1.5, True, 6)
        assert latex == r"x^{2} + y^{2} = \left(\frac{3}{2}\right)^{2}"

    def test_ellipse_latex_keeps_fraction_squared(self):
        latex = ellipse_machine_equation(0, 0, 1.5, 1, True, 6)
        assert r"\frac{x^{2}}{\left(\frac{3}{2}\right)^{2}}" in latex
        assert r"\frac{y^{2}}{1^{2}}" in latex

    def test_shifted_latex(self):
        latex = circle_machine_equation(0.5, -2, 3, True, 6)
        assert latex == r"\left(x - \frac{1}{2}\right)^{2} + \left(y + 2\right)^{2} = 3^{2}"


class TestTranscendentalEquation:
    def test_sine(self):
        assert build_transcendental_equation("sin", 3, 2, 1, 5) == "y = 3 * sin(2x + 1) + 5"

    def test_unit_amplitude_and_frequency(self):
        assert build_transcendental_equation("sin", 1, 1, 0, 0) == "y = sin(x)"
        assert build_transcendental_equation("sin", -1, -1, 0, 0) == "y = -sin(-x)"

    def test_offsets_that_round_to_zero_are_dropped(self):
        assert build_transcendental_equation("sin", 3, 2, 1e-6, 5) == "y = 3 * sin(2x) + 5"
        assert build_transcendental_equation("ln", 2, 1, 0, 1e-6) == "y = 2 * ln(x)"
        assert format_coefficient(1e-6, show_sign=True) == ""

    def test_zero_amplitude(self):
        assert build_transcendental_equation("sin", 0, 2, 1, 5) == "y = 5"

    def test_log(self):
        assert build_transcendental_equation("ln", 2, 1, 0, 1) == "y = 2 * ln(x) + 1"

    def test_exponential(self):
        equation = build_transcendental_equation("e^", 2, 0.5, 0, 1, open_paren="e^(")
        assert equation == "y = 2 * e^(1/2x) + 1"


class TestMachineEquation:
    def test_polynomial_latex(self):
        latex = polynomial_machine_equation([2, 1])
        assert latex.startswith("y = ")
        assert "2 x" in latex

    def test_same_flags_same_string(self):
        first = transcendental_machine_equation("sine", 3, 2, 1, 5)
        second = transcendental_machine_equation("sine", 3, 2, 1, 5)
        assert first == second
        assert "\\sin" in first

    def test_log_uses_ln(self):
        assert "\\ln" in transcendental_machine_equation("log", 2, 1, 0, 1)

    @pytest.mark.parametrize("use_fractions", [True, False])
    def test_decimal_flag(self, use_fractions):
        latex = transcendental_machine_equation("exponential", 0.5, 1, 0, 0, use_fractions)
        assert ("0.5" in latex) != use_fractions
