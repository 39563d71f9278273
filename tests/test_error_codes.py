"""Test error codes surfaced on fit results."""

import unittest

from curvefit_pkg.api import fit_curve
from curvefit_pkg.deadline import Deadline
from curvefit_pkg.solver import solve_equation
from curvefit_pkg.types import DataPoint, EquationKind, ErrorCode, FitResult


class TestErrorCodes(unittest.TestCase):
    """Test that each failure maps to its error code."""

    def assertCode(self, result, code):
        self.assertFalse(result.ok, f"Expected failure, got {result!r}")
        self.assertEqual(result.error_code, code, f"Expected {code}, got {result.error_code}")
        self.assertTrue(result.error)
        self.assertEqual(result.coefficients, {})

    def test_duplicate_points(self):
        self.assertCode(fit_curve("linear", [(1, 1), (1, 1)]), ErrorCode.DUPLICATE_POINTS)

    def test_wrong_point_count(self):
        result = fit_curve("cubic", [(0, 0), (1, 1), (2, 8)])
        self.assertCode(result, ErrorCode.WRONG_POINT_COUNT)
        self.assertIn("exactly 4", result.error)

    def test_approximation_minimum(self):
        result = fit_curve("sine", [(0, 0), (1, 1)])
        self.assertCode(result, ErrorCode.WRONG_POINT_COUNT)
        self.assertIn("at least 3", result.error)

    def test_degenerate_geometry(self):
        self.assertCode(
            fit_curve("circle", [(0, 0), (1, 1), (2, 2)]), ErrorCode.DEGENERATE_GEOMETRY
        )

    def test_non_positive_domain(self):
        result = fit_curve("log", [(-1, 0), (1, 1), (2, 2)], deadline=Deadline.frozen())
        self.assertCode(result, ErrorCode.NON_POSITIVE_DOMAIN)

    def test_invalid_point(self):
        self.assertCode(fit_curve("linear", [(0, 1), (1, float("inf"))]), ErrorCode.INVALID_POINT)

    def test_unknown_equation(self):
        self.assertCode(fit_curve("hyperbolic", [(0, 1)]), ErrorCode.UNKNOWN_EQUATION)

    def test_internal_error_is_caught(self):
        from curvefit_pkg import solver

        def broken(points, use_fractions, deadline):
            raise ZeroDivisionError("boom")

        original = solver._SOLVERS[EquationKind.LINEAR]
        solver._SOLVERS[EquationKind.LINEAR] = broken
        try:
            with self.assertLogs("curvefit.solver", level="ERROR"):
                result = solve_equation(EquationKind.LINEAR, [DataPoint(0, 0), DataPoint(1, 1)])
        finally:
            solver._SOLVERS[EquationKind.LINEAR] = original
        self.assertCode(result, ErrorCode.INTERNAL_ERROR)
        self.assertIn("boom", result.error)

    def test_failure_helper(self):
        result = FitResult.failure(EquationKind.CONIC, "nope", ErrorCode.NO_VALID_FIT)
        self.assertEqual(result.kind, "conic")
        self.assertEqual(result.error_code, "NO_VALID_FIT")
        self.assertEqual(result.equation, "")


if __name__ == "__main__":
    unittest.main()
