"""Fuzzing tests for the parser and every solver with random inputs."""

import math
import random
import string
import unittest

from curvefit_pkg.api import fit_curve
from curvefit_pkg.deadline import Deadline
from curvefit_pkg.parser import parse_points
from curvefit_pkg.types import EquationKind, ValidationError


class TestParserFuzzing(unittest.TestCase):
    """Fuzz test parser with random inputs."""

    def test_random_strings(self):
        rng = random.Random(1234)
        for _ in range(200):
            length = rng.randint(1, 80)
            random_str = "".join(rng.choices(string.printable, k=length))
            try:
                points = parse_points(random_str)
            except ValidationError:
                continue  # Expected
            for p in points:
                self.assertTrue(math.isfinite(p.x) and math.isfinite(p.y))


class TestSolverFuzzing(unittest.TestCase):
    """Every kind returns a well-formed result for random finite point sets."""

    def check_result(self, result):
        if result.ok:
            self.assertTrue(result.equation)
            self.assertIsNone(result.error)
            for value in result.coefficients.values():
                self.assertTrue(math.isfinite(value))
            if result.r_squared is not None:
                self.assertGreaterEqual(result.r_squared, 0.0)
                self.assertLessEqual(result.r_squared, 1.0)
        else:
            self.assertTrue(result.error)
            self.assertTrue(result.error_code)
            self.assertEqual(result.coefficients, {})
            self.assertEqual(result.equation, "")

    def test_random_point_sets(self):
        rng = random.Random(42)
        for kind in EquationKind:
            for _ in range(8):
                count = kind.min_points + (0 if kind.is_exact else rng.randint(0, 12))
                points = [
                    (rng.uniform(-50, 50), rng.uniform(-50, 50)) for _ in range(count)
                ]
                with self.subTest(kind=kind.value, points=points):
                    self.check_result(fit_curve(kind, points, deadline=Deadline(250)))

    def test_extreme_magnitudes(self):
        rng = random.Random(7)
        for kind in EquationKind:
            count = kind.min_points + (0 if kind.is_exact else 3)
            points = [
                (rng.uniform(1, 2) * 10 ** rng.randint(-8, 8), rng.uniform(-1, 1) * 1e8)
                for _ in range(count)
            ]
            with self.subTest(kind=kind.value):
                self.check_result(fit_curve(kind, points, deadline=Deadline(250)))

    def test_integer_grid(self):
        for kind in EquationKind:
            count = kind.min_points + (0 if kind.is_exact else 2)
            points = [(i, (i * 7) % 5) for i in range(count)]
            with self.subTest(kind=kind.value):
                self.check_result(fit_curve(kind, points, deadline=Deadline.frozen()))


if __name__ == "__main__":
    unittest.main()
