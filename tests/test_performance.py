"""Performance tests for curvefit.

These tests are marked as 'slow' and can be skipped with: pytest -m "not slow"
"""

import math
import time

import pytest

from curvefit_pkg.api import fit_curve
from curvefit_pkg.deadline import Deadline


@pytest.mark.slow
class TestExactPerformance:
    def test_exact_fits(self):
        start = time.time()
        for i in range(100):
            fit_curve("cubic", [(0, i), (1, 2), (2, 5), (3, 1)])
        elapsed = time.time() - start
        assert elapsed < 5.0, f"Exact fits too slow: {elapsed}s"


@pytest.mark.slow
class TestApproximationPerformance:
    def test_sine_respects_budget(self):
        points = [(x / 10, math.sin(x / 3) + 0.3 * math.cos(x * 1.7)) for x in range(400)]
        start = time.time()
        result = fit_curve("sine", points, deadline=Deadline(500))
        elapsed = time.time() - start
        assert result.ok
        # Budget is checked per LM iteration; allow for the fallback run
        assert elapsed < 5.0, f"Sine fit ignored its budget: {elapsed}s"

    def test_ellipse_approx_many_points(self):
        points = [(3 * math.cos(t / 50), 2 * math.sin(t / 50)) for t in range(1000)]
        start = time.time()
        result = fit_curve("ellipse_approx", points)
        elapsed = time.time() - start
        assert result.ok
        assert elapsed < 5.0, f"Ellipse fit too slow: {elapsed}s"
