"""Centralized configuration for curvefit.

This module defines:
- The wall-clock budget for approximation searches
- Numeric tolerances used by the linear solver and the exact solvers
- Formatting defaults (fraction search, decimal precision)
- Input validation limits for point lists

Configuration can be overridden via:
- CLI flags (see cli.py)
- Environment variables (prefixed with CURVEFIT_)
"""

import os

# Version is defined in pyproject.toml [project] section
try:
    import importlib.metadata

    VERSION = importlib.metadata.version("curvefit")
except Exception:
    # Fallback if package not installed
    VERSION = "1.0.0"

# Time budget for approximation fits (milliseconds)
TIME_BUDGET_MS = float(os.getenv("CURVEFIT_TIME_BUDGET_MS", "2000"))

# Linear algebra
SINGULAR_PIVOT_TOLERANCE = float(
    os.getenv("CURVEFIT_SINGULAR_PIVOT_TOLERANCE", "1e-14")
)  # Pivot magnitude below which a system is treated as singular

# Exact solver tolerances
COEFFICIENT_ZERO_TOLERANCE = float(
    os.getenv("CURVEFIT_COEFFICIENT_ZERO_TOLERANCE", "1e-10")
)  # Coefficients smaller than this are dropped from equations
CONIC_CLASSIFY_TOLERANCE = float(
    os.getenv("CURVEFIT_CONIC_CLASSIFY_TOLERANCE", "1e-8")
)  # Discriminant tolerance after normalisation
CONSISTENCY_TOLERANCE = float(
    os.getenv("CURVEFIT_CONSISTENCY_TOLERANCE", "1e-9")
)  # Relative residual allowed for extra points on an exact circle

# Approximation search
EARLY_EXIT_R_SQUARED = float(
    os.getenv("CURVEFIT_EARLY_EXIT_R_SQUARED", "0.999")
)  # Stop trying further initial guesses once a fit beats this

# Formatting
FRACTION_TOLERANCE = float(os.getenv("CURVEFIT_FRACTION_TOLERANCE", "1e-4"))
FRACTION_MAX_DENOMINATOR = int(
    os.getenv("CURVEFIT_FRACTION_MAX_DENOMINATOR", "100")
)
OUTPUT_PRECISION = int(os.getenv("CURVEFIT_OUTPUT_PRECISION", "4"))
GEOMETRY_PRECISION = 6  # circle and ellipse centres/radii
CONIC_PRECISION = 7

# Input validation limits
MAX_INPUT_LENGTH = int(os.getenv("CURVEFIT_MAX_INPUT_LENGTH", "100000"))  # characters
MAX_POINTS = int(os.getenv("CURVEFIT_MAX_POINTS", "10000"))
