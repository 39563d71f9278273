#!/usr/bin/env python3
"""
curvefit - Curve Fitting for 2D Point Sets

Thin wrapper that delegates all functionality to the curvefit_pkg package.

Usage:
    python curvefit.py linear --points "0,1; 1,3"
    python curvefit.py sine --file samples.txt --format json
    python curvefit.py --help
"""

from __future__ import annotations

import sys


def main() -> int:
    """
    Main entry point for curvefit.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    from curvefit_pkg.cli import main_entry

    try:
        return main_entry(sys.argv[1:])
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
