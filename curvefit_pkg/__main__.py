"""Main entry point for running curvefit_pkg as a module.

This allows running curvefit with:
    python -m curvefit_pkg linear --points "0,1; 1,3"
    python -m curvefit_pkg --list-kinds

This is equivalent to running:
    python -m curvefit_pkg.cli
    python curvefit.py
"""

from __future__ import annotations

import sys

from .cli import main_entry

if __name__ == "__main__":
    sys.exit(main_entry())
