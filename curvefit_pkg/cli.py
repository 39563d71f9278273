"""Command-line interface for curvefit.

Examples:
    python -m curvefit_pkg linear --points "0,1; 1,3"
    python -m curvefit_pkg sine --file samples.txt --format json
    python -m curvefit_pkg --list-kinds
"""

from __future__ import annotations

import argparse
import json
import sys
from .api import fit_curve, list_equation_kinds
from .config import TIME_BUDGET_MS, VERSION
from .deadline import Deadline
from .logging_config import get_logger, setup_logging
from .parser import parse_points
from .types import EquationKind, ErrorCode, FitResult, ValidationError

logger = get_logger("cli")


def print_result_pretty(result: FitResult, output_format: str = "human") -> None:
    """Print a fit result as JSON or as readable lines."""
    if output_format == "json":
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return

    if not result.ok:
        print(f"Error [{result.error_code}]: {result.error}")
        return

    print(result.equation)
    for name, value in result.coefficients.items():
        print(f"  {name} = {value:.10g}")
    if result.r_squared is not None:
        print(f"R² = {result.r_squared:.6f}")
    if result.machine_equation:
        print(f"LaTeX: {result.machine_equation}")


def print_kinds(output_format: str = "human") -> None:
    kinds = list_equation_kinds()
    if output_format == "json":
        print(json.dumps(kinds, indent=2))
        return
    for entry in kinds:
        requirement = (
            f"exactly {entry['points']}" if entry["exact"] else f"at least {entry['points']}"
        )
        print(f"{entry['kind']:<15} {requirement} points")


def _read_points(args: argparse.Namespace) -> str:
    if args.file:
        with open(args.file, encoding="utf-8") as handle:
            return handle.read()
    return args.points or ""


def _input_error(kind: str, message: str, code: str, output_format: str) -> int:
    print_result_pretty(FitResult.failure(kind, message, code), output_format)
    return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="curvefit",
        description="Fit polynomials, conics and transcendental curves to 2D points.",
    )
    parser.add_argument(
        "kind",
        nargs="?",
        choices=[kind.value for kind in EquationKind],
        help="Equation kind to fit",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "-p", "--points", type=str, help='Points, e.g. "0,1; 1,3" or one pair per line'
    )
    source.add_argument("-f", "--file", type=str, help="Read points from a file")
    parser.add_argument(
        "--decimals",
        action="store_true",
        help="Show coefficients as decimals instead of fractions",
    )
    parser.add_argument(
        "--format",
        type=str,
        choices=["json", "human"],
        default="human",
        help="Output format: json (machine-readable) or human (human-readable)",
    )
    parser.add_argument(
        "-t",
        "--time-budget",
        type=float,
        default=TIME_BUDGET_MS,
        help=f"Time budget for approximation fits in milliseconds (default: {TIME_BUDGET_MS:g})",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Set logging level",
    )
    parser.add_argument("--log-file", type=str, help="Write logs to file")
    parser.add_argument(
        "--list-kinds", action="store_true", help="List supported equation kinds and exit"
    )
    parser.add_argument(
        "-v", "--version", action="store_true", help="Show program version"
    )
    return parser


def main_entry(argv: list[str] | None = None) -> int:
    """
    Main entry point for the curvefit CLI.

    Args:
        argv: Optional command-line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for a successful fit, 1 for fit or input errors)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(level=args.log_level, log_file=args.log_file)

    if args.version:
        print(f"curvefit {VERSION}")
        return 0
    if args.list_kinds:
        print_kinds(args.format)
        return 0
    if not args.kind:
        parser.error("an equation kind is required (see --list-kinds)")
    if not args.points and not args.file:
        parser.error("one of --points or --file is required")
    if args.time_budget < 0:
        parser.error("--time-budget must be non-negative")

    try:
        text = _read_points(args)
    except OSError as e:
        logger.debug(f"Cannot read {args.file}: {e}")
        return _input_error(
            args.kind, f"Cannot read points file: {e}", ErrorCode.UNREADABLE_FILE, args.format
        )

    try:
        points = parse_points(text)
    except ValidationError as e:
        return _input_error(args.kind, e.message, e.code, args.format)

    result = fit_curve(
        args.kind,
        points,
        use_fractions=not args.decimals,
        deadline=Deadline(args.time_budget),
    )
    print_result_pretty(result, args.format)
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main_entry())
