"""Command-line interface for GD&T conformance and stack-up analysis."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from tolerance_calc.analysis import (
    calculate_stackup, compare_all_methods, format_result, validate_stackup_input,
)
from tolerance_calc.flatness import FlatnessInput, calculate_flatness
from tolerance_calc.models import AnalysisMethod, StackupAnalysis
from tolerance_calc.perpendicularity import PerpendicularityInput, calculate_perpendicularity
from tolerance_calc.position import PositionInput, calculate_position
from tolerance_calc.profile import ProfileInput, calculate_profile
from tolerance_calc.results import PassFailStatus
from tolerance_calc.rounding import DEFAULT_PRECISION, validate_precision
from tolerance_calc.statistics import pareto

logger = logging.getLogger(__name__)

CALCULATORS = {
    "position": (PositionInput, calculate_position),
    "flatness": (FlatnessInput, calculate_flatness),
    "perpendicularity": (PerpendicularityInput, calculate_perpendicularity),
    "profile": (ProfileInput, calculate_profile),
}


def _load_stack(path: str) -> StackupAnalysis:
    analysis = StackupAnalysis.load(path)
    check = validate_stackup_input(analysis)
    for w in check.warnings:
        print(f"warning: {w}", file=sys.stderr)
    if not check.valid:
        for e in check.errors:
            print(f"error [{e.code.value}] {e.field}: {e.message}", file=sys.stderr)
        sys.exit(2)
    return analysis


def cmd_analyze(args: argparse.Namespace) -> None:
    """Run one stack-up method on a JSON analysis file."""
    if not validate_precision(args.precision):
        print("error: --precision must be an integer between 1 and 6", file=sys.stderr)
        sys.exit(2)
    analysis = _load_stack(args.file)
    method = AnalysisMethod.parse(args.method) if args.method else None
    result = calculate_stackup(analysis, method=method)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return

    print(result.summary())
    p = args.precision
    print(f"  Reported range:   {format_result(result.minimum_value, p, result.unit)}"
          f" .. {format_result(result.maximum_value, p, result.unit)}")
    if args.pareto:
        print("  Pareto:")
        for entry in pareto(list(result.contributions)):
            print(f"    {entry.name:30s}  {entry.percent:6.2f}%  (cum. {entry.cumulative_percent:6.2f}%)")


def cmd_compare(args: argparse.Namespace) -> None:
    """Run every stack-up method side by side."""
    analysis = _load_stack(args.file)
    for result in compare_all_methods(analysis).values():
        print(result.summary())
        print()


def cmd_check(args: argparse.Namespace) -> None:
    """Evaluate a GD&T inspection record from a JSON file."""
    with open(args.file) as f:
        record = json.load(f)

    characteristic = args.characteristic or record.get("characteristic")
    if characteristic not in CALCULATORS:
        print(f"Unknown characteristic: {characteristic!r} "
              f"(expected one of {', '.join(CALCULATORS)})", file=sys.stderr)
        sys.exit(2)

    input_cls, calculate = CALCULATORS[characteristic]
    if args.precision is not None:
        record["precision"] = args.precision
    response = calculate(input_cls.from_dict(record))

    if args.json:
        print(json.dumps(response.to_dict(), indent=2))
    elif response.success:
        print(response.result.summary)
    else:
        for e in response.errors:
            print(f"error [{e.code.value}] {e.field}: {e.message}", file=sys.stderr)

    if not response.success:
        sys.exit(2)
    if response.result.status is PassFailStatus.FAIL:
        sys.exit(1)


def cmd_create_example(args: argparse.Namespace) -> None:
    """Write an example stack-up or inspection record."""
    from tolerance_calc.examples import RECORD_EXAMPLES, STACK_EXAMPLES

    path = args.output or f"{args.example}_example.json"
    if args.example in STACK_EXAMPLES:
        STACK_EXAMPLES[args.example]().save(path)
    else:
        with open(path, "w") as f:
            json.dump(RECORD_EXAMPLES[args.example](), f, indent=2)
    print(f"Created example: {path}")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="tolcalc",
        description="GD&T conformance and tolerance stack-up calculator",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Increase log verbosity (-v info, -vv debug)")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- analyze ---
    p_analyze = subparsers.add_parser("analyze", help="Analyze a stack-up from a JSON file")
    p_analyze.add_argument("file", help="Path to stack-up JSON file")
    p_analyze.add_argument("-m", "--method", default=None,
                           help="worst-case, rss or six-sigma (default: from file)")
    p_analyze.add_argument("-p", "--precision", type=int, default=DEFAULT_PRECISION,
                           help="Decimals for the reported range (default: 4)")
    p_analyze.add_argument("--pareto", action="store_true",
                           help="Print contributions ranked with cumulative share")
    p_analyze.add_argument("--json", action="store_true", help="Emit JSON")
    p_analyze.set_defaults(func=cmd_analyze)

    # --- compare ---
    p_compare = subparsers.add_parser("compare", help="Compare all stack-up methods")
    p_compare.add_argument("file", help="Path to stack-up JSON file")
    p_compare.set_defaults(func=cmd_compare)

    # --- check ---
    p_check = subparsers.add_parser("check", help="Evaluate a GD&T inspection record")
    p_check.add_argument("file", help="Path to inspection record JSON file")
    p_check.add_argument("-c", "--characteristic", choices=sorted(CALCULATORS), default=None,
                         help="Characteristic (default: 'characteristic' key in file)")
    p_check.add_argument("-p", "--precision", type=int, default=None,
                         help="Output precision, 1-6 decimals")
    p_check.add_argument("--json", action="store_true", help="Emit JSON")
    p_check.set_defaults(func=cmd_check)

    # --- example ---
    p_example = subparsers.add_parser("example", help="Create an example file")
    p_example.add_argument("example",
                           choices=["bearing", "bolt-pattern", "shaft", "position", "flatness"],
                           help="Which example to create")
    p_example.add_argument("-o", "--output", default=None, help="Output file path")
    p_example.set_defaults(func=cmd_create_example)

    args = parser.parse_args(argv)
    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    try:
        args.func(args)
    except (KeyError, ValueError) as exc:
        logger.debug("input document rejected", exc_info=True)
        print(f"Invalid input document: {exc}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
