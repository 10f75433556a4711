"""Command-line interface for building tier lists from matchup tables."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from pytiers.config import SolverConfigError, get_settings
from pytiers.config_loader import SolverProfile
from pytiers.ingest import DEFAULT_URL, IngestError, load_ratingupdate_tables, load_tables
from pytiers.report import ReportError, export_tierlist_csv, format_tierlist
from pytiers.solver import solve_all


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compute tier lists from pairwise matchup win-rates")
    parser.add_argument("-u", "--url", default=DEFAULT_URL, help="Ratingupdate matchups URL")
    parser.add_argument(
        "--input",
        type=Path,
        default=None,
        help="Read matchup tables from a .json or .csv file instead of fetching the URL",
    )
    parser.add_argument("-i", "--iters", type=int, default=None, help="Maximum iterations of the algorithm to run")
    parser.add_argument(
        "-m",
        "--max-settle",
        type=float,
        default=None,
        help="Stop once the grand multiplier moves less than this between rounds",
    )
    parser.add_argument(
        "-a",
        "--activation-cap",
        type=float,
        default=None,
        help="Cap on the activation function used in the tier list algorithm",
    )
    parser.add_argument(
        "-s",
        "--sort-by",
        type=int,
        default=None,
        help="Sort the rankings based on this matchup table (0-based index)",
    )
    parser.add_argument(
        "--parallel-jobs",
        type=int,
        default=None,
        help="Number of worker processes used to solve tables",
    )
    parser.add_argument("--output", type=Path, default=None, help="Optional CSV path for the scores")
    parser.add_argument("--load-profile", type=Path, help="Load solver parameters from JSON", default=None)
    parser.add_argument("--save-profile", type=Path, help="Save solver parameters to JSON", default=None)
    parser.add_argument("-n", "--no-pause", action="store_true", help="Don't pause at the end")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log solver progress")
    return parser.parse_args(argv)


def _pause() -> None:
    print("\nPress enter to exit.")
    try:
        input()
    except EOFError:
        # stdin is closed; nothing to wait for
        return


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    settings = get_settings()
    sort_by = args.sort_by
    if args.load_profile:
        try:
            profile = SolverProfile.load(args.load_profile)
        except SolverConfigError as exc:
            print(f"Invalid solver profile: {exc}", file=sys.stderr)
            return 2
        settings = profile.apply(settings)
        if sort_by is None:
            sort_by = profile.sort_by
    sort_by = sort_by or 0

    settings = settings.with_overrides(
        max_iters=args.iters,
        settle_threshold=args.max_settle,
        activation_cap=args.activation_cap,
        parallel_jobs=args.parallel_jobs,
    )
    try:
        settings.validate()
    except SolverConfigError as exc:
        print(f"Invalid solver settings: {exc}", file=sys.stderr)
        return 2

    if args.save_profile:
        SolverProfile(
            max_iters=settings.max_iters,
            settle_threshold=settings.settle_threshold,
            activation_cap=settings.activation_cap,
            sort_by=sort_by,
        ).save(args.save_profile)
        print(f"Saved solver profile to {args.save_profile}")

    try:
        if args.input:
            print(f"Loading matchup tables from {args.input}")
            tables = load_tables(args.input)
        else:
            print(f"Fetching matchup tables from {args.url}")
            tables = load_ratingupdate_tables(args.url)
    except IngestError as exc:
        print(f"Failed to load matchup tables: {exc}", file=sys.stderr)
        return 1

    if not tables:
        print("No matchup tables found", file=sys.stderr)
        return 1

    print(f"Computing tier lists for {len(tables)} tables")
    results = solve_all(
        tables,
        settings.max_iters,
        settings.settle_threshold,
        settings.activation_cap,
        parallel_jobs=settings.parallel_jobs,
    )

    print("Compiling results")
    try:
        report = format_tierlist(results, sort_by)
    except ReportError as exc:
        print(f"Cannot build report: {exc}", file=sys.stderr)
        return 2

    print("Final results:")
    print(report, end="")

    if args.output:
        args.output.write_text(export_tierlist_csv(results, sort_by), encoding="utf-8")
        print(f"Wrote scores to {args.output}")

    if not args.no_pause:
        _pause()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
