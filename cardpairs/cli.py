"""Command line entry point: solve a card exchange from shorthand requests and write the solution matrix.

Example:
    python -m cardpairs 1x3 2x3 3x4 --output solution.png
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional

from cardpairs.errors import InfeasibleModel, MalformedInput, SolverError
from cardpairs.main import CardExchangeProblem
import cardpairs.data.requests


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(prog="cardpairs", description="Pair up card exchange participants",
                                 formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    ap.add_argument("requests", nargs="+", help="Cards each participant wants to send, e.g. '3' or '2x5' (five people sending two)")
    ap.add_argument("--solver", default="highs", help="Pyomo solver name (highs, cbc, glpk, gurobi, ...)")
    ap.add_argument("--executable", default=None, help="Path to the solver executable, if it isn't on the PATH")
    ap.add_argument("--max-time", default=None, type=float, help="Solver time limit in seconds")
    ap.add_argument("--output", default=Path("solution.png"), type=Path, help="Where to write the solution matrix image")
    ap.add_argument("--report", default=None, type=Path, help="Optional text file for the report")
    ap.add_argument("--no-sort", action="store_true", help="Keep participants in the given order instead of sorting by request")
    ap.add_argument("--no-image", action="store_true", help="Skip writing the solution matrix image")
    ap.add_argument("--quiet", action="store_true", help="Only print the report")
    return ap.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    printing = not args.quiet

    try:
        nums = cardpairs.data.requests.parse_shorthand(args.requests)
        print("Numbers: " + str(nums))
        instance = CardExchangeProblem(nums, sort_requests=not args.no_sort, printing=printing)
    except MalformedInput as error:
        print("Invalid requests: " + str(error))
        return 2

    p_dict = {"solver_name": args.solver, "pyomo_max_time": args.max_time, "executable": args.executable}
    try:
        instance.solve_pyomo_model(p_dict)
    except (InfeasibleModel, SolverError) as error:
        print("Solver failed: " + str(error))
        return 1

    instance.report(printing=True, filepath=args.report)

    # A failed image doesn't invalidate the pairings, so this isn't an error exit
    if not args.no_image:
        try:
            instance.visualize_solution_matrix(printing=printing, filepath=args.output)
        except OSError:
            pass

    return 0
