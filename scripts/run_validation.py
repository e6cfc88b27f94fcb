"""Run full scenario validation and store a markdown report.

Usage:
    python -m scripts.run_validation --out artifacts/validation_report.md
"""

from __future__ import annotations

import argparse
import logging
import shutil
from pathlib import Path

from analysis.consistency import SweepConfig
from scenarios.runner import run_all


def main() -> None:
    parser = argparse.ArgumentParser(description="Run scenario sweep validation report.")
    parser.add_argument("--out", default="artifacts/validation_report.md", help="Output markdown report path")
    parser.add_argument("--h5", default="artifacts/ricochet_fixtures.h5", help="Output HDF5 fixture path")
    parser.add_argument("--plots", default="artifacts/plots", help="Plot output directory")
    parser.add_argument("--grid", type=int, nargs=2, default=[16, 9], metavar=("NX", "NY"), help="Cursor grid size for the lit/valid sweep")
    parser.add_argument("--scenarios", nargs="+", default=None, metavar="SID", help="Scenario ids to run (default: all)")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    generated = Path(run_all(args.h5, args.plots, SweepConfig(nx=args.grid[0], ny=args.grid[1]), args.scenarios))
    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    if generated.resolve() != out_path.resolve():
        shutil.copyfile(generated, out_path)
    print(out_path)


if __name__ == "__main__":
    main()
