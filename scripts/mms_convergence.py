#!/usr/bin/env python
"""Grid-refinement study with the manufactured solution.

Runs the solver in MMS mode on a sequence of grids, prints the
discretization error norms and the observed order of accuracy, and
writes a CSV table and a log-log plot.

Usage:
    uv run python scripts/mms_convergence.py
    uv run python scripts/mms_convergence.py --grids 9 17 33 --scheme pj
"""

import argparse
import logging
import sys
from pathlib import Path

import pandas as pd

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ldc_ac import ACSolver  # noqa: E402
from ldc_ac.metrics import discretization_error_norms, observed_order  # noqa: E402
from ldc_ac.plotting import plot_mms_convergence  # noqa: E402

log = logging.getLogger(__name__)


def run_study(grids, scheme="sgs", tolerance=1e-10, max_iterations=200000) -> pd.DataFrame:
    """Solve the manufactured problem on each grid and collect error norms."""
    rows = []
    for n in grids:
        solver = ACSolver(
            nx=n,
            ny=n,
            mms=True,
            scheme=scheme,
            tolerance=tolerance,
            max_iterations=max_iterations,
            output_interval=max_iterations,
        )
        status = solver.solve()
        norms = discretization_error_norms(solver.snapshot(), solver.exact_solution())
        row = {"N": n, "h": solver.constants.dx, "status": status.value, "iterations": solver.metrics.iterations}
        for name in ("p", "u", "v"):
            row[f"{name}_l1_error"] = norms.loc[name, "L1"]
            row[f"{name}_l2_error"] = norms.loc[name, "L2"]
            row[f"{name}_linf_error"] = norms.loc[name, "Linf"]
        rows.append(row)
        log.info(f"N={n}: {status.value} after {row['iterations']} iterations, "
                 f"u L2 error={row['u_l2_error']:.4e}")

    df = pd.DataFrame(rows)
    for name in ("p", "u", "v"):
        orders = observed_order(df[f"{name}_l2_error"].values, df["h"].values)
        df[f"{name}_order"] = [float("nan"), *orders]
    return df


def main():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--grids", type=int, nargs="+", default=[9, 17, 33, 65])
    parser.add_argument("--scheme", choices=["sgs", "pj"], default="sgs")
    parser.add_argument("--tolerance", type=float, default=1e-10)
    parser.add_argument("--output-dir", type=Path, default=Path("figures/mms"))
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(name)s - %(message)s")

    df = run_study(args.grids, scheme=args.scheme, tolerance=args.tolerance)

    args.output_dir.mkdir(parents=True, exist_ok=True)
    csv_path = args.output_dir / f"mms_convergence_{args.scheme}.csv"
    df.to_csv(csv_path, index=False)
    log.info(f"Saved: {csv_path}")

    plot_path = plot_mms_convergence(df, args.output_dir)
    log.info(f"Saved: {plot_path}")

    print(df[["N", "h", "status", "p_l2_error", "u_l2_error", "v_l2_error", "u_order", "v_order"]].to_string(index=False))


if __name__ == "__main__":
    main()
