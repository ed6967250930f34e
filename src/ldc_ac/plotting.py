"""
Convergence and field plots for the cavity solver.
"""

import logging
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

log = logging.getLogger(__name__)


def plot_convergence(timeseries_df: pd.DataFrame, Re: float, scheme: str, N: int, output_dir: Path) -> Path:
    """Plot iterative residual history (semilog over iterations)."""
    if timeseries_df.empty:
        log.warning("No timeseries data available for convergence plot")
        return None

    sns.set_style("darkgrid")

    fig, ax = plt.subplots()

    for col, label in (("continuity", "Continuity"), ("x_momentum", "x-Momentum"), ("y_momentum", "y-Momentum")):
        data = timeseries_df[col].replace([np.inf, -np.inf], np.nan).dropna()
        data = data[data > 0]
        if len(data) > 0:
            ax.semilogy(timeseries_df.loc[data.index, "iteration"], data, label=label)

    ax.set_xlabel("Iteration")
    ax.set_ylabel("Iterative residual (L2)")
    ax.set_title(f"Convergence History - {scheme.upper()}, N={N}, Re={Re:.0f}")
    ax.legend(frameon=True)

    # Transparent figure, but keep darkgrid axes background
    fig.patch.set_alpha(0.0)

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / "convergence.pdf"
    fig.savefig(output_path, facecolor=(0, 0, 0, 0))
    plt.close(fig)

    return output_path


def plot_fields(fields_df: pd.DataFrame, Re: float, scheme: str, N: int, output_dir: Path) -> Path:
    """Generate field contour plots (p, u, v) on the computational nodes."""
    x_unique = np.sort(fields_df["x"].unique())
    y_unique = np.sort(fields_df["y"].unique())
    nx, ny = len(x_unique), len(y_unique)

    sorted_df = fields_df.sort_values(["y", "x"])
    X, Y = np.meshgrid(x_unique, y_unique)

    fig, axes = plt.subplots(1, 3, figsize=(16, 5))
    panels = (("p", "Pressure", "coolwarm"), ("u", "U velocity", "RdBu_r"), ("v", "V velocity", "RdBu_r"))
    for ax, (name, title, cmap) in zip(axes, panels):
        Z = sorted_df[name].values.reshape(ny, nx)
        cf = ax.contourf(X, Y, Z, levels=25, cmap=cmap)
        ax.set_xlabel("x")
        ax.set_ylabel("y")
        ax.set_title(title, fontweight="bold")
        ax.set_aspect("equal")
        plt.colorbar(cf, ax=ax, label=name)

    fig.suptitle(f"Solution Fields - {scheme.upper()} N={N}, Re={Re:.0f}", fontweight="bold", fontsize=14)
    plt.tight_layout()

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / "fields.png"
    fig.savefig(output_path, dpi=300, bbox_inches="tight")
    plt.close(fig)

    return output_path


def plot_mms_convergence(study_df: pd.DataFrame, output_dir: Path) -> Path:
    """Log-log plot of discretization error L2 norms against grid spacing."""
    sns.set_style("darkgrid")
    fig, ax = plt.subplots()

    for name in ("p", "u", "v"):
        ax.loglog(study_df["h"], study_df[f"{name}_l2_error"], "o-", label=name)

    # Second-order reference slope through the coarsest u error
    h = study_df["h"].values
    e0 = study_df["u_l2_error"].values[0]
    ax.loglog(h, e0 * (h / h[0]) ** 2, "k--", label="2nd order")

    ax.set_xlabel("h")
    ax.set_ylabel("L2 discretization error")
    ax.set_title("Manufactured solution grid convergence")
    ax.legend(frameon=True)

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / "mms_convergence.pdf"
    fig.savefig(output_path)
    plt.close(fig)

    return output_path
