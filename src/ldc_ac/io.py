"""Restart records, history and field files.

Restart layout (plain text, whitespace separated)::

    n sim_time
    resinit_0 resinit_1 resinit_2
    x y p u v          <- one row per node, i outer, j inner

A run restarted from a record resumes at iteration ``n + 1``. An all-zero
``resinit`` row means the initial residuals were not captured yet.
"""

import logging
from pathlib import Path

import numpy as np
import pandas as pd

from .datastructures import InitialState
from .metrics import discretization_error_norms

log = logging.getLogger(__name__)


# =============================================================================
# Restart records
# =============================================================================


def write_restart(filepath, iteration, U, resinit, sim_time, x, y):
    """Write a restart record for ``U`` at ``iteration``."""
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    U = np.asarray(U)
    X, Y = np.meshgrid(x, y, indexing="ij")
    rows = np.column_stack([X.ravel(), Y.ravel(), U[:, :, 0].ravel(), U[:, :, 1].ravel(), U[:, :, 2].ravel()])
    resinit = np.zeros(3) if resinit is None else np.asarray(resinit, dtype=float)

    with open(filepath, "w") as fh:
        fh.write(f"{int(iteration)} {sim_time:.16e}\n")
        fh.write(" ".join(f"{r:.16e}" for r in resinit) + "\n")
        np.savetxt(fh, rows, fmt="%.16e")


def read_restart(filepath, nx: int, ny: int) -> InitialState:
    """Read a restart record written by ``write_restart``.

    Raises
    ------
    FileNotFoundError
        If ``filepath`` does not exist.
    ValueError
        If the record does not hold ``nx * ny`` node rows.
    """
    filepath = Path(filepath)
    with open(filepath) as fh:
        header = fh.readline().split()
        resinit = np.array([float(r) for r in fh.readline().split()])
        rows = np.loadtxt(fh, ndmin=2)

    if len(header) != 2 or resinit.size != 3:
        raise ValueError(f"Malformed restart header in {filepath}")
    if rows.shape != (nx * ny, 5):
        raise ValueError(
            f"Restart file {filepath} holds {rows.shape[0]} nodes, expected {nx}x{ny}"
        )

    U = rows[:, 2:].reshape(nx, ny, 3)
    iteration = int(header[0]) + 1
    log.info(f"Restarting at iteration {iteration}")
    return InitialState(
        iteration=iteration,
        sim_time=float(header[1]),
        resinit=None if not np.any(resinit) else resinit,
        U=U,
    )


# =============================================================================
# History and field files
# =============================================================================


def write_history(filepath, time_series) -> Path:
    """Write the residual history as CSV."""
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    time_series.to_dataframe().to_csv(filepath, index=False)
    return filepath


def field_dataframe(U, x, y, exact=None) -> pd.DataFrame:
    """One row per node with coordinates and (p, u, v).

    With ``exact`` given, adds the exact values and the absolute
    discretization error of each variable.
    """
    U = np.asarray(U)
    X, Y = np.meshgrid(x, y, indexing="ij")
    df = pd.DataFrame({
        "x": X.ravel(),
        "y": Y.ravel(),
        "p": U[:, :, 0].ravel(),
        "u": U[:, :, 1].ravel(),
        "v": U[:, :, 2].ravel(),
    })
    if exact is not None:
        for k, name in enumerate(("p", "u", "v")):
            df[f"{name}_exact"] = exact[:, :, k].ravel()
        for k, name in enumerate(("p", "u", "v")):
            df[f"{name}_error"] = np.abs(U[:, :, k] - exact[:, :, k]).ravel()
    return df


def write_fields(filepath, U, x, y, exact=None) -> Path:
    """Write the field snapshot as CSV."""
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    field_dataframe(U, x, y, exact).to_csv(filepath, index=False)
    return filepath


# =============================================================================
# Output sink
# =============================================================================


class OutputWriter:
    """Output callback writing field and restart files.

    Each call overwrites ``fields.csv`` and ``restart.out`` in
    ``output_dir``, so the directory always holds the latest snapshot.

    Parameters
    ----------
    output_dir : str or Path
        Destination directory.
    x, y : np.ndarray
        Node coordinate vectors.
    exact : np.ndarray, optional
        Manufactured solution on the nodes, written alongside the fields.
    """

    def __init__(self, output_dir, x, y, exact=None):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.x = x
        self.y = y
        self.exact = exact
        self.calls = 0

    @property
    def fields_path(self) -> Path:
        return self.output_dir / "fields.csv"

    @property
    def restart_path(self) -> Path:
        return self.output_dir / "restart.out"

    def __call__(self, iteration, U, dt, resinit, sim_time):
        write_fields(self.fields_path, U, self.x, self.y, self.exact)
        write_restart(self.restart_path, iteration, U, resinit, sim_time, self.x, self.y)
        self.calls += 1
        log.debug(f"Wrote output for iteration {iteration} to {self.output_dir}")


def error_norms_table(U, exact) -> pd.DataFrame:
    """Discretization error norms in a long table (variable, norm, value)."""
    norms = discretization_error_norms(np.asarray(U), exact)
    return norms.rename_axis("variable").reset_index().melt(
        id_vars="variable", var_name="norm", value_name="value"
    )
