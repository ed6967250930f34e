"""Error norms, observed order, and centreline extraction."""

from __future__ import annotations

import numpy as np
import pandas as pd
from scipy.interpolate import RectBivariateSpline

VARIABLES = ("p", "u", "v")


# -----------------------------------------------------------------------------
# Norms / errors
# -----------------------------------------------------------------------------


def discretization_error_norms(U: np.ndarray, exact: np.ndarray) -> pd.DataFrame:
    """L1, L2 and Linf norms of the discretization error over interior nodes.

    The sums are normalised by the total node count ``nx*ny`` (boundary
    nodes included), so norms from different grids are directly comparable.

    Parameters
    ----------
    U : np.ndarray
        Numerical state (nx, ny, 3).
    exact : np.ndarray
        Exact state on the same nodes (nx, ny, 3).

    Returns
    -------
    pd.DataFrame
        Index ``p, u, v``; columns ``L1, L2, Linf``.
    """
    nx, ny = U.shape[0], U.shape[1]
    de = np.abs(U[1:-1, 1:-1] - exact[1:-1, 1:-1]).reshape(-1, U.shape[2])

    return pd.DataFrame(
        {
            "L1": de.sum(axis=0) / (nx * ny),
            "L2": np.sqrt((de**2).sum(axis=0) / (nx * ny)),
            "Linf": de.max(axis=0),
        },
        index=list(VARIABLES),
    )


def observed_order(errors, h) -> np.ndarray:
    """Observed order of accuracy between successive refinements.

    ``p = log(e_coarse / e_fine) / log(h_coarse / h_fine)``, one value per
    consecutive pair.
    """
    errors = np.asarray(errors, dtype=float)
    h = np.asarray(h, dtype=float)
    if errors.shape != h.shape or errors.size < 2:
        raise ValueError("Need at least two (error, h) pairs of equal length")
    return np.log(errors[:-1] / errors[1:]) / np.log(h[:-1] / h[1:])


# -----------------------------------------------------------------------------
# Centreline profiles
# -----------------------------------------------------------------------------


def centerline_profiles(U: np.ndarray, x: np.ndarray, y: np.ndarray, n_points: int = 101):
    """Interpolate u along the vertical and v along the horizontal centreline.

    Parameters
    ----------
    U : np.ndarray
        State (nx, ny, 3).
    x, y : np.ndarray
        Node coordinate vectors.
    n_points : int
        Number of samples along each line.

    Returns
    -------
    tuple of pd.DataFrame
        ``(u_profile, v_profile)`` with columns ``(y, u)`` and ``(x, v)``.
    """
    x_mid = 0.5 * (x[0] + x[-1])
    y_mid = 0.5 * (y[0] + y[-1])
    x_fine = np.linspace(x[0], x[-1], n_points)
    y_fine = np.linspace(y[0], y[-1], n_points)

    u_spline = RectBivariateSpline(x, y, U[:, :, 1])
    v_spline = RectBivariateSpline(x, y, U[:, :, 2])

    u_line = u_spline(np.array([x_mid]), y_fine)[0]
    v_line = v_spline(x_fine, np.array([y_mid]))[:, 0]

    return (
        pd.DataFrame({"y": y_fine, "u": u_line}),
        pd.DataFrame({"x": x_fine, "v": v_line}),
    )
