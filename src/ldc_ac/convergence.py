"""Iterative residuals and the convergence criterion.

The iterative residual of each equation is recovered from the change of
its primary variable over one pseudo-time iteration::

    continuity:  r = (p_new - p_old) / (-beta^2 dt)
    x-momentum:  r = -rho (u_new - u_old) / dt
    y-momentum:  r = -rho (v_new - v_old) / dt

and reduced to ``res[k] = sqrt(sum(r^2) / (nx*ny))`` over interior nodes.

A NaN ratio never compares below the tolerance, so ``is_converged`` alone
cannot tell divergence from slow convergence; ``termination_status``
checks for non-finite residuals explicitly.
"""

from typing import Optional

import numpy as np

from .datastructures import TerminationStatus
from .operators.timestep import local_beta2


def iterative_residuals(U: np.ndarray, U_old: np.ndarray, dt: np.ndarray, constants) -> np.ndarray:
    """L2 norms of the continuity, x- and y-momentum iterative residuals.

    Parameters
    ----------
    U, U_old : np.ndarray
        Current and previous states (nx, ny, 3).
    dt : np.ndarray
        Local time step (nx, ny) used for the iteration.
    constants : ProblemConstants
        Derived problem constants.

    Returns
    -------
    np.ndarray
        ``res`` of length 3.
    """
    c = constants
    new = U[1:-1, 1:-1]
    old = U_old[1:-1, 1:-1]
    dtc = dt[1:-1, 1:-1]

    beta2 = local_beta2(new[:, :, 1], new[:, :, 2], c.beta2_floor)

    r_c = (new[:, :, 0] - old[:, :, 0]) / (-beta2 * dtc)
    r_x = -c.rho * (new[:, :, 1] - old[:, :, 1]) / dtc
    r_y = -c.rho * (new[:, :, 2] - old[:, :, 2]) / dtc

    npts = c.nx * c.ny
    return np.array([
        np.sqrt(np.sum(r_c**2) / npts),
        np.sqrt(np.sum(r_x**2) / npts),
        np.sqrt(np.sum(r_y**2) / npts),
    ])


def convergence_ratio(
    res: np.ndarray, resinit: np.ndarray, normalization: str = "per_equation", npts: int = 1
) -> float:
    """Dimensionless convergence measure.

    Parameters
    ----------
    res : np.ndarray
        Current residual norms.
    resinit : np.ndarray
        Residual norms captured at the first iteration.
    normalization : str
        ``"per_equation"``: ``max_k res[k] / resinit[k]``.
        ``"continuity"``: ``max(res) / (resinit[0] / sqrt(npts))`` for all
        three equations, the initial continuity norm being scaled by
        ``sqrt(nx*ny)`` once more.
    npts : int
        Total node count ``nx*ny`` (continuity normalization only).

    Zero entries of ``resinit`` are taken as 1, making the criterion
    absolute for that equation (the point-Jacobi continuity residual is
    exactly zero on the first iteration from a uniform pressure field).
    """
    res = np.asarray(res, dtype=float)
    resinit = np.asarray(resinit, dtype=float)
    scale = np.where(resinit > 0.0, resinit, 1.0)

    if normalization == "continuity":
        ref = resinit[0] / np.sqrt(npts) if resinit[0] > 0.0 else 1.0
        return float(np.max(res) / ref)
    elif normalization == "per_equation":
        return float(np.max(res / scale))
    else:
        raise ValueError(f"Unknown normalization: {normalization}")


def is_converged(ratio: float, tolerance: float) -> bool:
    """True when ``ratio`` is below ``tolerance`` (false for NaN)."""
    return bool(ratio < tolerance)


def termination_status(res: np.ndarray, ratio: float, tolerance: float) -> Optional[TerminationStatus]:
    """Terminal outcome after an iteration, or ``None`` to keep iterating."""
    if not np.all(np.isfinite(res)) or not np.isfinite(ratio):
        return TerminationStatus.DIVERGED
    if is_converged(ratio, tolerance):
        return TerminationStatus.CONVERGED
    return None
