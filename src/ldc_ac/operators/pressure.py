"""Pressure rescaling about the cavity centre."""

import numpy as np


def rescale_pressure(U: np.ndarray, p_ref: float) -> float:
    """Shift all pressures so the centre node equals ``p_ref``.

    The continuity equation fixes pressure only up to an additive constant.

    Returns
    -------
    float
        The shift ``deltap`` that was subtracted.
    """
    nx, ny = U.shape[0], U.shape[1]
    iref, jref = (nx - 1) // 2, (ny - 1) // 2
    deltap = U[iref, jref, 0] - p_ref
    U[:, :, 0] -= deltap
    return float(deltap)
