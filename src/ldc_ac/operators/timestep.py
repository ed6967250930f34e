"""Local pseudo-time step from convective and viscous stability limits."""

import numpy as np


def local_beta2(u: np.ndarray, v: np.ndarray, beta2_floor: float) -> np.ndarray:
    """Preconditioning parameter beta^2 = max(u^2 + v^2, kappa * Uref^2)."""
    return np.maximum(u * u + v * v, beta2_floor)


def eigenvalues(u: np.ndarray, v: np.ndarray, beta2: np.ndarray):
    """Maximum absolute eigenvalues (lambda_x, lambda_y) of the preconditioned system."""
    lambda_x = 0.5 * (np.abs(u) + np.sqrt(u * u + 4.0 * beta2))
    lambda_y = 0.5 * (np.abs(v) + np.sqrt(v * v + 4.0 * beta2))
    return lambda_x, lambda_y


def compute_time_step(U: np.ndarray, dt: np.ndarray, constants, mode: str = "last_node") -> float:
    """Fill interior entries of ``dt`` with the local stable pseudo-time step.

    Parameters
    ----------
    U : np.ndarray
        State (nx, ny, 3) holding (p, u, v).
    dt : np.ndarray
        Local time step (nx, ny), interior entries overwritten.
    constants : ProblemConstants
        Derived problem constants.
    mode : str
        ``"last_node"`` returns the step of the last interior node
        (nx-2, ny-2); ``"global_min"`` returns the interior minimum.

    Returns
    -------
    float
        ``dtmin`` used to accumulate the simulation time.
    """
    c = constants
    u = U[1:-1, 1:-1, 1]
    v = U[1:-1, 1:-1, 2]

    beta2 = local_beta2(u, v, c.beta2_floor)
    lambda_x, lambda_y = eigenvalues(u, v, beta2)
    lambda_max = np.maximum(lambda_x, lambda_y)

    dtconv = min(c.dx, c.dy) / lambda_max
    dtvisc = (c.dx * c.dy) / (4.0 * c.rmu * c.rhoinv)  # constant over the domain

    dt[1:-1, 1:-1] = c.cfl * np.minimum(dtconv, dtvisc)

    if mode == "global_min":
        return float(dt[1:-1, 1:-1].min())
    return float(dt[-2, -2])
