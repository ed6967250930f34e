"""Grid operators: time step, artificial viscosity, relaxation kernels, pressure rescaling."""

from .dissipation import compute_artificial_viscosity
from .pressure import rescale_pressure
from .sweeps import point_jacobi_update, sgs_backward_sweep, sgs_forward_sweep
from .timestep import compute_time_step, eigenvalues, local_beta2

__all__ = [
    "compute_time_step",
    "compute_artificial_viscosity",
    "eigenvalues",
    "local_beta2",
    "point_jacobi_update",
    "rescale_pressure",
    "sgs_backward_sweep",
    "sgs_forward_sweep",
]
