"""Problem setup: parameter validation, derived constants, initial state."""

import logging
from dataclasses import dataclass

import numpy as np

from .datastructures import InitialState, Parameters
from .errors import ConfigurationError

log = logging.getLogger(__name__)

SCHEMES = ("sgs", "pj")
DTMIN_MODES = ("last_node", "global_min")
NORMALIZATIONS = ("per_equation", "continuity")


@dataclass(frozen=True)
class ProblemConstants:
    """Physical and numerical constants derived once from ``Parameters``."""

    nx: int
    ny: int
    xmin: float
    xmax: float
    ymin: float
    ymax: float
    rho: float
    rhoinv: float
    rlength: float
    rmu: float
    uinf: float
    vel2ref: float
    dx: float
    dy: float
    cfl: float
    kappa: float
    Cx: float
    Cy: float

    @property
    def x(self) -> np.ndarray:
        """Node x coordinates."""
        return self.xmin + self.dx * np.arange(self.nx)

    @property
    def y(self) -> np.ndarray:
        """Node y coordinates."""
        return self.ymin + self.dy * np.arange(self.ny)

    @property
    def center(self):
        """Index of the pressure reference node."""
        return (self.nx - 1) // 2, (self.ny - 1) // 2

    @property
    def beta2_floor(self) -> float:
        """Lower bound kappa * Uref^2 of the preconditioning parameter."""
        return self.kappa * self.vel2ref


def validate_parameters(params: Parameters):
    """Raise ``ConfigurationError`` for inputs the discretization cannot handle."""
    for name in ("nx", "ny"):
        n = getattr(params, name)
        if int(n) != n or n < 5 or n % 2 == 0:
            raise ConfigurationError(f"{name} must be an odd integer >= 5, got {n}")
    if params.xmax <= params.xmin or params.ymax <= params.ymin:
        raise ConfigurationError(
            f"Domain extents must be positive: x=[{params.xmin}, {params.xmax}], "
            f"y=[{params.ymin}, {params.ymax}]"
        )
    for name in ("Re", "rho", "cfl", "lid_velocity", "kappa"):
        if not getattr(params, name) > 0:
            raise ConfigurationError(f"{name} must be positive, got {getattr(params, name)}")
    if params.scheme.lower() not in SCHEMES:
        raise ConfigurationError(f"Unknown scheme: {params.scheme}. Use 'sgs' or 'pj'.")
    if params.dtmin_mode not in DTMIN_MODES:
        raise ConfigurationError(
            f"Unknown dtmin_mode: {params.dtmin_mode}. Use one of {DTMIN_MODES}."
        )
    if params.normalization not in NORMALIZATIONS:
        raise ConfigurationError(
            f"Unknown normalization: {params.normalization}. Use one of {NORMALIZATIONS}."
        )
    if params.max_iterations < 1 or params.output_interval < 1 or params.residual_interval < 1:
        raise ConfigurationError("Iteration counts and output intervals must be >= 1")


def derive_constants(params: Parameters) -> ProblemConstants:
    """Validate ``params`` and compute the derived quantities."""
    validate_parameters(params)

    rlength = params.xmax - params.xmin  # cavity width
    rmu = params.rho * params.lid_velocity * rlength / params.Re
    constants = ProblemConstants(
        nx=int(params.nx),
        ny=int(params.ny),
        xmin=params.xmin,
        xmax=params.xmax,
        ymin=params.ymin,
        ymax=params.ymax,
        rho=params.rho,
        rhoinv=1.0 / params.rho,
        rlength=rlength,
        rmu=rmu,
        uinf=params.lid_velocity,
        vel2ref=params.lid_velocity**2,
        dx=(params.xmax - params.xmin) / (params.nx - 1),
        dy=(params.ymax - params.ymin) / (params.ny - 1),
        cfl=params.cfl,
        kappa=params.kappa,
        Cx=params.Cx,
        Cy=params.Cy,
    )
    log.info(
        f"rho={constants.rho}, V={constants.uinf}, L={rlength}, "
        f"mu={rmu:.6e}, Re={params.Re}, dx={constants.dx:.4e}, dy={constants.dy:.4e}"
    )
    return constants


def initial_state(constants: ProblemConstants, p_ref: float) -> InitialState:
    """Fresh-start state: uniform pressure, fluid at rest, lid moving."""
    U = np.zeros((constants.nx, constants.ny, 3))
    U[:, :, 0] = p_ref
    U[:, -1, 1] = constants.uinf
    return InitialState(iteration=1, sim_time=0.0, resinit=None, U=U)
