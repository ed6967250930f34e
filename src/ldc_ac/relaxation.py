"""Relaxation strategies advancing (p, u, v) by one pseudo-time iteration.

Two strategies, selected once per run:

1. SymmetricGaussSeidel: forward then backward in-place sweep, boundary
   conditions and artificial viscosity refreshed between the two.
   - Strictly sequential (each node reads already-updated neighbours)

2. PointJacobi: every node computed from the previous iteration only.
   - The old state is obtained by swapping buffers, not copying
   - Node updates are independent within a pass
"""

from abc import ABC, abstractmethod

from .operators.dissipation import compute_artificial_viscosity
from .operators.sweeps import point_jacobi_update, sgs_backward_sweep, sgs_forward_sweep


# =============================================================================
# Abstract Base Class
# =============================================================================


class RelaxationScheme(ABC):
    """Abstract base class for one relaxation iteration."""

    name = ""

    @abstractmethod
    def iterate(self, fields, bc, constants):
        """Advance ``fields.U`` by one iteration, leaving the prior state in ``fields.U_old``.

        Parameters
        ----------
        fields : SolverFields
            Solver stores; ``U``, ``U_old``, ``visc_x`` and ``visc_y`` are modified.
            ``dt`` must already hold the local time step.
        bc : BoundaryCondition
            Boundary-condition policy applied after each sweep.
        constants : ProblemConstants
            Derived problem constants.
        """
        pass


# =============================================================================
# Strategy 1: Symmetric Gauss-Seidel
# =============================================================================


class SymmetricGaussSeidel(RelaxationScheme):
    """Forward and backward Gauss-Seidel half-sweeps."""

    name = "sgs"

    def _sweep(self, kernel, fields, constants):
        c = constants
        kernel(
            fields.U.data,
            fields.visc_x.data,
            fields.visc_y.data,
            fields.dt.data,
            fields.S.data,
            c.rho,
            c.rhoinv,
            c.rmu,
            c.dx,
            c.dy,
            c.beta2_floor,
        )

    def iterate(self, fields, bc, constants):
        # Save previous flow values
        fields.U.copy_into(fields.U_old)

        compute_artificial_viscosity(fields.U.data, fields.visc_x.data, fields.visc_y.data, constants)
        self._sweep(sgs_forward_sweep, fields, constants)
        bc.apply(fields.U.data)

        compute_artificial_viscosity(fields.U.data, fields.visc_x.data, fields.visc_y.data, constants)
        self._sweep(sgs_backward_sweep, fields, constants)
        bc.apply(fields.U.data)


# =============================================================================
# Strategy 2: Point Jacobi
# =============================================================================


class PointJacobi(RelaxationScheme):
    """Single pass reading only the previous iteration."""

    name = "pj"

    def iterate(self, fields, bc, constants):
        # Swap buffers (zero-copy): U_old now holds the previous iteration
        fields.U.swap_storage(fields.U_old)

        compute_artificial_viscosity(
            fields.U_old.data, fields.visc_x.data, fields.visc_y.data, constants
        )
        point_jacobi_update(
            fields.U.data,
            fields.U_old.data,
            fields.visc_x.data,
            fields.visc_y.data,
            fields.dt.data,
            fields.S.data,
            constants,
        )
        bc.apply(fields.U.data)


# =============================================================================
# Factory
# =============================================================================


def create_relaxation_scheme(name: str = "sgs") -> RelaxationScheme:
    """Create relaxation scheme from configuration.

    Parameters
    ----------
    name : str
        ``"sgs"`` (symmetric Gauss-Seidel) or ``"pj"`` (point Jacobi)

    Returns
    -------
    RelaxationScheme
        Configured relaxation scheme
    """
    name_lower = name.lower()

    if name_lower == "sgs":
        return SymmetricGaussSeidel()
    elif name_lower == "pj":
        return PointJacobi()
    else:
        raise ValueError(f"Unknown relaxation scheme: {name}. Use 'sgs' or 'pj'.")
