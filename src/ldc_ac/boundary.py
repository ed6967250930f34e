"""Boundary conditions for the cavity state U = (p, u, v).

Two policies:

1. CavityWalls: no-slip stationary walls and a moving lid.
   - Side columns first, then bottom/top rows (which own the corners)
   - Wall pressure from linear extrapolation p_w = 2 p_1 - p_2

2. ManufacturedDirichlet: exact manufactured values on all four edges.
   - Pressure is then overwritten by the same 2nd order extrapolation,
     consistent with the interior discretization
"""

from abc import ABC, abstractmethod

import numpy as np

from .mms import ManufacturedSolution


# =============================================================================
# Abstract Base Class
# =============================================================================


class BoundaryCondition(ABC):
    """Abstract base class for boundary-condition appliers."""

    @abstractmethod
    def apply(self, U: np.ndarray):
        """Set boundary values of ``U`` (nx, ny, 3) in place from its interior."""
        pass


# =============================================================================
# Policy 1: Lid-driven cavity walls
# =============================================================================


class CavityWalls(BoundaryCondition):
    """No-slip walls with the top wall moving at ``lid_velocity``."""

    def __init__(self, lid_velocity: float):
        self.lid_velocity = lid_velocity

    def apply(self, U: np.ndarray):
        # Left/right walls (full columns)
        U[0, :, 1:] = 0.0
        U[-1, :, 1:] = 0.0
        U[0, :, 0] = 2.0 * U[1, :, 0] - U[2, :, 0]
        U[-1, :, 0] = 2.0 * U[-2, :, 0] - U[-3, :, 0]

        # Bottom wall
        U[:, 0, 1:] = 0.0
        U[:, 0, 0] = 2.0 * U[:, 1, 0] - U[:, 2, 0]

        # Top wall (lid)
        U[:, -1, 1] = self.lid_velocity
        U[:, -1, 2] = 0.0
        U[:, -1, 0] = 2.0 * U[:, -2, 0] - U[:, -3, 0]


# =============================================================================
# Policy 2: Manufactured solution
# =============================================================================


class ManufacturedDirichlet(BoundaryCondition):
    """Exact manufactured values on the boundary, extrapolated pressure.

    Parameters
    ----------
    solution : ManufacturedSolution
        Oracle for the exact field.
    x, y : np.ndarray
        Node coordinate vectors.
    """

    def __init__(self, solution: ManufacturedSolution, x: np.ndarray, y: np.ndarray):
        self.solution = solution
        # Exact values are fixed in time; evaluate the edges once
        exact = solution.exact_fields(x, y)
        self._left = exact[0, 1:-1].copy()
        self._right = exact[-1, 1:-1].copy()
        self._bottom = exact[:, 0].copy()
        self._top = exact[:, -1].copy()

    def apply(self, U: np.ndarray):
        # Side walls (j = 1 .. ny-2)
        U[0, 1:-1] = self._left
        U[0, 1:-1, 0] = 2.0 * U[1, 1:-1, 0] - U[2, 1:-1, 0]
        U[-1, 1:-1] = self._right
        U[-1, 1:-1, 0] = 2.0 * U[-2, 1:-1, 0] - U[-3, 1:-1, 0]

        # Top/bottom walls (full rows)
        U[:, 0] = self._bottom
        U[:, 0, 0] = 2.0 * U[:, 1, 0] - U[:, 2, 0]
        U[:, -1] = self._top
        U[:, -1, 0] = 2.0 * U[:, -2, 0] - U[:, -3, 0]


# =============================================================================
# Factory
# =============================================================================


def create_boundary_condition(mms: bool, constants) -> BoundaryCondition:
    """Create the boundary-condition policy for the run.

    Parameters
    ----------
    mms : bool
        Use the manufactured-solution policy instead of cavity walls.
    constants : ProblemConstants
        Derived problem constants.

    Returns
    -------
    BoundaryCondition
        Configured boundary-condition applier
    """
    if mms:
        solution = ManufacturedSolution.from_constants(constants)
        return ManufacturedDirichlet(solution, constants.x, constants.y)
    return CavityWalls(lid_velocity=constants.uinf)
