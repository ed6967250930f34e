"""Artificial-compressibility solver for the steady lid-driven cavity.

Pseudo-time marching of the incompressible Navier-Stokes equations on a
uniform collocated grid, with a manufactured-solution mode for code
verification.

Component Hierarchy:
--------------------
ACSolver (control loop)
├── BoundaryCondition
│   ├── CavityWalls
│   └── ManufacturedDirichlet
├── RelaxationScheme
│   ├── SymmetricGaussSeidel
│   └── PointJacobi
└── SolverFields (FieldStore buffers)
"""

from .boundary import (
    BoundaryCondition,
    CavityWalls,
    ManufacturedDirichlet,
    create_boundary_condition,
)
from .convergence import convergence_ratio, is_converged, iterative_residuals, termination_status
from .datastructures import (
    Fields,
    InitialState,
    Metrics,
    Parameters,
    SolverFields,
    TerminationStatus,
    TimeSeries,
)
from .errors import ConfigurationError, ShapeMismatchError
from .field_store import FieldStore
from .mms import ManufacturedSolution
from .problem import ProblemConstants, derive_constants, initial_state, validate_parameters
from .relaxation import PointJacobi, RelaxationScheme, SymmetricGaussSeidel, create_relaxation_scheme
from .solver import ACSolver

__all__ = [
    # Solver
    "ACSolver",
    # Data structures
    "Parameters",
    "Metrics",
    "Fields",
    "TimeSeries",
    "TerminationStatus",
    "InitialState",
    "SolverFields",
    "FieldStore",
    # Problem setup
    "ProblemConstants",
    "derive_constants",
    "initial_state",
    "validate_parameters",
    # Boundary conditions
    "BoundaryCondition",
    "CavityWalls",
    "ManufacturedDirichlet",
    "create_boundary_condition",
    "ManufacturedSolution",
    # Relaxation
    "RelaxationScheme",
    "SymmetricGaussSeidel",
    "PointJacobi",
    "create_relaxation_scheme",
    # Convergence
    "iterative_residuals",
    "convergence_ratio",
    "is_converged",
    "termination_status",
    # Errors
    "ConfigurationError",
    "ShapeMismatchError",
]
