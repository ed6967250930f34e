"""Data structures for solver configuration and results.

This module defines the configuration and result data structures
for the artificial-compressibility lid-driven cavity solver.

Structure:
- Parameters: Input configuration (logged to MLflow at start)
- Metrics: Output results (logged to MLflow at end)
- Fields: Spatial solution data
- TimeSeries: Convergence history
- SolverFields: Internal field stores, allocated once per run
"""

from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import Optional, List

import numpy as np
import pandas as pd

from .field_store import FieldStore


# ========================================================
# Parameters (Input Configuration)
# ========================================================


@dataclass
class Parameters:
    """Solver parameters - physical inputs and numerical settings.

    ``normalization`` defaults to ``"per_equation"``: each residual is scaled
    by its own initial value. ``"continuity"`` scales all three by the
    initial continuity norm divided by ``sqrt(nx*ny)``, the classic
    cavity-code criterion.
    """

    Re: float = 10.0
    lid_velocity: float = 1.0
    rho: float = 1.0
    xmin: float = 0.0
    xmax: float = 0.05
    ymin: float = 0.0
    ymax: float = 0.05
    nx: int = 65
    ny: int = 65
    max_iterations: int = 100000
    tolerance: float = 1e-10
    cfl: float = 0.8
    kappa: float = 0.1  # time-derivative preconditioning constant
    Cx: float = 0.01  # 4th order artificial viscosity in x
    Cy: float = 0.01  # 4th order artificial viscosity in y
    p_ref: float = 0.801333844662  # initial/reference pressure (MMS value at centre)
    scheme: str = "sgs"  # "sgs" or "pj"
    mms: bool = False
    output_interval: int = 500
    residual_interval: int = 10
    dtmin_mode: str = "last_node"  # or "global_min"
    normalization: str = "per_equation"  # or "continuity"
    method: str = "AC-SGS"

    def to_dataframe(self):
        return pd.DataFrame([asdict(self)])

    def to_mlflow(self) -> dict:
        """Flat dict of parameters for ``mlflow.log_params``."""
        return asdict(self)


# ========================================================
# Metrics (Output Results)
# ========================================================


class TerminationStatus(str, Enum):
    """Terminal outcome of the pseudo-time marching loop."""

    CONVERGED = "converged"
    DIVERGED = "diverged"
    MAX_ITERATIONS = "max_iterations"


@dataclass
class Metrics:
    """Solver metrics - output results computed during/after solving."""

    iterations: int = 0
    converged: bool = False
    status: str = ""
    final_residual: float = float("inf")
    wall_time_seconds: float = 0.0
    continuity_residual: float = 0.0
    x_momentum_residual: float = 0.0
    y_momentum_residual: float = 0.0
    sim_time: float = 0.0
    # Discretization error norms (MMS mode only)
    p_l2_error: Optional[float] = None
    u_l2_error: Optional[float] = None
    v_l2_error: Optional[float] = None

    def to_dataframe(self):
        row = {k: (np.nan if v is None else v) for k, v in asdict(self).items()}
        return pd.DataFrame([row])

    def to_mlflow(self) -> dict:
        """Numeric metrics only (mlflow rejects strings and None)."""
        out = {}
        for k, v in asdict(self).items():
            if v is None or isinstance(v, str):
                continue
            out[k] = float(v)
        return out


# ========================================================
# Fields (Spatial Solution Data)
# ========================================================


@dataclass
class Fields:
    """Spatial solution fields (p, u, v) on grid (x, y), flattened i-major."""

    p: np.ndarray
    u: np.ndarray
    v: np.ndarray
    x: np.ndarray
    y: np.ndarray

    @classmethod
    def from_state(cls, U: np.ndarray, x: np.ndarray, y: np.ndarray) -> "Fields":
        X, Y = np.meshgrid(x, y, indexing="ij")
        return cls(
            p=U[:, :, 0].ravel().copy(),
            u=U[:, :, 1].ravel().copy(),
            v=U[:, :, 2].ravel().copy(),
            x=X.ravel(),
            y=Y.ravel(),
        )

    def to_dataframe(self) -> pd.DataFrame:
        """Convert to DataFrame with one row per grid point."""
        return pd.DataFrame(asdict(self))


# ========================================================
# Time Series (Convergence History)
# ========================================================


@dataclass
class TimeSeries:
    """Convergence history (one row every ``residual_interval`` iterations)."""

    iteration: List[int] = field(default_factory=list)
    sim_time: List[float] = field(default_factory=list)
    dtmin: List[float] = field(default_factory=list)
    continuity: List[float] = field(default_factory=list)
    x_momentum: List[float] = field(default_factory=list)
    y_momentum: List[float] = field(default_factory=list)
    ratio: List[float] = field(default_factory=list)

    def append(self, iteration, sim_time, dtmin, res, ratio):
        self.iteration.append(int(iteration))
        self.sim_time.append(float(sim_time))
        self.dtmin.append(float(dtmin))
        self.continuity.append(float(res[0]))
        self.x_momentum.append(float(res[1]))
        self.y_momentum.append(float(res[2]))
        self.ratio.append(float(ratio))

    def __len__(self):
        return len(self.iteration)

    def to_dataframe(self) -> pd.DataFrame:
        """Convert to DataFrame with one row per recorded iteration."""
        return pd.DataFrame(asdict(self))

    def to_mlflow_batch(self) -> list:
        """Build mlflow ``Metric`` entities for ``MlflowClient.log_batch``."""
        from mlflow.entities import Metric

        batch = []
        for name in ("continuity", "x_momentum", "y_momentum", "ratio"):
            values = getattr(self, name)
            for step, value in zip(self.iteration, values):
                if np.isfinite(value):
                    batch.append(Metric(name, float(value), 0, int(step)))
        return batch


# =============================================================
# Solver internals
# ============================================================


@dataclass
class InitialState:
    """Starting point of a run (fresh start or restart record)."""

    iteration: int
    sim_time: float
    resinit: Optional[np.ndarray]
    U: np.ndarray


@dataclass
class SolverFields:
    """Internal solver stores - current state, previous state, and work buffers."""

    # Current solution state (p, u, v) and previous iteration
    U: FieldStore
    U_old: FieldStore

    # Source terms (zero unless MMS is active)
    S: FieldStore

    # Artificial viscosity, x and y directions
    visc_x: FieldStore
    visc_y: FieldStore

    # Local pseudo-time step
    dt: FieldStore

    @classmethod
    def allocate(cls, nx: int, ny: int):
        """Allocate all stores with their final sizes."""
        return cls(
            U=FieldStore(nx, ny, 3),
            U_old=FieldStore(nx, ny, 3),
            S=FieldStore(nx, ny, 3),
            visc_x=FieldStore(nx, ny),
            visc_y=FieldStore(nx, ny),
            dt=FieldStore(nx, ny),
        )
