"""Pseudo-time marching solver for the steady lid-driven cavity.

Each iteration:

1. Local time step (convective and viscous limits)
2. Relaxation (symmetric Gauss-Seidel or point Jacobi), which refreshes
   the artificial viscosity and applies boundary conditions itself
3. Pressure rescaling about the cavity centre
4. Simulation time update and iterative residuals

The loop stops on convergence, on non-finite residuals, or at the
iteration cap, and reports which one as a ``TerminationStatus``.
"""

import logging
import time
from pathlib import Path

import mlflow
import numpy as np

from .boundary import create_boundary_condition
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
from .errors import ShapeMismatchError
from .metrics import discretization_error_norms
from .mms import ManufacturedSolution
from .operators.pressure import rescale_pressure
from .operators.timestep import compute_time_step
from .problem import derive_constants, initial_state as fresh_state
from .relaxation import create_relaxation_scheme

log = logging.getLogger(__name__)


class ACSolver:
    """Artificial-compressibility solver for the lid-driven cavity.

    Parameters
    ----------
    params : Parameters, optional
        Parameters object. If not provided, kwargs are used to create params.
    initial_state : InitialState, optional
        Starting point (e.g. from ``io.read_restart``). A fresh start is
        used when omitted.
    output_callback : callable, optional
        Called as ``output_callback(iteration, U, dt, resinit, sim_time)``
        before the first iteration, every ``output_interval`` iterations
        and once at termination. Arrays are read-only views.
    **kwargs
        Configuration parameters passed to ``Parameters`` if params is None.

    Raises
    ------
    ConfigurationError
        Invalid grid size or mode flag. Raised before any field is allocated.
    """

    Parameters = Parameters

    def __init__(self, params=None, initial_state=None, output_callback=None, **kwargs):
        if params is None:
            params = self.Parameters(**kwargs)

        self.params = params
        self.constants = derive_constants(params)
        c = self.constants

        self.bc = create_boundary_condition(params.mms, c)
        self.scheme = create_relaxation_scheme(params.scheme)
        self.output_callback = output_callback

        # Pressure reference: exact centre value for the manufactured solution
        if params.mms:
            self.mms = ManufacturedSolution.from_constants(c)
            xc, yc = c.x[c.center[0]], c.y[c.center[1]]
            self.p_ref = float(self.mms.exact(xc, yc, 0))
        else:
            self.mms = None
            self.p_ref = params.p_ref

        self.arrays = SolverFields.allocate(c.nx, c.ny)

        if initial_state is None:
            initial_state = fresh_state(c, params.p_ref)
        self._load_state(initial_state)
        self.bc.apply(self.arrays.U.data)

        # Source terms evaluated once (zero for the physical cavity)
        if self.mms is not None:
            self.arrays.S.data[...] = self.mms.source_terms(c)

        self.res = np.zeros(3)
        self._last_output = None
        self.dtmin = 0.0
        self.metrics = Metrics()
        self.time_series = None
        self.fields = None

    def _load_state(self, state: InitialState):
        U = np.asarray(state.U, dtype=float)
        if U.shape != self.arrays.U.shape:
            raise ShapeMismatchError(
                f"Initial state of shape {U.shape} does not match grid {self.arrays.U.shape}"
            )
        self.arrays.U.data[...] = U
        self.iteration = int(state.iteration)
        self.sim_time = float(state.sim_time)
        self.resinit = None if state.resinit is None else np.asarray(state.resinit, dtype=float).copy()

    # =========================================================================
    # Core operations
    # =========================================================================

    def run_iteration(self):
        """Advance the solution by one pseudo-time iteration.

        Returns
        -------
        res : np.ndarray
            Continuity, x- and y-momentum iterative residual norms.
        ratio : float
            Normalized convergence measure.
        """
        f, c = self.arrays, self.constants

        self.dtmin = compute_time_step(f.U.data, f.dt.data, c, self.params.dtmin_mode)
        self.scheme.iterate(f, self.bc, c)
        rescale_pressure(f.U.data, self.p_ref)
        self.sim_time += self.dtmin

        res = iterative_residuals(f.U.data, f.U_old.data, f.dt.data, c)
        if self.resinit is None:
            self.resinit = res.copy()
        ratio = convergence_ratio(res, self.resinit, self.params.normalization, c.nx * c.ny)

        self.res = res
        self.iteration += 1
        return res, ratio

    @staticmethod
    def is_converged(ratio: float, tolerance: float) -> bool:
        """True when ``ratio`` is below ``tolerance``."""
        return is_converged(ratio, tolerance)

    def snapshot(self) -> np.ndarray:
        """Read-only view of the current state (nx, ny, 3)."""
        return self.arrays.U.view()

    def exact_solution(self) -> np.ndarray:
        """Manufactured solution on the grid nodes (MMS mode only)."""
        if self.mms is None:
            raise RuntimeError("Exact solution is only available with mms=True")
        return self.mms.exact_fields(self.constants.x, self.constants.y)

    def _emit_output(self, iteration: int):
        if self.output_callback is None or iteration == self._last_output:
            return
        self._last_output = iteration
        resinit = self.resinit if self.resinit is not None else np.zeros(3)
        self.output_callback(iteration, self.snapshot(), self.arrays.dt.view(), resinit, self.sim_time)

    # =========================================================================
    # Control loop
    # =========================================================================

    def solve(self, tolerance: float = None, max_iter: int = None) -> TerminationStatus:
        """March in pseudo-time until convergence, divergence or the iteration cap.

        Stores results in solver attributes:
        - self.fields : Fields dataclass with solution fields
        - self.time_series : TimeSeries dataclass with residual history
        - self.metrics : Metrics dataclass with solver metrics

        Parameters
        ----------
        tolerance : float, optional
            Convergence tolerance. If None, uses params.tolerance.
        max_iter : int, optional
            Last iteration number. If None, uses params.max_iterations.

        Returns
        -------
        TerminationStatus
            ``CONVERGED``, ``DIVERGED`` or ``MAX_ITERATIONS``.
        """
        if tolerance is None:
            tolerance = self.params.tolerance
        if max_iter is None:
            max_iter = self.params.max_iterations

        residual_interval = self.params.residual_interval
        output_interval = self.params.output_interval

        time_series = TimeSeries()
        status = TerminationStatus.MAX_ITERATIONS
        ratio = float("nan")
        last = self.iteration - 1

        self._emit_output(last)

        log.info(f"{'Iter':>8} {'Time (s)':>12} {'dtmin (s)':>12} "
                 f"{'Continuity':>12} {'x-Momentum':>12} {'y-Momentum':>12} {'Ratio':>12}")

        time_start = time.time()
        mlflow_time = 0.0

        while self.iteration <= max_iter:
            res, ratio = self.run_iteration()
            last = self.iteration - 1
            outcome = termination_status(res, ratio, tolerance)

            if last % residual_interval == 0 or outcome is not None:
                time_series.append(last, self.sim_time, self.dtmin, res, ratio)

            if last % output_interval == 0 or outcome is not None:
                log.info(f"{last:>8d} {self.sim_time:>12.5e} {self.dtmin:>12.5e} "
                         f"{res[0]:>12.5e} {res[1]:>12.5e} {res[2]:>12.5e} {ratio:>12.5e}")

                if mlflow.active_run() and outcome is None:
                    t_log_start = time.time()
                    mlflow.log_metrics(
                        {
                            "continuity": float(res[0]),
                            "x_momentum": float(res[1]),
                            "y_momentum": float(res[2]),
                            "ratio": float(ratio),
                        },
                        step=last,
                    )
                    mlflow_time += time.time() - t_log_start

            if outcome is not None:
                status = outcome
                break

            if last % output_interval == 0:
                self._emit_output(last)

        wall_time = time.time() - time_start - mlflow_time

        if status is TerminationStatus.CONVERGED:
            log.info(f"Converged in {last} iterations (ratio={ratio:.3e} < {tolerance:.1e})")
        elif status is TerminationStatus.DIVERGED:
            log.warning(f"Diverged at iteration {last}: non-finite residuals {self.res}")
        else:
            log.warning(f"Stopped at the iteration limit ({max_iter}) with ratio={ratio:.3e}")

        self._store_results(time_series, last, status, ratio, wall_time)
        self._emit_output(last)
        return status

    def _store_results(self, time_series, last_iteration, status, ratio, wall_time):
        """Store solve results in self.fields, self.time_series, and self.metrics."""
        c = self.constants
        U = self.arrays.U.data

        self.fields = Fields.from_state(U, c.x, c.y)
        self.time_series = time_series
        self.metrics = Metrics(
            iterations=last_iteration,
            converged=status is TerminationStatus.CONVERGED,
            status=status.value,
            final_residual=float(ratio),
            wall_time_seconds=wall_time,
            continuity_residual=float(self.res[0]),
            x_momentum_residual=float(self.res[1]),
            y_momentum_residual=float(self.res[2]),
            sim_time=self.sim_time,
        )

        # Discretization error norms (manufactured solution only)
        if self.mms is not None:
            norms = discretization_error_norms(U, self.exact_solution())
            for name in ("p", "u", "v"):
                row = norms.loc[name]
                log.info(f"{name} DE norms: L1={row['L1']:.6e} L2={row['L2']:.6e} Linf={row['Linf']:.6e}")
            self.metrics.p_l2_error = float(norms.loc["p", "L2"])
            self.metrics.u_l2_error = float(norms.loc["u", "L2"])
            self.metrics.v_l2_error = float(norms.loc["v", "L2"])

        log.info(f"Solver finished in {wall_time:.2f} seconds ({status.value}).")

    def save(self, filepath):
        """Save complete solver state to HDF5 file.

        Saves params, metrics, time_series, and fields for later analysis.

        Parameters
        ----------
        filepath : str or Path
            Output file path (use .h5 extension).
        """
        import pandas as pd

        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with pd.HDFStore(filepath, mode="w", complevel=5) as store:
            store["params"] = self.params.to_dataframe()
            store["metrics"] = self.metrics.to_dataframe()
            store["time_series"] = self.time_series.to_dataframe()
            store["fields"] = self.fields.to_dataframe()
