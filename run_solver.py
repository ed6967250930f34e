"""
LDC Artificial-Compressibility Runner - Hydra + MLflow integration.

Single runs:
    uv run python run_solver.py solver=sgs N=33 Re=10
    uv run python run_solver.py solver=pj N=17 mms=true

Parameter sweeps (multirun mode):
    uv run python run_solver.py -m solver=sgs,pj N=17,33,65
    uv run python run_solver.py -m +experiment=mms

Restart from a previous run's record:
    uv run python run_solver.py N=65 +restart=outputs/<date>/<time>/restart.out

MLflow modes:
    local-files  - file-based ./mlruns (default)
    remote       - tracking server (requires .env with credentials)

Setup for remote MLflow:
    cp .env.template .env
    # Edit .env with your credentials
"""

import logging
import os
import sys
from pathlib import Path

import hydra
import mlflow
from dotenv import load_dotenv
from hydra.utils import instantiate
from mlflow.tracking import MlflowClient
from omegaconf import DictConfig, OmegaConf

# Load .env file (for MLflow credentials)
load_dotenv()

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent / "src"))

from ldc_ac.io import OutputWriter, error_norms_table, read_restart, write_history  # noqa: E402
from ldc_ac.plotting import plot_convergence, plot_fields  # noqa: E402

log = logging.getLogger(__name__)


# =============================================================================
# Solver Factory
# =============================================================================


def create_solver(cfg: DictConfig, output_dir: Path):
    """Instantiate solver using Hydra's instantiate on solver subtree.

    Common parameters from root config are passed to the solver constructor.
    """
    initial_state = None
    restart = cfg.get("restart", None)
    if restart:
        initial_state = read_restart(hydra.utils.to_absolute_path(restart), cfg.N, cfg.N)

    solver_factory = instantiate(
        cfg.solver,
        Re=cfg.Re,
        lid_velocity=cfg.lid_velocity,
        rho=cfg.rho,
        xmax=cfg.L,
        ymax=cfg.L,
        nx=cfg.N,
        ny=cfg.N,
        max_iterations=cfg.max_iterations,
        tolerance=cfg.tolerance,
        cfl=cfg.cfl,
        mms=cfg.mms,
        output_interval=cfg.output_interval,
        residual_interval=cfg.residual_interval,
        _convert_="partial",
        _partial_=True,
    )
    solver = solver_factory(initial_state=initial_state)

    if cfg.get("write_files", True):
        c = solver.constants
        exact = solver.exact_solution() if cfg.mms else None
        solver.output_callback = OutputWriter(output_dir, c.x, c.y, exact=exact)

    return solver


# =============================================================================
# MLflow Logging
# =============================================================================


def setup_mlflow(cfg: DictConfig) -> str:
    """Setup MLflow tracking and return experiment name."""
    tracking_uri = cfg.mlflow.get("tracking_uri", "./mlruns")
    # If defaulting to local file backend, clear any env override
    if str(cfg.mlflow.get("mode", "")).lower() in ("files", "local"):
        os.environ.pop("MLFLOW_TRACKING_URI", None)
    os.environ["MLFLOW_TRACKING_URI"] = str(tracking_uri)
    mlflow.set_tracking_uri(tracking_uri)

    # Build experiment name with optional project prefix
    experiment_name = cfg.experiment_name
    project_prefix = cfg.mlflow.get("project_prefix", "")
    if project_prefix and not experiment_name.startswith("/"):
        experiment_name = f"{project_prefix}/{experiment_name}"

    mlflow.set_experiment(experiment_name)
    return experiment_name


def log_params(solver):
    """Log solver params to MLflow using dataclass to_mlflow method."""
    mlflow.log_params(solver.params.to_mlflow())


def log_metrics_and_timeseries(solver, run_id: str):
    """Log final metrics and timeseries to MLflow."""
    mlflow.log_metrics(solver.metrics.to_mlflow())
    mlflow.set_tag("status", solver.metrics.status)

    if solver.time_series is not None:
        batch_metrics = solver.time_series.to_mlflow_batch()
        if batch_metrics:
            MlflowClient().log_batch(run_id=run_id, metrics=batch_metrics)


def log_outputs(solver, cfg: DictConfig, output_dir: Path):
    """Save HDF5 results, history, error norms and plots as MLflow artifacts."""
    h5_path = output_dir / "solution.h5"
    solver.save(h5_path)
    mlflow.log_artifact(str(h5_path))

    history_path = write_history(output_dir / "history.csv", solver.time_series)
    mlflow.log_artifact(str(history_path))

    if cfg.mms:
        norms_path = output_dir / "de_norms.csv"
        error_norms_table(solver.snapshot(), solver.exact_solution()).to_csv(norms_path, index=False)
        mlflow.log_artifact(str(norms_path))

    if cfg.get("write_files", True):
        for name in ("fields.csv", "restart.out"):
            path = output_dir / name
            if path.exists():
                mlflow.log_artifact(str(path))

    if cfg.get("plots", True):
        ts_df = solver.time_series.to_dataframe()
        fields_df = solver.fields.to_dataframe()
        for path in (
            plot_convergence(ts_df, cfg.Re, solver.params.scheme, cfg.N, output_dir),
            plot_fields(fields_df, cfg.Re, solver.params.scheme, cfg.N, output_dir),
        ):
            if path is not None:
                mlflow.log_artifact(str(path), artifact_path="plots")


# =============================================================================
# Main Entry Point
# =============================================================================


@hydra.main(config_path="conf", config_name="config", version_base=None)
def main(cfg: DictConfig) -> None:
    """Hydra entry point - runs solver with MLflow tracking."""
    log.info(f"Solver: {cfg.solver.method}, N={cfg.N}, Re={cfg.Re}, mms={cfg.mms}")

    experiment_name = setup_mlflow(cfg)
    log.info(f"MLflow experiment: {experiment_name}")

    output_dir = Path(hydra.core.hydra_config.HydraConfig.get().runtime.output_dir)

    solver = create_solver(cfg, output_dir)
    run_name = f"{cfg.solver.method}_N{cfg.N}"

    # Check for parent run (from sweep callback)
    parent_run_id = os.environ.get("MLFLOW_PARENT_RUN_ID")

    run_tags = {"solver": cfg.solver.method}
    nested = False
    if parent_run_id:
        run_tags["mlflow.parentRunId"] = parent_run_id
        run_tags["parent_run_id"] = parent_run_id
        run_tags["sweep"] = "child"
        nested = True

    with mlflow.start_run(run_name=run_name, tags=run_tags, nested=nested) as run:
        log_params(solver)

        # Log Hydra config as artifact
        mlflow.log_dict(OmegaConf.to_container(cfg), "config.yaml")

        # Tag with HPC job info if available
        job_id = os.environ.get("LSB_JOBID")
        if job_id:
            mlflow.set_tag("lsf.job_id", job_id)
            mlflow.set_tag("lsf.job_name", os.environ.get("LSB_JOBNAME", ""))

        log.info("Starting solver...")
        status = solver.solve()

        log_metrics_and_timeseries(solver, run.info.run_id)
        log_outputs(solver, cfg, output_dir)

        log.info(
            f"Done: {solver.metrics.iterations} iter, "
            f"status={status.value}, "
            f"time={solver.metrics.wall_time_seconds:.2f}s"
        )


if __name__ == "__main__":
    main()
