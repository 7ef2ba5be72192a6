"""Command Dispatcher for the tmaxfit CLI
======================================

Reads the input, runs a :class:`SamplingSession` against two off-screen
figures and writes the plots and thinned draws to the output directory.
"""

import sys
from pathlib import Path
from typing import Any

# Headless backend (must be before pyplot import)
import matplotlib

matplotlib.use("Agg")

from tmaxfit.cli.args_parser import validate_args  # noqa: E402
from tmaxfit.config.manager import ConfigManager  # noqa: E402
from tmaxfit.optimization.mcmc.orchestrator import ChainProgress  # noqa: E402
from tmaxfit.utils.logging import configure_logging, get_logger  # noqa: E402
from tmaxfit.viz.surfaces import SurfaceRegistry  # noqa: E402
from tmaxfit.workflows.pipeline import RunStatus, SamplingSession  # noqa: E402

logger = get_logger(__name__)

TRACE_SURFACE = "trace"
FIT_SURFACE = "fit"


def dispatch_command(args, sampler=None) -> dict[str, Any]:
    """Run the command described by ``args``.

    Parameters
    ----------
    args : argparse.Namespace
        Parsed command-line arguments
    sampler : Sampler, optional
        Sampler override, NUTS when omitted

    Returns
    -------
    dict
        ``success`` plus either ``error`` or the written ``outputs``
    """
    if not validate_args(args):
        return {"success": False, "error": "Invalid command-line arguments"}

    try:
        config = _load_configuration(args)
        configure_logging("DEBUG" if args.verbose else config.log_level)

        raw_text = _read_input(args.input)
        args.output_dir.mkdir(parents=True, exist_ok=True)

        surfaces = _create_surfaces(config)
        session = SamplingSession(surfaces=surfaces, sampler=sampler, config=config)

        if args.prepare_only:
            return _prepare_only(session, raw_text, args.output_dir, config)

        outcome = session.prepare_and_run(
            raw_text,
            TRACE_SURFACE,
            FIT_SURFACE,
            seed=config.get_run_config(seed=args.seed).base_seed,
            chain_count=args.chains,
            tuning_steps=args.tuning,
            sample_steps=args.samples,
            on_yield=_log_progress,
        )
        if outcome.status is not RunStatus.OK:
            return {"success": False, "error": outcome.error}

        outputs = _save_outputs(surfaces, outcome.posterior_text, args.output_dir, config)
        summary = outcome.summary
        for name, stats in summary.parameter_stats.items():
            logger.info(
                f"  {name}: mean={stats.mean:.4f} sd={stats.std:.4f} "
                f"[{stats.lower:.4f}, {stats.upper:.4f}]"
            )
        return {
            "success": True,
            "elapsed_ms": outcome.elapsed_ms,
            "render_errors": list(outcome.render_errors),
            "outputs": outputs,
        }

    except Exception as e:
        logger.error(f"Command execution failed: {e}")
        logger.debug("Full traceback:", exc_info=True)
        return {"success": False, "error": str(e)}


def _load_configuration(args) -> ConfigManager:
    """Load configuration from file, or defaults when none is given."""
    if args.config is None:
        logger.debug("No configuration file given, using defaults")
        return ConfigManager()
    logger.info(f"Loading configuration from: {args.config}")
    return ConfigManager(str(args.config))


def _read_input(source: str) -> str:
    if source == "-":
        logger.info("Reading input from stdin")
        return sys.stdin.read()
    logger.info(f"Reading input from: {source}")
    return Path(source).read_text(encoding="utf-8")


def _create_surfaces(config: ConfigManager) -> SurfaceRegistry:
    dpi = config.plotting_option("dpi")
    surfaces = SurfaceRegistry()
    surfaces.create(
        TRACE_SURFACE, figsize=tuple(config.plotting_option("trace_figsize")), dpi=dpi
    )
    surfaces.create(
        FIT_SURFACE, figsize=tuple(config.plotting_option("fit_figsize")), dpi=dpi
    )
    return surfaces


def _log_progress(progress: ChainProgress) -> None:
    logger.info(
        f"Chain {progress.completed_chains}/{progress.chain_count} complete "
        f"({progress.n_draws} draws, {progress.elapsed_s:.2f}s)"
    )


def _prepare_only(
    session: SamplingSession,
    raw_text: str,
    output_dir: Path,
    config: ConfigManager,
) -> dict[str, Any]:
    prepared = session.prepare(raw_text)
    if not prepared.success:
        return {"success": False, "error": prepared.error}

    data_path = output_dir / "prepared.csv"
    data_path.write_text(prepared.prepared.text, encoding="utf-8")

    plotted = session.plot(FIT_SURFACE, None, prepared.prepared)
    if not plotted.success:
        return {"success": False, "error": plotted.error}

    fit_path = output_dir / "fit.png"
    session.surfaces.save(FIT_SURFACE, fit_path, dpi=config.plotting_option("dpi"))
    logger.info(
        f"Prepared {prepared.prepared.n_observations} observations "
        f"({prepared.prepared.source_format}, {prepared.prepared.rows_skipped} rows skipped)"
    )
    return {
        "success": True,
        "outputs": {"prepared": str(data_path), "fit": str(fit_path)},
    }


def _save_outputs(
    surfaces: SurfaceRegistry,
    posterior_text: str,
    output_dir: Path,
    config: ConfigManager,
) -> dict[str, str]:
    dpi = config.plotting_option("dpi")
    trace_path = output_dir / "trace.png"
    fit_path = output_dir / "fit.png"
    posterior_path = output_dir / "posterior.csv"

    surfaces.save(TRACE_SURFACE, trace_path, dpi=dpi)
    surfaces.save(FIT_SURFACE, fit_path, dpi=dpi)
    posterior_path.write_text(posterior_text, encoding="utf-8")

    logger.info(f"Results saved to: {output_dir}")
    return {
        "trace": str(trace_path),
        "fit": str(fit_path),
        "posterior": str(posterior_path),
    }
