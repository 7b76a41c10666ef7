# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Subcommand handlers for the cowichan CLI.

Every handler takes the parsed argparse namespace and returns an exit code.
Setup (config, overrides, bootstrap) is shared through
``_load_and_bootstrap``; failures are mapped to exit codes by
``_exit_code_for`` so each handler only has to catch and log.

No print() calls. Everything goes through the structured logger.
"""

import argparse
import logging
from pathlib import Path
from typing import Optional

from cowichan.cli.exit_codes import CONFIG_ERROR, RUNTIME_ERROR, SUCCESS, VALIDATION_ERROR
from cowichan.config.exceptions import ConfigError
from cowichan.config.loader import config_snapshot, default_config, load_config
from cowichan.config.schema import CowichanConfig
from cowichan.kernels.errors import InvariantViolation, KernelError
from cowichan.logging.logger import get_logger, set_log_level
from cowichan.runtime.bootstrap import bootstrap, set_thread_count
from cowichan.utils.paths import resolve_output_root


def _exit_code_for(err: Exception) -> int:
    if isinstance(err, ConfigError):
        return CONFIG_ERROR
    if isinstance(err, InvariantViolation):
        return VALIDATION_ERROR
    return RUNTIME_ERROR


def _load_and_bootstrap(
    args: argparse.Namespace,
    command_name: str,
) -> tuple[int, Optional[CowichanConfig], logging.Logger]:
    """
    Load the config (or the defaults), apply CLI overrides and bootstrap.

    Returns a tuple of (exit_code, config, logger). If exit_code is not
    SUCCESS, the caller should return it immediately.
    """
    logger = get_logger(f"cowichan.cli.{command_name}", log_level=args.log_level or "INFO")

    try:
        if args.config is not None:
            config = load_config(Path(args.config), seed=args.seed, workers=args.workers)
        else:
            logger.debug("No config provided, running with defaults", extra={"command": command_name})
            config = default_config(seed=args.seed, workers=args.workers)
    except ConfigError as err:
        logger.error("Configuration error", extra={"command": command_name, "error": str(err)})
        return CONFIG_ERROR, None, logger

    bootstrap(config.global_config)
    set_thread_count(config.chain.workers)
    if args.log_level is not None:
        set_log_level(args.log_level)

    return SUCCESS, config, logger


def _output_root(config: CowichanConfig, override: Optional[str]) -> Path:
    if override is not None:
        return Path(override)
    return resolve_output_root() / config.bench.output_directory


def handle_run(args: argparse.Namespace) -> int:
    """Run the chain once and log the outcome."""
    exit_code, config, logger = _load_and_bootstrap(args, "run")
    if exit_code != SUCCESS:
        return exit_code

    chain = config.chain
    logger.info(
        "Command started",
        extra={"command": "run", "generator": chain.generator, "mask": chain.mask, "dry_run": args.dry_run},
    )
    if args.dry_run:
        logger.info(
            "Dry run, chain not executed",
            extra={"rows": chain.rows, "cols": chain.cols, "workers": chain.workers},
        )
        return SUCCESS

    from cowichan.pipeline.chain import run_chain

    try:
        result = run_chain(chain)
    except (KernelError, KeyError, ValueError) as err:
        logger.error("Chain failed", extra={"error": str(err)}, exc_info=True)
        return _exit_code_for(err)

    logger.info(
        "Run finished",
        extra={
            "points": result.point_count,
            "residual": result.residual,
            "gauss_converged": result.gauss.converged,
            "sor_converged": result.sor.converged,
            "sor_iterations": result.sor.iterations,
            "stage_seconds": result.stage_seconds,
        },
    )
    return SUCCESS


def handle_bench(args: argparse.Namespace) -> int:
    """Time repeated chain runs and write a report directory."""
    exit_code, config, logger = _load_and_bootstrap(args, "bench")
    if exit_code != SUCCESS:
        return exit_code

    executions = args.executions if args.executions is not None else config.bench.executions
    logger.info("Command started", extra={"command": "bench", "executions": executions, "dry_run": args.dry_run})
    if args.dry_run:
        logger.info("Dry run, no executions timed", extra={"executions": executions})
        return SUCCESS

    from cowichan.reporting.bench import run_bench
    from cowichan.reporting.export import export_artifacts
    from cowichan.reporting.writer import make_run_id, write_bench_report

    try:
        summary, last = run_bench(
            config.chain,
            executions,
            keep_last_artifacts=config.bench.export_matrices,
        )
        report_dir = _output_root(config, args.output_dir) / make_run_id(summary)
        write_bench_report(summary, report_dir, config_snapshot(config))
        if last is not None and last.artifacts is not None:
            export_artifacts(last.artifacts, report_dir / "matrices")
    except (KernelError, KeyError, ValueError, OSError) as err:
        logger.error("Bench failed", extra={"error": str(err)}, exc_info=True)
        return _exit_code_for(err)

    logger.info(
        "Bench finished",
        extra={
            "report_dir": str(report_dir),
            "min_seconds": summary.min_seconds,
            "mean_seconds": summary.mean_seconds,
            "max_seconds": summary.max_seconds,
        },
    )
    return SUCCESS


def handle_export(args: argparse.Namespace) -> int:
    """Run the chain once and write its matrices as PGM/PBM images."""
    exit_code, config, logger = _load_and_bootstrap(args, "export")
    if exit_code != SUCCESS:
        return exit_code

    output_dir = _output_root(config, args.output_dir)
    if args.output_dir is None:
        output_dir = output_dir / "export"
    logger.info("Command started", extra={"command": "export", "output_dir": str(output_dir), "dry_run": args.dry_run})
    if args.dry_run:
        return SUCCESS

    from cowichan.pipeline.chain import run_chain
    from cowichan.reporting.export import export_artifacts

    try:
        result = run_chain(config.chain, keep_artifacts=True)
        written = export_artifacts(result.artifacts, output_dir)
    except (KernelError, KeyError, ValueError, OSError) as err:
        logger.error("Export failed", extra={"error": str(err)}, exc_info=True)
        return _exit_code_for(err)

    logger.info("Export finished", extra={"files": [str(path) for path in written]})
    return SUCCESS


def handle_info(args: argparse.Namespace) -> int:
    """Log environment details and the effective configuration."""
    exit_code, config, logger = _load_and_bootstrap(args, "info")
    if exit_code != SUCCESS:
        return exit_code

    from cowichan import __version__
    from cowichan.kernels.registry import list_generators, list_masks
    from cowichan.runtime.environment import get_system_info

    system_info = get_system_info()
    logger.info(
        "System information",
        extra={
            "cowichan_version": __version__,
            "python_version": system_info.python_version,
            "torch_version": system_info.torch_version,
            "platform": system_info.platform,
            "architecture": system_info.architecture,
            "hostname": system_info.hostname,
            "cpu_count": system_info.cpu_count,
            "torch_threads": system_info.torch_threads,
            "generators": list_generators(),
            "masks": list_masks(),
        },
    )
    logger.info("Effective configuration", extra={"config": config_snapshot(config)})
    return SUCCESS
