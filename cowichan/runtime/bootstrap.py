# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Runtime bootstrap for cowichan.

The one-time setup that happens before the chain runs:
  1. Validate the environment (Python version)
  2. Seed Python and torch global state
  3. Re-level the package loggers
  4. Ensure the output directories exist

The chain itself never touches global random state: randmat seeds its own
per-row generators from ``chain.randmat.seed``.
"""

import random
from pathlib import Path

import torch

from cowichan.config.schema import GlobalConfig
from cowichan.logging.logger import get_logger, set_log_level
from cowichan.runtime.environment import check_minimum_python, get_system_info
from cowichan.utils.paths import ensure_directory, resolve_output_root, resolve_project_root


def set_deterministic_seed(seed: int) -> None:
    """
    Seed Python's ``random`` and torch's default generator.

    Args:
        seed: Integer seed value. Must be >= 0.
    """
    random.seed(seed)
    torch.manual_seed(seed)


def set_thread_count(workers: int) -> None:
    """Give torch's intra-op pool the same budget as the chain's workers."""
    torch.set_num_threads(max(1, workers))


def _ensure_project_directories(project_root: Path, config: GlobalConfig) -> None:
    """Create the standard project directories if they don't exist."""
    dirs = config.directories
    ensure_directory(project_root / dirs.output)
    ensure_directory(project_root / dirs.logs)


def bootstrap(config: GlobalConfig) -> None:
    """
    Run the full bootstrap sequence.

    Called once at the start of every CLI command that loads a config.

    Args:
        config: The validated global configuration.
    """
    check_minimum_python()
    set_deterministic_seed(config.seed)

    log_file = resolve_output_root() / config.log_file if config.log_file is not None else None
    logger = get_logger("cowichan.runtime", log_level=config.log_level, log_file=log_file)
    set_log_level(config.log_level, log_file)

    system_info = get_system_info()
    logger.info(
        "cowichan bootstrap complete",
        extra={
            "seed": config.seed,
            "python_version": system_info.python_version,
            "torch_version": system_info.torch_version,
            "platform": system_info.platform,
            "architecture": system_info.architecture,
            "cpu_count": system_info.cpu_count,
        },
    )

    try:
        project_root = resolve_project_root()
        _ensure_project_directories(project_root, config)
    except RuntimeError:
        logger.warning(
            "Could not resolve project root, skipping directory creation",
            extra={"cwd": str(Path.cwd())},
        )
