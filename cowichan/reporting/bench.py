# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Timed repetitions of the chain.

Each execution records a UTC timestamp and its wall time, measured with
``time.perf_counter`` around a full ``run_chain`` call. The summary keeps
every record plus min/mean/max, which is all a comparison between
programming models needs. Executions are strictly sequential so the runs
never compete with each other for cores.
"""

import statistics
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from cowichan.config.schema import ChainConfig
from cowichan.logging.logger import get_logger
from cowichan.pipeline.chain import ChainResult, run_chain

logger = get_logger(__name__)


@dataclass(frozen=True)
class BenchRecord:
    """One timed execution."""

    execution: int
    timestamp: str
    elapsed_seconds: float
    residual: float
    point_count: int
    sor_iterations: int
    converged: bool
    stage_seconds: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class BenchSummary:
    """All records of a bench run and their aggregate timings."""

    records: list[BenchRecord]
    min_seconds: float
    mean_seconds: float
    max_seconds: float
    generator: str
    mask: str
    rows: int
    cols: int
    workers: int


def summarize(records: list[BenchRecord], config: ChainConfig) -> BenchSummary:
    """
    Aggregate bench records.

    Raises:
        ValueError: If there are no records.
    """
    if not records:
        raise ValueError("Cannot summarize an empty bench run")
    elapsed = [record.elapsed_seconds for record in records]
    return BenchSummary(
        records=list(records),
        min_seconds=min(elapsed),
        mean_seconds=statistics.fmean(elapsed),
        max_seconds=max(elapsed),
        generator=config.generator,
        mask=config.mask,
        rows=config.rows,
        cols=config.cols,
        workers=config.workers,
    )


def run_bench(
    config: ChainConfig,
    executions: int,
    keep_last_artifacts: bool = False,
) -> tuple[BenchSummary, Optional[ChainResult]]:
    """
    Run the chain ``executions`` times and time each run.

    Args:
        config: Chain parameters, identical for every execution.
        executions: Number of runs, at least 1.
        keep_last_artifacts: Keep the intermediates of the final run.

    Returns:
        The summary, and the last ChainResult (None only if nothing ran).

    Raises:
        ValueError: If executions is below 1.
        KernelError: The first fatal chain failure; later runs are not attempted.
    """
    if executions < 1:
        raise ValueError(f"executions must be >= 1, got {executions}")

    records: list[BenchRecord] = []
    last: Optional[ChainResult] = None
    for execution in range(executions):
        keep = keep_last_artifacts and execution == executions - 1
        timestamp = datetime.now(tz=timezone.utc).isoformat()
        start = time.perf_counter()
        last = run_chain(config, keep_artifacts=keep)
        elapsed = time.perf_counter() - start

        record = BenchRecord(
            execution=execution,
            timestamp=timestamp,
            elapsed_seconds=elapsed,
            residual=last.residual,
            point_count=last.point_count,
            sor_iterations=last.sor.iterations,
            converged=last.converged,
            stage_seconds=last.stage_seconds,
        )
        records.append(record)
        logger.info(
            "Execution timed",
            extra={
                "execution": execution,
                "timestamp": timestamp,
                "elapsed_seconds": elapsed,
                "residual": last.residual,
            },
        )

    return summarize(records, config), last
