# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Bench report writer.

Writes one directory per bench run:

    results/<run_id>/
    ├── timings.json          machine-readable records and aggregates
    ├── report.txt            human-readable summary
    └── config_snapshot.yaml  the config used for this run

run_id format: YYYYMMDD_HHMMSS_<generator>_<mask>

timings.json is the authoritative output; report.txt is a convenience
view of the same data.
"""

import json
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import yaml

from cowichan.logging.logger import get_logger
from cowichan.reporting.bench import BenchSummary
from cowichan.runtime.environment import get_system_info
from cowichan.utils.filesystem import atomic_write

logger = get_logger(__name__)


def make_run_id(summary: BenchSummary) -> str:
    """Timestamped identifier for a bench run directory."""
    timestamp = datetime.now(tz=timezone.utc).strftime("%Y%m%d_%H%M%S")
    return f"{timestamp}_{summary.generator}_{summary.mask}"


def write_bench_report(
    summary: BenchSummary,
    output_dir: Path,
    config_snapshot: Optional[dict[str, Any]] = None,
) -> Path:
    """
    Write timings.json, report.txt and (optionally) config_snapshot.yaml.

    Args:
        summary: The bench run to report.
        output_dir: Directory to write into; created if needed.
        config_snapshot: Plain-dict config to store alongside the timings.

    Returns:
        ``output_dir``.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    payload = asdict(summary)
    payload["system"] = get_system_info()._asdict()
    atomic_write(
        output_dir / "timings.json",
        json.dumps(payload, indent=2, sort_keys=True, default=str),
    )

    atomic_write(output_dir / "report.txt", format_report_text(summary))

    if config_snapshot is not None:
        atomic_write(
            output_dir / "config_snapshot.yaml",
            yaml.safe_dump(config_snapshot, default_flow_style=False, sort_keys=True),
        )

    logger.info(
        "Bench report written",
        extra={"output_dir": str(output_dir), "executions": len(summary.records)},
    )
    return output_dir


def format_report_text(summary: BenchSummary) -> str:
    """Render a bench summary as a plain-text report."""
    lines: list[str] = [
        "=" * 60,
        "COWICHAN CHAIN BENCHMARK",
        f"Generated: {datetime.now(tz=timezone.utc).isoformat()}",
        f"Chain: {summary.generator} -> {summary.mask} on {summary.rows}x{summary.cols}",
        f"Workers: {summary.workers}",
        "=" * 60,
        "",
        "--- EXECUTIONS ---",
    ]

    for record in summary.records:
        status = "converged" if record.converged else "NOT CONVERGED"
        lines.append(
            f"  #{record.execution:<3d} {record.timestamp}  "
            f"{record.elapsed_seconds:.4f}s  residual={record.residual:.3e}  "
            f"points={record.point_count}  {status}"
        )

    lines.extend(
        [
            "",
            "--- TIMING ---",
            f"Min:  {summary.min_seconds:.4f}s",
            f"Mean: {summary.mean_seconds:.4f}s",
            f"Max:  {summary.max_seconds:.4f}s",
        ]
    )

    if summary.records:
        lines.extend(["", "--- STAGES (last execution) ---"])
        for stage, seconds in summary.records[-1].stage_seconds.items():
            lines.append(f"  {stage:<14s} {seconds:.4f}s")

    lines.extend(["", "=" * 60])
    return "\n".join(lines) + "\n"
