# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for bench timing and the report writer.

Reports are checked structurally: the JSON must parse and hold one record
per execution, and the text report must contain every section.
"""

import json
from pathlib import Path

import pytest
import yaml

from cowichan.config.loader import config_snapshot, default_config
from cowichan.config.schema import ChainConfig
from cowichan.reporting.bench import BenchRecord, run_bench, summarize
from cowichan.reporting.writer import format_report_text, make_run_id, write_bench_report


def _record(execution: int, elapsed: float) -> BenchRecord:
    return BenchRecord(
        execution=execution,
        timestamp="2026-01-01T00:00:00+00:00",
        elapsed_seconds=elapsed,
        residual=1e-12,
        point_count=10,
        sor_iterations=7,
        converged=True,
        stage_seconds={"generate": 0.001, "solve": 0.002},
    )


class TestSummarize:
    def test_min_mean_max(self) -> None:
        summary = summarize([_record(0, 1.0), _record(1, 3.0), _record(2, 2.0)], ChainConfig())
        assert summary.min_seconds == 1.0
        assert summary.mean_seconds == pytest.approx(2.0)
        assert summary.max_seconds == 3.0
        assert summary.generator == "mandel"
        assert summary.mask == "invperc"

    def test_empty_records_raise(self) -> None:
        with pytest.raises(ValueError, match="empty"):
            summarize([], ChainConfig())


class TestRunBench:
    def test_one_record_per_execution(self, small_mandel_chain: ChainConfig) -> None:
        summary, last = run_bench(small_mandel_chain, executions=3)
        assert [record.execution for record in summary.records] == [0, 1, 2]
        assert all(record.elapsed_seconds > 0 for record in summary.records)
        assert all(record.point_count == 60 for record in summary.records)
        assert summary.min_seconds <= summary.mean_seconds <= summary.max_seconds
        assert last is not None and last.artifacts is None

    def test_keeps_artifacts_of_last_run(self, small_mandel_chain: ChainConfig) -> None:
        _, last = run_bench(small_mandel_chain, executions=2, keep_last_artifacts=True)
        assert last is not None
        assert last.artifacts is not None

    def test_zero_executions_raise(self, small_mandel_chain: ChainConfig) -> None:
        with pytest.raises(ValueError, match="executions"):
            run_bench(small_mandel_chain, executions=0)


class TestWriteBenchReport:
    def test_writes_all_files(self, tmp_path: Path) -> None:
        summary = summarize([_record(0, 0.5), _record(1, 0.7)], ChainConfig())
        snapshot = config_snapshot(default_config())
        output_dir = write_bench_report(summary, tmp_path / "run", snapshot)

        assert (output_dir / "timings.json").exists()
        assert (output_dir / "report.txt").exists()
        assert (output_dir / "config_snapshot.yaml").exists()

        timings = json.loads((output_dir / "timings.json").read_text(encoding="utf-8"))
        assert len(timings["records"]) == 2
        assert timings["max_seconds"] == 0.7
        assert "torch_version" in timings["system"]

        stored = yaml.safe_load((output_dir / "config_snapshot.yaml").read_text(encoding="utf-8"))
        assert stored["global"]["seed"] == 42
        assert stored["chain"]["generator"] == "mandel"

    def test_snapshot_is_optional(self, tmp_path: Path) -> None:
        summary = summarize([_record(0, 0.5)], ChainConfig())
        output_dir = write_bench_report(summary, tmp_path / "run")
        assert not (output_dir / "config_snapshot.yaml").exists()

    def test_report_text_sections(self) -> None:
        summary = summarize([_record(0, 0.5), _record(1, 0.7)], ChainConfig())
        text = format_report_text(summary)
        assert "COWICHAN CHAIN BENCHMARK" in text
        assert "--- EXECUTIONS ---" in text
        assert "--- TIMING ---" in text
        assert "Max:  0.7000s" in text
        assert "mandel -> invperc on 60x90" in text
        assert "solve" in text

    def test_run_id_names_the_variant(self) -> None:
        summary = summarize([_record(0, 0.5)], ChainConfig())
        run_id = make_run_id(summary)
        assert run_id.endswith("_mandel_invperc")
        assert len(run_id.split("_")[0]) == 8
