# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI smoke tests.

CLI tests verify that commands execute, exit codes are correct and help
text exists. We use subprocess to run the actual entrypoint the way a user
would, which catches broken imports and argument wiring that unit tests miss.
"""

import json
import subprocess
import sys
from pathlib import Path

import pytest


def _run_cli(*args: str) -> subprocess.CompletedProcess[str]:
    """Run `cowichan` with the given arguments and capture output."""
    return subprocess.run(
        [sys.executable, "-m", "cowichan.cli.main", *args],
        capture_output=True,
        text=True,
        timeout=120,
    )


def _log_lines(output: str) -> list[dict]:
    return [json.loads(line) for line in output.splitlines() if line.startswith("{")]


class TestHelpTexts:
    """Every subcommand must have working --help output."""

    @pytest.mark.parametrize("subcommand", ["run", "bench", "export", "info"])
    def test_subcommand_help_exits_zero(self, subcommand: str) -> None:
        result = _run_cli(subcommand, "--help")
        assert result.returncode == 0
        assert "usage" in result.stdout.lower()

    def test_root_help_exits_with_user_error(self) -> None:
        """Running cowichan with no args should show help and exit with USER_ERROR (1)."""
        result = _run_cli()
        assert result.returncode == 1

    def test_unknown_subcommand_is_a_user_error(self) -> None:
        result = _run_cli("frobnicate")
        assert result.returncode != 0


class TestSubcommandExecution:
    def test_info_runs_without_config(self) -> None:
        result = _run_cli("info")
        assert result.returncode == 0
        messages = [line["msg"] for line in _log_lines(result.stdout)]
        assert "System information" in messages
        assert "Effective configuration" in messages

    def test_run_with_config(self, tmp_config_file: Path) -> None:
        result = _run_cli("run", "--config", str(tmp_config_file))
        assert result.returncode == 0, result.stdout + result.stderr
        finished = [line for line in _log_lines(result.stdout) if line["msg"] == "Run finished"]
        assert finished[0]["points"] == 24
        assert finished[0]["sor_converged"] is True

    def test_dry_run_skips_the_chain(self, tmp_config_file: Path) -> None:
        result = _run_cli("run", "--config", str(tmp_config_file), "--dry-run")
        assert result.returncode == 0
        assert not any(line["msg"] == "Run finished" for line in _log_lines(result.stdout))

    def test_bench_writes_report(self, tmp_config_file: Path, tmp_path: Path) -> None:
        output_dir = tmp_path / "bench_out"
        result = _run_cli(
            "bench", "--config", str(tmp_config_file), "--executions", "2", "--output-dir", str(output_dir)
        )
        assert result.returncode == 0, result.stdout + result.stderr
        (report_dir,) = list(output_dir.iterdir())
        timings = json.loads((report_dir / "timings.json").read_text(encoding="utf-8"))
        assert len(timings["records"]) == 2
        assert (report_dir / "report.txt").exists()
        assert (report_dir / "config_snapshot.yaml").exists()

    def test_export_writes_images(self, tmp_config_file: Path, tmp_path: Path) -> None:
        output_dir = tmp_path / "frames"
        result = _run_cli("export", "--config", str(tmp_config_file), "--output-dir", str(output_dir), "--workers", "3")
        assert result.returncode == 0, result.stdout + result.stderr
        assert sorted(path.name for path in output_dir.iterdir()) == [
            "mask.pbm", "matrix.pgm", "shuffled.pgm", "world.pbm",
        ]


class TestExitCodes:
    def test_nonexistent_config_returns_config_error(self) -> None:
        result = _run_cli("run", "--config", "/nonexistent/path.yaml")
        assert result.returncode == 2

    def test_invalid_config_returns_config_error(self, invalid_config_file: Path) -> None:
        result = _run_cli("info", "--config", str(invalid_config_file))
        assert result.returncode == 2

    def test_invalid_workers_override_returns_config_error(self, tmp_config_file: Path) -> None:
        result = _run_cli("run", "--config", str(tmp_config_file), "--workers", "0")
        assert result.returncode == 2

    def test_empty_point_set_returns_runtime_error(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text(
            'global:\n  config_version: "1.0.0"\n'
            "chain:\n  rows: 8\n  cols: 8\n  invperc:\n    fill_count: 0\n",
            encoding="utf-8",
        )
        result = _run_cli("run", "--config", str(config_file))
        assert result.returncode == 3
