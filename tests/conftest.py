# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared pytest fixtures for cowichan tests.

Chain configs here are deliberately tiny: a 20x30 grid, no Life
generations, so the point count is known in advance and the solvers
finish in milliseconds.
"""

import textwrap
from pathlib import Path

import pytest

from cowichan.config.schema import ChainConfig


@pytest.fixture()
def tmp_config_file(tmp_path: Path) -> Path:
    """
    Create a minimal valid config YAML file in a temp directory.

    This is the smallest config that passes schema validation, plus a
    small chain so CLI tests that actually run it stay fast.
    """
    config_content = textwrap.dedent(f"""\
        global:
          config_version: "1.0.0"
          project_name: "cowichan-test"
          seed: 42
          log_level: "DEBUG"
        chain:
          rows: 12
          cols: 16
          invperc:
            fill_count: 24
          life:
            generations: 0
        bench:
          executions: 2
          output_directory: "{tmp_path / 'results'}"
    """)
    config_file = tmp_path / "test_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def invalid_config_file(tmp_path: Path) -> Path:
    """A config file that's valid YAML but fails schema validation (missing required field)."""
    config_content = textwrap.dedent("""\
        global:
          project_name: "cowichan-test"
          seed: 42
    """)
    config_file = tmp_path / "invalid_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def broken_yaml_file(tmp_path: Path) -> Path:
    """A file that isn't valid YAML at all."""
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("{{not: yaml: at: all:::", encoding="utf-8")
    return config_file


@pytest.fixture()
def small_mandel_chain() -> ChainConfig:
    """mandel -> invperc with 60 filled cells and no Life steps: exactly 60 points."""
    return ChainConfig.model_validate(
        {
            "rows": 20,
            "cols": 30,
            "generator": "mandel",
            "mask": "invperc",
            "invperc": {"fill_count": 60},
            "life": {"generations": 0},
        }
    )


@pytest.fixture()
def small_randmat_chain() -> ChainConfig:
    """randmat -> thresh on a dense soup; one Life step leaves plenty alive."""
    return ChainConfig.model_validate(
        {
            "rows": 16,
            "cols": 16,
            "generator": "randmat",
            "randmat": {"seed": 7, "limit": 100},
            "mask": "thresh",
            "thresh": {"percent": 40.0},
            "life": {"generations": 1},
        }
    )
