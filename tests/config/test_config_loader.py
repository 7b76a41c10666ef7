# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the config loader.

We test:
  1. Valid YAML loads into a frozen, correct config object
  2. Missing required fields and unknown keys raise ConfigValidationError
  3. Broken or missing files raise ConfigLoadError
  4. CLI overrides go through the same validation as the file
"""

import textwrap
from pathlib import Path

import pytest
import torch

from cowichan.config.exceptions import ConfigError, ConfigLoadError, ConfigValidationError
from cowichan.config.loader import (
    DEFAULT_CONFIG_VERSION,
    config_snapshot,
    default_config,
    load_config,
    validate_config,
)
from cowichan.pipeline.chain import run_chain

_RANDMAT_YAML = textwrap.dedent("""\
    global:
      config_version: "1.0.0"
    chain:
      rows: 16
      cols: 16
      generator: "randmat"
      randmat:
        seed: 46
        limit: 100
      mask: "thresh"
      thresh:
        percent: 40.0
      life:
        generations: 0
""")


class TestLoadValidConfig:
    def test_loads_minimal_valid_config(self, tmp_config_file: Path) -> None:
        config = load_config(tmp_config_file)
        assert config.global_config.project_name == "cowichan-test"
        assert config.global_config.seed == 42
        assert config.global_config.config_version == "1.0.0"

    def test_chain_section_is_read(self, tmp_config_file: Path) -> None:
        config = load_config(tmp_config_file)
        assert config.chain.rows == 12
        assert config.chain.cols == 16
        assert config.chain.invperc.fill_count == 24
        assert config.chain.life.generations == 0
        assert config.bench.executions == 2

    def test_missing_sections_take_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "only_global.yaml"
        config_file.write_text('global:\n  config_version: "1.0.0"\n', encoding="utf-8")
        config = load_config(config_file)
        assert config.chain.generator == "mandel"
        assert config.chain.mask == "invperc"
        assert config.bench.executions == 30

    def test_shipped_configs_load(self) -> None:
        configs_dir = Path(__file__).resolve().parents[2] / "configs"
        for config_file in sorted(configs_dir.glob("*.yaml")):
            load_config(config_file)


class TestOverrides:
    def test_seed_override(self, tmp_config_file: Path) -> None:
        config = load_config(tmp_config_file, seed=7)
        assert config.chain.randmat.seed == 7
        assert config.global_config.seed == 7

    def test_seed_override_keeps_other_randmat_fields(self, tmp_path: Path) -> None:
        config_file = tmp_path / "randmat.yaml"
        config_file.write_text(_RANDMAT_YAML, encoding="utf-8")
        config = load_config(config_file, seed=9)
        assert config.chain.randmat.seed == 9
        assert config.chain.randmat.limit == 100
        assert config.chain.generator == "randmat"

    def test_seed_override_changes_the_randmat_chain(self, tmp_path: Path) -> None:
        config_file = tmp_path / "randmat.yaml"
        config_file.write_text(_RANDMAT_YAML, encoding="utf-8")
        first = run_chain(load_config(config_file, seed=1).chain, keep_artifacts=True)
        second = run_chain(load_config(config_file, seed=2).chain, keep_artifacts=True)
        assert not torch.equal(first.artifacts.matrix, second.artifacts.matrix)
        assert not torch.equal(first.artifacts.mask, second.artifacts.mask)

    def test_workers_override(self, tmp_config_file: Path) -> None:
        config = load_config(tmp_config_file, workers=4)
        assert config.chain.workers == 4
        assert config.chain.rows == 12

    def test_invalid_override_is_rejected(self, tmp_config_file: Path) -> None:
        with pytest.raises(ConfigValidationError):
            load_config(tmp_config_file, workers=0)


class TestInvalidConfig:
    def test_missing_required_field(self, invalid_config_file: Path) -> None:
        with pytest.raises(ConfigValidationError, match="config_version"):
            load_config(invalid_config_file)

    def test_unknown_key(self, tmp_path: Path) -> None:
        content = textwrap.dedent("""\
            global:
              config_version: "1.0.0"
            chain:
              rows: 10
              colums: 10
        """)
        config_file = tmp_path / "typo.yaml"
        config_file.write_text(content, encoding="utf-8")
        with pytest.raises(ConfigValidationError, match="colums"):
            load_config(config_file)

    def test_unknown_generator(self, tmp_path: Path) -> None:
        config_file = tmp_path / "bad_generator.yaml"
        config_file.write_text(
            'global:\n  config_version: "1.0.0"\nchain:\n  generator: "julia"\n',
            encoding="utf-8",
        )
        with pytest.raises(ConfigValidationError):
            load_config(config_file)

    def test_broken_yaml(self, broken_yaml_file: Path) -> None:
        with pytest.raises(ConfigLoadError, match="Invalid YAML"):
            load_config(broken_yaml_file)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigLoadError, match="not found"):
            load_config(tmp_path / "nope.yaml")

    def test_directory_instead_of_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigLoadError, match="not a file"):
            load_config(tmp_path)

    def test_non_mapping_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "list.yaml"
        config_file.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigLoadError, match="mapping"):
            load_config(config_file)

    def test_all_errors_share_a_base(self) -> None:
        assert issubclass(ConfigLoadError, ConfigError)
        assert issubclass(ConfigValidationError, ConfigError)


class TestDefaults:
    def test_default_config(self) -> None:
        config = default_config()
        assert config.global_config.config_version == DEFAULT_CONFIG_VERSION
        assert config.chain.rows == 60
        assert config.chain.cols == 90

    def test_default_config_with_overrides(self) -> None:
        config = default_config(seed=3, workers=2)
        assert config.global_config.seed == 3
        assert config.chain.randmat.seed == 3
        assert config.chain.workers == 2

    def test_snapshot_round_trips(self) -> None:
        config = default_config(seed=5)
        snapshot = config_snapshot(config)
        assert "global" in snapshot
        assert validate_config(snapshot) == config
