# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Config loader: YAML on disk in, validated and frozen CowichanConfig out.

Loading is linear: read the file, parse YAML into a dict, hand it to
pydantic. Any failure stops right there with a ConfigError; a benchmark
run with half-valid parameters would produce timings nobody can compare.

Command-line overrides (``--seed``, ``--workers``) are applied on the raw
dict before validation, so they go through exactly the same checks as
values written in the file. ``--seed`` lands in ``chain.randmat.seed``,
the only randomness the chain has, and is mirrored into ``global.seed``.
"""

from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from cowichan.config.exceptions import ConfigLoadError, ConfigValidationError
from cowichan.config.schema import CowichanConfig

DEFAULT_CONFIG_VERSION = "1.0.0"


def _read_yaml_file(config_path: Path) -> dict[str, Any]:
    """
    Read a YAML file and return the parsed mapping.

    Raises:
        ConfigLoadError: If the file doesn't exist, isn't readable, isn't
            valid YAML, or doesn't hold a mapping at the top level.
    """
    if not config_path.exists():
        raise ConfigLoadError(f"Config file not found: {config_path}")

    if not config_path.is_file():
        raise ConfigLoadError(f"Config path is not a file: {config_path}")

    try:
        raw_text = config_path.read_text(encoding="utf-8")
    except OSError as err:
        raise ConfigLoadError(f"Cannot read config file {config_path}: {err}") from err

    try:
        parsed = yaml.safe_load(raw_text)
    except yaml.YAMLError as err:
        raise ConfigLoadError(f"Invalid YAML in {config_path}: {err}") from err

    if not isinstance(parsed, dict):
        raise ConfigLoadError(
            f"Config file must contain a YAML mapping (dict), got {type(parsed).__name__}"
        )

    return parsed


def _apply_overrides(
    raw_data: dict[str, Any],
    seed: Optional[int],
    workers: Optional[int],
) -> dict[str, Any]:
    """Return a copy of the raw mapping with CLI overrides merged in."""
    merged = dict(raw_data)
    chain_section = dict(merged.get("chain") or {})
    if seed is not None:
        global_section = dict(merged.get("global") or {})
        global_section["seed"] = seed
        merged["global"] = global_section
        randmat_section = dict(chain_section.get("randmat") or {})
        randmat_section["seed"] = seed
        chain_section["randmat"] = randmat_section
    if workers is not None:
        chain_section["workers"] = workers
    if seed is not None or workers is not None:
        merged["chain"] = chain_section
    return merged


def validate_config(raw_data: dict[str, Any], source: str = "<mapping>") -> CowichanConfig:
    """
    Validate a raw mapping against the schema.

    Raises:
        ConfigValidationError: On any schema violation.
    """
    try:
        return CowichanConfig.model_validate(raw_data)
    except ValidationError as err:
        raise ConfigValidationError(f"Config validation failed for {source}:\n{err}") from err


def load_config(
    config_path: Path,
    seed: Optional[int] = None,
    workers: Optional[int] = None,
) -> CowichanConfig:
    """
    Load, validate, and freeze a config file.

    Args:
        config_path: Path to a YAML config file.
        seed: Optional override for ``chain.randmat.seed`` (mirrored into
            ``global.seed``).
        workers: Optional override for ``chain.workers``.

    Returns:
        A fully validated, frozen CowichanConfig.

    Raises:
        ConfigLoadError: File I/O or YAML parse failures.
        ConfigValidationError: Schema violations (missing fields, wrong types, unknown keys).
    """
    raw_data = _apply_overrides(_read_yaml_file(config_path), seed, workers)
    return validate_config(raw_data, str(config_path))


def default_config(seed: Optional[int] = None, workers: Optional[int] = None) -> CowichanConfig:
    """The config used when no file is given: every section at its defaults."""
    raw_data = _apply_overrides({"global": {"config_version": DEFAULT_CONFIG_VERSION}}, seed, workers)
    return validate_config(raw_data, "<defaults>")


def config_snapshot(config: CowichanConfig) -> dict[str, Any]:
    """Plain-dict view of a config, keyed the way the YAML file is, for reports."""
    return config.model_dump(mode="json", by_alias=True)
