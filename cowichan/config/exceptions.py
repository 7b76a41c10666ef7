# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Configuration failures.

Kept apart from the kernel errors so the CLI can tell "your YAML is wrong"
(exit code 2) from "the chain failed" (exit code 3) without importing the
kernels.
"""


class ConfigError(Exception):
    """Base for all configuration errors."""


class ConfigLoadError(ConfigError):
    """The config file is missing, unreadable, or not a YAML mapping."""


class ConfigValidationError(ConfigError):
    """
    The YAML parsed but does not fit the schema: a missing ``global`` section,
    an unknown generator name, a negative row count, a stray key.
    """
