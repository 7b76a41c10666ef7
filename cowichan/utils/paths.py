# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Path helpers.

Report and export directories in the config are relative to the project
root, which is found by walking up to the nearest pyproject.toml. Outside
a checkout (an installed wheel) there is no root, and the CLI falls back
to the working directory.
"""

from pathlib import Path


def resolve_project_root() -> Path:
    """
    Walk up from this file's location to find the project root.

    Returns:
        Absolute path to the directory holding pyproject.toml.

    Raises:
        RuntimeError: If no pyproject.toml is found in any ancestor directory.
    """
    current = Path(__file__).resolve().parent
    while current != current.parent:
        if (current / "pyproject.toml").exists():
            return current
        current = current.parent
    raise RuntimeError(
        "Cannot find project root. No pyproject.toml found in any ancestor directory."
    )


def resolve_output_root() -> Path:
    """Project root when there is one, else the current working directory."""
    try:
        return resolve_project_root()
    except RuntimeError:
        return Path.cwd()


def ensure_directory(path: Path) -> Path:
    """Create a directory (and parents) if it doesn't exist. Returns the path for chaining."""
    path.mkdir(parents=True, exist_ok=True)
    return path
