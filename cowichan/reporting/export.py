# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Plain-text Netpbm export of intermediate matrices.

Integer matrices become PGM (``P2``) greyscale images whose maximum value is
the largest cell value; boolean masks become PBM (``P1``) bitmaps with 1 for
a set cell. Both are written row-major, one image row per matrix row, so
``matrix[r, c]`` is pixel (x=c, y=r).
"""

from pathlib import Path

import torch

from cowichan.kernels.errors import ShapeMismatch
from cowichan.logging.logger import get_logger
from cowichan.pipeline.chain import ChainArtifacts
from cowichan.utils.filesystem import atomic_write

logger = get_logger(__name__)


def format_pgm(matrix: torch.Tensor) -> str:
    """
    Render an IntMatrix as P2 text.

    Raises:
        ShapeMismatch: If the matrix is not 2-D.
        ValueError: If it holds negative values, which PGM cannot express.
    """
    if matrix.dim() != 2:
        raise ShapeMismatch("PGM export needs a 2-D matrix", "export", {"matrix": tuple(matrix.shape)})
    rows, cols = matrix.shape
    if matrix.numel() and int(matrix.min()) < 0:
        raise ValueError("PGM export needs non-negative values")
    max_value = max(1, int(matrix.max())) if matrix.numel() else 1

    lines = ["P2", f"{cols} {rows}", str(max_value)]
    lines.extend(" ".join(str(value) for value in row) for row in matrix.tolist())
    return "\n".join(lines) + "\n"


def format_pbm(mask: torch.Tensor) -> str:
    """
    Render a BoolMatrix as P1 text.

    Raises:
        ShapeMismatch: If the mask is not 2-D.
    """
    if mask.dim() != 2:
        raise ShapeMismatch("PBM export needs a 2-D mask", "export", {"mask": tuple(mask.shape)})
    rows, cols = mask.shape
    lines = ["P1", f"{cols} {rows}"]
    lines.extend(" ".join("1" if cell else "0" for cell in row) for row in mask.tolist())
    return "\n".join(lines) + "\n"


def write_pgm(matrix: torch.Tensor, path: Path) -> Path:
    atomic_write(path, format_pgm(matrix))
    return path


def write_pbm(mask: torch.Tensor, path: Path) -> Path:
    atomic_write(path, format_pbm(mask))
    return path


def export_artifacts(artifacts: ChainArtifacts, output_dir: Path) -> list[Path]:
    """
    Write the matrix-shaped intermediates of one run.

    Produces matrix.pgm, shuffled.pgm, mask.pbm and world.pbm in
    ``output_dir`` and returns their paths in that order.
    """
    written = [
        write_pgm(artifacts.matrix, output_dir / "matrix.pgm"),
        write_pgm(artifacts.shuffled, output_dir / "shuffled.pgm"),
        write_pbm(artifacts.mask, output_dir / "mask.pbm"),
        write_pbm(artifacts.world, output_dir / "world.pbm"),
    ]
    logger.info(
        "Intermediate matrices exported",
        extra={"output_dir": str(output_dir), "files": [path.name for path in written]},
    )
    return written
