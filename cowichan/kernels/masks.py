# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Mask generators: derive the boolean matrix B from the integer matrix I.

invperc (invasion percolation)
  Filling starts at the center cell (rounding down on even extents). A
  min-heap holds the unfilled 4-neighbors of filled cells, keyed by
  ``(value, row, col)``, so lower values fill first and ties go to the cell
  that comes first in raster order. Each cell enters the heap at most once.
  This stage is inherently sequential and runs on one thread.

thresh (histogram thresholding)
  With ``target = ceil(percent * cells / 100)``, the cutoff is the largest
  value ``v`` such that at least ``target`` cells hold a value ``>= v``. The
  mask marks every cell with value ``>= v``, so the boundary is inclusive
  and ties at the cutoff are all kept. The result therefore has at least
  ``percent`` percent of its cells set, possibly more when values repeat.
"""

import heapq
import math

import torch

from cowichan.kernels.types import require_matrix
from cowichan.logging.logger import get_logger

logger = get_logger(__name__)

_NEIGHBOR_OFFSETS = ((-1, 0), (0, -1), (0, 1), (1, 0))


def invperc(matrix: torch.Tensor, fill_count: int) -> torch.Tensor:
    """
    Invasion percolation from the center cell.

    Args:
        matrix: IntMatrix of resistances; lower values fill first.
        fill_count: Number of cells to fill, the center included. Values
                    above the cell count fill the whole grid.

    Returns:
        BoolMatrix with exactly ``min(fill_count, rows * cols)`` cells set.

    Raises:
        ValueError: If fill_count is negative.
    """
    rows, cols = require_matrix(matrix, "invperc")
    if fill_count < 0:
        raise ValueError(f"fill_count must be >= 0, got {fill_count}")

    mask = torch.zeros((rows, cols), dtype=torch.bool)
    if fill_count == 0:
        return mask

    values = matrix.tolist()
    filled = [[False] * cols for _ in range(rows)]
    queued = [[False] * cols for _ in range(rows)]
    frontier: list[tuple[int, int, int]] = []

    def fill(row: int, col: int) -> None:
        filled[row][col] = True
        for d_row, d_col in _NEIGHBOR_OFFSETS:
            n_row, n_col = row + d_row, col + d_col
            if 0 <= n_row < rows and 0 <= n_col < cols and not queued[n_row][n_col]:
                queued[n_row][n_col] = True
                heapq.heappush(frontier, (values[n_row][n_col], n_row, n_col))

    center_row, center_col = rows // 2, cols // 2
    queued[center_row][center_col] = True
    fill(center_row, center_col)
    filled_count = 1

    while filled_count < fill_count and frontier:
        _, row, col = heapq.heappop(frontier)
        fill(row, col)
        filled_count += 1

    mask = torch.tensor(filled, dtype=torch.bool)
    logger.debug(
        "Invasion percolation complete",
        extra={"rows": rows, "cols": cols, "requested": fill_count, "filled": filled_count},
    )
    return mask


def histogram(matrix: torch.Tensor) -> tuple[torch.Tensor, torch.Tensor]:
    """Distinct values of a matrix in ascending order, with their cell counts."""
    values, counts = torch.unique(matrix.flatten(), sorted=True, return_counts=True)
    return values, counts


def threshold_cutoff(matrix: torch.Tensor, percent: float) -> int | None:
    """
    The value at which ``thresh`` cuts, or None when nothing is selected.

    Walks the histogram from the highest value down, accumulating counts,
    and stops at the first value where the running total reaches the target.
    """
    if not 0 <= percent <= 100:
        raise ValueError(f"percent must be within [0, 100], got {percent}")
    cells = matrix.numel()
    target = math.ceil(percent * cells / 100)
    if target == 0:
        return None

    values, counts = histogram(matrix)
    running = counts.flip(0).cumsum(0)
    reached = int(torch.nonzero(running >= target)[0, 0])
    return int(values.flip(0)[reached])


def thresh(matrix: torch.Tensor, percent: float) -> torch.Tensor:
    """
    Histogram thresholding: keep at least ``percent`` percent of the cells.

    Args:
        matrix: IntMatrix to threshold.
        percent: Minimum percentage of cells to mark, within [0, 100].

    Returns:
        BoolMatrix, true where the cell value is at or above the cutoff.

    Raises:
        ValueError: If percent is outside [0, 100].
    """
    rows, cols = require_matrix(matrix, "thresh")
    cutoff = threshold_cutoff(matrix, percent)
    if cutoff is None:
        return torch.zeros((rows, cols), dtype=torch.bool)

    mask = matrix >= cutoff
    logger.debug(
        "Histogram threshold applied",
        extra={"percent": percent, "cutoff": cutoff, "selected": int(mask.sum())},
    )
    return mask
