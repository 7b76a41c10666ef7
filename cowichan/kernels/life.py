# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Conway's Game of Life on a torus.

Neighbor counts come from eight ``torch.roll`` shifts of the previous
generation, which gives the wraparound for free and guarantees that every
cell of generation g+1 is computed from generation g only.
"""

import torch

from cowichan.kernels.types import require_matrix
from cowichan.logging.logger import get_logger

logger = get_logger(__name__)

_SHIFTS = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1),           (0, 1),
    (1, -1),  (1, 0),  (1, 1),
)


def neighbor_counts(world: torch.Tensor) -> torch.Tensor:
    """Live 8-neighbor count of every cell, with toroidal boundaries."""
    cells = world.to(torch.int8)
    counts = torch.zeros_like(cells)
    for d_row, d_col in _SHIFTS:
        counts += torch.roll(cells, shifts=(d_row, d_col), dims=(0, 1))
    return counts


def step(world: torch.Tensor) -> torch.Tensor:
    """One generation: alive next iff 3 neighbors, or 2 neighbors and alive now."""
    counts = neighbor_counts(world)
    return (counts == 3) | (world & (counts == 2))


def life(matrix: torch.Tensor, numgen: int) -> torch.Tensor:
    """
    Evolve a world for ``numgen`` generations.

    Args:
        matrix: BoolMatrix holding the initial world. Not modified.
        numgen: Number of generations; 0 returns an unchanged copy.

    Returns:
        BoolMatrix of the same shape holding the final world.

    Raises:
        ValueError: If numgen is negative.
    """
    rows, cols = require_matrix(matrix, "life")
    if numgen < 0:
        raise ValueError(f"numgen must be >= 0, got {numgen}")

    world = matrix.to(torch.bool).clone()
    for _ in range(numgen):
        world = step(world)

    logger.debug(
        "Life simulation complete",
        extra={"rows": rows, "cols": cols, "generations": numgen, "alive": int(world.sum())},
    )
    return world
