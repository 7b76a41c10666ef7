# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Two-axis shuffle of the integer matrix.

Along an axis of extent n, positions are split into two halves: the odd
positions (1, 3, 5, ...) are gathered at the low end in their original
order, and the even positions (0, 2, 4, ...) at the high end. Indexing is
0-based. The column permutation is applied to every row first, then the row
permutation to every column. No randomness is involved, so the result
depends on the matrix alone.
"""

import torch

from cowichan.kernels.parallel import run_banded
from cowichan.kernels.types import require_matrix
from cowichan.logging.logger import get_logger

logger = get_logger(__name__)


def interleave_permutation(extent: int) -> torch.Tensor:
    """
    Source index for each destination position along one axis.

    ``interleave_permutation(5)`` is ``[1, 3, 0, 2, 4]``.
    """
    odd = torch.arange(1, extent, 2, dtype=torch.int64)
    even = torch.arange(0, extent, 2, dtype=torch.int64)
    return torch.cat([odd, even])


def shuffle(matrix: torch.Tensor, workers: int = 1) -> torch.Tensor:
    """
    Shuffle a matrix along columns, then along rows.

    Every row of the result holds the same multiset of values as some row of
    the input, and the whole result is a permutation of the input.

    Args:
        matrix: IntMatrix to shuffle. Not modified.
        workers: Number of threads; does not affect the result.

    Returns:
        A new matrix with the same shape and dtype.
    """
    rows, cols = require_matrix(matrix, "shuffle")
    col_order = interleave_permutation(cols)
    row_order = interleave_permutation(rows)

    # Pass 1: reorder the columns inside each band of rows.
    by_columns = run_banded(
        lambda start, stop: matrix[start:stop].index_select(1, col_order),
        rows,
        workers,
    )

    # Pass 2: destination row r takes source row row_order[r]; bands are
    # over destination rows so each thread writes a disjoint slice.
    shuffled = run_banded(
        lambda start, stop: by_columns.index_select(0, row_order[start:stop]),
        rows,
        workers,
    )

    logger.debug("Matrix shuffled", extra={"rows": rows, "cols": cols, "workers": workers})
    return shuffled
