# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Turn the integer matrix and its mask into a list of weighted points."""

import torch

from cowichan.kernels.types import Point, require_matrix, require_same_shape


def points_from(matrix: torch.Tensor, mask: torch.Tensor) -> list[Point]:
    """
    One point per set mask cell, in row-major raster order.

    The weight is the matrix value at the cell, ``x`` its row and ``y`` its
    column. The same matrix and mask always give the same sequence.

    Raises:
        ShapeMismatch: If the matrix and mask shapes differ.
    """
    require_matrix(matrix, "points")
    require_same_shape(matrix, mask, "points")

    # nonzero() enumerates indices in row-major order.
    cells = torch.nonzero(mask.to(torch.bool), as_tuple=False).tolist()
    weights = matrix[mask.to(torch.bool)].tolist()
    return [Point(int(weight), float(row), float(col)) for (row, col), weight in zip(cells, weights)]
