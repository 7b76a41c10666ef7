# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Build the dense linear system A x = V from normalized points.

Construction:
  1. ``A[i][j] = |p_i - p_j|`` for i != j (Euclidean distance).
  2. ``A <- (A + A^T) / 2``, which pins exact symmetry.
  3. ``A[i][i] = L * max_j |A[i][j]|``, or 1.0 for a row with no non-zero
     off-diagonal entry. Since the off-diagonal row sum is at most
     ``(L - 1) * max``, every row ends up strictly diagonally dominant.
  4. ``V[i] = |p_i|``, the distance of the point from the origin.

A symmetric matrix with a positive, strictly dominant diagonal is positive
definite, which is what both solvers rely on. ``check_system`` enforces the
invariant and ``outer`` always calls it before handing the system out.
"""

from typing import Sequence

import torch

from cowichan.kernels.errors import InvariantViolation, ShapeMismatch
from cowichan.kernels.types import REAL_DTYPE, DenseSystem, Point
from cowichan.logging.logger import get_logger

logger = get_logger(__name__)


def check_system(system: DenseSystem, stage: str = "outer") -> None:
    """
    Verify that a system is safe to hand to the solvers.

    Raises:
        InvariantViolation: If A is not square, V does not match, A is not
            exactly symmetric, or some row is not diagonally dominant
            (``|a_ii| >= sum_{j != i} |a_ij|`` with a non-zero diagonal).
    """
    matrix, vector = system.matrix, system.vector
    shapes = {"A": tuple(matrix.shape), "V": tuple(vector.shape)}

    if matrix.dim() != 2 or matrix.shape[0] != matrix.shape[1]:
        raise InvariantViolation("A must be a square matrix", stage, shapes)
    if vector.dim() != 1 or vector.shape[0] != matrix.shape[0]:
        raise InvariantViolation("V length must match the size of A", stage, shapes)
    if not torch.equal(matrix, matrix.transpose(0, 1)):
        raise InvariantViolation("A is not symmetric", stage, shapes)

    magnitudes = matrix.abs()
    diagonal = magnitudes.diagonal().clone()
    off_diagonal = magnitudes.clone()
    off_diagonal.fill_diagonal_(0)
    row_sums = off_diagonal.sum(dim=1)

    failing = torch.nonzero((diagonal < row_sums) | (diagonal == 0)).flatten()
    if failing.numel() > 0:
        row = int(failing[0])
        raise InvariantViolation(
            f"A is not diagonally dominant at row {row} "
            f"(|diagonal| {float(diagonal[row]):.6g} vs off-diagonal sum {float(row_sums[row]):.6g})",
            stage,
            shapes,
        )


def outer(points: Sequence[Point]) -> DenseSystem:
    """
    Build the symmetric, diagonally dominant system for a point sequence.

    Args:
        points: Normalized points; their order fixes the row order of A.

    Returns:
        A validated DenseSystem of size L = len(points).

    Raises:
        ShapeMismatch: If ``points`` is empty.
    """
    size = len(points)
    if size == 0:
        raise ShapeMismatch("cannot build a system from zero points", "outer", {"points": (0,)})

    coords = torch.tensor([[point.x, point.y] for point in points], dtype=REAL_DTYPE)
    deltas = coords.unsqueeze(1) - coords.unsqueeze(0)
    matrix = deltas.pow(2).sum(dim=-1).sqrt()
    matrix = (matrix + matrix.transpose(0, 1)) / 2

    matrix.fill_diagonal_(0)
    row_max = matrix.abs().max(dim=1).values
    diagonal = torch.where(row_max > 0, size * row_max, torch.ones_like(row_max))
    matrix = matrix + torch.diag(diagonal)

    vector = coords.pow(2).sum(dim=1).sqrt()

    system = DenseSystem(matrix=matrix, vector=vector)
    check_system(system)
    logger.debug("Linear system built", extra={"size": size})
    return system
