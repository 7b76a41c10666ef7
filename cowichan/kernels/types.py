# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared value types for the kernel chain.

Matrix conventions used by every kernel:
  - IntMatrix is a 2-D torch.int64 tensor, BoolMatrix a 2-D torch.bool tensor.
  - Both are row-major: ``matrix[r, c]`` is row ``r``, column ``c``. Shapes are
    always reported as ``(rows, cols)``.
  - Real-valued systems and solutions are torch.float64.

Points are small immutable tuples so they can be copied between stages
without any shared mutable storage.
"""

import enum
from dataclasses import dataclass
from typing import NamedTuple

import torch

from cowichan.kernels.errors import ShapeMismatch

INT_DTYPE = torch.int64
REAL_DTYPE = torch.float64


class Point(NamedTuple):
    """A weighted 2-D point. ``x`` is the source row, ``y`` the source column."""

    weight: int
    x: float
    y: float


class SolverMethod(str, enum.Enum):
    """Which solver produced a SolutionVector."""

    GAUSS = "gauss"
    SOR = "sor"


@dataclass(frozen=True)
class DenseSystem:
    """
    The linear system ``A x = V`` shared read-only by both solvers.

    Instances are only meant to be built by ``cowichan.kernels.outer.outer``,
    which validates the symmetric and diagonally dominant invariant first.
    """

    matrix: torch.Tensor
    vector: torch.Tensor

    @property
    def size(self) -> int:
        return int(self.vector.shape[0])


@dataclass(frozen=True)
class SolutionVector:
    """A candidate solution to ``A x = V`` tagged with the method that produced it."""

    method: SolverMethod
    values: torch.Tensor
    converged: bool
    iterations: int
    residual: float


def require_matrix(matrix: torch.Tensor, stage: str, name: str = "matrix") -> tuple[int, int]:
    """
    Check that a tensor is a non-empty 2-D grid and return its (rows, cols).

    Raises:
        ShapeMismatch: If the tensor is not 2-D or has an empty axis.
    """
    if matrix.dim() != 2:
        raise ShapeMismatch(
            f"expected a 2-D {name}, got {matrix.dim()} dimensions",
            stage,
            {name: tuple(matrix.shape)},
        )
    rows, cols = matrix.shape
    if rows < 1 or cols < 1:
        raise ShapeMismatch(f"{name} has an empty axis", stage, {name: (rows, cols)})
    return int(rows), int(cols)


def require_same_shape(
    left: torch.Tensor,
    right: torch.Tensor,
    stage: str,
    names: tuple[str, str] = ("matrix", "mask"),
) -> None:
    """Raise ShapeMismatch unless both tensors have identical shapes."""
    if left.shape != right.shape:
        raise ShapeMismatch(
            f"{names[0]} and {names[1]} must have the same shape",
            stage,
            {names[0]: tuple(left.shape), names[1]: tuple(right.shape)},
        )
