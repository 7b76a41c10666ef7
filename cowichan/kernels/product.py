# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Checking products A x and the norm-1 distance between them."""

import torch

from cowichan.kernels.errors import ShapeMismatch
from cowichan.kernels.types import DenseSystem, SolutionVector


def product(system: DenseSystem, solution: SolutionVector) -> torch.Tensor:
    """
    Compute ``A x`` for one solution.

    Raises:
        ShapeMismatch: If the solution length does not match the system.
    """
    if solution.values.shape != system.vector.shape:
        raise ShapeMismatch(
            "solution length does not match the system",
            "product",
            {"A": tuple(system.matrix.shape), "x": tuple(solution.values.shape)},
        )
    return torch.mv(system.matrix, solution.values)


def vecdiff(left: torch.Tensor, right: torch.Tensor) -> float:
    """
    Norm-1 distance ``sum |left - right|`` between two vectors.

    Raises:
        ShapeMismatch: If the vectors differ in shape.
    """
    if left.shape != right.shape:
        raise ShapeMismatch(
            "vectors must have the same shape",
            "vecdiff",
            {"left": tuple(left.shape), "right": tuple(right.shape)},
        )
    return float((left - right).abs().sum())
