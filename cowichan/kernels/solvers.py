# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
The two solvers for A x = V.

Both run against the same DenseSystem at the same time, so neither may
write to ``system.matrix`` or ``system.vector``. Gauss works on private
copies; SOR only reads A and V and writes its own solution vector.

gauss
  Gaussian elimination with partial pivoting (the first largest magnitude
  wins a tie), then back-substitution. A pivot whose magnitude is at or
  below the tolerance raises NumericalFailure naming the elimination row.

sor
  Successive over-relaxation sweeping rows in order, starting from zero.
  After each sweep the residual ``max|V - A x|`` is checked against the
  tolerance. Running out of iterations is not an error: the best-effort
  vector comes back with ``converged=False`` and a warning is logged.
"""

import torch

from cowichan.kernels.errors import NumericalFailure
from cowichan.kernels.types import REAL_DTYPE, DenseSystem, SolutionVector, SolverMethod
from cowichan.logging.logger import get_logger

logger = get_logger(__name__)

DEFAULT_GAUSS_TOLERANCE = 1e-12
DEFAULT_SOR_OMEGA = 1.25
DEFAULT_SOR_TOLERANCE = 1e-10
DEFAULT_SOR_MAX_ITERATIONS = 10_000


def residual_norm(system: DenseSystem, values: torch.Tensor) -> float:
    """Largest absolute component of ``V - A x``."""
    if values.numel() == 0:
        return 0.0
    return float((system.vector - torch.mv(system.matrix, values)).abs().max())


def gauss(system: DenseSystem, tolerance: float = DEFAULT_GAUSS_TOLERANCE) -> SolutionVector:
    """
    Solve the system by Gaussian elimination with partial pivoting.

    Raises:
        NumericalFailure: If a pivot is numerically zero.
    """
    matrix = system.matrix.to(REAL_DTYPE).clone()
    target = system.vector.to(REAL_DTYPE).clone()
    size = system.size
    shapes = {"A": tuple(matrix.shape), "V": tuple(target.shape)}

    for k in range(size):
        pivot_row = k + int(torch.argmax(matrix[k:, k].abs()))
        if abs(float(matrix[pivot_row, k])) <= tolerance:
            raise NumericalFailure("pivot is zero within tolerance", "gauss", row=k, shapes=shapes)

        if pivot_row != k:
            matrix[[k, pivot_row]] = matrix[[pivot_row, k]]
            target[[k, pivot_row]] = target[[pivot_row, k]]

        if k + 1 < size:
            factors = matrix[k + 1:, k] / matrix[k, k]
            matrix[k + 1:, k:] -= torch.outer(factors, matrix[k, k:])
            target[k + 1:] -= factors * target[k]

    values = torch.zeros(size, dtype=REAL_DTYPE)
    for k in range(size - 1, -1, -1):
        tail = torch.dot(matrix[k, k + 1:], values[k + 1:])
        values[k] = (target[k] - tail) / matrix[k, k]

    residual = residual_norm(system, values)
    logger.debug("Gaussian elimination complete", extra={"size": size, "residual": residual})
    return SolutionVector(
        method=SolverMethod.GAUSS,
        values=values,
        converged=True,
        iterations=size,
        residual=residual,
    )


def sor(
    system: DenseSystem,
    omega: float = DEFAULT_SOR_OMEGA,
    tolerance: float = DEFAULT_SOR_TOLERANCE,
    max_iterations: int = DEFAULT_SOR_MAX_ITERATIONS,
) -> SolutionVector:
    """
    Solve the system by successive over-relaxation.

    Args:
        system: A validated DenseSystem. Only read.
        omega: Relaxation factor, strictly between 0 and 2.
        tolerance: Stop once ``max|V - A x|`` drops below this.
        max_iterations: Maximum number of full sweeps.

    Returns:
        The last iterate, with ``converged`` telling whether the tolerance
        was met.

    Raises:
        ValueError: If omega is outside (0, 2) or max_iterations is below 1.
    """
    if not 0 < omega < 2:
        raise ValueError(f"omega must be strictly between 0 and 2, got {omega}")
    if max_iterations < 1:
        raise ValueError(f"max_iterations must be >= 1, got {max_iterations}")

    matrix, target = system.matrix, system.vector
    size = system.size
    diagonal = matrix.diagonal().tolist()
    rhs = target.tolist()
    values = torch.zeros(size, dtype=REAL_DTYPE)

    residual = residual_norm(system, values)
    iteration = 0
    while residual >= tolerance and iteration < max_iterations:
        iteration += 1
        for i in range(size):
            current = float(values[i])
            sigma = float(torch.dot(matrix[i], values)) - diagonal[i] * current
            values[i] = (1.0 - omega) * current + omega * (rhs[i] - sigma) / diagonal[i]
        residual = residual_norm(system, values)

    converged = residual < tolerance
    if converged:
        logger.debug(
            "SOR converged",
            extra={"size": size, "iterations": iteration, "residual": residual},
        )
    else:
        logger.warning(
            "SOR did not converge within the iteration cap",
            extra={"size": size, "iterations": iteration, "residual": residual},
        )

    return SolutionVector(
        method=SolverMethod.SOR,
        values=values,
        converged=converged,
        iterations=iteration,
        residual=residual,
    )
