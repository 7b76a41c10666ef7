# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Error kinds raised by the kernels and the chain.

Every error carries the name of the stage that raised it and the shapes of
the operands involved, so a failed benchmark run can be diagnosed from the
log line alone. None of these are retried anywhere in the package; a caller
that wants another attempt re-seeds and runs the chain again.
"""

from typing import Optional


class KernelError(Exception):
    """Base for every failure raised by a kernel or by the chain."""

    def __init__(
        self,
        message: str,
        stage: str,
        shapes: Optional[dict[str, tuple[int, ...]]] = None,
    ) -> None:
        self.stage = stage
        self.shapes = dict(shapes or {})
        detail = f"[{stage}] {message}"
        if self.shapes:
            rendered = ", ".join(f"{name}={shape}" for name, shape in sorted(self.shapes.items()))
            detail = f"{detail} (shapes: {rendered})"
        super().__init__(detail)


class ShapeMismatch(KernelError):
    """Matrices, masks or vectors with inconsistent dimensions. Fatal."""


class InvariantViolation(KernelError):
    """
    A linear system that is not square, not symmetric or not diagonally
    dominant. Raised before the system can reach either solver.
    """


class NumericalFailure(KernelError):
    """Gaussian elimination hit a pivot that is zero within tolerance."""

    def __init__(
        self,
        message: str,
        stage: str,
        row: int,
        shapes: Optional[dict[str, tuple[int, ...]]] = None,
    ) -> None:
        self.row = row
        super().__init__(f"{message} at row {row}", stage, shapes)


class ConvergenceFailure(KernelError):
    """
    Successive over-relaxation ran out of iterations.

    The solver itself never raises this; it returns a best-effort vector with
    ``converged=False``. The chain raises it only when strict convergence is
    requested in the solver config.
    """

    def __init__(
        self,
        message: str,
        stage: str,
        iterations: int,
        residual: float,
        shapes: Optional[dict[str, tuple[int, ...]]] = None,
    ) -> None:
        self.iterations = iterations
        self.residual = residual
        super().__init__(
            f"{message} after {iterations} iterations (residual {residual:.3e})",
            stage,
            shapes,
        )


class StageError(KernelError):
    """Wraps an unexpected exception escaping a stage, keeping stage context."""
