# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
The chained kernel pipeline.

Stage order is fixed:
  1. generate   I = mandel(...) or randmat(...)
  2. shuffle    I = shuffle(I)
  3. mask       B = invperc(I, n) or thresh(I, p)
  4. life       B = life(B, generations)
  5. points     P = points_from(I, B)
  6. hull       P = hull(P)
  7. norm       P = norm(P)
  8. outer      (A, V) = outer(P)
  9. solve      Xgauss = gauss(A, V)  ||  Xsor = sor(A, V)
 10. product    Vgauss = A Xgauss     ||  Vsor = A Xsor
 11. vecdiff    residual = sum |Vgauss - Vsor|

Stages 1-8 run one after another on the calling thread; each starts only
after its predecessor has returned. Stages 9 and 10 are fork-join pairs:
both branches are submitted together, share the read-only system, and are
joined before the next stage starts.

A stage that raises stops the run. Kernel errors propagate unchanged; any
other exception is wrapped in StageError with the stage name attached.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, TypeVar

import torch

from cowichan.config.schema import ChainConfig, SolverConfig
from cowichan.kernels.errors import ConvergenceFailure, KernelError, StageError
from cowichan.kernels.hull import hull
from cowichan.kernels.life import life
from cowichan.kernels.norm import norm
from cowichan.kernels.outer import check_system, outer
from cowichan.kernels.parallel import fork_join
from cowichan.kernels.points import points_from
from cowichan.kernels.product import product, vecdiff
from cowichan.kernels.registry import build_mask, build_source
from cowichan.kernels.shuffle import shuffle
from cowichan.kernels.solvers import gauss, sor
from cowichan.kernels.types import DenseSystem, Point, SolutionVector
from cowichan.logging.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ChainArtifacts:
    """Intermediate values of one run, kept only when asked for (export, debugging)."""

    matrix: torch.Tensor
    shuffled: torch.Tensor
    mask: torch.Tensor
    world: torch.Tensor
    points: list[Point]
    peeled: list[Point]
    normalized: list[Point]
    system: DenseSystem


@dataclass(frozen=True)
class ChainResult:
    """What one chain run hands back to its caller."""

    gauss: SolutionVector
    sor: SolutionVector
    residual: float
    point_count: int
    stage_seconds: dict[str, float] = field(default_factory=dict)
    artifacts: Optional[ChainArtifacts] = None

    @property
    def converged(self) -> bool:
        return self.gauss.converged and self.sor.converged


def _timed(stage: str, task: Callable[[], T]) -> tuple[T, float]:
    """Run one stage, returning its value and wall time; attach stage context to failures."""
    start = time.perf_counter()
    try:
        value = task()
    except KernelError:
        raise
    except Exception as err:
        raise StageError(f"{type(err).__name__}: {err}", stage) from err
    return value, time.perf_counter() - start


class _StageClock:
    """Collects per-stage wall times on the coordinating thread."""

    def __init__(self) -> None:
        self.seconds: dict[str, float] = {}

    def run(self, stage: str, task: Callable[[], T], **context: Any) -> T:
        value, elapsed = _timed(stage, task)
        self.seconds[stage] = elapsed
        logger.debug("Stage complete", extra={"stage": stage, "elapsed_seconds": elapsed, **context})
        return value

    def record(self, stage: str, elapsed: float) -> None:
        self.seconds[stage] = elapsed


def solve_pair(
    system: DenseSystem,
    solver: SolverConfig,
) -> tuple[SolutionVector, SolutionVector, float, float]:
    """
    Fork-join 1: run Gauss and SOR concurrently on the same system.

    Returns:
        (gauss_solution, sor_solution, gauss_seconds, sor_seconds)

    Raises:
        NumericalFailure: If elimination hits a zero pivot.
        ConvergenceFailure: If SOR did not converge and strict convergence is set.
    """
    check_system(system, stage="solve")

    (x_gauss, gauss_seconds), (x_sor, sor_seconds) = fork_join(
        lambda: _timed("gauss", lambda: gauss(system, tolerance=solver.gauss_tolerance)),
        lambda: _timed(
            "sor",
            lambda: sor(
                system,
                omega=solver.omega,
                tolerance=solver.sor_tolerance,
                max_iterations=solver.sor_max_iterations,
            ),
        ),
    )

    if solver.strict_convergence and not x_sor.converged:
        raise ConvergenceFailure(
            "SOR did not reach tolerance",
            "sor",
            iterations=x_sor.iterations,
            residual=x_sor.residual,
            shapes={"A": tuple(system.matrix.shape)},
        )
    return x_gauss, x_sor, gauss_seconds, sor_seconds


def check_pair(
    system: DenseSystem,
    x_gauss: SolutionVector,
    x_sor: SolutionVector,
) -> tuple[float, float, float]:
    """
    Fork-join 2: compute both checking products, then their norm-1 distance.

    Returns:
        (residual, gauss_product_seconds, sor_product_seconds)
    """
    (v_gauss, gauss_seconds), (v_sor, sor_seconds) = fork_join(
        lambda: _timed("product_gauss", lambda: product(system, x_gauss)),
        lambda: _timed("product_sor", lambda: product(system, x_sor)),
    )
    residual, _ = _timed("vecdiff", lambda: vecdiff(v_gauss, v_sor))
    return residual, gauss_seconds, sor_seconds


def run_chain(config: ChainConfig, keep_artifacts: bool = False) -> ChainResult:
    """
    Run the whole chain once.

    Args:
        config: Validated chain parameters.
        keep_artifacts: Keep every intermediate value on the result.

    Returns:
        Both solutions, their convergence flags, the residual and stage timings.

    Raises:
        KernelError: Any fatal stage failure (ShapeMismatch, InvariantViolation,
            NumericalFailure, StageError, and ConvergenceFailure in strict mode).
        KeyError: If the generator or mask name is not registered.
    """
    source = build_source(config)
    mask_strategy = build_mask(config)
    clock = _StageClock()
    started = time.perf_counter()

    logger.info(
        "Chain started",
        extra={
            "rows": config.rows,
            "cols": config.cols,
            "generator": config.generator,
            "mask": config.mask,
            "generations": config.life.generations,
            "workers": config.workers,
        },
    )

    matrix = clock.run("generate", lambda: source(config.rows, config.cols, config.workers))
    shuffled = clock.run("shuffle", lambda: shuffle(matrix, workers=config.workers))
    mask = clock.run("mask", lambda: mask_strategy(shuffled))
    world = clock.run("life", lambda: life(mask, config.life.generations))
    points = clock.run("points", lambda: points_from(shuffled, world))
    peeled = clock.run("hull", lambda: hull(points), point_count=len(points))
    normalized = clock.run("norm", lambda: norm(peeled))
    system = clock.run("outer", lambda: outer(normalized), size=len(normalized))

    solve_started = time.perf_counter()
    x_gauss, x_sor, gauss_seconds, sor_seconds = solve_pair(system, config.solver)
    clock.record("gauss", gauss_seconds)
    clock.record("sor", sor_seconds)
    clock.record("solve", time.perf_counter() - solve_started)

    check_started = time.perf_counter()
    residual, gauss_product_seconds, sor_product_seconds = check_pair(system, x_gauss, x_sor)
    clock.record("product_gauss", gauss_product_seconds)
    clock.record("product_sor", sor_product_seconds)
    clock.record("check", time.perf_counter() - check_started)

    total = time.perf_counter() - started
    logger.info(
        "Chain complete",
        extra={
            "points": len(points),
            "residual": residual,
            "gauss_residual": x_gauss.residual,
            "sor_residual": x_sor.residual,
            "sor_iterations": x_sor.iterations,
            "sor_converged": x_sor.converged,
            "elapsed_seconds": total,
        },
    )

    artifacts = None
    if keep_artifacts:
        artifacts = ChainArtifacts(
            matrix=matrix,
            shuffled=shuffled,
            mask=mask,
            world=world,
            points=points,
            peeled=peeled,
            normalized=normalized,
            system=system,
        )

    return ChainResult(
        gauss=x_gauss,
        sor=x_sor,
        residual=residual,
        point_count=len(points),
        stage_seconds=dict(clock.seconds),
        artifacts=artifacts,
    )
