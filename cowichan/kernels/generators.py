# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Matrix sources: the first stage of the chain.

Two interchangeable generators produce the integer matrix I:
  - mandel: iteration counts of the Mandelbrot recurrence over a region of
    the complex plane;
  - randmat: pseudo-random integers from a seed.

Both must give the same matrix for any number of workers. Mandel gets this
for free because every cell is computed independently. Randmat gets it by
giving every row its own generator, seeded from (seed, row), so no stream
is ever shared between threads.
"""

import torch

from cowichan.kernels.errors import ShapeMismatch
from cowichan.kernels.parallel import run_banded
from cowichan.kernels.types import INT_DTYPE, REAL_DTYPE
from cowichan.logging.logger import get_logger

logger = get_logger(__name__)

MANDEL_MAX_ITERATIONS = 150
MANDEL_ESCAPE_RADIUS_SQUARED = 4.0

RANDMAT_DEFAULT_LIMIT = 2**31 - 1

_MASK_64 = 0xFFFF_FFFF_FFFF_FFFF


def _check_shape(rows: int, cols: int, stage: str) -> None:
    if rows < 1 or cols < 1:
        raise ShapeMismatch("matrix shape must be at least 1x1", stage, {"matrix": (rows, cols)})


def mandel(
    rows: int,
    cols: int,
    x0: float,
    y0: float,
    dx: float,
    dy: float,
    workers: int = 1,
) -> torch.Tensor:
    """
    Generate the Mandelbrot iteration-count matrix for a region.

    Cell (row j, column i) maps to ``c = (x0 + dx*i/cols) + ((y0 + dy) - dy*j/rows)i``,
    so row 0 is the top edge of the region. Starting from ``z = 0`` the cell
    iterates ``z <- z*z + c`` while ``|z| < 2``, at most 150 times, and stores
    the number of iterations taken.

    Args:
        rows: Number of rows in the output.
        cols: Number of columns in the output.
        x0: Real coordinate of the lower-left corner.
        y0: Imaginary coordinate of the lower-left corner.
        dx: Width of the region.
        dy: Height of the region.
        workers: Number of threads; does not affect the result.

    Returns:
        IntMatrix of shape (rows, cols) with values in [0, 150].

    Raises:
        ShapeMismatch: If rows or cols is below 1.
    """
    _check_shape(rows, cols, "mandel")

    def compute(start: int, stop: int) -> torch.Tensor:
        height = stop - start
        col_index = torch.arange(cols, dtype=REAL_DTYPE)
        row_index = torch.arange(start, stop, dtype=REAL_DTYPE)
        c_re = (x0 + (dx / cols) * col_index).unsqueeze(0).expand(height, cols)
        c_im = ((y0 + dy) - (dy / rows) * row_index).unsqueeze(1).expand(height, cols)

        z_re = torch.zeros((height, cols), dtype=REAL_DTYPE)
        z_im = torch.zeros((height, cols), dtype=REAL_DTYPE)
        counts = torch.zeros((height, cols), dtype=INT_DTYPE)

        for _ in range(MANDEL_MAX_ITERATIONS):
            active = (z_re * z_re + z_im * z_im) < MANDEL_ESCAPE_RADIUS_SQUARED
            if not bool(active.any()):
                break
            next_re = z_re * z_re - z_im * z_im + c_re
            next_im = 2.0 * z_re * z_im + c_im
            # Escaped cells keep their last value so they never overflow.
            z_re = torch.where(active, next_re, z_re)
            z_im = torch.where(active, next_im, z_im)
            counts += active.to(INT_DTYPE)

        return counts

    matrix = run_banded(compute, rows, workers)
    logger.debug(
        "Mandelbrot matrix generated",
        extra={"rows": rows, "cols": cols, "workers": workers},
    )
    return matrix


def splitmix64(value: int) -> int:
    """One step of the SplitMix64 mixer, on plain Python ints masked to 64 bits."""
    z = (value + 0x9E37_79B9_7F4A_7C15) & _MASK_64
    z = ((z ^ (z >> 30)) * 0xBF58_476D_1CE4_E5B9) & _MASK_64
    z = ((z ^ (z >> 27)) * 0x94D0_49BB_1331_11EB) & _MASK_64
    return z ^ (z >> 31)


def row_seed(seed: int, row: int) -> int:
    """Seed for the generator that owns ``row``; a pure function of (seed, row)."""
    return splitmix64((splitmix64(seed & _MASK_64) + row) & _MASK_64)


def randmat(
    rows: int,
    cols: int,
    seed: int,
    limit: int = RANDMAT_DEFAULT_LIMIT,
    workers: int = 1,
) -> torch.Tensor:
    """
    Fill a matrix with pseudo-random integers in ``[0, limit)``.

    Every row draws from a private ``torch.Generator`` seeded with
    ``row_seed(seed, row)``, filling its columns left to right. The result
    depends only on (rows, cols, seed, limit).

    Raises:
        ShapeMismatch: If rows or cols is below 1.
        ValueError: If limit is below 1.
    """
    _check_shape(rows, cols, "randmat")
    if limit < 1:
        raise ValueError(f"randmat limit must be >= 1, got {limit}")

    def compute(start: int, stop: int) -> torch.Tensor:
        band = torch.empty((stop - start, cols), dtype=INT_DTYPE)
        generator = torch.Generator()
        for offset, row in enumerate(range(start, stop)):
            generator.manual_seed(row_seed(seed, row))
            band[offset] = torch.randint(0, limit, (cols,), generator=generator, dtype=INT_DTYPE)
        return band

    matrix = run_banded(compute, rows, workers)
    logger.debug(
        "Random matrix generated",
        extra={"rows": rows, "cols": cols, "seed": seed, "workers": workers},
    )
    return matrix
