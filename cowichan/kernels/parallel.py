# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Thread helpers for the cell-independent kernels and the two fork-join points.

Two patterns live here:
  - banded execution: a kernel that computes rows independently is split
    into contiguous row bands, one per worker, and the bands are stitched
    back together in row order;
  - fork-join: two independent tasks run on a two-thread pool and both
    results are collected before the caller continues.

Threads are enough for both because torch releases the GIL inside its
tensor operations. The number of workers never changes what a kernel
computes, only which thread computes it.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, TypeVar

import torch

T = TypeVar("T")
U = TypeVar("U")


def row_bands(rows: int, workers: int) -> list[tuple[int, int]]:
    """
    Split ``range(rows)`` into at most ``workers`` contiguous ``(start, stop)`` bands.

    Earlier bands take the remainder rows, so the layout is fixed for a given
    (rows, workers) pair.
    """
    workers = max(1, min(workers, rows))
    base, extra = divmod(rows, workers)
    bands = []
    start = 0
    for index in range(workers):
        stop = start + base + (1 if index < extra else 0)
        bands.append((start, stop))
        start = stop
    return bands


def run_banded(
    compute: Callable[[int, int], torch.Tensor],
    rows: int,
    workers: int = 1,
) -> torch.Tensor:
    """
    Compute a matrix band by band and concatenate the bands along dim 0.

    Args:
        compute: Called as ``compute(start, stop)``; must return the rows
                 ``start..stop-1`` of the result and touch nothing else.
        rows: Total number of rows in the result.
        workers: Number of threads to spread the bands over.

    Returns:
        The full matrix, identical for every value of ``workers``.
    """
    bands = row_bands(rows, workers)
    if len(bands) == 1:
        start, stop = bands[0]
        return compute(start, stop)

    with ThreadPoolExecutor(max_workers=len(bands), thread_name_prefix="cowichan-band") as pool:
        futures = [pool.submit(compute, start, stop) for start, stop in bands]
        parts = [future.result() for future in futures]
    return torch.cat(parts, dim=0)


def fork_join(left: Callable[[], T], right: Callable[[], U]) -> tuple[T, U]:
    """
    Run two independent tasks concurrently and wait for both.

    Results come back in argument order no matter which task finishes
    first. If a task raises, its exception propagates from here after both
    tasks have finished (the pool shutdown waits for the sibling), and the
    left task's exception wins when both fail.
    """
    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="cowichan-fork") as pool:
        left_future = pool.submit(left)
        right_future = pool.submit(right)
        # Wait for both before touching either result.
        left_error = left_future.exception()
        right_error = right_future.exception()
    if left_error is not None:
        raise left_error
    if right_error is not None:
        raise right_error
    return left_future.result(), right_future.result()
