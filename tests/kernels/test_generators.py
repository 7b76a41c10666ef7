# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the matrix generators.

Both generators must give bit-identical results for any worker count.
"""

import pytest
import torch

from cowichan.kernels.errors import ShapeMismatch
from cowichan.kernels.generators import (
    MANDEL_MAX_ITERATIONS,
    mandel,
    randmat,
    row_seed,
    splitmix64,
)


class TestMandel:
    def test_origin_never_escapes(self) -> None:
        """c = 0 sits inside the set, so its cell hits the iteration cap."""
        matrix = mandel(2, 2, x0=-1.0, y0=-1.0, dx=2.0, dy=2.0)
        assert int(matrix[1, 1]) == MANDEL_MAX_ITERATIONS

    def test_zero_extent_region_at_origin(self) -> None:
        assert mandel(1, 1, 0.0, 0.0, 0.0, 0.0).tolist() == [[150]]

    def test_far_point_escapes_after_one_iteration(self) -> None:
        matrix = mandel(1, 1, x0=2.0, y0=2.0, dx=1.0, dy=1.0)
        assert int(matrix[0, 0]) == 1

    def test_shape_dtype_and_range(self) -> None:
        matrix = mandel(15, 25, -2.0, -1.0, 3.0, 2.0)
        assert matrix.shape == (15, 25)
        assert matrix.dtype == torch.int64
        assert int(matrix.min()) >= 0
        assert int(matrix.max()) <= MANDEL_MAX_ITERATIONS

    def test_top_and_bottom_rows_mirror(self) -> None:
        """The default region is symmetric about the real axis away from row 0."""
        matrix = mandel(4, 9, -2.0, -1.0, 3.0, 2.0)
        assert torch.equal(matrix[1], matrix[3])

    @pytest.mark.parametrize("workers", [2, 3, 7, 64])
    def test_worker_count_does_not_change_result(self, workers: int) -> None:
        serial = mandel(23, 31, -2.0, -1.0, 3.0, 2.0, workers=1)
        parallel = mandel(23, 31, -2.0, -1.0, 3.0, 2.0, workers=workers)
        assert torch.equal(serial, parallel)

    def test_rejects_empty_shape(self) -> None:
        with pytest.raises(ShapeMismatch):
            mandel(0, 5, -2.0, -1.0, 3.0, 2.0)


class TestRandmat:
    def test_same_seed_same_matrix(self) -> None:
        assert torch.equal(randmat(10, 12, seed=3), randmat(10, 12, seed=3))

    def test_different_seed_different_matrix(self) -> None:
        assert not torch.equal(randmat(10, 12, seed=3), randmat(10, 12, seed=4))

    @pytest.mark.parametrize("workers", [1, 3, 7])
    def test_worker_count_does_not_change_result(self, workers: int) -> None:
        reference = randmat(17, 9, seed=46, limit=1000, workers=1)
        assert torch.equal(randmat(17, 9, seed=46, limit=1000, workers=workers), reference)

    def test_values_within_limit(self) -> None:
        matrix = randmat(30, 30, seed=11, limit=5)
        assert matrix.dtype == torch.int64
        assert int(matrix.min()) >= 0
        assert int(matrix.max()) < 5

    def test_limit_one_gives_zeros(self) -> None:
        assert int(randmat(4, 4, seed=1, limit=1).abs().sum()) == 0

    def test_rows_do_not_depend_on_matrix_height(self) -> None:
        """A row is a function of (seed, row), so a taller matrix extends a shorter one."""
        short = randmat(5, 8, seed=9, limit=1000)
        tall = randmat(12, 8, seed=9, limit=1000)
        assert torch.equal(tall[:5], short)

    def test_invalid_limit_raises(self) -> None:
        with pytest.raises(ValueError, match="limit"):
            randmat(3, 3, seed=1, limit=0)

    def test_rejects_empty_shape(self) -> None:
        with pytest.raises(ShapeMismatch):
            randmat(3, 0, seed=1)


class TestSeeding:
    def test_splitmix_stays_in_64_bits(self) -> None:
        for value in (0, 1, 2**63, 2**64 - 1):
            assert 0 <= splitmix64(value) < 2**64

    def test_row_seeds_are_distinct(self) -> None:
        seeds = {row_seed(46, row) for row in range(1000)}
        assert len(seeds) == 1000
