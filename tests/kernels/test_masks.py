# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for invperc and thresh.

Tie-breaking rules get explicit cases because they decide which cells a
benchmark run ends up with.
"""

import pytest
import torch

from cowichan.kernels.errors import ShapeMismatch
from cowichan.kernels.generators import randmat
from cowichan.kernels.masks import histogram, invperc, threshold_cutoff, thresh


def _cells(mask: torch.Tensor) -> set[tuple[int, int]]:
    return {(row, col) for row, col in torch.nonzero(mask).tolist()}


class TestInvperc:
    def test_fills_lowest_frontier_cells_first(self) -> None:
        matrix = torch.tensor([[9, 9, 9], [9, 0, 1], [9, 2, 9]], dtype=torch.int64)
        mask = invperc(matrix, fill_count=3)
        assert _cells(mask) == {(1, 1), (1, 2), (2, 1)}

    def test_ties_go_to_raster_order(self) -> None:
        matrix = torch.zeros((3, 3), dtype=torch.int64)
        assert _cells(invperc(matrix, fill_count=2)) == {(1, 1), (0, 1)}

    def test_starts_at_center(self) -> None:
        matrix = randmat(3, 5, seed=1, limit=10)
        assert _cells(invperc(matrix, fill_count=1)) == {(1, 2)}

    def test_zero_fill_gives_empty_mask(self) -> None:
        mask = invperc(randmat(4, 4, seed=1), fill_count=0)
        assert mask.dtype == torch.bool
        assert not bool(mask.any())

    def test_exact_fill_count(self) -> None:
        mask = invperc(randmat(20, 20, seed=6, limit=1000), fill_count=57)
        assert int(mask.sum()) == 57

    def test_filled_region_is_connected(self) -> None:
        mask = invperc(randmat(15, 15, seed=4, limit=1000), fill_count=40)
        cells = _cells(mask)
        seen = {(7, 7)}
        stack = [(7, 7)]
        while stack:
            row, col = stack.pop()
            for neighbor in ((row - 1, col), (row + 1, col), (row, col - 1), (row, col + 1)):
                if neighbor in cells and neighbor not in seen:
                    seen.add(neighbor)
                    stack.append(neighbor)
        assert seen == cells

    def test_overfill_covers_whole_grid(self) -> None:
        mask = invperc(randmat(3, 3, seed=1), fill_count=100)
        assert bool(mask.all())

    def test_negative_fill_count_raises(self) -> None:
        with pytest.raises(ValueError):
            invperc(randmat(3, 3, seed=1), fill_count=-1)


class TestThresh:
    def test_histogram_is_sorted_with_counts(self) -> None:
        values, counts = histogram(torch.tensor([[3, 1], [3, 2]], dtype=torch.int64))
        assert values.tolist() == [1, 2, 3]
        assert counts.tolist() == [1, 1, 2]

    def test_selects_top_values(self) -> None:
        matrix = torch.arange(1, 11, dtype=torch.int64).reshape(2, 5)
        assert threshold_cutoff(matrix, 30.0) == 8
        assert int(thresh(matrix, 30.0).sum()) == 3

    def test_cutoff_is_inclusive_of_ties(self) -> None:
        """Every cell equal to the cutoff value is kept, even past the target."""
        matrix = torch.tensor([[5, 5, 5, 1]], dtype=torch.int64)
        mask = thresh(matrix, 25.0)
        assert mask.tolist() == [[True, True, True, False]]

    def test_at_least_percent_selected(self) -> None:
        matrix = randmat(25, 25, seed=12, limit=40)
        for percent in (1.0, 10.0, 33.3, 75.0):
            selected = int(thresh(matrix, percent).sum())
            assert selected >= percent * matrix.numel() / 100

    def test_zero_percent_selects_nothing(self) -> None:
        assert not bool(thresh(randmat(5, 5, seed=1), 0.0).any())

    def test_hundred_percent_selects_everything(self) -> None:
        assert bool(thresh(randmat(5, 5, seed=1), 100.0).all())

    @pytest.mark.parametrize("percent", [-0.5, 100.5])
    def test_out_of_range_percent_raises(self, percent: float) -> None:
        with pytest.raises(ValueError, match="percent"):
            thresh(randmat(3, 3, seed=1), percent)

    def test_rejects_non_matrix(self) -> None:
        with pytest.raises(ShapeMismatch):
            thresh(torch.arange(5), 50.0)
