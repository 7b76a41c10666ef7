# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Rescale point coordinates into the unit square."""

from typing import Sequence

from cowichan.kernels.types import Point

DOMAIN_LOW = 0.0
DOMAIN_HIGH = 1.0
DOMAIN_CENTER = (DOMAIN_LOW + DOMAIN_HIGH) / 2


def _rescale(value: float, low: float, high: float) -> float:
    if high == low:
        return DOMAIN_CENTER
    return DOMAIN_LOW + (value - low) * (DOMAIN_HIGH - DOMAIN_LOW) / (high - low)


def norm(points: Sequence[Point]) -> list[Point]:
    """
    Map x and y linearly onto [0, 1], each axis independently.

    An axis with no spread (every point has the same coordinate) maps to the
    domain center 0.5. Weights and order are kept as they are.
    """
    if not points:
        return []

    x_low = min(point.x for point in points)
    x_high = max(point.x for point in points)
    y_low = min(point.y for point in points)
    y_high = max(point.y for point in points)

    return [
        Point(point.weight, _rescale(point.x, x_low, x_high), _rescale(point.y, y_low, y_high))
        for point in points
    ]
