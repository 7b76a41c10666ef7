# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Convex hull peeling.

The outermost hull of the point set is removed, then the hull of what is
left, and so on, until fewer than 3 points remain. Those last points are
appended in their original relative order. The output is a permutation of
the input grouped by peel layer.

Each hull is found with Andrew's monotone chain. Points lying on a hull
edge but not at a corner are not hull vertices; they stay for a later
layer. Vertices are listed counter-clockwise, starting from the vertex with
the lowest (x, y). Points with identical coordinates are told apart by
their position in the input, so only one of them can be a vertex per layer.
"""

from typing import Sequence

from cowichan.kernels.types import Point

MIN_HULL_POINTS = 3


def _cross(origin: Point, a: Point, b: Point) -> float:
    """Z component of (a - origin) x (b - origin); positive for a left turn."""
    return (a.x - origin.x) * (b.y - origin.y) - (a.y - origin.y) * (b.x - origin.x)


def convex_hull(points: Sequence[Point]) -> list[int]:
    """
    Indices of the hull vertices of ``points``, counter-clockwise.

    Degenerate inputs still return at least one index when ``points`` is not
    empty: a single location gives one vertex and a collinear set gives its
    two end points.
    """
    order = sorted(range(len(points)), key=lambda i: (points[i].x, points[i].y, i))

    distinct: list[int] = []
    for index in order:
        if distinct:
            last = points[distinct[-1]]
            if (last.x, last.y) == (points[index].x, points[index].y):
                continue
        distinct.append(index)

    if len(distinct) <= 2:
        return distinct

    lower: list[int] = []
    for index in distinct:
        while len(lower) >= 2 and _cross(points[lower[-2]], points[lower[-1]], points[index]) <= 0:
            lower.pop()
        lower.append(index)

    upper: list[int] = []
    for index in reversed(distinct):
        while len(upper) >= 2 and _cross(points[upper[-2]], points[upper[-1]], points[index]) <= 0:
            upper.pop()
        upper.append(index)

    return lower[:-1] + upper[:-1]


def hull_layers(points: Sequence[Point]) -> list[list[Point]]:
    """
    Peel ``points`` into layers, outermost first.

    The final entry holds the fewer-than-3 leftover points, if there are any.
    """
    remaining = list(range(len(points)))
    layers: list[list[Point]] = []

    while len(remaining) >= MIN_HULL_POINTS:
        candidates = [points[i] for i in remaining]
        vertices = [remaining[j] for j in convex_hull(candidates)]
        layers.append([points[i] for i in vertices])
        taken = set(vertices)
        remaining = [i for i in remaining if i not in taken]

    if remaining:
        layers.append([points[i] for i in remaining])
    return layers


def hull(points: Sequence[Point]) -> list[Point]:
    """The input points reordered by peel layer, outermost layer first."""
    return [point for layer in hull_layers(points) for point in layer]
