"""Visiting-order heuristic: nearest-neighbour construction plus 2-opt.

The tour is an open path that starts at the first point and ends wherever
the heuristic leaves it.  The result is a local optimum only.
"""

from collections.abc import Sequence

from voter_radius.lib.locator.geometry import haversine_miles

# Minimum gain (miles) for a 2-opt reversal to count as an improvement
IMPROVEMENT_EPSILON = 1e-9

Point = tuple[float, float]


def distance_matrix(points: Sequence[Point]) -> list[list[float]]:
    """Pairwise great-circle distances in miles.

    Args:
        points: ``(latitude, longitude)`` pairs.

    Returns:
        Square symmetric matrix ``d[i][j]`` with a zero diagonal.
    """
    n = len(points)
    matrix = [[0.0] * n for _ in range(n)]
    for i in range(n):
        lat_i, lon_i = points[i]
        for j in range(i + 1, n):
            lat_j, lon_j = points[j]
            matrix[i][j] = matrix[j][i] = haversine_miles(lat_i, lon_i, lat_j, lon_j)
    return matrix


def tour_length(route: Sequence[int], matrix: Sequence[Sequence[float]]) -> float:
    """Total length of an open path over ``matrix``."""
    return sum(matrix[route[i]][route[i + 1]] for i in range(len(route) - 1))


def nearest_neighbour_tour(matrix: Sequence[Sequence[float]], start: int = 0) -> list[int]:
    """Greedy path from ``start``, always moving to the closest unvisited point.

    Ties go to the lowest index, so the result depends only on the input order.
    """
    n = len(matrix)
    if n == 0:
        return []
    route = [start]
    unvisited = set(range(n)) - {start}
    current = start
    while unvisited:
        current = min(unvisited, key=lambda j: (matrix[current][j], j))
        route.append(current)
        unvisited.remove(current)
    return route


def reversal_gain(route: Sequence[int], matrix: Sequence[Sequence[float]], i: int, k: int) -> float:
    """Length saved by reversing ``route[i:k + 1]`` on an open path (``1 <= i < k``)."""
    a, b = route[i - 1], route[i]
    c = route[k]
    before = matrix[a][b]
    after = matrix[a][c]
    if k + 1 < len(route):
        d = route[k + 1]
        before += matrix[c][d]
        after += matrix[b][d]
    return before - after


def two_opt(route: Sequence[int], matrix: Sequence[Sequence[float]]) -> tuple[list[int], int]:
    """Improve ``route`` with 2-opt reversals until a full pass makes no move.

    The first point stays fixed.  A reversal is applied only when it shortens
    the path by more than ``IMPROVEMENT_EPSILON``, so every accepted move
    strictly decreases the length and the loop terminates.

    Returns:
        The improved route and the number of reversals applied.
    """
    best = list(route)
    n = len(best)
    moves = 0
    improved = True
    while improved:
        improved = False
        for i in range(1, n - 1):
            for k in range(i + 1, n):
                if reversal_gain(best, matrix, i, k) > IMPROVEMENT_EPSILON:
                    best[i : k + 1] = reversed(best[i : k + 1])
                    moves += 1
                    improved = True
    return best, moves


def optimized_tour_order(points: Sequence[Point]) -> list[int]:
    """Visiting order over ``points`` starting at index 0.

    Args:
        points: ``(latitude, longitude)`` pairs.

    Returns:
        A permutation of ``range(len(points))``.
    """
    if len(points) < 3:
        return list(range(len(points)))
    matrix = distance_matrix(points)
    route, _ = two_opt(nearest_neighbour_tour(matrix), matrix)
    return route
