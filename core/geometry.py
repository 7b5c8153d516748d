"""2D vector math and geometry utilities."""

from __future__ import annotations

import math
from collections.abc import Sequence

from ..models.types import Point2D
from .tolerances import ZERO_MAGNITUDE

ZERO_MAGNITUDE_TOLERANCE: float = ZERO_MAGNITUDE


def distance_between_points(p1: Point2D, p2: Point2D) -> float:
    """
    Calculate the Euclidean distance between two 2D points.

    Args:
        p1: First point (x, y)
        p2: Second point (x, y)

    Returns:
        Distance between points
    """
    return math.hypot(p2[0] - p1[0], p2[1] - p1[1])


def points_are_close(p1: Point2D, p2: Point2D, tolerance: float) -> bool:
    """Check if two points are within (or exactly at) tolerance distance."""
    return distance_between_points(p1, p2) <= tolerance


def angle_of(origin: Point2D, target: Point2D) -> float:
    """
    Direction from origin to target in radians, measured from +X.

    Coincident points give 0.0 rather than an undefined direction.
    """
    dx = target[0] - origin[0]
    dy = target[1] - origin[1]
    if abs(dx) < ZERO_MAGNITUDE_TOLERANCE and abs(dy) < ZERO_MAGNITUDE_TOLERANCE:
        return 0.0
    return math.atan2(dy, dx)


def rotate_vector(v: Point2D, angle: float) -> Point2D:
    """
    Rotate a vector counter-clockwise about the origin.

    Args:
        v: Vector (x, y)
        angle: Rotation in radians

    Returns:
        Rotated vector
    """
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return (
        v[0] * cos_a - v[1] * sin_a,
        v[0] * sin_a + v[1] * cos_a,
    )


def polyline_length(vertices: Sequence[Point2D], closed: bool = False) -> float:
    """
    Total length of a vertex path.

    Args:
        vertices: Ordered vertices
        closed: Include the segment from the last vertex back to the first

    Returns:
        Sum of segment lengths (0.0 for fewer than two vertices)
    """
    if len(vertices) < 2:
        return 0.0
    total = sum(
        distance_between_points(vertices[i], vertices[i + 1])
        for i in range(len(vertices) - 1)
    )
    if closed:
        total += distance_between_points(vertices[-1], vertices[0])
    return total


def polygon_area(vertices: Sequence[Point2D]) -> float:
    """Absolute area of a simple polygon using the shoelace formula."""
    n = len(vertices)
    if n < 3:
        return 0.0
    twice_area = 0.0
    for i in range(n):
        x1, y1 = vertices[i]
        x2, y2 = vertices[(i + 1) % n]
        twice_area += x1 * y2 - x2 * y1
    return abs(twice_area) / 2


def perpendicular_foot(p: Point2D, a: Point2D, b: Point2D) -> Point2D:
    """
    Project a point onto the infinite line through a and b.

    A degenerate line (a == b) returns a.
    """
    dx = b[0] - a[0]
    dy = b[1] - a[1]
    len_sq = dx * dx + dy * dy
    if len_sq < ZERO_MAGNITUDE_TOLERANCE:
        return a
    t = ((p[0] - a[0]) * dx + (p[1] - a[1]) * dy) / len_sq
    return (a[0] + t * dx, a[1] + t * dy)


def arc_sweep(start_angle: float, end_angle: float) -> float:
    """Counter-clockwise sweep from start to end angle, in [0, 2*pi)."""
    sweep = end_angle - start_angle
    if sweep < 0:
        sweep += 2 * math.pi
    return sweep
