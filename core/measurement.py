"""
Physical measurements on calibrated rasters.

Points are normalized raster coordinates. Each function scales them by the
raster size in pixels and then by ``units_per_px``, the physical length of
one pixel obtained from a calibration segment.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from ..models.frame import CalibrationData
from ..models.types import Point2D
from . import geometry


def units_per_pixel(
    calibration: CalibrationData | None,
    image_width: int,
    image_height: int,
) -> float:
    """
    Physical units per pixel from a reference segment.

    Returns:
        Units per pixel, 0.0 when there is no calibration, the raster has
        no width, or the reference segment has zero length
    """
    if calibration is None:
        return 0.0
    return calibration.units_per_pixel(image_width, image_height)


def _to_pixels(p: Point2D, image_width: int, image_height: int) -> Point2D:
    return (p[0] * image_width, p[1] * image_height)


def physical_distance(
    p1: Point2D,
    p2: Point2D,
    image_width: int,
    image_height: int,
    units_per_px: float,
) -> float:
    """Distance between two normalized points in physical units."""
    dx = (p1[0] - p2[0]) * image_width
    dy = (p1[1] - p2[1]) * image_height
    return math.hypot(dx, dy) * units_per_px


def perpendicular_point(
    p: Point2D,
    l1: Point2D,
    l2: Point2D,
    image_width: int,
    image_height: int,
) -> Point2D:
    """
    Foot of the perpendicular from p onto the line through l1 and l2.

    The projection happens in pixel space so non-square rasters keep right
    angles. A degenerate line returns l1.

    Returns:
        The foot point, normalized
    """
    if image_width == 0 or image_height == 0:
        return l1
    px = _to_pixels(p, image_width, image_height)
    a = _to_pixels(l1, image_width, image_height)
    b = _to_pixels(l2, image_width, image_height)
    foot = geometry.perpendicular_foot(px, a, b)
    if foot is a:
        return l1
    return (foot[0] / image_width, foot[1] / image_height)


def polygon_area(
    points: Sequence[Point2D],
    image_width: int,
    image_height: int,
    units_per_px: float,
) -> float:
    """Area enclosed by normalized points, in square physical units."""
    pixels = [_to_pixels(p, image_width, image_height) for p in points]
    return geometry.polygon_area(pixels) * units_per_px * units_per_px


def polyline_length(
    points: Sequence[Point2D],
    image_width: int,
    image_height: int,
    units_per_px: float,
) -> float:
    """Length of an open path through normalized points, in physical units."""
    pixels = [_to_pixels(p, image_width, image_height) for p in points]
    return geometry.polyline_length(pixels) * units_per_px
