"""Coordinate frame snapshot models.

A ``CoordinateFrame`` bundles everything needed to move between the
normalized raster frame, absolute CAD units and origin-relative logic
coordinates. It is immutable: changing the origin or the raster size
produces a new snapshot, and logic coordinates computed against the old
one must be derived again.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import TypedDict

from .types import Point2D


class DxfExtentsDict(TypedDict):
    """Type definition for DxfExtents serialization."""

    min_x: float
    max_x: float
    max_y: float
    padding: float
    total_w: float
    total_h: float
    default_center: list[float]


@dataclass(frozen=True, slots=True)
class DxfExtents:
    """
    Bounding metadata of a DXF drawing as rendered to the raster.

    Attributes:
        min_x: Smallest entity x in the drawing
        max_x: Largest entity x in the drawing
        max_y: Largest entity y in the drawing
        padding: Margin added around the drawing on every side
        total_w: Drawing width including padding on both sides
        total_h: Drawing height including padding on both sides
        default_center: Center of the unpadded drawing, the default origin
    """

    min_x: float
    max_x: float
    max_y: float
    padding: float
    total_w: float
    total_h: float
    default_center: Point2D

    def __post_init__(self) -> None:
        if self.total_w <= 0 or self.total_h <= 0:
            raise ValueError(
                f"Drawing extents must be positive, got {self.total_w} x {self.total_h}"
            )

    @property
    def left(self) -> float:
        """Absolute x of the normalized x = 0 edge."""
        return self.min_x - self.padding

    @property
    def top(self) -> float:
        """Absolute y of the normalized y = 0 edge."""
        return self.max_y + self.padding

    def to_dict(self) -> DxfExtentsDict:
        return DxfExtentsDict(
            min_x=self.min_x,
            max_x=self.max_x,
            max_y=self.max_y,
            padding=self.padding,
            total_w=self.total_w,
            total_h=self.total_h,
            default_center=list(self.default_center),
        )

    @classmethod
    def from_dict(cls, data: DxfExtentsDict) -> DxfExtents:
        center = data['default_center']
        return cls(
            min_x=data['min_x'],
            max_x=data['max_x'],
            max_y=data['max_y'],
            padding=data['padding'],
            total_w=data['total_w'],
            total_h=data['total_h'],
            default_center=(float(center[0]), float(center[1])),
        )


@dataclass(frozen=True, slots=True)
class CalibrationData:
    """A user-drawn reference segment of known physical length.

    ``start`` and ``end`` are normalized raster points.
    """

    start: Point2D
    end: Point2D
    real_world_distance: float
    unit: str = 'mm'

    def units_per_pixel(self, image_width: int, image_height: int) -> float:
        """Physical units per raster pixel, 0.0 when undefined."""
        if image_width == 0:
            return 0.0
        dx = (self.start[0] - self.end[0]) * image_width
        dy = (self.start[1] - self.end[1]) * image_height
        dist_px = math.hypot(dx, dy)
        return self.real_world_distance / dist_px if dist_px > 0 else 0.0


@dataclass(frozen=True, slots=True)
class CalibrationScale:
    """Physical size of the whole raster derived from a calibration."""

    total_width_units: float
    total_height_units: float

    @classmethod
    def from_reference(
        cls,
        calibration: CalibrationData,
        image_width: int,
        image_height: int,
    ) -> CalibrationScale | None:
        """Derive the raster size in physical units.

        Returns:
            The scale, or None when the reference segment is degenerate
        """
        unit_per_px = calibration.units_per_pixel(image_width, image_height)
        if unit_per_px <= 0:
            return None
        return cls(
            total_width_units=image_width * unit_per_px,
            total_height_units=image_height * unit_per_px,
        )


@dataclass(frozen=True, slots=True)
class CoordinateFrame:
    """
    Immutable snapshot used by the coordinate transformer.

    Attributes:
        extents: DXF bounding metadata (DXF mode)
        calibration: Physical raster size (calibrated image mode)
        manual_origin: User-chosen origin in absolute CAD units
        image_size: Rendered raster size in pixels (width, height)
    """

    extents: DxfExtents | None = None
    calibration: CalibrationScale | None = None
    manual_origin: Point2D | None = None
    image_size: tuple[int, int] | None = None

    @property
    def is_dxf(self) -> bool:
        return self.extents is not None

    @property
    def is_measurable(self) -> bool:
        """False until either DXF metadata or a calibration is present."""
        return self.extents is not None or self.calibration is not None

    def with_origin(self, origin: Point2D | None) -> CoordinateFrame:
        """Return a new snapshot with a different manual origin."""
        return replace(self, manual_origin=origin)

    def with_image_size(self, width: int, height: int) -> CoordinateFrame:
        """Return a new snapshot for a different raster size."""
        return replace(self, image_size=(width, height))
