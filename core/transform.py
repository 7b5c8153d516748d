"""
Coordinate transforms between the three drawing frames.

Frames:
    Normalized: (x, y) in [0, 1], raster space, y grows downward
    Absolute CAD: drawing units, y grows upward, independent of any origin
    Logic: Absolute CAD minus the anchor (manual origin, else the drawing's
        default center, else (0, 0))

Every method is a pure function of the ``CoordinateFrame`` snapshot the
transformer was built with. Missing context (no DXF extents and no
calibration) gives None instead of raising.
"""

from __future__ import annotations

from ..models.entity import Bounds
from ..models.frame import CoordinateFrame
from ..models.types import Point2D


class CoordinateTransformer:
    """Converts points between Normalized, Absolute CAD and Logic frames."""

    def __init__(self, frame: CoordinateFrame) -> None:
        self.frame = frame

    def __repr__(self) -> str:
        mode = 'dxf' if self.frame.is_dxf else 'calibrated' if self.frame.calibration else 'none'
        return f"CoordinateTransformer(mode={mode}, anchor={self.anchor})"

    @property
    def anchor(self) -> Point2D:
        """Absolute CAD point that maps to Logic (0, 0)."""
        if self.frame.manual_origin is not None:
            return self.frame.manual_origin
        if self.frame.extents is not None:
            return self.frame.extents.default_center
        return (0.0, 0.0)

    @property
    def effective_height(self) -> float | None:
        """
        Drawing height spanned by the normalized y axis in DXF mode.

        The rendered raster's aspect ratio wins over the declared total
        height whenever the raster size is known, so the forward and
        inverse transforms stay exact inverses for one snapshot.
        """
        extents = self.frame.extents
        if extents is None:
            return None
        size = self.frame.image_size
        if size is not None and size[0] > 0 and size[1] > 0:
            return extents.total_w * (size[1] / size[0])
        return extents.total_h

    def to_absolute_cad(self, p: Point2D) -> Point2D | None:
        """
        Convert a normalized point to absolute CAD units.

        Args:
            p: Normalized point

        Returns:
            Absolute CAD point, or None when the frame is not measurable
        """
        extents = self.frame.extents
        if extents is not None:
            return (
                p[0] * extents.total_w + extents.left,
                extents.top - p[1] * self.effective_height,
            )
        scale = self.frame.calibration
        if scale is not None:
            return (p[0] * scale.total_width_units, p[1] * scale.total_height_units)
        return None

    def to_normalized_from_absolute(self, a: Point2D) -> Point2D | None:
        """Inverse of ``to_absolute_cad``."""
        extents = self.frame.extents
        if extents is not None:
            height = self.effective_height
            return (
                (a[0] - extents.left) / extents.total_w,
                (extents.top - a[1]) / height,
            )
        scale = self.frame.calibration
        if scale is not None and scale.total_width_units > 0 and scale.total_height_units > 0:
            return (a[0] / scale.total_width_units, a[1] / scale.total_height_units)
        return None

    def absolute_to_logic(self, a: Point2D) -> Point2D:
        """Translate an absolute CAD point into the anchor-relative frame."""
        ax, ay = self.anchor
        return (a[0] - ax, a[1] - ay)

    def logic_to_absolute(self, l: Point2D) -> Point2D:
        ax, ay = self.anchor
        return (l[0] + ax, l[1] + ay)

    def to_logic(self, p: Point2D) -> Point2D | None:
        """Normalized to Logic, None when the frame is not measurable."""
        absolute = self.to_absolute_cad(p)
        if absolute is None:
            return None
        return self.absolute_to_logic(absolute)

    def to_normalized(self, l: Point2D) -> Point2D | None:
        """Logic to Normalized, None when the frame is not measurable."""
        return self.to_normalized_from_absolute(self.logic_to_absolute(l))

    def region_to_absolute(self, p1: Point2D, p2: Point2D) -> Bounds | None:
        """
        Express a normalized selection rectangle as absolute CAD bounds.

        Args:
            p1: One corner of the selection, normalized
            p2: Opposite corner, normalized

        Returns:
            Bounds in absolute CAD units, or None when not measurable
        """
        a1 = self.to_absolute_cad(p1)
        a2 = self.to_absolute_cad(p2)
        if a1 is None or a2 is None:
            return None
        return Bounds.from_points([a1, a2])
