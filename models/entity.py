"""CAD primitive and bounding box models."""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TypedDict

from .types import CIRCULAR_KINDS, ENTITY_KINDS, EntityKind, Point2D


class BoundsDict(TypedDict):
    """Type definition for Bounds serialization."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float


class EntityDict(TypedDict, total=False):
    """Type definition for Entity serialization."""

    id: str
    kind: str
    bounds: BoundsDict
    layer: str
    center: list[float] | None
    radius: float | None
    start_angle: float | None
    end_angle: float | None
    vertices: list[list[float]]
    closed: bool


@dataclass(frozen=True, slots=True)
class Bounds:
    """Axis-aligned bounding box in absolute CAD units."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Point2D:
        return ((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)

    @property
    def diagonal(self) -> float:
        return math.hypot(self.width, self.height)

    def union(self, other: Bounds) -> Bounds:
        """Return the smallest box containing both boxes."""
        return Bounds(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )

    def contains(self, point: Point2D) -> bool:
        """Check if a point lies inside or on the edge of the box."""
        return (self.min_x <= point[0] <= self.max_x
                and self.min_y <= point[1] <= self.max_y)

    @classmethod
    def from_points(cls, points: Iterable[Point2D]) -> Bounds:
        """Build the tight box around a non-empty set of points.

        Raises:
            ValueError: If no points are given
        """
        pts = list(points)
        if not pts:
            raise ValueError("Cannot build bounds from an empty point set")
        xs = [p[0] for p in pts]
        ys = [p[1] for p in pts]
        return cls(min(xs), min(ys), max(xs), max(ys))

    @classmethod
    def union_all(cls, boxes: Iterable[Bounds]) -> Bounds | None:
        """Union of all boxes, or None if there are none."""
        result: Bounds | None = None
        for box in boxes:
            result = box if result is None else result.union(box)
        return result

    def to_dict(self) -> BoundsDict:
        return BoundsDict(
            min_x=self.min_x, min_y=self.min_y,
            max_x=self.max_x, max_y=self.max_y,
        )

    @classmethod
    def from_dict(cls, data: BoundsDict) -> Bounds:
        return cls(
            float(data['min_x']), float(data['min_y']),
            float(data['max_x']), float(data['max_y']),
        )


@dataclass(frozen=True, slots=True)
class Entity:
    """
    Immutable geometric primitive extracted from CAD data.

    Geometry is fixed at import time; only group membership (held by
    components) ever changes.

    Attributes:
        id: Unique identifier within the drawing
        kind: Primitive kind (CIRCLE, ARC, LINE, POLYLINE or UNKNOWN)
        bounds: Axis-aligned bounds in absolute CAD units
        layer: Source layer name
        center: Circle/arc center
        radius: Circle/arc radius
        start_angle: Arc start angle in radians
        end_angle: Arc end angle in radians
        vertices: Ordered vertex list for lines and polylines
        closed: True for closed polylines
    """

    id: str
    kind: EntityKind
    bounds: Bounds
    layer: str = '0'
    center: Point2D | None = None
    radius: float | None = None
    start_angle: float | None = None
    end_angle: float | None = None
    vertices: tuple[Point2D, ...] = field(default_factory=tuple)
    closed: bool = False

    def __post_init__(self) -> None:
        if self.kind not in ENTITY_KINDS:
            raise ValueError(f"Unknown entity kind: {self.kind!r}")
        if self.radius is not None and self.radius < 0:
            raise ValueError(f"radius cannot be negative, got {self.radius}")

    def __repr__(self) -> str:
        return f"Entity({self.kind} {self.id!r})"

    @property
    def is_circular(self) -> bool:
        return self.kind in CIRCULAR_KINDS

    def center_point(self) -> Point2D:
        """Geometric center used for positioning and spatial hashing.

        Circles and arcs use their true center; everything else uses the
        center of its bounding box.
        """
        if self.center is not None:
            return self.center
        return self.bounds.center

    def to_dict(self) -> EntityDict:
        """Convert to dictionary for JSON serialization."""
        return EntityDict(
            id=self.id,
            kind=self.kind,
            bounds=self.bounds.to_dict(),
            layer=self.layer,
            center=list(self.center) if self.center is not None else None,
            radius=self.radius,
            start_angle=self.start_angle,
            end_angle=self.end_angle,
            vertices=[list(v) for v in self.vertices],
            closed=self.closed,
        )

    @classmethod
    def from_dict(cls, data: EntityDict) -> Entity:
        """Create Entity from dictionary."""
        center = data.get('center')
        return cls(
            id=data['id'],
            kind=data['kind'],  # type: ignore[arg-type]
            bounds=Bounds.from_dict(data['bounds']),
            layer=data.get('layer', '0'),
            center=(float(center[0]), float(center[1])) if center else None,
            radius=data.get('radius'),
            start_angle=data.get('start_angle'),
            end_angle=data.get('end_angle'),
            vertices=tuple((float(v[0]), float(v[1])) for v in data.get('vertices', [])),
            closed=data.get('closed', False),
        )
