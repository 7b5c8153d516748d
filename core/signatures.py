"""Rotation and translation invariant entity signatures.

A signature reduces an entity to the scalar properties that survive a
rigid motion, so that two entities can be compared without knowing where
or at what angle either one sits in the drawing.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from ..models.entity import Entity
from .geometry import arc_sweep, distance_between_points, polyline_length
from .tolerances import ARC_SWEEP_RAD, SIZE_GROUP_STEP


@dataclass(frozen=True, slots=True)
class EntitySignature:
    """Comparable descriptor of one entity.

    Attributes:
        kind: Entity kind
        size: Diameter for circles/arcs, length for lines, path length
            for polylines, bounds diagonal otherwise
        measure: Value compared against the geometry tolerance: radius
            for circles/arcs, otherwise the same as size
        sweep: Arc sweep angle in radians (arcs only)
        vertex_count: Number of vertices (polylines only)
    """

    kind: str
    size: float
    measure: float
    sweep: float | None = None
    vertex_count: int | None = None


def characteristic_size(entity: Entity) -> float:
    """
    Size used to rank entities and compare them.

    Larger features carry proportionally less measurement error, which is
    why the matching engine anchors on the entity with the largest size.
    """
    if entity.is_circular and entity.radius is not None:
        return entity.radius * 2
    if entity.kind == 'LINE' and len(entity.vertices) >= 2:
        return distance_between_points(entity.vertices[0], entity.vertices[-1])
    if entity.kind == 'POLYLINE' and len(entity.vertices) >= 2:
        return polyline_length(entity.vertices, entity.closed)
    return entity.bounds.diagonal


def signature_of(entity: Entity) -> EntitySignature:
    """Build the signature of an entity."""
    sweep = None
    vertex_count = None
    if (entity.kind == 'ARC'
            and entity.start_angle is not None and entity.end_angle is not None):
        sweep = arc_sweep(entity.start_angle, entity.end_angle)
    if entity.kind == 'POLYLINE':
        vertex_count = len(entity.vertices)
    size = characteristic_size(entity)
    measure = size / 2 if entity.is_circular and entity.radius is not None else size
    return EntitySignature(
        kind=entity.kind,
        size=size,
        measure=measure,
        sweep=sweep,
        vertex_count=vertex_count,
    )


def signatures_match(a: EntitySignature, b: EntitySignature, geometry_tolerance: float) -> bool:
    """
    Check whether two signatures describe equivalent geometry.

    Args:
        a: First signature
        b: Second signature
        geometry_tolerance: Allowed absolute difference of the measures
            (radius for circles and arcs), exclusive

    Returns:
        True if kinds agree and every scalar differs by less than its
        tolerance. Arc sweeps use the fixed ARC_SWEEP_RAD tolerance.
    """
    if a.kind != b.kind:
        return False
    if abs(a.measure - b.measure) >= geometry_tolerance:
        return False
    if a.kind == 'ARC':
        if a.sweep is None or b.sweep is None:
            return a.sweep is b.sweep
        return abs(a.sweep - b.sweep) < ARC_SWEEP_RAD
    if a.kind == 'POLYLINE':
        return a.vertex_count == b.vertex_count
    return True


def entities_match(a: Entity, b: Entity, geometry_tolerance: float) -> bool:
    """Convenience wrapper comparing two entities directly."""
    return signatures_match(signature_of(a), signature_of(b), geometry_tolerance)


def size_group_key(entity: Entity, step: float = SIZE_GROUP_STEP) -> tuple[str, str]:
    """
    Coarse grouping key and display label for quick grouping.

    Circles group by diameter and lines by length, both rounded to
    ``step``. Polylines group by vertex count. Other kinds group by kind.

    Returns:
        Tuple of (key, label)
    """
    if entity.kind == 'CIRCLE' and entity.radius is not None:
        diameter = entity.radius * 2
        return f"CIRCLE_{round(diameter / step) * step:.2f}", f"Circle Ø{diameter:.2f}"
    if entity.kind == 'LINE':
        length = characteristic_size(entity)
        return f"LINE_{round(length / step) * step:.2f}", f"Line L{length:.2f}"
    if entity.kind == 'POLYLINE':
        count = len(entity.vertices)
        return f"POLYLINE_{count}", f"Polyline {count}V"
    return entity.kind, entity.kind


@dataclass(slots=True)
class SizeGroup:
    """Entities that share a quick grouping key."""

    key: str
    label: str
    entity_ids: list[str]

    @property
    def count(self) -> int:
        return len(self.entity_ids)


def group_by_size(entities: Iterable[Entity], step: float = SIZE_GROUP_STEP) -> list[SizeGroup]:
    """
    Bucket entities by their quick grouping key.

    Returns:
        Groups sorted by label, each listing entity ids in input order
    """
    groups: dict[str, SizeGroup] = {}
    for entity in entities:
        key, label = size_group_key(entity, step)
        group = groups.get(key)
        if group is None:
            group = groups[key] = SizeGroup(key=key, label=label, entity_ids=[])
        group.entity_ids.append(entity.id)
    return sorted(groups.values(), key=lambda g: g.label)
