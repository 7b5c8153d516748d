"""
Shared test helpers for DxfMatch tests.

Entity factories and a pattern placer that copies a seed pattern to a new
position and orientation, so matching tests can build drawings with known
answers.
"""
from __future__ import annotations

import math
from collections.abc import Sequence

from models.component import Component
from models.entity import Bounds, Entity

Point = tuple[float, float]


def make_circle(entity_id: str, center: Point, radius: float, layer: str = '0') -> Entity:
    cx, cy = center
    return Entity(
        id=entity_id,
        kind='CIRCLE',
        bounds=Bounds(cx - radius, cy - radius, cx + radius, cy + radius),
        layer=layer,
        center=(cx, cy),
        radius=radius,
    )


def make_arc(entity_id: str, center: Point, radius: float,
             start_angle: float, end_angle: float) -> Entity:
    """Arc with angles in radians; bounds are the full circle box."""
    cx, cy = center
    return Entity(
        id=entity_id,
        kind='ARC',
        bounds=Bounds(cx - radius, cy - radius, cx + radius, cy + radius),
        center=(cx, cy),
        radius=radius,
        start_angle=start_angle,
        end_angle=end_angle,
    )


def make_line(entity_id: str, start: Point, end: Point) -> Entity:
    return Entity(
        id=entity_id,
        kind='LINE',
        bounds=Bounds.from_points([start, end]),
        vertices=(start, end),
    )


def make_polyline(entity_id: str, vertices: Sequence[Point], closed: bool = False) -> Entity:
    return Entity(
        id=entity_id,
        kind='POLYLINE',
        bounds=Bounds.from_points(vertices),
        vertices=tuple(vertices),
        closed=closed,
    )


def _move(p: Point, theta: float, translation: Point) -> Point:
    c, s = math.cos(theta), math.sin(theta)
    return (p[0] * c - p[1] * s + translation[0], p[0] * s + p[1] * c + translation[1])


def place_entity(entity: Entity, rotation_deg: float, translation: Point, new_id: str) -> Entity:
    """Copy an entity rotated about the origin, then translated."""
    theta = math.radians(rotation_deg)
    if entity.kind == 'CIRCLE':
        return make_circle(new_id, _move(entity.center, theta, translation), entity.radius)
    if entity.kind == 'ARC':
        return make_arc(
            new_id,
            _move(entity.center, theta, translation),
            entity.radius,
            entity.start_angle + theta,
            entity.end_angle + theta,
        )
    moved = [_move(v, theta, translation) for v in entity.vertices]
    if entity.kind == 'LINE':
        return make_line(new_id, moved[0], moved[1])
    return make_polyline(new_id, moved, entity.closed)


def place_pattern(pattern: Sequence[Entity], rotation_deg: float,
                  translation: Point, prefix: str) -> list[Entity]:
    """
    Copy a pattern defined around the origin.

    Copied entity ids are ``"{prefix}-{seed entity id}"``.
    """
    return [
        place_entity(e, rotation_deg, translation, f"{prefix}-{e.id}")
        for e in pattern
    ]


def make_seed_component(entities: Sequence[Entity], name: str = 'Seed',
                        component_id: str = 'seed') -> Component:
    """Seed component with bounds and centroid computed from its entities."""
    bounds = Bounds.union_all(e.bounds for e in entities)
    return Component(
        id=component_id,
        name=name,
        entity_ids={e.id for e in entities},
        seed_size=len(entities),
        bounds=bounds,
        centroid=bounds.center if bounds is not None else None,
    )


def two_circle_seed() -> list[Entity]:
    """Seed of a r5 circle at the origin and a r3 circle 20 units along +X."""
    return [
        make_circle('big', (0.0, 0.0), 5.0),
        make_circle('small', (20.0, 0.0), 3.0),
    ]
