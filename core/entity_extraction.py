"""
Entity extraction from ezdxf documents.

Converts parsed DXF graphic entities into canonical ``Entity`` records in
absolute CAD units and derives the drawing extents used by the coordinate
transformer. Block references are resolved through ezdxf's virtual
entities, so their transforms are already applied to the geometry returned
here.
"""

from __future__ import annotations

import logging
import math
import uuid
from collections.abc import Callable, Iterable
from typing import Any

import ezdxf

from ..lib.logUtils import handle_error, log
from ..models.entity import Bounds, Entity
from ..models.frame import DxfExtents
from ..models.types import Point2D
from .tolerances import EXTENTS_PADDING_FALLBACK, EXTENTS_PADDING_RATIO

SUPPORTED_DXF_TYPES = frozenset({'LINE', 'CIRCLE', 'ARC', 'LWPOLYLINE', 'POLYLINE'})


def _generate_id() -> str:
    """Generate a unique ID."""
    return str(uuid.uuid4())[:8]


def _xy(vec: Any) -> Point2D:
    return (float(vec[0]), float(vec[1]))


def _layer_of(dxf_entity: Any) -> str:
    return dxf_entity.dxf.get('layer', '0') or '0'


def _polyline_points(dxf_entity: Any) -> tuple[list[Point2D], bool]:
    if dxf_entity.dxftype() == 'LWPOLYLINE':
        points = [_xy(p) for p in dxf_entity.get_points(format='xy')]
        return points, bool(dxf_entity.closed)
    points = [_xy(v.dxf.location) for v in dxf_entity.vertices]
    return points, bool(dxf_entity.is_closed)


def entity_from_dxf(dxf_entity: Any, entity_id: str) -> Entity | None:
    """
    Convert one ezdxf graphic entity.

    Args:
        dxf_entity: ezdxf entity (LINE, CIRCLE, ARC, LWPOLYLINE or POLYLINE)
        entity_id: Identifier assigned to the result

    Returns:
        The converted entity, or None for unsupported types and polylines
        without vertices
    """
    dxftype = dxf_entity.dxftype()
    layer = _layer_of(dxf_entity)

    if dxftype == 'LINE':
        start = _xy(dxf_entity.dxf.start)
        end = _xy(dxf_entity.dxf.end)
        return Entity(
            id=entity_id,
            kind='LINE',
            bounds=Bounds.from_points([start, end]),
            layer=layer,
            vertices=(start, end),
        )

    if dxftype in ('CIRCLE', 'ARC'):
        center = _xy(dxf_entity.dxf.center)
        radius = abs(float(dxf_entity.dxf.radius))
        # Arcs use the full circle box
        bounds = Bounds(center[0] - radius, center[1] - radius,
                        center[0] + radius, center[1] + radius)
        if dxftype == 'CIRCLE':
            return Entity(id=entity_id, kind='CIRCLE', bounds=bounds, layer=layer,
                          center=center, radius=radius)
        return Entity(
            id=entity_id,
            kind='ARC',
            bounds=bounds,
            layer=layer,
            center=center,
            radius=radius,
            start_angle=math.radians(dxf_entity.dxf.start_angle),
            end_angle=math.radians(dxf_entity.dxf.end_angle),
        )

    if dxftype in ('LWPOLYLINE', 'POLYLINE'):
        points, closed = _polyline_points(dxf_entity)
        if not points:
            return None
        return Entity(
            id=entity_id,
            kind='POLYLINE',
            bounds=Bounds.from_points(points),
            layer=layer,
            vertices=tuple(points),
            closed=closed,
        )

    return None


def extract_entities(
    dxf_entities: Iterable[Any],
    explode_inserts: bool = True,
    id_factory: Callable[[], str] | None = None,
) -> list[Entity]:
    """
    Convert a sequence of ezdxf entities (e.g. a modelspace).

    Entities that fail to convert are logged and skipped; the rest of the
    drawing is still returned.

    Args:
        dxf_entities: ezdxf graphic entities
        explode_inserts: Expand INSERT entities into their block content
            (recursively, transforms applied)
        id_factory: Callable producing a fresh entity id

    Returns:
        Converted entities in drawing order
    """
    make_id = id_factory or _generate_id
    entities: list[Entity] = []
    skipped = 0

    def process(items: Iterable[Any]) -> None:
        nonlocal skipped
        for item in items:
            try:
                dxftype = item.dxftype()
                if dxftype == 'INSERT':
                    if explode_inserts:
                        process(item.virtual_entities())
                    continue
                if dxftype not in SUPPORTED_DXF_TYPES:
                    skipped += 1
                    continue
                entity = entity_from_dxf(item, make_id())
                if entity is None:
                    skipped += 1
                    continue
                entities.append(entity)
            except Exception:
                handle_error(f'extract_entities: {item!r}')
                skipped += 1

    process(dxf_entities)
    log(f"Extracted {len(entities)} entities ({skipped} skipped)", logging.DEBUG)
    return entities


def load_entities(path: str, explode_inserts: bool = True) -> list[Entity]:
    """
    Read a DXF file with ezdxf and extract its modelspace entities.

    Raises:
        IOError: If the file cannot be read
        ezdxf.DXFStructureError: If the file is not a valid DXF document
    """
    doc = ezdxf.readfile(path)
    return extract_entities(doc.modelspace(), explode_inserts=explode_inserts)


def drawing_extents(entities: Iterable[Entity]) -> DxfExtents | None:
    """
    Derive the drawing extents metadata from extracted entities.

    Padding is 5% of the larger drawing side, or 10 units when the drawing
    has no extent (for example a single point-like entity).

    Returns:
        Extents, or None when there are no entities
    """
    bounds = Bounds.union_all(e.bounds for e in entities)
    if bounds is None:
        return None
    padding = max(bounds.width, bounds.height) * EXTENTS_PADDING_RATIO
    if padding <= 0:
        padding = EXTENTS_PADDING_FALLBACK
    return DxfExtents(
        min_x=bounds.min_x,
        max_x=bounds.max_x,
        max_y=bounds.max_y,
        padding=padding,
        total_w=bounds.width + padding * 2,
        total_h=bounds.height + padding * 2,
        default_center=bounds.center,
    )
