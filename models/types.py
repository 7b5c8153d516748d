"""Shared type aliases for geometry and entity classification."""

from __future__ import annotations

from typing import Literal, TypeAlias

# 2D point or vector (x, y)
Point2D: TypeAlias = tuple[float, float]

# Primitive kinds produced by the entity extractor
EntityKind: TypeAlias = Literal['CIRCLE', 'ARC', 'LINE', 'POLYLINE', 'UNKNOWN']

ENTITY_KINDS: tuple[EntityKind, ...] = ('CIRCLE', 'ARC', 'LINE', 'POLYLINE', 'UNKNOWN')

# Entity kinds whose geometry is defined by a center and radius
CIRCULAR_KINDS: frozenset[str] = frozenset({'CIRCLE', 'ARC'})

# Group flags that can be toggled from the UI
ComponentFlag: TypeAlias = Literal['is_visible', 'is_weld', 'is_mark']
