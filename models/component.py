"""Component (group) and match result models."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TypedDict

from .entity import Bounds, BoundsDict
from .types import Point2D


class ComponentDict(TypedDict, total=False):
    """Type definition for Component serialization."""

    id: str
    name: str
    is_visible: bool
    is_weld: bool
    is_mark: bool
    color: str
    entity_ids: list[str]
    child_group_ids: list[str]
    seed_size: int
    centroid: list[float] | None
    bounds: BoundsDict | None
    parent_group_id: str | None
    rotation: float
    rotation_deg: float
    sequence: int | None


def normalize_radians(angle: float) -> float:
    """Wrap an angle into [0, 2*pi)."""
    full_turn = 2 * math.pi
    wrapped = angle % full_turn
    # Tiny negative inputs can round up to exactly one full turn
    return 0.0 if wrapped >= full_turn else wrapped


def normalize_degrees(angle: float) -> float:
    """Wrap an angle into [0, 360)."""
    wrapped = angle % 360.0
    return 0.0 if wrapped >= 360.0 else wrapped


def _sequence_from(value: object) -> int | None:
    # Legacy snapshots store 0 or omit the key for "no sequence"
    if value is None or isinstance(value, bool):
        return None
    seq = int(value)
    return seq if seq > 0 else None


@dataclass(slots=True)
class Component:
    """
    A named, mutable collection of entities and nested sub-groups.

    A component without ``parent_group_id`` is a seed (top-level); one with
    it set is a match derived from that seed by the matching engine.
    ``centroid`` and ``bounds`` describe the tight union of every entity the
    component owns recursively and are kept current by the component store.

    Attributes:
        id: Unique identifier
        name: Display name
        is_visible: Display flag
        is_weld: Marks the group as a weld location
        is_mark: Marks the group as a mark location
        color: Display color
        entity_ids: Direct member entity ids
        child_group_ids: Nested sub-group ids
        seed_size: Number of entities in the seed pattern
        centroid: Center of ``bounds``, None when the group is empty
        bounds: Tight bounds of all owned entities, None when empty
        parent_group_id: Seed id for matches, None for seeds
        rotation: Rotation relative to the seed, radians in [0, 2*pi)
        rotation_deg: Same rotation in degrees, [0, 360)
        sequence: Welding order (1-based), None when unassigned
    """

    id: str
    name: str
    entity_ids: set[str] = field(default_factory=set)
    child_group_ids: list[str] = field(default_factory=list)
    is_visible: bool = True
    is_weld: bool = False
    is_mark: bool = False
    color: str = ''
    seed_size: int = 0
    centroid: Point2D | None = None
    bounds: Bounds | None = None
    parent_group_id: str | None = None
    rotation: float = 0.0
    rotation_deg: float = 0.0
    sequence: int | None = None

    def __post_init__(self) -> None:
        self.rotation = normalize_radians(self.rotation)
        self.rotation_deg = normalize_degrees(self.rotation_deg)

    def __repr__(self) -> str:
        kind = 'match' if self.is_match else 'seed'
        return f"Component({self.name!r}, {kind}, entities={len(self.entity_ids)})"

    @property
    def is_match(self) -> bool:
        return self.parent_group_id is not None

    @property
    def is_seed(self) -> bool:
        return self.parent_group_id is None

    def to_dict(self) -> ComponentDict:
        """Convert to dictionary for JSON serialization."""
        return ComponentDict(
            id=self.id,
            name=self.name,
            is_visible=self.is_visible,
            is_weld=self.is_weld,
            is_mark=self.is_mark,
            color=self.color,
            entity_ids=sorted(self.entity_ids),
            child_group_ids=list(self.child_group_ids),
            seed_size=self.seed_size,
            centroid=list(self.centroid) if self.centroid is not None else None,
            bounds=self.bounds.to_dict() if self.bounds is not None else None,
            parent_group_id=self.parent_group_id,
            rotation=self.rotation,
            rotation_deg=self.rotation_deg,
            sequence=self.sequence,
        )

    @classmethod
    def from_dict(cls, data: ComponentDict) -> Component:
        """Create Component from dictionary."""
        centroid = data.get('centroid')
        bounds = data.get('bounds')
        return cls(
            id=data['id'],
            name=data['name'],
            entity_ids=set(data.get('entity_ids', [])),
            child_group_ids=list(data.get('child_group_ids', [])),
            is_visible=data.get('is_visible', True),
            is_weld=data.get('is_weld', False),
            is_mark=data.get('is_mark', False),
            color=data.get('color', ''),
            seed_size=data.get('seed_size', 0),
            centroid=(float(centroid[0]), float(centroid[1])) if centroid else None,
            bounds=Bounds.from_dict(bounds) if bounds else None,
            parent_group_id=data.get('parent_group_id'),
            rotation=data.get('rotation', 0.0),
            rotation_deg=data.get('rotation_deg', 0.0),
            sequence=_sequence_from(data.get('sequence')),
        )


@dataclass(frozen=True, slots=True)
class MatchResult:
    """One cluster found by the matching engine.

    ``entity_ids`` lists the anchor first, followed by the other members in
    seed order. ``centroid`` and ``bounds`` come from the found entities,
    never from the seed.
    """

    id: str
    name: str
    entity_ids: tuple[str, ...]
    centroid: Point2D
    bounds: Bounds
    rotation: float
    rotation_deg: float

    def __repr__(self) -> str:
        return (f"MatchResult({self.name!r}, entities={len(self.entity_ids)}, "
                f"rot={self.rotation_deg:.1f})")
