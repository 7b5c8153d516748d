"""Match report rows for display and export."""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TypedDict

from ..models.component import Component
from .transform import CoordinateTransformer

DEFAULT_PRECISION: int = 4


class MatchReportRowDict(TypedDict):
    """Type definition for MatchReportRow serialization."""

    id: str
    name: str
    type: str
    x: str
    y: str
    angle_deg: str
    angle_rad: str
    count: int
    is_weld: bool
    is_mark: bool


def format_coordinate(value: float, precision: int = DEFAULT_PRECISION) -> str:
    """
    Format a coordinate or angle with a fixed number of decimals.

    Args:
        value: Value to format
        precision: Number of decimal places

    Returns:
        Formatted string like "12.5000"
        Returns "ERROR" if value is NaN or infinity
    """
    # Guard against invalid float values
    if math.isnan(value) or math.isinf(value):
        return "ERROR"
    text = f"{value:.{precision}f}"
    # Avoid "-0.0000" for values that round to zero
    if text.startswith('-') and float(text) == 0:
        text = text[1:]
    return text


@dataclass(frozen=True, slots=True)
class MatchReportRow:
    """One component expressed in Logic coordinates.

    Attributes:
        id: Component id
        name: Component name
        type: 'seed' for top-level groups, 'match' for matches
        x: Centroid x in Logic coordinates (NaN when unavailable)
        y: Centroid y in Logic coordinates (NaN when unavailable)
        angle_deg: Rotation relative to the seed, degrees
        angle_rad: Rotation relative to the seed, radians
        count: Number of direct member entities
        is_weld: Weld flag
        is_mark: Mark flag
    """

    id: str
    name: str
    type: str
    x: float
    y: float
    angle_deg: float
    angle_rad: float
    count: int = 0
    is_weld: bool = False
    is_mark: bool = False

    def to_dict(self, precision: int = DEFAULT_PRECISION) -> MatchReportRowDict:
        """Convert to a dictionary of display strings."""
        return MatchReportRowDict(
            id=self.id,
            name=self.name,
            type=self.type,
            x=format_coordinate(self.x, precision),
            y=format_coordinate(self.y, precision),
            angle_deg=format_coordinate(self.angle_deg, precision),
            angle_rad=format_coordinate(self.angle_rad, precision),
            count=self.count,
            is_weld=self.is_weld,
            is_mark=self.is_mark,
        )


def build_match_report(
    components: Iterable[Component],
    transformer: CoordinateTransformer,
) -> list[MatchReportRow]:
    """
    Build report rows for a set of components.

    Centroids are absolute CAD points, so only the origin translation of
    the transformer is applied. Components without a centroid report NaN,
    which ``format_coordinate`` renders as "ERROR".

    Args:
        components: Components to report, in output order
        transformer: Transformer holding the current origin

    Returns:
        One row per component
    """
    rows: list[MatchReportRow] = []
    for comp in components:
        if comp.centroid is not None:
            x, y = transformer.absolute_to_logic(comp.centroid)
        else:
            x = y = math.nan
        rows.append(MatchReportRow(
            id=comp.id,
            name=comp.name,
            type='match' if comp.is_match else 'seed',
            x=x,
            y=y,
            angle_deg=comp.rotation_deg,
            angle_rad=comp.rotation,
            count=len(comp.entity_ids),
            is_weld=comp.is_weld,
            is_mark=comp.is_mark,
        ))
    return rows
