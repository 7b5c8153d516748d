"""Data models for entities, components, settings and coordinate frames."""

from .types import (
    Point2D,
    EntityKind,
    ENTITY_KINDS,
    CIRCULAR_KINDS,
    ComponentFlag,
)
from .entity import Bounds, BoundsDict, Entity, EntityDict
from .component import (
    Component,
    ComponentDict,
    MatchResult,
    normalize_degrees,
    normalize_radians,
)
from .settings import MatchSettings, MatchSettingsDict, validate_match_settings
from .frame import (
    CalibrationData,
    CalibrationScale,
    CoordinateFrame,
    DxfExtents,
    DxfExtentsDict,
)
from .units import UNIT_TO_MM, convert_length

__all__ = [
    # Types
    'Point2D',
    'EntityKind',
    'ENTITY_KINDS',
    'CIRCULAR_KINDS',
    'ComponentFlag',
    # Entities
    'Bounds',
    'BoundsDict',
    'Entity',
    'EntityDict',
    # Components
    'Component',
    'ComponentDict',
    'MatchResult',
    'normalize_degrees',
    'normalize_radians',
    # Settings
    'MatchSettings',
    'MatchSettingsDict',
    'validate_match_settings',
    # Coordinate frames
    'CalibrationData',
    'CalibrationScale',
    'CoordinateFrame',
    'DxfExtents',
    'DxfExtentsDict',
    # Units
    'UNIT_TO_MM',
    'convert_length',
]
