"""Pattern matching tuning parameters."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypedDict

from .. import config


class MatchSettingsDict(TypedDict):
    """Type definition for MatchSettings serialization."""

    geometry_tolerance: float
    position_fuzziness: float
    angle_tolerance: float
    min_match_distance: float


def validate_match_settings(
    geometry_tolerance: float | None = None,
    position_fuzziness: float | None = None,
    angle_tolerance: float | None = None,
    min_match_distance: float | None = None,
) -> None:
    """Validate match setting values.

    Args:
        geometry_tolerance: Radius/length tolerance (must be positive if provided)
        position_fuzziness: Positional tolerance multiplier (must be positive if provided)
        angle_tolerance: Hypothesis separation in degrees (must be non-negative if provided)
        min_match_distance: Minimum centroid spacing (must be non-negative if provided)

    Raises:
        ValueError: If any value violates its constraint
    """
    if geometry_tolerance is not None and geometry_tolerance <= 0:
        raise ValueError(f"geometry_tolerance must be positive, got {geometry_tolerance}")
    if position_fuzziness is not None and position_fuzziness <= 0:
        raise ValueError(f"position_fuzziness must be positive, got {position_fuzziness}")
    if angle_tolerance is not None and angle_tolerance < 0:
        raise ValueError(f"angle_tolerance cannot be negative, got {angle_tolerance}")
    if min_match_distance is not None and min_match_distance < 0:
        raise ValueError(f"min_match_distance cannot be negative, got {min_match_distance}")


@dataclass(frozen=True, slots=True)
class MatchSettings:
    """
    Tuning record for one matching run.

    Attributes:
        geometry_tolerance: Absolute difference allowed when comparing
            diameters and lengths
        position_fuzziness: Multiplier applied to the dynamic positional
            tolerance derived from the seed size
        angle_tolerance: Degrees; rotation hypotheses for the same anchor
            that lie closer than this to an earlier hypothesis are skipped.
            0 tries every hypothesis.
        min_match_distance: Minimum centroid spacing between accepted
            matches and the seed. 0 disables the check.
    """

    geometry_tolerance: float = config.DEFAULT_GEOMETRY_TOLERANCE
    position_fuzziness: float = config.DEFAULT_POSITION_FUZZINESS
    angle_tolerance: float = config.DEFAULT_ANGLE_TOLERANCE_DEG
    min_match_distance: float = config.DEFAULT_MIN_MATCH_DISTANCE

    def __post_init__(self) -> None:
        validate_match_settings(
            geometry_tolerance=self.geometry_tolerance,
            position_fuzziness=self.position_fuzziness,
            angle_tolerance=self.angle_tolerance,
            min_match_distance=self.min_match_distance,
        )

    @property
    def is_default(self) -> bool:
        """True when every parameter is at its baseline value."""
        return self == MatchSettings()

    def to_dict(self) -> MatchSettingsDict:
        """Convert to dictionary for JSON serialization."""
        return MatchSettingsDict(
            geometry_tolerance=self.geometry_tolerance,
            position_fuzziness=self.position_fuzziness,
            angle_tolerance=self.angle_tolerance,
            min_match_distance=self.min_match_distance,
        )

    @classmethod
    def from_dict(cls, data: MatchSettingsDict) -> MatchSettings:
        """Create MatchSettings from dictionary.

        Missing keys fall back to defaults. Out-of-range values are clamped
        to handle legacy data saved before validation was added.
        """
        return cls(
            geometry_tolerance=max(0.001, data.get('geometry_tolerance', config.DEFAULT_GEOMETRY_TOLERANCE)),
            position_fuzziness=max(0.001, data.get('position_fuzziness', config.DEFAULT_POSITION_FUZZINESS)),
            angle_tolerance=max(0.0, data.get('angle_tolerance', config.DEFAULT_ANGLE_TOLERANCE_DEG)),
            min_match_distance=max(0.0, data.get('min_match_distance', config.DEFAULT_MIN_MATCH_DISTANCE)),
        )
