"""Tolerance constants for geometric calculations.

Centralizes all tolerance values used throughout the codebase for
consistency and easy tuning.
"""

# Zero vector detection threshold
# Distances and lengths below this are treated as zero
ZERO_MAGNITUDE: float = 1e-10

# Arc sweep comparison tolerance (radians, ~1.15 degrees)
# Independent of the user geometry tolerance
ARC_SWEEP_RAD: float = 0.02

# Positional tolerance as a fraction of the seed's larger extent (2%)
# Scaled further by MatchSettings.position_fuzziness
POSITION_RATIO: float = 0.02

# Smallest seed extent used when deriving the positional tolerance
# Keeps single-point seeds from collapsing the tolerance to zero
MIN_SEED_EXTENT: float = 1.0

# Spatial grid cell size as a multiple of the positional tolerance,
# with an absolute floor in CAD units
GRID_CELL_FACTOR: float = 20.0
GRID_CELL_MIN: float = 100.0

# Reference partner search: accepted distance band and extra search
# radius, both as multiples of the positional tolerance
REFERENCE_BAND_FACTOR: float = 4.0
REFERENCE_SEARCH_PAD_FACTOR: float = 5.0

# Rounding step for quick size grouping keys (drawing units)
SIZE_GROUP_STEP: float = 0.1

# Padding around DXF drawing extents (5% of the larger side),
# with a fallback for degenerate drawings
EXTENTS_PADDING_RATIO: float = 0.05
EXTENTS_PADDING_FALLBACK: float = 10.0
