"""Core geometry, matching and coordinate utilities."""

from .geometry import (
    distance_between_points,
    points_are_close,
    angle_of,
    rotate_vector,
    polyline_length,
    polygon_area,
    perpendicular_foot,
    arc_sweep,
)
from .signatures import (
    EntitySignature,
    SizeGroup,
    characteristic_size,
    signature_of,
    signatures_match,
    entities_match,
    size_group_key,
    group_by_size,
)
from .spatial_index import (
    SpatialGrid,
    dynamic_tolerance,
    grid_cell_size,
)
from .matching import (
    CancellationToken,
    MatchSession,
    RotationHypothesis,
    find_matches,
)
from .transform import CoordinateTransformer
from . import measurement
from .measurement import (
    units_per_pixel,
    physical_distance,
    perpendicular_point,
    polygon_area as measured_polygon_area,
    polyline_length as measured_polyline_length,
)
from .reporting import (
    MatchReportRow,
    build_match_report,
    format_coordinate,
)
from .entity_extraction import (
    entity_from_dxf,
    extract_entities,
    load_entities,
    drawing_extents,
)
from .tolerances import (
    ZERO_MAGNITUDE,
    ARC_SWEEP_RAD,
    POSITION_RATIO,
    GRID_CELL_FACTOR,
    GRID_CELL_MIN,
    SIZE_GROUP_STEP,
)

__all__ = [
    # Geometry
    'distance_between_points',
    'points_are_close',
    'angle_of',
    'rotate_vector',
    'polyline_length',
    'polygon_area',
    'perpendicular_foot',
    'arc_sweep',
    # Signatures
    'EntitySignature',
    'SizeGroup',
    'characteristic_size',
    'signature_of',
    'signatures_match',
    'entities_match',
    'size_group_key',
    'group_by_size',
    # Spatial index
    'SpatialGrid',
    'dynamic_tolerance',
    'grid_cell_size',
    # Matching
    'CancellationToken',
    'MatchSession',
    'RotationHypothesis',
    'find_matches',
    # Transform
    'CoordinateTransformer',
    # Measurement
    'measurement',
    'units_per_pixel',
    'physical_distance',
    'perpendicular_point',
    'measured_polygon_area',
    'measured_polyline_length',
    # Reporting
    'MatchReportRow',
    'build_match_report',
    'format_coordinate',
    # Extraction
    'entity_from_dxf',
    'extract_entities',
    'load_entities',
    'drawing_extents',
    # Tolerances
    'ZERO_MAGNITUDE',
    'ARC_SWEEP_RAD',
    'POSITION_RATIO',
    'GRID_CELL_FACTOR',
    'GRID_CELL_MIN',
    'SIZE_GROUP_STEP',
]
