# Application Global Variables
# This module serves as a way to share variables across different
# modules (global variables).

import os

# Flag that indicates to run in Debug mode or not. When running in Debug mode
# log messages are also echoed to the console. Set DXFMATCH_DEBUG=1 while
# tuning a drawing and leave it unset in production.
DEBUG = os.getenv('DXFMATCH_DEBUG', '').lower() in ('1', 'true', 'yes')

# Gets the name of the package from the name of the folder the py file is in.
# Used as the logger name so host applications can configure it.
PACKAGE_NAME = os.path.basename(os.path.dirname(__file__))

# Minimum level passed to the package logger (DEBUG, INFO, WARNING, ...)
LOG_LEVEL = os.getenv('DXFMATCH_LOG_LEVEL', 'INFO').upper()

# Default values for new match settings (absolute CAD units unless noted)
DEFAULT_GEOMETRY_TOLERANCE = 0.5
DEFAULT_POSITION_FUZZINESS = 1.0
DEFAULT_ANGLE_TOLERANCE_DEG = 1.0
DEFAULT_MIN_MATCH_DISTANCE = 0.0

# Number of anchor candidates processed between cancellation checks
DEFAULT_MATCH_BATCH_SIZE = 256

# Group model snapshot schema
SNAPSHOT_VERSION = '1.0'
SUPPORTED_SNAPSHOT_VERSIONS = {'1.0'}

# Palette cycled through for newly created groups
GROUP_COLORS = (
    '#6366f1', '#10b981', '#f59e0b', '#ef4444', '#ec4899',
    '#06b6d4', '#8b5cf6', '#a855f7', '#14b8a6', '#f97316',
)
