"""DxfMatch - rotation-aware pattern matching for DXF drawings.

This __init__.py makes the project directory a proper Python package,
enabling relative imports between submodules (core, models, storage, lib).
"""

from . import core
from . import models
from .storage import components

__all__ = ['core', 'models', 'components']
