"""
Pytest configuration for DxfMatch tests.

This conftest.py sets up the Python path and module aliases so that tests can
import project modules using simple names (e.g., `from core.x import y`) while
the production code uses relative imports between subpackages.

How it works:
1. Imports the installed DxfMatch package, or loads the project root as
   the DxfMatch package when it is not installed
2. Creates module aliases so `import core` resolves to `DxfMatch.core`
3. Puts the tests directory on sys.path for the shared helpers module
"""
import importlib.util
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
tests_dir = Path(__file__).parent

if str(tests_dir) not in sys.path:
    sys.path.insert(0, str(tests_dir))

try:
    import DxfMatch
except ImportError:
    # Not installed: the project root itself is the package directory
    _spec = importlib.util.spec_from_file_location(
        'DxfMatch',
        project_root / '__init__.py',
        submodule_search_locations=[str(project_root)],
    )
    DxfMatch = importlib.util.module_from_spec(_spec)
    sys.modules['DxfMatch'] = DxfMatch
    _spec.loader.exec_module(DxfMatch)

# Import package submodules and create aliases
# This allows tests to use simple imports like `from core.x import y`
import DxfMatch.config as config
import DxfMatch.core as core
import DxfMatch.models as models
import DxfMatch.storage as storage
import DxfMatch.storage.components
import DxfMatch.lib.logUtils as logUtils

sys.modules['config'] = config
sys.modules['core'] = core
sys.modules['models'] = models
sys.modules['storage'] = storage
sys.modules['logUtils'] = logUtils

# Also alias the submodules for imports like `from core.matching import x`
sys.modules['core.geometry'] = core.geometry
sys.modules['core.signatures'] = core.signatures
sys.modules['core.spatial_index'] = core.spatial_index
sys.modules['core.matching'] = core.matching
sys.modules['core.transform'] = core.transform
sys.modules['core.measurement'] = core.measurement
sys.modules['core.reporting'] = core.reporting
sys.modules['core.entity_extraction'] = core.entity_extraction
sys.modules['core.tolerances'] = core.tolerances

sys.modules['models.types'] = models.types
sys.modules['models.entity'] = models.entity
sys.modules['models.component'] = models.component
sys.modules['models.settings'] = models.settings
sys.modules['models.frame'] = models.frame
sys.modules['models.units'] = models.units

sys.modules['storage.components'] = DxfMatch.storage.components
