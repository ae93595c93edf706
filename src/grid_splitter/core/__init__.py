"""
Grid Splitter Core Package

Shared data models, the error hierarchy, schema validation and
serialization used by the splitter pipeline and the CLI.

**DESIGN NOTES:**

1. **Immutable Committed Models**
   - SplitConfig is frozen; every edit returns a new instance
   - Only EditableSplit (used mid-drag) is mutable and unsorted

2. **Explicit Override State**
   - Each image is either Inherited or Overridden(config)
   - Resolution happens on demand, never cached

3. **Derived Grid Size**
   - Row/column counts for partitioning come from the line tuples,
     rows/cols fields are advisory
"""

from .errors import GridSplitterError
from .models import (
    CellBounds,
    ConfigOverrides,
    ImageSet,
    LineKind,
    SplitConfig,
    resolve,
)

__all__ = [
    "CellBounds",
    "ConfigOverrides",
    "GridSplitterError",
    "ImageSet",
    "LineKind",
    "SplitConfig",
    "resolve",
]
