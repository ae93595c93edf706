"""
Data models for the grid partition engine.

All committed configuration types are frozen; edits return new instances.
"""

from .bounds import CellBounds
from .image_set import ImageSet, SUPPORTED_EXTENSIONS, collect_images, is_supported_image
from .overrides import (
    ConfigOverrides,
    Inherited,
    Overridden,
    OverridesSnapshot,
    resolve,
)
from .split_config import (
    COARSE_STEP,
    FINE_STEP,
    EditableSplit,
    LineKind,
    SplitConfig,
)

__all__ = [
    "CellBounds",
    "COARSE_STEP",
    "ConfigOverrides",
    "EditableSplit",
    "FINE_STEP",
    "ImageSet",
    "Inherited",
    "LineKind",
    "Overridden",
    "OverridesSnapshot",
    "SUPPORTED_EXTENSIONS",
    "SplitConfig",
    "collect_images",
    "is_supported_image",
    "resolve",
]
