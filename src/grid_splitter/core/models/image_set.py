"""
Module: image_set

Purpose:
    Ordered collection of source image paths. The position of a path in
    the set is the stable key used by ConfigOverrides.

Key Classes:
    - ImageSet: Insertion-ordered list of paths (duplicates allowed)

Key Functions:
    - is_supported_image(path): Extension check
    - collect_images(paths): Expand directories into supported image files

Dependencies:
    - pathlib (std)

Used By:
    - splitter.exporter
    - core.utils.serialization
    - cli
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence, Union

logger = logging.getLogger(__name__)

# Raster formats accepted as sources
SUPPORTED_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".bmp", ".gif"})

PathLike = Union[str, Path]


def is_supported_image(path: PathLike) -> bool:
    """True if the path has a supported raster extension (case-insensitive)."""
    return Path(path).suffix.lower() in SUPPORTED_EXTENSIONS


def collect_images(paths: Iterable[PathLike]) -> List[Path]:
    """
    Expand a mix of files and directories into image paths.

    Directories contribute their supported files (non-recursive, sorted by
    name). Files are kept in the order given whatever their extension, so
    unreadable inputs still surface as per-image failures later.

    Args:
        paths: Files and/or directories

    Returns:
        Ordered list of image paths
    """
    result: List[Path] = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            found = sorted(
                (p for p in path.iterdir() if p.is_file() and is_supported_image(p)),
                key=lambda p: p.name.lower(),
            )
            logger.debug(f"Found {len(found)} images in {path}")
            result.extend(found)
        else:
            result.append(path)
    return result


class ImageSet:
    """
    Ordered source paths for one batch.

    Indices never change for paths already in the set: adding appends,
    and the only removal is clear(), which invalidates all indices at once.

    Example:
        >>> images = ImageSet(["a.png", "b.jpg"])
        >>> images.add(["a.png"])
        >>> len(images)
        3
    """

    def __init__(self, paths: Iterable[PathLike] = ()):
        self._paths: List[Path] = [Path(p) for p in paths]

    def add(self, paths: Iterable[PathLike]) -> None:
        """Append paths in order; duplicates are kept."""
        self._paths.extend(Path(p) for p in paths)

    def clear(self) -> None:
        self._paths.clear()

    @property
    def paths(self) -> Sequence[Path]:
        """Read-only view of the paths."""
        return tuple(self._paths)

    def stem(self, index: int) -> str:
        """File stem of image `index`, or "image" when the name has none."""
        return self._paths[index].stem or "image"

    def __getitem__(self, index: int) -> Path:
        return self._paths[index]

    def __iter__(self) -> Iterator[Path]:
        return iter(self._paths)

    def __len__(self) -> int:
        return len(self._paths)

    def __bool__(self) -> bool:
        return bool(self._paths)

    def __repr__(self) -> str:
        return f"ImageSet({len(self._paths)} images)"
