"""
Module: splitter.naming

Purpose:
    Chooses the output stem for every image in a batch so that two sources
    with the same file stem (e.g. a/x.png and b/x.jpg) do not overwrite
    each other's cells.

Key Functions:
    - plan_output_stems(): One output stem per image index

Used By:
    - splitter.exporter
"""

from __future__ import annotations

from collections import Counter
from typing import List, Sequence

from grid_splitter.core.models import ImageSet


def plan_output_stems(images: ImageSet, *, disambiguate: bool = True) -> List[str]:
    """
    Output stem for each image.

    Unique stems are used as-is. When two or more images share a stem
    (compared case-insensitively, since output folders may live on a
    case-insensitive filesystem) each of them is prefixed with its
    1-based position in the set: "3_scan". Duplicate paths count as a
    collision too. A prefixed stem can equal another source's own stem
    ("1_x" from a/x.png next to c/1_x.png), so prefixing repeats on the
    planned names until every one is unique.

    Args:
        images: Batch sources
        disambiguate: False keeps plain stems even when they collide

    Returns:
        List parallel to `images`

    Example:
        >>> plan_output_stems(ImageSet(["a/x.png", "b/x.jpg", "c/y.png"]))
        ['1_x', '2_x', 'y']
    """
    planned = [images.stem(i) for i in range(len(images))]
    if not disambiguate:
        return planned

    # Terminates: names prefixed in the same round differ in their
    # "{n}_" prefix, and only prefixed names grow.
    while True:
        counts = Counter(stem.casefold() for stem in planned)
        if all(count == 1 for count in counts.values()):
            return planned
        planned = [
            f"{index + 1}_{stem}" if counts[stem.casefold()] > 1 else stem
            for index, stem in enumerate(planned)
        ]


def colliding_stems(stems: Sequence[str]) -> List[str]:
    """Stems (as given) that appear more than once, case-insensitively."""
    counts = Counter(stem.casefold() for stem in stems)
    seen = set()
    result = []
    for stem in stems:
        key = stem.casefold()
        if counts[key] > 1 and key not in seen:
            seen.add(key)
            result.append(stem)
    return result
