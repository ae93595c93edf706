"""
Module: splitter.partition

Purpose:
    Converts fractional split lines into pixel boundaries and slices a
    decoded image into a row-major grid of cells.

Key Functions:
    - compute_boundaries(): Pixel edges along one axis
    - cell_bounds(): Grid of CellBounds for an image size and config
    - partition(): Crop every cell from an image
    - cell_filename(): Output name for a cell

Dependencies:
    - PIL: Image cropping
    - grid_splitter.core.models: SplitConfig, CellBounds

Used By:
    - splitter.exporter: Per-image partition step

Design Notes:
    Fractions are converted with floor, not round, so edges stay
    non-decreasing and inside [0, size] however closely lines cluster.
    The grid size always comes from the line tuples; rows/cols on the
    config are ignored here.
"""

from __future__ import annotations

import math
from typing import List, Sequence

from PIL import Image

from grid_splitter.core.models import CellBounds, SplitConfig

# Output cells are always JPEG
OUTPUT_SUFFIX = ".jpg"


def compute_boundaries(size: int, lines: Sequence[float]) -> List[int]:
    """
    Pixel edges along one axis.

    Args:
        size: Image width or height in pixels
        lines: Fractional line positions (ascending)

    Returns:
        [0, floor(size*p0), floor(size*p1), ..., size]

    Example:
        >>> compute_boundaries(200, [0.5])
        [0, 100, 200]
    """
    edges = [0]
    for position in lines:
        edges.append(min(size, max(0, math.floor(size * position))))
    edges.append(size)
    return edges


def cell_bounds(width: int, height: int, config: SplitConfig) -> List[List[CellBounds]]:
    """
    Pixel rectangles for every cell, row-major.

    Cells tile [0, width) x [0, height) exactly with no gaps or overlap.
    Coincident lines give zero-height or zero-width cells.

    Args:
        width: Image width in pixels
        height: Image height in pixels
        config: Split lines (rows/cols fields are not consulted)

    Returns:
        Outer list indexed by row, inner by column
    """
    h_edges = compute_boundaries(height, config.h_lines)
    v_edges = compute_boundaries(width, config.v_lines)

    grid: List[List[CellBounds]] = []
    for row in range(len(config.h_lines) + 1):
        grid.append([
            CellBounds(
                row=row,
                col=col,
                left=v_edges[col],
                top=h_edges[row],
                right=v_edges[col + 1],
                bottom=h_edges[row + 1],
            )
            for col in range(len(config.v_lines) + 1)
        ])
    return grid


def partition(image: Image.Image, config: SplitConfig) -> List[List[Image.Image]]:
    """
    Crop an image into its grid of cells.

    An empty config (no lines) returns a 1x1 grid holding the whole image.

    Args:
        image: Decoded source image
        config: Resolved split configuration for this image

    Returns:
        Row-major grid of new PIL Images

    Example:
        >>> cells = partition(Image.new("RGB", (100, 200)), SplitConfig.from_lines([0.5]))
        >>> [cell.size for row in cells for cell in row]
        [(100, 100), (100, 100)]
    """
    return [
        [bounds.crop_from(image) for bounds in row]
        for row in cell_bounds(image.width, image.height, config)
    ]


def cell_filename(stem: str, row: int, col: int) -> str:
    """
    Output file name for a cell (1-based row/col in the name).

    Example:
        >>> cell_filename("scan", 0, 2)
        'scan_1_3.jpg'
    """
    return f"{stem}_{row + 1}_{col + 1}{OUTPUT_SUFFIX}"
