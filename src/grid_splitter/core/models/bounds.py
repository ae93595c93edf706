"""
Module: bounds

Purpose:
    Provides the CellBounds dataclass - the pixel rectangle of one grid
    cell within a source image, tagged with its (row, col) position.

Key Functions:
    - CellBounds.crop_from(image): Crop this cell from a PIL image
    - CellBounds.contains(x, y): Check if a pixel is inside the cell
    - CellBounds.overlaps(other): Check for overlap with another cell
    - CellBounds.as_box(): (left, top, right, bottom) tuple for PIL

Dependencies:
    - dataclasses (std)
    - PIL.Image (TYPE_CHECKING only)

Used By:
    - splitter.partition
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from PIL import Image


@dataclass(frozen=True, slots=True)
class CellBounds:
    """
    Pixel region of one grid cell.

    The region is [left, right) x [top, bottom). Unlike most rectangles
    a cell may be empty: two coincident split lines map to the same
    pixel row or column and give a zero-height or zero-width cell.

    Attributes:
        row: Zero-based row index in the grid
        col: Zero-based column index in the grid
        left: X of left edge (inclusive)
        top: Y of top edge (inclusive)
        right: X of right edge (exclusive)
        bottom: Y of bottom edge (exclusive)

    Invariants:
        - 0 <= left <= right
        - 0 <= top <= bottom

    Example:
        >>> cell = CellBounds(row=0, col=1, left=50, top=0, right=100, bottom=40)
        >>> cell.size
        (50, 40)
    """

    row: int
    col: int
    left: int
    top: int
    right: int
    bottom: int

    def __post_init__(self) -> None:
        """Validate bounds on construction."""
        if self.left < 0 or self.top < 0:
            raise ValueError(f"Cell origin must be >= 0: ({self.left}, {self.top})")
        if self.right < self.left:
            raise ValueError(f"right must be >= left: {self.right} < {self.left}")
        if self.bottom < self.top:
            raise ValueError(f"bottom must be >= top: {self.bottom} < {self.top}")

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    @property
    def size(self) -> tuple[int, int]:
        """(width, height) in pixels."""
        return (self.width, self.height)

    @property
    def is_empty(self) -> bool:
        """True when the cell covers no pixels."""
        return self.width == 0 or self.height == 0

    def contains(self, x: int, y: int) -> bool:
        return self.left <= x < self.right and self.top <= y < self.bottom

    def overlaps(self, other: CellBounds) -> bool:
        """
        Check if two cells share at least one pixel.

        Adjacent cells (one.right == other.left) do NOT overlap.
        """
        return (
            self.left < other.right
            and other.left < self.right
            and self.top < other.bottom
            and other.top < self.bottom
        )

    def as_box(self) -> tuple[int, int, int, int]:
        """(left, top, right, bottom) tuple for PIL."""
        return (self.left, self.top, self.right, self.bottom)

    def crop_from(self, image: Image.Image) -> Image.Image:
        """
        Crop this cell from an image.

        Returns:
            New PIL Image (may have zero width or height)
        """
        return image.crop(self.as_box())

    def __repr__(self) -> str:
        return f"CellBounds(r{self.row}c{self.col}: {self.as_box()})"
