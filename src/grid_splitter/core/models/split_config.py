"""
Module: split_config

Purpose:
    Provides the SplitConfig dataclass - the committed, always-sorted
    description of how one image is divided into a grid - and EditableSplit,
    its mutable counterpart used while a line is being dragged.

Key Functions:
    - SplitConfig.new(rows, cols): Evenly spaced layout
    - SplitConfig.add_line(kind, position): Insert a line, returns new config + index
    - SplitConfig.remove_lines(kind, indices): Remove lines (highest index first)
    - SplitConfig.begin_edit(): Start an interactive edit
    - EditableSplit.move_line(kind, index, position): In-place move, no re-sort
    - EditableSplit.commit(): Sort and re-derive rows/cols

Dependencies:
    - dataclasses (std)
    - enum (std)

Used By:
    - core.models.overrides
    - core.utils.serialization
    - splitter.partition
    - splitter.exporter
    - cli

Design Notes:
    Positions are fractions of the image height (horizontal lines) or width
    (vertical lines). rows/cols are advisory; the partitioner always derives
    the grid from the line tuples.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Optional, Sequence, Tuple

# Keyboard nudge steps (fraction of the image dimension)
FINE_STEP = 0.001
COARSE_STEP = 0.005


class LineKind(str, Enum):
    """Axis of a split line."""
    HORIZONTAL = "horizontal"  # Splits rows, position is a fraction of height
    VERTICAL = "vertical"      # Splits columns, position is a fraction of width

    def __str__(self) -> str:
        return self.value


def even_positions(count: int) -> Tuple[float, ...]:
    """
    Evenly spaced interior positions for `count` segments.

    Returns `count - 1` values `(i + 1) / count`; empty for count <= 1.
    """
    return tuple((i + 1) / count for i in range(count - 1))


def _clamp(position: float) -> float:
    return min(1.0, max(0.0, float(position)))


@dataclass(frozen=True, slots=True)
class SplitConfig:
    """
    Row/column split lines for one image.

    Attributes:
        rows: Nominal number of rows (advisory, display only)
        cols: Nominal number of columns (advisory, display only)
        h_lines: Horizontal line positions in [0, 1], ascending
        v_lines: Vertical line positions in [0, 1], ascending

    Invariants:
        - every position is within [0.0, 1.0]
        - h_lines and v_lines are non-decreasing
        - configs returned by the editing methods satisfy is_valid()

    Coincident lines are allowed; they produce zero-area cells.

    Example:
        >>> config = SplitConfig.new(2, 3)
        >>> config.h_lines
        (0.5,)
        >>> config.effective_cols
        3
    """

    rows: int = 1
    cols: int = 1
    h_lines: Tuple[float, ...] = ()
    v_lines: Tuple[float, ...] = ()

    def __post_init__(self) -> None:
        """Normalise line sequences to tuples and validate them."""
        object.__setattr__(self, "h_lines", tuple(float(p) for p in self.h_lines))
        object.__setattr__(self, "v_lines", tuple(float(p) for p in self.v_lines))
        for kind, lines in ((LineKind.HORIZONTAL, self.h_lines), (LineKind.VERTICAL, self.v_lines)):
            for position in lines:
                if not 0.0 <= position <= 1.0:
                    raise ValueError(f"{kind} line out of range [0, 1]: {position}")
            for earlier, later in zip(lines, lines[1:]):
                if later < earlier:
                    raise ValueError(f"{kind} lines must be ascending: {list(lines)}")

    # ─────────────────────────────────────────────────────────────────────────
    # Construction
    # ─────────────────────────────────────────────────────────────────────────

    @classmethod
    def new(cls, rows: int, cols: int) -> SplitConfig:
        """
        Create an evenly spaced layout.

        rows/cols must be >= 1; zero is a caller error and simply yields
        a config without lines.

        Args:
            rows: Number of rows
            cols: Number of columns

        Returns:
            SplitConfig with h_lines[i] = (i+1)/rows and v_lines[i] = (i+1)/cols
        """
        return cls(
            rows=rows,
            cols=cols,
            h_lines=even_positions(rows),
            v_lines=even_positions(cols),
        )

    @classmethod
    def from_lines(
        cls,
        h_lines: Iterable[float] = (),
        v_lines: Iterable[float] = (),
    ) -> SplitConfig:
        """Build a committed config from arbitrary positions (clamped, sorted)."""
        h = tuple(sorted(_clamp(p) for p in h_lines))
        v = tuple(sorted(_clamp(p) for p in v_lines))
        return cls(rows=len(h) + 1, cols=len(v) + 1, h_lines=h, v_lines=v)

    # ─────────────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def effective_rows(self) -> int:
        """Row count used for partitioning."""
        return len(self.h_lines) + 1

    @property
    def effective_cols(self) -> int:
        """Column count used for partitioning."""
        return len(self.v_lines) + 1

    @property
    def cell_count(self) -> int:
        return self.effective_rows * self.effective_cols

    def lines(self, kind: LineKind) -> Tuple[float, ...]:
        """Line positions for one axis."""
        return self.h_lines if kind is LineKind.HORIZONTAL else self.v_lines

    def is_valid(self) -> bool:
        """True when rows/cols agree with the line counts."""
        return (
            len(self.h_lines) == max(self.rows - 1, 0)
            and len(self.v_lines) == max(self.cols - 1, 0)
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Editing (each returns a new committed config)
    # ─────────────────────────────────────────────────────────────────────────

    def reset_to_default(self) -> SplitConfig:
        """Discard custom positions and re-space lines from rows/cols."""
        return SplitConfig.new(self.rows, self.cols)

    def with_grid(self, rows: int, cols: int) -> SplitConfig:
        """Change the nominal grid size; lines are reset to even spacing."""
        return SplitConfig.new(rows, cols)

    def add_line(self, kind: LineKind, position: float) -> Tuple[SplitConfig, int]:
        """
        Insert a line and re-sort.

        Args:
            kind: Axis of the new line
            position: Fractional position, clamped to [0, 1]

        Returns:
            (new_config, index) where index is the new line's position in
            the sorted sequence. With equal positions the new line is placed
            after the existing ones.
        """
        position = _clamp(position)
        lines = list(self.lines(kind))
        index = sum(1 for p in lines if p <= position)
        lines.insert(index, position)
        return self._with_lines(kind, lines), index

    def remove_lines(self, kind: LineKind, indices: Iterable[int]) -> SplitConfig:
        """
        Remove lines by index.

        Indices are removed highest first so earlier removals do not shift
        later ones. Duplicate indices are ignored.

        Raises:
            IndexError: If any index is out of range
        """
        lines = list(self.lines(kind))
        for index in sorted(set(indices), reverse=True):
            if not 0 <= index < len(lines):
                raise IndexError(f"No {kind} line at index {index}")
            del lines[index]
        return self._with_lines(kind, lines)

    def nudge_lines(
        self,
        selection: Iterable[Tuple[LineKind, int]],
        delta: float,
    ) -> SplitConfig:
        """
        Move selected lines by `delta`, clamped to [0, 1], then commit.

        Unknown indices are skipped, matching keyboard nudging of a stale
        selection.
        """
        editable = self.begin_edit()
        for kind, index in selection:
            lines = editable.lines(kind)
            if 0 <= index < len(lines):
                editable.move_line(kind, index, lines[index] + delta)
        return editable.commit()

    def line_near(
        self,
        kind: LineKind,
        position: float,
        tolerance: float,
    ) -> Optional[int]:
        """
        Index of the line closest to `position` within `tolerance`.

        Returns:
            Line index, or None when no line is close enough
        """
        best: Optional[int] = None
        best_distance = tolerance
        for index, line in enumerate(self.lines(kind)):
            distance = abs(line - position)
            if distance <= best_distance:
                best, best_distance = index, distance
        return best

    def begin_edit(self) -> EditableSplit:
        """Mutable copy for interactive dragging."""
        return EditableSplit(
            rows=self.rows,
            cols=self.cols,
            h_lines=list(self.h_lines),
            v_lines=list(self.v_lines),
        )

    def _with_lines(self, kind: LineKind, lines: Sequence[float]) -> SplitConfig:
        h = tuple(sorted(lines)) if kind is LineKind.HORIZONTAL else self.h_lines
        v = tuple(sorted(lines)) if kind is LineKind.VERTICAL else self.v_lines
        return SplitConfig(rows=len(h) + 1, cols=len(v) + 1, h_lines=h, v_lines=v)

    # ─────────────────────────────────────────────────────────────────────────
    # Serialization
    # ─────────────────────────────────────────────────────────────────────────

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {
            "rows": self.rows,
            "cols": self.cols,
            "h_lines": list(self.h_lines),
            "v_lines": list(self.v_lines),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SplitConfig:
        """
        Deserialize from dict.

        Missing line lists fall back to an even layout for the stored
        rows/cols.
        """
        rows = int(data.get("rows", 1))
        cols = int(data.get("cols", 1))
        h_lines = data.get("h_lines")
        v_lines = data.get("v_lines")
        return cls(
            rows=rows,
            cols=cols,
            h_lines=even_positions(rows) if h_lines is None else tuple(h_lines),
            v_lines=even_positions(cols) if v_lines is None else tuple(v_lines),
        )

    def __repr__(self) -> str:
        return f"SplitConfig({self.rows}x{self.cols}, h={list(self.h_lines)}, v={list(self.v_lines)})"


@dataclass(slots=True)
class EditableSplit:
    """
    Split lines while a gesture is in progress.

    No ordering invariant holds here: a dragged line may pass its
    neighbours. Indices stay stable until commit().
    """

    rows: int
    cols: int
    h_lines: list[float] = field(default_factory=list)
    v_lines: list[float] = field(default_factory=list)

    def lines(self, kind: LineKind) -> list[float]:
        return self.h_lines if kind is LineKind.HORIZONTAL else self.v_lines

    def move_line(self, kind: LineKind, index: int, new_position: float) -> None:
        """
        Update one position in place (clamped, not re-sorted).

        Raises:
            IndexError: If index is out of range
        """
        lines = self.lines(kind)
        if not 0 <= index < len(lines):
            raise IndexError(f"No {kind} line at index {index}")
        lines[index] = _clamp(new_position)

    def commit(self) -> SplitConfig:
        """Sort positions and re-derive rows/cols."""
        return SplitConfig.from_lines(self.h_lines, self.v_lines)
