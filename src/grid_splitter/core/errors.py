"""Base exception for grid_splitter."""


class GridSplitterError(Exception):
    """Root of all errors raised deliberately by grid_splitter."""
