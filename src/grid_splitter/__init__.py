"""Grid Splitter: cut images into grids of JPEG cells.

Subpackages:
- grid_splitter.core: split configs, per-image overrides, config files
- grid_splitter.splitter: partitioning and the parallel batch exporter
- grid_splitter.cli: `grid-splitter` command
"""

import re
from importlib.metadata import PackageNotFoundError, version as _dist_version
from pathlib import Path

_VERSION_LINE = re.compile(r'^version\s*=\s*["\']([^"\']+)["\']', re.MULTILINE)


def _get_version() -> str:
    """Version from a source checkout's pyproject.toml, else the installed dist."""
    pyproject = Path(__file__).resolve().parents[2] / "pyproject.toml"
    try:
        match = _VERSION_LINE.search(pyproject.read_text(encoding="utf-8"))
    except OSError:
        match = None
    if match:
        return match.group(1)

    try:
        return _dist_version("grid-splitter")
    except PackageNotFoundError:
        return "0.0.0"


__version__ = _get_version()
__all__: list[str] = ["__version__"]
