"""
Serialization Utilities

JSON persistence for split configs and whole projects (image list,
global config and per-image overrides).

- `save_*` functions write atomically (temp file then rename)
- `load_*` functions validate against the bundled schemas before
  building model objects
- Relative image paths in a project are resolved against the project
  file's directory
"""

from __future__ import annotations

import json
import logging
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..models.image_set import ImageSet
from ..models.overrides import ConfigOverrides
from ..models.split_config import SplitConfig
from ..schemas.validator import (
    PROJECT_SCHEMA_VERSION,
    SPLIT_CONFIG_SCHEMA_VERSION,
    ConfigFileError,
    validate_project,
    validate_split_config,
)

logger = logging.getLogger(__name__)


@dataclass
class Project:
    """
    Everything needed to repeat an export.

    Attributes:
        images: Source images in batch order
        global_config: Shared split configuration
        overrides: Per-image configurations keyed by image index
    """
    images: ImageSet = field(default_factory=ImageSet)
    global_config: SplitConfig = field(default_factory=lambda: SplitConfig.new(1, 1))
    overrides: ConfigOverrides = field(default_factory=ConfigOverrides)


# ─────────────────────────────────────────────────────────────────────────────
# File helpers
# ─────────────────────────────────────────────────────────────────────────────

def _write_json_atomic(data: dict[str, Any], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            suffix=".json",
            dir=path.parent,
            delete=False,
            encoding="utf-8",
        ) as f:
            temp_path = Path(f.name)
            json.dump(data, f, indent=2)
        temp_path.replace(path)
    except Exception:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigFileError(f"{path.name} is not valid JSON: {e}", path=str(path)) from e


# ─────────────────────────────────────────────────────────────────────────────
# Split config files
# ─────────────────────────────────────────────────────────────────────────────

def serialize_split_config(config: SplitConfig) -> dict[str, Any]:
    """Config dict with schema version, ready for JSON."""
    return {"schema_version": SPLIT_CONFIG_SCHEMA_VERSION, **config.to_dict()}


def deserialize_split_config(data: dict[str, Any], *, validate: bool = True) -> SplitConfig:
    """
    Build a SplitConfig from a parsed config file.

    Raises:
        ConfigFileError: If validate=True and data is invalid
    """
    if validate:
        validate_split_config(data)
    payload = {k: v for k, v in data.items() if k != "schema_version"}
    return SplitConfig.from_dict(payload)


def save_split_config(config: SplitConfig, path: Path) -> Path:
    """Write a config file. Returns the path written."""
    _write_json_atomic(serialize_split_config(config), path)
    logger.debug(f"Saved split config {config!r} to {path}")
    return path


def load_split_config(path: Path) -> SplitConfig:
    """
    Read a config file.

    Raises:
        FileNotFoundError: If path does not exist
        ConfigFileError: If the file is malformed
    """
    return deserialize_split_config(_read_json(path))


# ─────────────────────────────────────────────────────────────────────────────
# Project files
# ─────────────────────────────────────────────────────────────────────────────

def serialize_project(project: Project, *, base_path: Path | None = None) -> dict[str, Any]:
    """
    Project dict ready for JSON.

    Image paths under `base_path` are stored relative to it.
    """
    images = []
    for image in project.images:
        if base_path is not None:
            image = image.resolve()
            try:
                image = image.relative_to(base_path)
            except ValueError:
                pass  # outside the project directory, keep absolute
        images.append(image.as_posix())

    return {
        "schema_version": PROJECT_SCHEMA_VERSION,
        "images": images,
        "global": project.global_config.to_dict(),
        "overrides": {
            str(index): config.to_dict()
            for index, config in project.overrides.items()
        },
    }


def deserialize_project(
    data: dict[str, Any],
    *,
    base_path: Path | None = None,
    validate: bool = True,
) -> Project:
    """
    Build a Project from a parsed project file.

    Args:
        data: Parsed JSON
        base_path: Directory that relative image paths are resolved against
        validate: Validate against the schema first

    Raises:
        ConfigFileError: If validate=True and data is invalid
    """
    if validate:
        validate_project(data)

    images = ImageSet()
    for raw in data["images"]:
        path = Path(raw)
        if base_path is not None and not path.is_absolute():
            path = base_path / path
        images.add([path])

    overrides = ConfigOverrides({
        int(key): SplitConfig.from_dict(value)
        for key, value in data.get("overrides", {}).items()
    })

    return Project(
        images=images,
        global_config=SplitConfig.from_dict(data["global"]),
        overrides=overrides,
    )


def save_project(project: Project, path: Path) -> Path:
    """Write a project file, storing image paths relative to it where possible."""
    data = serialize_project(project, base_path=path.parent.resolve())
    _write_json_atomic(data, path)
    logger.info(
        f"Saved project with {len(project.images)} images "
        f"and {len(project.overrides)} overrides to {path}"
    )
    return path


def load_project(path: Path) -> Project:
    """
    Read a project file.

    Raises:
        FileNotFoundError: If path does not exist
        ConfigFileError: If the file is malformed
    """
    return deserialize_project(_read_json(path), base_path=path.parent.resolve())
