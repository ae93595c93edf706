"""
Schema Validation Utilities

Validates persisted split configs and project files against the JSON
schemas shipped next to this module.

- Structural checks via jsonschema (types, ranges, required keys)
- Semantic checks jsonschema cannot express (ascending lines,
  override indices inside the image list)
- Fail fast: the first problem raises ConfigFileError
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Sequence

import jsonschema

from ..errors import GridSplitterError


# Schema version constants
SPLIT_CONFIG_SCHEMA_VERSION = 1
PROJECT_SCHEMA_VERSION = 1


# Loaded lazily
_SCHEMAS: dict[str, dict] = {}


def _load_schema(name: str) -> dict:
    """Load a schema from the schemas directory."""
    if name not in _SCHEMAS:
        schema_path = Path(__file__).parent / f"{name}.schema.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")
        with open(schema_path, "r", encoding="utf-8") as f:
            _SCHEMAS[name] = json.load(f)
    return _SCHEMAS[name]


class ConfigFileError(GridSplitterError):
    """Raised when a config or project file fails validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def _check_schema(data: Any, schema_name: str) -> None:
    schema = _load_schema(schema_name)
    try:
        jsonschema.validate(data, schema)
    except jsonschema.ValidationError as e:
        raise ConfigFileError(
            f"Schema validation failed: {e.message}",
            path=".".join(str(p) for p in e.absolute_path),
            errors=[e.message],
        ) from e


def _check_ascending(lines: Sequence[float], path: str) -> None:
    for i, (earlier, later) in enumerate(zip(lines, lines[1:])):
        if later < earlier:
            raise ConfigFileError(
                f"Lines must be ascending: {list(lines)}",
                path=f"{path}[{i + 1}]",
            )


def _check_config_lines(data: dict[str, Any], path: str) -> None:
    for key in ("h_lines", "v_lines"):
        if key in data:
            _check_ascending(data[key], f"{path}.{key}" if path else key)


def validate_split_config(data: dict[str, Any]) -> None:
    """
    Validate a split config file payload.

    Args:
        data: Parsed JSON

    Raises:
        ConfigFileError: If data is invalid
    """
    _check_schema(data, "split_config")
    version = data.get("schema_version", SPLIT_CONFIG_SCHEMA_VERSION)
    if version != SPLIT_CONFIG_SCHEMA_VERSION:
        raise ConfigFileError(
            f"Unsupported split config schema version: {version} "
            f"(expected {SPLIT_CONFIG_SCHEMA_VERSION})",
            path="schema_version",
        )
    _check_config_lines(data, "")


def validate_project(data: dict[str, Any]) -> None:
    """
    Validate a project file payload.

    Besides the schema, every override key must index into `images`.

    Raises:
        ConfigFileError: If data is invalid
    """
    _check_schema(data, "project")
    version = data.get("schema_version")
    if version != PROJECT_SCHEMA_VERSION:
        raise ConfigFileError(
            f"Unsupported project schema version: {version} (expected {PROJECT_SCHEMA_VERSION})",
            path="schema_version",
        )

    _check_config_lines(data["global"], "global")

    image_count = len(data["images"])
    for key, config in data.get("overrides", {}).items():
        index = int(key)
        if index >= image_count:
            raise ConfigFileError(
                f"Override for image {index} but project has {image_count} images",
                path=f"overrides.{key}",
            )
        _check_config_lines(config, f"overrides.{key}")
