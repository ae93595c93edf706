from .serialization import (
    Project,
    deserialize_project,
    deserialize_split_config,
    load_project,
    load_split_config,
    save_project,
    save_split_config,
    serialize_project,
    serialize_split_config,
)

__all__ = [
    "Project",
    "deserialize_project",
    "deserialize_split_config",
    "load_project",
    "load_split_config",
    "save_project",
    "save_split_config",
    "serialize_project",
    "serialize_split_config",
]
