from .validator import (
    PROJECT_SCHEMA_VERSION,
    SPLIT_CONFIG_SCHEMA_VERSION,
    ConfigFileError,
    validate_project,
    validate_split_config,
)

__all__ = [
    "ConfigFileError",
    "PROJECT_SCHEMA_VERSION",
    "SPLIT_CONFIG_SCHEMA_VERSION",
    "validate_project",
    "validate_split_config",
]
