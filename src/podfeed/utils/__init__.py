"""Utility functions and helpers for podfeed."""

from podfeed.utils.errors import (
    BuildError,
    ConfigError,
    ContainerAlreadyOwnedError,
    InvalidConfigError,
    InvalidRegionError,
    PodfeedError,
    StorageError,
    TransientStorageError,
    UnreadableFileError,
    UnsupportedExtensionError,
    UploadError,
)
from podfeed.utils.paths import get_config_dir, get_config_file

__all__ = [
    # Errors
    "PodfeedError",
    "ConfigError",
    "InvalidConfigError",
    "InvalidRegionError",
    "BuildError",
    "UnreadableFileError",
    "UnsupportedExtensionError",
    "StorageError",
    "ContainerAlreadyOwnedError",
    "TransientStorageError",
    "UploadError",
    # Paths
    "get_config_dir",
    "get_config_file",
]
