"""Filesystem locations used by podfeed."""

from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "podfeed"


def get_config_dir() -> Path:
    """Get the podfeed config directory (honours XDG_CONFIG_HOME on Linux)."""
    return Path(user_config_dir(APP_NAME))


def get_config_file() -> Path:
    return get_config_dir() / "config.yaml"
