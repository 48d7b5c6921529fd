"""Configuration manager for loading and saving podfeed config."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from podfeed.config.schema import GlobalConfig
from podfeed.utils.errors import InvalidConfigError
from podfeed.utils.paths import get_config_dir, get_config_file

DEFAULT_CONFIG_HEADER = """\
# podfeed configuration
#
# publish.region and publish.container are used when --region/--container
# are not given on the command line.
"""


class ConfigManager:
    """Manages the podfeed configuration file."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize the config manager.

        Args:
            config_dir: Optional custom config directory. Defaults to the platform config dir.
        """
        if config_dir is None:
            self.config_dir = get_config_dir()
            self.config_file = get_config_file()
        else:
            self.config_dir = config_dir
            self.config_file = config_dir / "config.yaml"

    def load_config(self) -> GlobalConfig:
        """Load and validate global configuration.

        Returns:
            Validated GlobalConfig instance

        Raises:
            InvalidConfigError: If config is invalid
        """
        if not self.config_file.exists():
            config = GlobalConfig()
            self.save_config(config)
            return config

        try:
            with open(self.config_file) as f:
                data = yaml.safe_load(f) or {}
            return GlobalConfig(**data)
        except (yaml.YAMLError, ValidationError, TypeError) as e:
            raise InvalidConfigError(
                f"Invalid configuration in {self.config_file}: {e}"
            ) from e

    def save_config(self, config: GlobalConfig) -> None:
        """Save global configuration.

        Args:
            config: GlobalConfig instance to save
        """
        data = config.model_dump(mode="json")

        self.config_dir.mkdir(parents=True, exist_ok=True)

        with open(self.config_file, "w") as f:
            f.write(DEFAULT_CONFIG_HEADER)
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)

    def set_value(self, key: str, value: str) -> GlobalConfig:
        """Set a (possibly dotted) config key from its string form and save.

        Args:
            key: Field name, e.g. ``log_level`` or ``publish.region``
            value: New value; ``none``/``null`` clears optional fields

        Returns:
            The updated configuration

        Raises:
            InvalidConfigError: If the key is unknown or the value invalid
        """
        config = self.load_config()
        data: dict[str, Any] = config.model_dump(mode="json")

        *parents, leaf = key.split(".")
        section = data
        for part in parents:
            if not isinstance(section.get(part), dict):
                raise InvalidConfigError(f"Unknown config key: {key}")
            section = section[part]
        if leaf not in section or isinstance(section[leaf], dict):
            raise InvalidConfigError(f"Unknown config key: {key}")

        section[leaf] = None if value.lower() in ("none", "null", "") else value

        try:
            updated = GlobalConfig(**data)
        except ValidationError as e:
            raise InvalidConfigError(f"Invalid value for {key}: {value!r}") from e

        self.save_config(updated)
        return updated
