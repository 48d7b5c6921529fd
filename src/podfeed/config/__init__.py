"""Configuration for podfeed."""

from podfeed.config.manager import ConfigManager
from podfeed.config.schema import FeedDefaults, GlobalConfig, PublishConfig

__all__ = ["ConfigManager", "GlobalConfig", "FeedDefaults", "PublishConfig"]
