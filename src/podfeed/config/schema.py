"""Configuration schema models using Pydantic."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class FeedDefaults(BaseModel):
    """Defaults for `podfeed feed`."""

    title: str | None = None
    description: str | None = None
    output: Path = Path("feed.xml")
    image: Path | None = None


class PublishConfig(BaseModel):
    """Where and how feeds are published."""

    region: str | None = None
    container: str | None = None
    endpoint_url: str | None = None  # For S3-compatible services and testing
    retry_attempts: int = Field(default=1, ge=1)  # 1 = no retries


class GlobalConfig(BaseModel):
    """Global podfeed configuration."""

    version: str = "1"
    log_level: LogLevel = "WARNING"

    feed: FeedDefaults = Field(default_factory=FeedDefaults)
    publish: PublishConfig = Field(default_factory=PublishConfig)
