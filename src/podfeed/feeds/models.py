"""Data models for media files and the feeds built from them."""

from datetime import datetime
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field


@runtime_checkable
class MediaItem(Protocol):
    """Read-only view of one audio file.

    ``extension`` has no leading dot. ``byte_length`` may raise ``OSError``
    when the size cannot be determined.
    """

    @property
    def name(self) -> str: ...

    @property
    def stem(self) -> str: ...

    @property
    def extension(self) -> str: ...

    def byte_length(self) -> int: ...


class MediaFile:
    """MediaItem backed by a file on disk."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def stem(self) -> str:
        return self.path.stem

    @property
    def extension(self) -> str:
        return self.path.suffix.lstrip(".")

    def byte_length(self) -> int:
        return self.path.stat().st_size

    @classmethod
    def from_paths(cls, paths: list[Path] | list[str]) -> list["MediaFile"]:
        """Wrap explicit paths, keeping their order."""
        return [cls(p) for p in paths]

    @classmethod
    def from_directory(cls, directory: Path | str) -> list["MediaFile"]:
        """List the regular, non-hidden files of a directory, sorted by name."""
        directory = Path(directory)
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
        return [cls(p) for p in entries if p.is_file() and not p.name.startswith(".")]

    def __repr__(self) -> str:
        return f"MediaFile({str(self.path)!r})"


class FeedMetadata(BaseModel):
    """Channel-level settings for one feed build."""

    model_config = ConfigDict(frozen=True)

    title: str
    base_url: str
    description: str | None = None
    image: Path | None = None

    @property
    def channel_description(self) -> str:
        """RSS requires a description; fall back to the title."""
        return self.description or self.title


class Enclosure(BaseModel):
    """Downloadable payload of one feed item."""

    model_config = ConfigDict(frozen=True)

    url: str
    mime_type: str
    length_bytes: int = Field(ge=0)


class FeedItem(BaseModel):
    """One episode in the feed."""

    model_config = ConfigDict(frozen=True)

    title: str
    enclosure: Enclosure
    publication_date: datetime


class Channel(BaseModel):
    """In-memory feed document, before serialization."""

    model_config = ConfigDict(frozen=True)

    metadata: FeedMetadata
    items: list[FeedItem] = Field(default_factory=list)
    build_date: datetime
    image_url: str | None = None

    @property
    def podcast_block(self) -> bool:
        """Feeds built by podfeed always ask directories not to list them."""
        return True
