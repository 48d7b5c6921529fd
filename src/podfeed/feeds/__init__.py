"""Feed generation for podfeed."""

from podfeed.feeds.builder import (
    MIME_TYPES,
    FeedBuilder,
    encode_filename,
    generate,
    item_title,
    mime_type_for,
    publication_date,
)
from podfeed.feeds.models import (
    Channel,
    Enclosure,
    FeedItem,
    FeedMetadata,
    MediaFile,
    MediaItem,
)

__all__ = [
    "FeedBuilder",
    "generate",
    "MIME_TYPES",
    "mime_type_for",
    "encode_filename",
    "item_title",
    "publication_date",
    "MediaItem",
    "MediaFile",
    "FeedMetadata",
    "Enclosure",
    "FeedItem",
    "Channel",
]
