"""RSS feed builder using feedgen.

Turns an ordered list of media items into a podcast feed. Item order is
never changed: the first item gets the build date, each following item one
day earlier, so clients list them newest first without date collisions.
"""

import logging
import os
import tempfile
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta
from pathlib import Path
from typing import BinaryIO
from urllib.parse import quote

from feedgen.feed import FeedGenerator

from podfeed import __version__
from podfeed.feeds.models import Channel, Enclosure, FeedItem, FeedMetadata, MediaFile, MediaItem
from podfeed.utils.datetime import midnight_utc, now_utc
from podfeed.utils.errors import UnreadableFileError, UnsupportedExtensionError

logger = logging.getLogger(__name__)

# Closed set: anything else is rejected rather than guessed
MIME_TYPES: dict[str, str] = {
    "aac": "audio/aac",
    "m4a": "audio/mp4",
    "mp3": "audio/mpeg",
    "mp4": "audio/mp4",
}

IMAGE_EXTENSIONS = frozenset({"jpg", "png"})


def mime_type_for(name: str, extension: str) -> str:
    """Look up the MIME type for a (case-sensitive) file extension.

    Raises:
        UnsupportedExtensionError: If the extension is not a known audio type
    """
    try:
        return MIME_TYPES[extension]
    except KeyError:
        raise UnsupportedExtensionError(readable_name(name), extension) from None


def readable_name(name: str) -> str:
    """File name with undecodable filesystem bytes shown as U+FFFD."""
    return os.fsencode(name).decode("utf-8", errors="replace")


def encode_filename(name: str) -> str:
    """Percent-encode a file name for use as one URL path segment.

    The file name's filesystem bytes are encoded, so names that are not
    valid UTF-8 still map to the file on disk. Only ASCII letters, digits,
    ``.`` and ``_`` are left as they are.
    """
    return quote(os.fsencode(name), safe=b"").replace("-", "%2D").replace("~", "%7E")


def item_title(stem: str) -> str:
    return readable_name(stem).replace("_", " ")


def publication_date(build_date: datetime, index: int) -> datetime:
    """Date for the item at ``index``: build date minus one day per position."""
    return build_date - timedelta(days=index)


def join_url(base_url: str, name: str) -> str:
    return f"{base_url}/{encode_filename(name)}"


class FeedBuilder:
    """Builds podcast feeds for one set of channel metadata.

    Example:
        >>> builder = FeedBuilder(FeedMetadata(title="Show", base_url="https://eg.test"))
        >>> with open("feed.xml", "wb") as sink:
        ...     builder.generate(MediaFile.from_directory("episodes"), sink)
    """

    def __init__(
        self,
        metadata: FeedMetadata,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        """Initialize the feed builder.

        Args:
            metadata: Channel title, base URL and optional artwork
            clock: Source of the build time (truncated to midnight UTC)
        """
        self.metadata = metadata
        self.clock = clock

    def build_item(self, index: int, media: MediaItem, build_date: datetime) -> FeedItem:
        """Describe one media item as a feed item.

        Raises:
            UnsupportedExtensionError: If the extension has no MIME type
            UnreadableFileError: If the file size cannot be read
        """
        mime_type = mime_type_for(media.name, media.extension)
        try:
            length = media.byte_length()
        except OSError as e:
            raise UnreadableFileError(readable_name(media.name), e.strerror or str(e)) from e

        return FeedItem(
            title=item_title(media.stem),
            enclosure=Enclosure(
                url=join_url(self.metadata.base_url, media.name),
                mime_type=mime_type,
                length_bytes=length,
            ),
            publication_date=publication_date(build_date, index),
        )

    def build_channel(self, media_items: Iterable[MediaItem]) -> Channel:
        """Build the in-memory feed, one item per media item, in input order."""
        image_url = None
        if self.metadata.image is not None:
            image = self.metadata.image
            extension = image.suffix.lstrip(".")
            if extension not in IMAGE_EXTENSIONS:
                raise UnsupportedExtensionError(readable_name(image.name), extension)
            image_url = join_url(self.metadata.base_url, image.name)

        build_date = midnight_utc(self.clock())
        items = [
            self.build_item(index, media, build_date)
            for index, media in enumerate(media_items)
        ]
        logger.debug(f"Built channel '{self.metadata.title}' with {len(items)} item(s)")

        return Channel(
            metadata=self.metadata,
            items=items,
            build_date=build_date,
            image_url=image_url,
        )

    def render(self, channel: Channel) -> bytes:
        """Serialize a channel as pretty-printed RSS 2.0 with iTunes tags."""
        metadata = channel.metadata
        fg = FeedGenerator()
        fg.load_extension("podcast")

        fg.title(metadata.title)
        fg.link(href=metadata.base_url, rel="alternate")
        fg.description(metadata.channel_description)
        fg.pubDate(channel.build_date)
        fg.lastBuildDate(channel.build_date)
        fg.generator("podfeed", version=__version__)
        fg.podcast.itunes_block(channel.podcast_block)

        if channel.image_url:
            fg.image(url=channel.image_url, title=metadata.title, link=metadata.base_url)
            fg.podcast.itunes_image(channel.image_url)

        for item in channel.items:
            entry = fg.add_entry(order="append")
            entry.title(item.title)
            entry.enclosure(
                item.enclosure.url,
                str(item.enclosure.length_bytes),
                item.enclosure.mime_type,
            )
            entry.pubDate(item.publication_date)

        return fg.rss_str(pretty=True)

    def generate(self, media_items: Iterable[MediaItem], sink: BinaryIO) -> None:
        """Write the feed for ``media_items`` to ``sink``.

        The document is fully rendered before the first byte is written, so a
        failing build leaves the sink untouched.
        """
        data = self.render(self.build_channel(media_items))
        sink.write(data)
        logger.info(f"Wrote feed '{self.metadata.title}' ({len(data)} bytes)")

    def generate_for_files(self, paths: list[Path] | list[str], sink: BinaryIO) -> None:
        self.generate(MediaFile.from_paths(paths), sink)

    def generate_for_dir(self, directory: Path | str, sink: BinaryIO) -> None:
        self.generate(MediaFile.from_directory(directory), sink)

    def write(self, media_items: Iterable[MediaItem], output: Path) -> None:
        """Write the feed to ``output``, replacing any existing file atomically."""
        output.parent.mkdir(parents=True, exist_ok=True)
        data = self.render(self.build_channel(media_items))

        fd, tmp_name = tempfile.mkstemp(dir=output.parent, prefix=f".{output.name}.")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, output)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.info(f"Wrote feed '{self.metadata.title}' to {output}")


def generate(
    metadata: FeedMetadata,
    media_items: Iterable[MediaItem],
    sink: BinaryIO,
    clock: Callable[[], datetime] = now_utc,
) -> None:
    """Build a feed for ``media_items`` and write it to ``sink``."""
    FeedBuilder(metadata, clock=clock).generate(media_items, sink)
