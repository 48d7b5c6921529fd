"""Tests for media items and feed models."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from podfeed.feeds.models import Enclosure, FeedMetadata, MediaFile, MediaItem
from podfeed.testing import FakeMediaItem


class TestMediaFile:
    """Tests for the filesystem-backed MediaItem."""

    def test_name_parts(self, fixtures_dir: Path) -> None:
        media = MediaFile(fixtures_dir / "file1.mp3")

        assert media.name == "file1.mp3"
        assert media.stem == "file1"
        assert media.extension == "mp3"
        assert media.byte_length() == 6

    def test_extension_is_last_suffix(self) -> None:
        media = MediaFile("show.ep1.m4a")
        assert media.stem == "show.ep1"
        assert media.extension == "m4a"

    def test_no_extension(self) -> None:
        assert MediaFile("README").extension == ""

    def test_missing_file_raises_oserror(self, tmp_path: Path) -> None:
        with pytest.raises(OSError):
            MediaFile(tmp_path / "missing.mp3").byte_length()

    def test_from_directory_sorted_files_only(self, tmp_path: Path) -> None:
        for name in ["b.mp3", "a.mp3", ".DS_Store", "c.m4a"]:
            (tmp_path / name).write_bytes(b"1")
        (tmp_path / "subdir").mkdir()

        names = [m.name for m in MediaFile.from_directory(tmp_path)]

        assert names == ["a.mp3", "b.mp3", "c.m4a"]

    def test_from_paths_keeps_order(self) -> None:
        names = [m.name for m in MediaFile.from_paths(["z.mp3", "a.mp3"])]
        assert names == ["z.mp3", "a.mp3"]

    def test_satisfies_protocol(self) -> None:
        assert isinstance(MediaFile("a.mp3"), MediaItem)
        assert isinstance(FakeMediaItem(), MediaItem)


class TestFakeMediaItem:
    """Tests for the fixture-backed MediaItem."""

    def test_named_splits_extension(self) -> None:
        item = FakeMediaItem.named("a+b c&d.mp3", length=9)
        assert (item.name, item.stem, item.extension) == ("a+b c&d.mp3", "a+b c&d", "mp3")
        assert item.byte_length() == 9

    def test_error_raised_on_length(self) -> None:
        item = FakeMediaItem(error=OSError("boom"))
        with pytest.raises(OSError, match="boom"):
            item.byte_length()


class TestModels:
    """Tests for feed models."""

    def test_metadata_is_frozen(self) -> None:
        metadata = FeedMetadata(title="Show", base_url="https://eg.test")
        with pytest.raises(ValidationError):
            metadata.title = "Other"  # type: ignore[misc]

    def test_channel_description_falls_back_to_title(self) -> None:
        assert FeedMetadata(title="Show", base_url="x").channel_description == "Show"
        assert (
            FeedMetadata(title="Show", base_url="x", description="About").channel_description
            == "About"
        )

    def test_enclosure_length_not_negative(self) -> None:
        with pytest.raises(ValidationError):
            Enclosure(url="https://eg.test/a.mp3", mime_type="audio/mpeg", length_bytes=-1)
