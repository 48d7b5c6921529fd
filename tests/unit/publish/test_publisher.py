"""Tests for Publisher."""

import os
import sys
from pathlib import Path

import pytest

from podfeed.publish.backend import public_read_policy
from podfeed.publish.publisher import Publisher, UploadState, content_type_for
from podfeed.testing import RecordingStorageBackend
from podfeed.utils.errors import (
    InvalidRegionError,
    StorageError,
    TransientStorageError,
    UploadError,
)
from podfeed.utils.retry import TEST_RETRY_CONFIG


@pytest.fixture
def publisher(backend: RecordingStorageBackend) -> Publisher:
    return Publisher("eu-west-1", "bucket1", backend=backend)


class TestPublisherConfig:
    """Tests for construction and URLs."""

    def test_invalid_region(self, backend: RecordingStorageBackend) -> None:
        with pytest.raises(InvalidRegionError, match="invalid region: moon-base-1"):
            Publisher("moon-base-1", "bucket1", backend=backend)

    def test_base_url(self, publisher: Publisher) -> None:
        assert publisher.base_url() == "https://bucket1.s3.eu-west-1.amazonaws.com"

    def test_base_url_china(self, backend: RecordingStorageBackend) -> None:
        publisher = Publisher("cn-north-1", "bucket1", backend=backend)
        assert publisher.base_url() == "https://bucket1.s3.cn-north-1.amazonaws.com.cn"

    def test_url_for_file_strips_directories(self, publisher: Publisher) -> None:
        url = publisher.url_for_file(Path("/tmp/out/feed.xml"))
        assert url == "https://bucket1.s3.eu-west-1.amazonaws.com/feed.xml"

    def test_url_for_file_does_not_escape(self, publisher: Publisher) -> None:
        assert publisher.url_for_file("a b.mp3").endswith("/a b.mp3")

    def test_no_network_on_construction(
        self, publisher: Publisher, backend: RecordingStorageBackend
    ) -> None:
        publisher.base_url()
        assert backend.calls == []


class TestUpload:
    """Tests for the upload state machine."""

    def test_steps_run_in_order(
        self, publisher: Publisher, backend: RecordingStorageBackend, audio_files: list[Path]
    ) -> None:
        result = publisher.upload(audio_files)

        assert backend.operations() == [
            "create_container",
            "set_public_read_policy",
            "put_object",
            "put_object",
            "put_object",
        ]
        assert result.state == UploadState.DONE
        assert result.keys == ["file1.mp3", "file2.mp3", "file3.mp3"]
        assert result.urls[0] == "https://bucket1.s3.eu-west-1.amazonaws.com/file1.mp3"

    def test_creates_bucket_in_region(
        self, publisher: Publisher, backend: RecordingStorageBackend
    ) -> None:
        publisher.upload([])
        assert backend.calls[0] == ("create_container", ("bucket1", "eu-west-1"))

    def test_attaches_public_read_policy(
        self, publisher: Publisher, backend: RecordingStorageBackend
    ) -> None:
        publisher.upload([])

        policy = backend.policies["bucket1"]
        assert policy == public_read_policy("bucket1")
        statement = policy["Statement"][0]
        assert policy["Version"] == "2012-10-17"
        assert statement["Sid"] == "AddPerm"
        assert statement["Effect"] == "Allow"
        assert statement["Principal"] == "*"
        assert statement["Action"] == ["read"]
        assert statement["Resource"] == ["bucket1/*"]

    def test_objects_keyed_by_base_name(
        self, publisher: Publisher, backend: RecordingStorageBackend, audio_files: list[Path]
    ) -> None:
        publisher.upload(audio_files)

        stored = backend.objects[("bucket1", "file2.mp3")]
        assert stored.body == b"xx"
        assert stored.content_type == "audio/mpeg"

    def test_upload_twice_is_idempotent(
        self, publisher: Publisher, backend: RecordingStorageBackend, audio_files: list[Path]
    ) -> None:
        publisher.upload(audio_files)
        result = publisher.upload(audio_files)

        assert result.state == UploadState.DONE
        assert backend.keys("bucket1") == ["file1.mp3", "file2.mp3", "file3.mp3"]
        assert backend.operations().count("create_container") == 2

    def test_already_owned_bucket_continues(
        self, publisher: Publisher, backend: RecordingStorageBackend, audio_files: list[Path]
    ) -> None:
        backend.containers["bucket1"] = "eu-west-1"

        result = publisher.upload(audio_files)

        assert result.state == UploadState.DONE
        assert "bucket1" in backend.policies
        assert len(backend.keys("bucket1")) == 3

    def test_bucket_owned_by_someone_else_is_fatal(
        self, backend: RecordingStorageBackend, audio_files: list[Path]
    ) -> None:
        backend.foreign_containers.add("taken")
        publisher = Publisher("eu-west-1", "taken", backend=backend)

        with pytest.raises(UploadError, match="BucketAlreadyExists") as exc_info:
            publisher.upload(audio_files)

        assert exc_info.value.state == UploadState.IDLE.value
        assert exc_info.value.step == UploadState.CONTAINER_ENSURED.value
        assert backend.operations() == ["create_container"]
        assert backend.policies == {}
        assert backend.objects == {}

    def test_policy_failure_stops_uploads(
        self, publisher: Publisher, backend: RecordingStorageBackend, audio_files: list[Path]
    ) -> None:
        backend.failures["set_public_read_policy"] = StorageError(
            "put_bucket_policy failed (AccessDenied): no", code="AccessDenied"
        )

        with pytest.raises(UploadError, match="AccessDenied") as exc_info:
            publisher.upload(audio_files)

        assert exc_info.value.state == UploadState.CONTAINER_ENSURED.value
        assert backend.objects == {}

    def test_first_failing_file_aborts_rest(
        self, publisher: Publisher, backend: RecordingStorageBackend, audio_files: list[Path]
    ) -> None:
        missing = audio_files[0].parent / "missing.mp3"
        files = [audio_files[0], missing, audio_files[1]]

        with pytest.raises(UploadError, match="missing.mp3") as exc_info:
            publisher.upload(files)

        error = exc_info.value
        assert error.state == UploadState.POLICY_PUBLIC.value
        assert error.uploaded == ["file1.mp3"]
        assert error.path == missing
        assert backend.keys("bucket1") == ["file1.mp3"]

    def test_put_failure_is_fatal(
        self, publisher: Publisher, backend: RecordingStorageBackend, audio_files: list[Path]
    ) -> None:
        backend.failures["put_object"] = StorageError("put_object failed (AccessDenied): no")

        with pytest.raises(UploadError):
            publisher.upload(audio_files)

        assert backend.operations().count("put_object") == 1
        assert backend.objects == {}

    @pytest.mark.skipif(
        sys.platform not in ("linux", "freebsd"), reason="needs arbitrary bytes in file names"
    )
    def test_key_not_utf8_is_fatal(
        self, publisher: Publisher, backend: RecordingStorageBackend, audio_files: list[Path]
    ) -> None:
        bad = audio_files[0].parent / os.fsdecode(b"bad\xff.mp3")
        bad.write_bytes(b"abc")

        with pytest.raises(UploadError, match="not valid UTF-8") as exc_info:
            publisher.upload([audio_files[0], bad, audio_files[1]])

        assert "bad\ufffd.mp3" in str(exc_info.value)
        assert exc_info.value.uploaded == ["file1.mp3"]
        assert backend.keys("bucket1") == ["file1.mp3"]

    def test_duplicate_names_upload_once(
        self, publisher: Publisher, backend: RecordingStorageBackend, tmp_path: Path
    ) -> None:
        (tmp_path / "a").mkdir()
        (tmp_path / "b").mkdir()
        (tmp_path / "a" / "ep.mp3").write_bytes(b"first")
        (tmp_path / "b" / "ep.mp3").write_bytes(b"second")

        result = publisher.upload([tmp_path / "a" / "ep.mp3", tmp_path / "b" / "ep.mp3"])

        assert result.keys == ["ep.mp3"]
        assert backend.objects[("bucket1", "ep.mp3")].body == b"second"


class TestRetry:
    """Tests for retrying transient storage errors."""

    def test_no_retry_by_default(
        self, publisher: Publisher, backend: RecordingStorageBackend, audio_files: list[Path]
    ) -> None:
        backend.failures["put_object"] = TransientStorageError("put_object failed (SlowDown)")

        with pytest.raises(UploadError, match="SlowDown"):
            publisher.upload(audio_files)

        assert backend.operations().count("put_object") == 1

    def test_transient_error_retried_when_configured(
        self, backend: RecordingStorageBackend, audio_files: list[Path]
    ) -> None:
        publisher = Publisher(
            "eu-west-1", "bucket1", backend=backend, retry_config=TEST_RETRY_CONFIG
        )
        backend.failures["put_object"] = TransientStorageError("put_object failed (SlowDown)")

        result = publisher.upload(audio_files)

        assert result.state == UploadState.DONE
        assert backend.operations().count("put_object") == 4
        assert len(backend.keys("bucket1")) == 3

    def test_permanent_error_not_retried(
        self, backend: RecordingStorageBackend, audio_files: list[Path]
    ) -> None:
        publisher = Publisher(
            "eu-west-1", "bucket1", backend=backend, retry_config=TEST_RETRY_CONFIG
        )
        backend.foreign_containers.add("bucket1")

        with pytest.raises(UploadError):
            publisher.upload(audio_files)

        assert backend.operations() == ["create_container"]


class TestContentType:
    """Tests for upload Content-Type guessing."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("feed.xml", "application/rss+xml"),
            ("ep.mp3", "audio/mpeg"),
            ("ep.m4a", "audio/mp4"),
            ("ep.aac", "audio/aac"),
            ("cover.png", "image/png"),
            ("cover.jpg", "image/jpeg"),
        ],
    )
    def test_known_types(self, name: str, expected: str) -> None:
        assert content_type_for(Path(name)) == expected

    def test_unknown_type(self) -> None:
        assert content_type_for(Path("blob.unknownext")) is None
