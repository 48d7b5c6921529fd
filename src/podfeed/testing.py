"""Test doubles for podfeed.

In-memory stand-ins for the filesystem and for S3, so feeds and uploads can
be exercised without real files or network access.

Example usage in a test file:

    from podfeed.testing import FakeMediaItem, RecordingStorageBackend

    def test_upload_is_idempotent(tmp_path):
        backend = RecordingStorageBackend()
        publisher = Publisher("eu-west-1", "bucket1", backend=backend)
        publisher.upload([...])
        publisher.upload([...])
        assert len(backend.objects) == ...
"""

from dataclasses import dataclass, field
from typing import Any

from podfeed.utils.errors import ContainerAlreadyOwnedError, StorageError


@dataclass(frozen=True)
class FakeMediaItem:
    """Fixture-backed MediaItem.

    Set ``error`` to make ``byte_length`` fail the way an unreadable file would.
    """

    name: str = "name1.mp3"
    stem: str = "name1"
    extension: str = "mp3"
    length: int = 123
    error: OSError | None = None

    @classmethod
    def named(cls, name: str, length: int = 123) -> "FakeMediaItem":
        """Build an item from a file name, splitting off the extension."""
        stem, dot, extension = name.rpartition(".")
        if not dot:
            stem, extension = name, ""
        return cls(name=name, stem=stem, extension=extension, length=length)

    def byte_length(self) -> int:
        if self.error is not None:
            raise self.error
        return self.length


@dataclass
class StoredObject:
    """An object written to the recording backend."""

    body: bytes
    content_type: str | None = None


@dataclass
class RecordingStorageBackend:
    """In-memory storage backend that records every call.

    Buckets listed in ``foreign_containers`` behave as if another account owns
    them. Exceptions in ``failures`` (keyed by operation name) are raised the
    next time that operation runs, after the call has been recorded.
    """

    foreign_containers: set[str] = field(default_factory=set)
    failures: dict[str, Exception] = field(default_factory=dict)
    containers: dict[str, str] = field(default_factory=dict)
    policies: dict[str, dict[str, Any]] = field(default_factory=dict)
    objects: dict[tuple[str, str], StoredObject] = field(default_factory=dict)
    calls: list[tuple[str, tuple[Any, ...]]] = field(default_factory=list)

    def _record(self, operation: str, *args: Any) -> None:
        self.calls.append((operation, args))
        if operation in self.failures:
            raise self.failures.pop(operation)

    def operations(self) -> list[str]:
        """Names of the operations called so far, in order."""
        return [operation for operation, _ in self.calls]

    def create_container(self, name: str, region: str) -> None:
        self._record("create_container", name, region)
        if name in self.foreign_containers:
            raise StorageError(
                f"create_bucket failed (BucketAlreadyExists): {name} is taken",
                code="BucketAlreadyExists",
                operation="create_bucket",
            )
        if name in self.containers:
            raise ContainerAlreadyOwnedError(
                f"create_bucket failed (BucketAlreadyOwnedByYou): {name}",
                code="BucketAlreadyOwnedByYou",
                operation="create_bucket",
            )
        self.containers[name] = region

    def set_public_read_policy(self, name: str, policy: dict[str, Any]) -> None:
        self._record("set_public_read_policy", name, policy)
        if name not in self.containers:
            raise StorageError(
                f"put_bucket_policy failed (NoSuchBucket): {name}",
                code="NoSuchBucket",
                operation="put_bucket_policy",
            )
        self.policies[name] = policy

    def put_object(
        self, name: str, key: str, body: bytes, content_type: str | None = None
    ) -> None:
        self._record("put_object", name, key, content_type)
        if name not in self.containers:
            raise StorageError(
                f"put_object failed (NoSuchBucket): {name}",
                code="NoSuchBucket",
                operation="put_object",
            )
        self.objects[(name, key)] = StoredObject(body=body, content_type=content_type)

    def keys(self, name: str) -> list[str]:
        """Object keys stored in bucket ``name``, sorted."""
        return sorted(key for container, key in self.objects if container == name)
