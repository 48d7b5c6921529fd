"""Publish files to a public S3 bucket.

An upload runs three steps in a fixed order, each moving the upload one
state further:

    IDLE -> CONTAINER_ENSURED -> POLICY_PUBLIC -> DONE

Any failing step moves it to FAILED and nothing after it runs. The only
error that is not fatal is "bucket already owned by you" while creating the
bucket, which makes re-running an upload safe. Nothing is rolled back.
"""

import logging
import mimetypes
from collections.abc import Callable, Iterable
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

from podfeed.feeds.builder import readable_name
from podfeed.publish.backend import StorageBackend, public_read_policy
from podfeed.publish.s3 import S3Backend, validate_region
from podfeed.utils.errors import ContainerAlreadyOwnedError, StorageError, UploadError
from podfeed.utils.retry import DEFAULT_RETRY_CONFIG, RetryConfig, call_with_retry

logger = logging.getLogger(__name__)

# Types mimetypes gets wrong or leaves to the platform
CONTENT_TYPES: dict[str, str] = {
    ".xml": "application/rss+xml",
    ".rss": "application/rss+xml",
    ".m4a": "audio/mp4",
    ".aac": "audio/aac",
}


class UploadState(str, Enum):
    """Progress of one upload."""

    IDLE = "idle"
    CONTAINER_ENSURED = "container_ensured"
    POLICY_PUBLIC = "policy_public"
    DONE = "done"
    FAILED = "failed"


class UploadResult(BaseModel):
    """Outcome of a completed upload."""

    state: UploadState = UploadState.DONE
    keys: list[str] = Field(default_factory=list)
    urls: list[str] = Field(default_factory=list)


def content_type_for(path: Path) -> str | None:
    """Best-effort Content-Type for an uploaded file."""
    suffix = path.suffix.lower()
    if suffix in CONTENT_TYPES:
        return CONTENT_TYPES[suffix]
    return mimetypes.guess_type(path.name)[0]


class Publisher:
    """Provision a public bucket and upload files into it.

    Example:
        >>> publisher = Publisher("eu-west-1", "my-show")
        >>> publisher.upload([Path("feed.xml"), Path("episode_1.mp3")])
        >>> publisher.url_for_file("feed.xml")
        'https://my-show.s3.eu-west-1.amazonaws.com/feed.xml'
    """

    def __init__(
        self,
        region: str,
        container_name: str,
        backend: StorageBackend | None = None,
        retry_config: RetryConfig | None = None,
        endpoint_url: str | None = None,
    ) -> None:
        """Initialize the publisher.

        Args:
            region: AWS region for the bucket
            container_name: Bucket name
            backend: Storage backend (defaults to an S3 client for ``region``)
            retry_config: Retry policy for transient storage errors (default: one attempt)
            endpoint_url: Custom S3 endpoint, ignored when ``backend`` is given

        Raises:
            InvalidRegionError: If S3 does not know ``region``
        """
        self.region = validate_region(region)
        self.container_name = container_name
        self.backend = backend or S3Backend(region, endpoint_url=endpoint_url)
        self.retry_config = retry_config or DEFAULT_RETRY_CONFIG

    def base_url(self) -> str:
        domain = "amazonaws.com.cn" if self.region.startswith("cn-") else "amazonaws.com"
        return f"https://{self.container_name}.s3.{self.region}.{domain}"

    def url_for_file(self, path: Path | str) -> str:
        """Public URL of the object uploaded from ``path``.

        The file name is used as-is, without percent-encoding.
        """
        return f"{self.base_url()}/{Path(path).name}"

    def upload(self, files: Iterable[Path | str]) -> UploadResult:
        """Ensure the bucket, make it public, then upload ``files`` in order.

        Raises:
            UploadError: If any step fails; later steps are not attempted
        """
        paths = [Path(f) for f in files]
        uploaded: list[str] = []
        steps: list[tuple[UploadState, Callable[[], None]]] = [
            (UploadState.CONTAINER_ENSURED, self.ensure_container),
            (UploadState.POLICY_PUBLIC, self.make_public),
            (UploadState.DONE, lambda: self.put_files(paths, uploaded)),
        ]

        state = UploadState.IDLE
        for target, step in steps:
            try:
                step()
            except StorageError as e:
                raise self._failed(str(e), target, state, uploaded) from e
            except OSError as e:
                path = Path(e.filename) if e.filename else None
                message = f"cannot read '{readable_name(str(path))}': {e.strerror or e}"
                raise self._failed(message, target, state, uploaded, path) from e
            logger.debug(f"Upload to {self.container_name}: {state.value} -> {target.value}")
            state = target

        logger.info(f"Uploaded {len(uploaded)} file(s) to {self.base_url()}")
        return UploadResult(
            state=state,
            keys=list(uploaded),
            urls=[f"{self.base_url()}/{key}" for key in uploaded],
        )

    def ensure_container(self) -> None:
        """Create the bucket, treating "already owned by you" as success."""
        try:
            call_with_retry(
                self.backend.create_container,
                self.container_name,
                self.region,
                config=self.retry_config,
            )
        except ContainerAlreadyOwnedError:
            logger.info(f"Bucket {self.container_name} already exists and is yours, reusing it")

    def make_public(self) -> None:
        call_with_retry(
            self.backend.set_public_read_policy,
            self.container_name,
            public_read_policy(self.container_name),
            config=self.retry_config,
        )

    def put_files(self, paths: list[Path], uploaded: list[str]) -> None:
        """Upload each file under its base name, stopping at the first failure."""
        for path in paths:
            key = path.name
            try:
                key.encode("utf-8")
            except UnicodeEncodeError:
                raise StorageError(
                    f"object key is not valid UTF-8: '{readable_name(key)}'",
                    operation="put_object",
                ) from None
            if key in uploaded:
                logger.warning(f"'{path}' overwrites an object uploaded earlier as '{key}'")
            body = path.read_bytes()
            call_with_retry(
                self.backend.put_object,
                self.container_name,
                key,
                body,
                content_type_for(path),
                config=self.retry_config,
            )
            if key not in uploaded:
                uploaded.append(key)
            logger.info(f"Uploaded {path} -> {self.url_for_file(path)}")

    def _failed(
        self,
        message: str,
        target: UploadState,
        state: UploadState,
        uploaded: list[str],
        path: Path | None = None,
    ) -> UploadError:
        logger.error(
            f"Upload to {self.container_name}: {state.value} -> {UploadState.FAILED.value} "
            f"while reaching {target.value}: {message}"
        )
        return UploadError(
            message,
            step=target.value,
            state=state.value,
            uploaded=list(uploaded),
            path=path,
        )
