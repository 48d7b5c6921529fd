"""Publishing feeds and media to object storage."""

from podfeed.publish.backend import StorageBackend, public_read_policy
from podfeed.publish.publisher import Publisher, UploadResult, UploadState
from podfeed.publish.s3 import S3Backend, available_regions, validate_region

__all__ = [
    "Publisher",
    "UploadResult",
    "UploadState",
    "StorageBackend",
    "public_read_policy",
    "S3Backend",
    "available_regions",
    "validate_region",
]
