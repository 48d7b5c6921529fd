"""AWS S3 storage backend.

Binds the publisher's storage capabilities to a boto3 S3 client and maps
S3 error codes onto podfeed's storage error classes.
"""

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from functools import lru_cache
from typing import Any

import boto3
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)

from podfeed.utils.errors import (
    ContainerAlreadyOwnedError,
    InvalidRegionError,
    StorageError,
    TransientStorageError,
)

logger = logging.getLogger(__name__)

# Region that must not be sent as an explicit location constraint
DEFAULT_REGION = "us-east-1"

TRANSIENT_ERROR_CODES = frozenset(
    {
        "SlowDown",
        "Throttling",
        "ThrottlingException",
        "RequestTimeout",
        "RequestTimeTooSkewed",
        "InternalError",
        "ServiceUnavailable",
    }
)


# Backend-neutral policy actions in S3 terms
S3_POLICY_ACTIONS = {"read": "s3:GetObject"}

S3_ARN_PREFIX = "arn:aws:s3:::"

@lru_cache(maxsize=1)
def available_regions() -> frozenset[str]:
    """Regions botocore knows for S3, across all partitions (no network call)."""
    session = boto3.session.Session()
    regions: set[str] = set()
    for partition in session.get_available_partitions():
        regions.update(session.get_available_regions("s3", partition_name=partition))
    return frozenset(regions)


def validate_region(region: str) -> str:
    """Return ``region`` unchanged if S3 knows it.

    Raises:
        InvalidRegionError: If the region is unknown
    """
    if region not in available_regions():
        raise InvalidRegionError(region)
    return region


def classify_client_error(error: ClientError, operation: str) -> StorageError:
    """Translate an S3 error response into a podfeed storage error."""
    details = error.response.get("Error", {})
    code = details.get("Code", "Unknown")
    message = details.get("Message") or str(error)
    status = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0)
    text = f"{operation} failed ({code}): {message}"

    if code == "BucketAlreadyOwnedByYou":
        return ContainerAlreadyOwnedError(text, code=code, operation=operation)
    if code in TRANSIENT_ERROR_CODES or 500 <= status < 600:
        return TransientStorageError(text, code=code, operation=operation)
    return StorageError(text, code=code, operation=operation)


def s3_policy(policy: dict[str, Any]) -> dict[str, Any]:
    """Render a backend-neutral policy document as an S3 bucket policy.

    Raises:
        StorageError: If a statement uses an action S3 has no mapping for
    """
    statements = []
    for statement in policy["Statement"]:
        actions = []
        for action in statement["Action"]:
            if action not in S3_POLICY_ACTIONS:
                raise StorageError(
                    f"unsupported policy action: {action}", operation="put_bucket_policy"
                )
            actions.append(S3_POLICY_ACTIONS[action])
        statements.append(
            {
                **statement,
                "Action": actions,
                "Resource": [f"{S3_ARN_PREFIX}{resource}" for resource in statement["Resource"]],
            }
        )
    return {**policy, "Statement": statements}


@contextmanager
def translate_errors(operation: str) -> Iterator[None]:
    """Re-raise botocore exceptions as podfeed storage errors."""
    try:
        yield
    except ClientError as e:
        raise classify_client_error(e, operation) from e
    except (EndpointConnectionError, ConnectTimeoutError, ReadTimeoutError) as e:
        raise TransientStorageError(f"{operation} failed: {e}", operation=operation) from e
    except BotoCoreError as e:
        raise StorageError(f"{operation} failed: {e}", operation=operation) from e


class S3Backend:
    """S3 implementation of :class:`~podfeed.publish.backend.StorageBackend`."""

    def __init__(
        self,
        region: str,
        client: Any | None = None,
        endpoint_url: str | None = None,
    ) -> None:
        """Initialize the S3 backend.

        Args:
            region: AWS region the client talks to
            client: Pre-built boto3 S3 client (tests pass a stubbed one)
            endpoint_url: Custom endpoint URL (for testing/minio)
        """
        self.region = region
        self.s3_client = client or boto3.client(
            "s3", region_name=region, endpoint_url=endpoint_url
        )

    def create_container(self, name: str, region: str) -> None:
        request: dict[str, Any] = {"Bucket": name}
        if region != DEFAULT_REGION:
            request["CreateBucketConfiguration"] = {"LocationConstraint": region}

        with translate_errors("create_bucket"):
            self.s3_client.create_bucket(**request)
        logger.info(f"Created S3 bucket {name} in {region}")

    def set_public_read_policy(self, name: str, policy: dict[str, Any]) -> None:
        document = json.dumps(s3_policy(policy))
        # New buckets block public policies until the access block is removed
        with translate_errors("delete_public_access_block"):
            self.s3_client.delete_public_access_block(Bucket=name)
        with translate_errors("put_bucket_policy"):
            self.s3_client.put_bucket_policy(Bucket=name, Policy=document)
        logger.info(f"Attached public-read policy to S3 bucket {name}")

    def put_object(
        self, name: str, key: str, body: bytes, content_type: str | None = None
    ) -> None:
        extra_args = {}
        if content_type:
            extra_args["ContentType"] = content_type

        with translate_errors("put_object"):
            self.s3_client.put_object(Bucket=name, Key=key, Body=body, **extra_args)
        logger.debug(f"Uploaded s3://{name}/{key} ({len(body)} bytes)")
