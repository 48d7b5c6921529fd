"""Storage capabilities the publisher relies on.

The publisher only ever needs three remote operations. Production code binds
them to S3 (:class:`podfeed.publish.s3.S3Backend`); tests bind them to
:class:`podfeed.testing.RecordingStorageBackend`.
"""

from typing import Any, Protocol

POLICY_VERSION = "2012-10-17"


class StorageBackend(Protocol):
    """Remote object storage operations.

    Implementations raise :class:`~podfeed.utils.errors.ContainerAlreadyOwnedError`
    when asked to create a container the caller already owns, and
    :class:`~podfeed.utils.errors.StorageError` (or a subclass) for every
    other failure.
    """

    def create_container(self, name: str, region: str) -> None: ...

    def set_public_read_policy(self, name: str, policy: dict[str, Any]) -> None: ...

    def put_object(
        self, name: str, key: str, body: bytes, content_type: str | None = None
    ) -> None: ...


def public_read_policy(container: str) -> dict[str, Any]:
    """Policy document granting anonymous read on every object in ``container``.

    Actions and resources are backend-neutral (``read``, ``<container>/*``);
    each backend renders them in its own terms.
    """
    return {
        "Version": POLICY_VERSION,
        "Statement": [
            {
                "Sid": "AddPerm",
                "Effect": "Allow",
                "Principal": "*",
                "Action": ["read"],
                "Resource": [f"{container}/*"],
            }
        ],
    }
