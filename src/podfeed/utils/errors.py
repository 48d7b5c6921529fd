"""Custom exceptions for podfeed."""

from pathlib import Path


class PodfeedError(Exception):
    """Base exception for all podfeed errors."""

    pass


class ConfigError(PodfeedError):
    """Configuration-related errors."""

    pass


class InvalidConfigError(ConfigError):
    """Invalid configuration data."""

    pass


class InvalidRegionError(ConfigError):
    """Region is not known to the storage service."""

    def __init__(self, region: str) -> None:
        super().__init__(f"invalid region: {region}")
        self.region = region


class BuildError(PodfeedError):
    """Feed generation errors."""

    pass


class UnreadableFileError(BuildError):
    """A media file's size could not be read."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"cannot read '{name}': {reason}")
        self.name = name
        self.reason = reason


class UnsupportedExtensionError(BuildError):
    """File extension has no known MIME type."""

    def __init__(self, name: str, extension: str) -> None:
        shown = extension or "<none>"
        super().__init__(f"unsupported file extension '{shown}' for '{name}'")
        self.name = name
        self.extension = extension


class StorageError(PodfeedError):
    """Object storage service errors.

    Attributes:
        code: Error code reported by the service, if any
        operation: Name of the storage operation that failed
    """

    def __init__(
        self, message: str, code: str | None = None, operation: str | None = None
    ) -> None:
        super().__init__(message)
        self.code = code
        self.operation = operation


class ContainerAlreadyOwnedError(StorageError):
    """The container already exists and belongs to the caller."""

    pass


class TransientStorageError(StorageError):
    """Throttling, timeouts and server-side failures."""

    pass


class UploadError(PodfeedError):
    """Publishing failed part way through.

    Attributes:
        step: State the failing step was trying to reach
        state: Last state successfully reached
        uploaded: Object keys written before the failure
    """

    def __init__(
        self,
        message: str,
        step: str,
        state: str,
        uploaded: list[str] | None = None,
        path: Path | None = None,
    ) -> None:
        super().__init__(message)
        self.step = step
        self.state = state
        self.uploaded = uploaded or []
        self.path = path
