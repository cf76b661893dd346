"""Domain-specific exceptions for storage failures."""


class StorageError(Exception):
    """Base exception for blob storage errors."""

    pass


class StorageConnectionError(StorageError):
    """Raised when the storage backend is unreachable or fails."""

    pass


class StorageAuthenticationError(StorageError):
    """Raised when storage authentication or authorization fails."""

    pass


class BlobNotFoundError(StorageError):
    """Raised when nothing exists at the requested path."""

    pass


class PayloadTooLargeError(StorageError):
    """Raised when the blob is bigger than the allowed maximum size."""

    pass


class EmptyPayloadError(StorageError):
    """Raised when the fetch succeeded but returned no bytes."""

    pass
