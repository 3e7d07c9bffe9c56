from __future__ import annotations


class S3dbError(Exception):
    """Base error for s3db."""


class ConfigurationError(S3dbError):
    """Raised when required client settings are missing after env fallback."""


class PreconditionError(S3dbError):
    """Raised when a store operation runs before bucket/collection are bound."""


class NotFoundError(S3dbError):
    """Raised when a bucket, collection, document or object does not exist."""


class ParseError(S3dbError):
    """Raised when a stored document body is not a JSON object."""


class ValidationError(S3dbError, ValueError):
    """Raised when a collection name, document id or media name is not a valid key segment."""


class StorageError(S3dbError):
    """Raised when the object storage service rejects or fails a request."""

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        key: str | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.key = key
        self.code = code
