"""Stable public imports for `s3db`.

Lower-level helpers (key layout, adapters, test doubles) live in their submodules.
"""

from s3db.config import S3dbConfig, get_s3db_config
from s3db.document_store import Document, DocumentStore, Listing
from s3db.errors import (
    ConfigurationError,
    NotFoundError,
    ParseError,
    PreconditionError,
    S3dbError,
    StorageError,
    ValidationError,
)
from s3db.media import MediaFile
from s3db.store import Boto3ObjectClient, ObjectStoreClient, StoredObject

__all__ = [
    "Boto3ObjectClient",
    "ConfigurationError",
    "Document",
    "DocumentStore",
    "Listing",
    "MediaFile",
    "NotFoundError",
    "ObjectStoreClient",
    "ParseError",
    "PreconditionError",
    "S3dbConfig",
    "S3dbError",
    "StorageError",
    "StoredObject",
    "ValidationError",
    "get_s3db_config",
]
