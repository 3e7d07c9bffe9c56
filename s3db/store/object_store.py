from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True)
class StoredObject:
    """A leaf object: its key (or leaf name, once scoped) and modification time."""

    name: str
    last_modified: datetime


@dataclass
class ListObjectsPage:
    """One page of a bucket listing.

    ``common_prefixes`` holds full prefixes as returned by the provider (``c1/u1/``).
    """

    contents: list[StoredObject] = field(default_factory=list)
    common_prefixes: list[str] = field(default_factory=list)


class ObjectStoreClient(Protocol):
    """The object storage operations a DocumentStore needs.

    Adapters raise ``NotFoundError`` for missing keys on ``get_object`` and wrap every
    other provider failure in ``StorageError``.
    """

    def list_buckets(self) -> list[str]:
        """Return the names of all buckets visible to the credentials."""

    def create_bucket(self, bucket: str) -> None:
        """Create ``bucket``."""

    def list_objects(
        self,
        bucket: str,
        *,
        prefix: str | None = None,
        delimiter: str | None = None,
    ) -> ListObjectsPage:
        """List one page of objects under ``prefix``.

        With a delimiter, keys below the next delimiter are grouped into common
        prefixes; without one the listing covers every key under ``prefix``.
        """

    def get_object(self, bucket: str, key: str) -> bytes:
        """Read the full object body."""

    def put_object(
        self,
        bucket: str,
        key: str,
        body: bytes = b"",
        *,
        content_type: str | None = None,
    ) -> None:
        """Create or overwrite ``key``."""

    def delete_objects(self, bucket: str, keys: Sequence[str]) -> None:
        """Delete ``keys`` in batched calls; keys that do not exist are ignored."""

    def generate_signed_url(self, bucket: str, key: str, *, expires_in: int) -> str:
        """Return a time-limited URL granting read access to ``key``."""
