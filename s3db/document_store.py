from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any

from s3db import keys
from s3db.config import S3dbConfig
from s3db.errors import NotFoundError, ParseError, PreconditionError, ValidationError
from s3db.media import MediaFile
from s3db.observability import log_event
from s3db.store.boto3_client import Boto3ObjectClient
from s3db.store.object_store import ObjectStoreClient, StoredObject

logger = logging.getLogger(__name__)

Document = dict[str, Any]

DEFAULT_URL_EXPIRES_IN = 900


@dataclass
class Listing:
    """Entries directly under one prefix.

    ``folder_names`` are the next path components only, de-duplicated in listing order.
    ``objects`` are leaf objects named relative to the listed prefix.
    """

    folder_names: list[str] = field(default_factory=list)
    objects: list[StoredObject] = field(default_factory=list)


class DocumentStore:
    """JSON documents and their media kept under ``{collection}/{id}/`` keys of one bucket.

    Build instances with :meth:`initialize` (or :meth:`from_config`); the returned
    handle has both its bucket and collection bound. Writes are last-writer-wins and
    multi-object operations are not transactional.
    """

    def __init__(self, client: ObjectStoreClient):
        self._client = client
        self._bucket_name: str | None = None
        self._collection_name: str | None = None

    @classmethod
    def initialize(
        cls,
        client: ObjectStoreClient,
        bucket_name: str,
        collection_name: str,
        *,
        auto_create: bool = False,
    ) -> DocumentStore:
        """Verify the bucket and collection, then return a bound store.

        With ``auto_create=False`` a missing bucket or collection raises
        ``NotFoundError``. With ``auto_create=True`` the bucket is created and the
        collection gets a zero-length ``{collection}/`` placeholder object.
        """

        if not isinstance(bucket_name, str) or not bucket_name.strip():
            raise ValidationError("bucket_name is required")
        keys.validate_segment(collection_name, field="collection_name")

        store = cls(client)
        if bucket_name not in client.list_buckets():
            if not auto_create:
                raise NotFoundError(f"Bucket not found: {bucket_name}")
            client.create_bucket(bucket_name)
            log_event(logger, "s3db.create_bucket", bucket=bucket_name)
        store._bucket_name = bucket_name

        if collection_name not in store.list_collection_names():
            if not auto_create:
                raise NotFoundError(
                    f"Collection not found in bucket {bucket_name}: {collection_name}"
                )
            client.put_object(bucket_name, keys.collection_prefix(collection_name))
            log_event(
                logger, "s3db.create_collection", bucket=bucket_name, collection=collection_name
            )
        store._collection_name = collection_name

        log_event(
            logger,
            "s3db.initialize",
            bucket=bucket_name,
            collection=collection_name,
            auto_create=auto_create,
        )
        return store

    @classmethod
    def from_config(
        cls,
        config: S3dbConfig,
        bucket_name: str,
        collection_name: str,
        *,
        auto_create: bool = False,
    ) -> DocumentStore:
        client = Boto3ObjectClient.from_config(config)
        return cls.initialize(client, bucket_name, collection_name, auto_create=auto_create)

    @property
    def bucket_name(self) -> str:
        if not self._bucket_name:
            raise PreconditionError("bucket_name is not bound; use DocumentStore.initialize")
        return self._bucket_name

    @property
    def collection_name(self) -> str:
        if not self._collection_name:
            raise PreconditionError("collection_name is not bound; use DocumentStore.initialize")
        return self._collection_name

    # Listing

    def list_entries(self, prefix: str | None = None) -> Listing:
        """List folders and leaf objects one level below ``prefix``."""

        page = self._client.list_objects(self.bucket_name, prefix=prefix, delimiter=keys.DELIMITER)
        listing = Listing()

        seen: set[str] = set()
        for common in page.common_prefixes:
            name = keys.child_segment(common, prefix)
            if name and name not in seen:
                seen.add(name)
                listing.folder_names.append(name)

        for obj in page.contents:
            name = keys.child_segment(obj.name, prefix)
            # The zero-length folder placeholder lists as the prefix itself.
            if not name:
                continue
            listing.objects.append(StoredObject(name=name, last_modified=obj.last_modified))
        return listing

    def list_collection_names(self) -> list[str]:
        return self.list_entries().folder_names

    def list_document_ids(self) -> list[str]:
        return self.list_entries(keys.collection_prefix(self.collection_name)).folder_names

    # Reading

    def get_document(self, document_id: str) -> Document:
        key = keys.document_key(
            self.collection_name, keys.validate_segment(document_id, field="document_id")
        )
        raw = self._client.get_object(self.bucket_name, key)
        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ParseError(f"Document body is not valid JSON: {key}") from exc
        if not isinstance(payload, dict):
            raise ParseError(f"Document body must be a JSON object: {key}")
        return payload

    def get_document_media(self, document_id: str) -> list[StoredObject]:
        prefix = keys.document_prefix(
            self.collection_name, keys.validate_segment(document_id, field="document_id")
        )
        return [
            obj
            for obj in self.list_entries(prefix).objects
            if obj.name != keys.DOCUMENT_FILENAME
        ]

    def get_document_url(
        self, document_id: str, *, expires_in: int = DEFAULT_URL_EXPIRES_IN
    ) -> str:
        key = keys.document_key(
            self.collection_name, keys.validate_segment(document_id, field="document_id")
        )
        return self._client.generate_signed_url(self.bucket_name, key, expires_in=expires_in)

    # Writing

    def upload_document(self, document: Mapping[str, Any]) -> str:
        """Write ``document`` as ``{collection}/{id}/data.json`` and return its id.

        A document without an ``id`` gets a fresh uuid4 and an empty folder placeholder.
        An existing ``id`` is overwritten in place (no merge).
        """

        bucket = self.bucket_name
        collection = self.collection_name

        document_id = document.get("id")
        generated = not document_id
        if generated:
            document_id = str(uuid.uuid4())
        else:
            keys.validate_segment(document_id, field="document.id")

        # Serialize before any write so a rejected document leaves no placeholder.
        try:
            body = json.dumps({**document, "id": document_id}, indent=4)
        except (TypeError, ValueError) as exc:
            raise ValidationError(
                f"Document id<{document_id}> is not JSON serializable: {exc}"
            ) from exc

        if generated:
            self._client.put_object(bucket, keys.document_prefix(collection, document_id))
        self._client.put_object(
            bucket,
            keys.document_key(collection, document_id),
            body.encode("utf-8"),
            content_type="application/json",
        )
        log_event(logger, "s3db.upload_document", collection=collection, id=document_id)
        return document_id

    def upload_document_media(
        self,
        document_id: str,
        files: Sequence[MediaFile],
        *,
        max_workers: int | None = None,
    ) -> None:
        """Upload ``files`` concurrently under the document prefix.

        Every write is attempted. The first failure is raised once all writes have
        finished; writes that already succeeded are kept.
        """

        bucket = self.bucket_name
        collection = self.collection_name
        keys.validate_segment(document_id, field="document_id")
        for media in files:
            keys.validate_segment(media.name, field="media name")
            if media.name == keys.DOCUMENT_FILENAME:
                raise ValidationError(f"media name {keys.DOCUMENT_FILENAME!r} is reserved")
        if not files:
            return

        def _upload_one(media: MediaFile) -> None:
            self._client.put_object(
                bucket,
                keys.media_key(collection, document_id, media.name),
                media.body,
                content_type=media.resolved_content_type,
            )

        workers = max(1, min(max_workers or len(files), len(files)))
        errors: list[BaseException] = []
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {executor.submit(_upload_one, media): media.name for media in files}
            for future in as_completed(futures):
                exc = future.exception()
                if exc is not None:
                    log_event(
                        logger,
                        "s3db.upload_media_failed",
                        level=logging.WARNING,
                        id=document_id,
                        name=futures[future],
                        error=exc,
                    )
                    errors.append(exc)

        log_event(
            logger,
            "s3db.upload_document_media",
            collection=collection,
            id=document_id,
            file_count=len(files),
            failed=len(errors) or None,
        )
        if errors:
            raise errors[0]

    def upload_document_with_media(
        self,
        document: Mapping[str, Any],
        files: Sequence[MediaFile],
        *,
        max_workers: int | None = None,
    ) -> str:
        """Upload the document, then its media. A media failure leaves the document stored."""

        document_id = self.upload_document(document)
        self.upload_document_media(document_id, files, max_workers=max_workers)
        return document_id

    # Deleting

    def delete_document(self, document_id: str) -> None:
        bucket = self.bucket_name
        prefix = keys.document_prefix(
            self.collection_name, keys.validate_segment(document_id, field="document_id")
        )
        page = self._client.list_objects(bucket, prefix=prefix)
        object_keys = [obj.name for obj in page.contents]
        if not object_keys:
            raise NotFoundError(f"No objects found for document id<{document_id}>. Nothing to delete.")
        self._client.delete_objects(bucket, object_keys)
        log_event(
            logger,
            "s3db.delete_document",
            collection=self.collection_name,
            id=document_id,
            object_count=len(object_keys),
        )

    def delete_document_media(self, document_id: str, names: Sequence[str]) -> None:
        bucket = self.bucket_name
        collection = self.collection_name
        keys.validate_segment(document_id, field="document_id")
        object_keys = [
            keys.media_key(collection, document_id, keys.validate_segment(name, field="media name"))
            for name in names
        ]
        if not object_keys:
            return
        self._client.delete_objects(bucket, object_keys)
        log_event(
            logger,
            "s3db.delete_document_media",
            collection=collection,
            id=document_id,
            object_count=len(object_keys),
        )
