from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from s3db.config import S3dbConfig
from s3db.errors import NotFoundError, StorageError
from s3db.observability import log_event
from s3db.store.object_store import ListObjectsPage, ObjectStoreClient, StoredObject

logger = logging.getLogger(__name__)

T = TypeVar("T")

DELETE_BATCH_SIZE = 1000
_MISSING_KEY_CODES = {"404", "NoSuchKey", "NotFound"}


def _error_code(exc: BaseException) -> str:
    response = getattr(exc, "response", None) or {}
    error = response.get("Error") or {}
    return str(error.get("Code") or "")


class Boto3ObjectClient(ObjectStoreClient):
    """ObjectStoreClient backed by a boto3 S3 client (AWS S3 or MinIO)."""

    def __init__(self, client: Any):
        self._client = client

    @classmethod
    def from_config(
        cls,
        config: S3dbConfig,
        *,
        url_style: str = "virtual",
        client_kwargs: dict[str, Any] | None = None,
    ) -> Boto3ObjectClient:
        kwargs: dict[str, Any] = dict(client_kwargs or {})
        kwargs.update(config.client_kwargs())
        kwargs["config"] = Config(
            signature_version="s3v4",
            s3={"addressing_style": url_style},
        )
        return cls(boto3.client("s3", **kwargs))

    def _call(self, operation: str, fn: Callable[[], T], *, key: str | None = None) -> T:
        try:
            return fn()
        except ClientError as exc:
            code = _error_code(exc)
            log_event(
                logger,
                "s3db.storage_error",
                level=logging.WARNING,
                operation=operation,
                key=key,
                code=code,
            )
            raise StorageError(
                f"{operation} failed for {key or 'request'}: {exc}",
                operation=operation,
                key=key,
                code=code or None,
            ) from exc
        except BotoCoreError as exc:
            log_event(
                logger,
                "s3db.storage_error",
                level=logging.WARNING,
                operation=operation,
                key=key,
            )
            raise StorageError(
                f"{operation} failed for {key or 'request'}: {exc}",
                operation=operation,
                key=key,
            ) from exc

    def list_buckets(self) -> list[str]:
        response = self._call("list_buckets", self._client.list_buckets)
        return [b["Name"] for b in response.get("Buckets", []) or [] if b.get("Name")]

    def create_bucket(self, bucket: str) -> None:
        kwargs: dict[str, Any] = {"Bucket": bucket}
        region = getattr(getattr(self._client, "meta", None), "region_name", None)
        # us-east-1 rejects an explicit LocationConstraint.
        if isinstance(region, str) and region and region != "us-east-1":
            kwargs["CreateBucketConfiguration"] = {"LocationConstraint": region}
        self._call("create_bucket", lambda: self._client.create_bucket(**kwargs), key=bucket)

    def list_objects(
        self,
        bucket: str,
        *,
        prefix: str | None = None,
        delimiter: str | None = None,
    ) -> ListObjectsPage:
        kwargs: dict[str, Any] = {"Bucket": bucket}
        if prefix:
            kwargs["Prefix"] = prefix
        if delimiter:
            kwargs["Delimiter"] = delimiter

        response = self._call(
            "list_objects", lambda: self._client.list_objects_v2(**kwargs), key=prefix
        )
        page = ListObjectsPage()
        for obj in response.get("Contents", []) or []:
            name = obj.get("Key")
            last_modified = obj.get("LastModified")
            if name and last_modified:
                page.contents.append(StoredObject(name=name, last_modified=last_modified))
        for entry in response.get("CommonPrefixes", []) or []:
            value = entry.get("Prefix")
            if value:
                page.common_prefixes.append(value)
        return page

    def get_object(self, bucket: str, key: str) -> bytes:
        try:
            response = self._client.get_object(Bucket=bucket, Key=key)
        except ClientError as exc:
            if _error_code(exc) in _MISSING_KEY_CODES:
                raise NotFoundError(f"Object not found: s3://{bucket}/{key}") from exc
            raise StorageError(
                f"get_object failed for {key}: {exc}",
                operation="get_object",
                key=key,
                code=_error_code(exc) or None,
            ) from exc
        except BotoCoreError as exc:
            raise StorageError(
                f"get_object failed for {key}: {exc}", operation="get_object", key=key
            ) from exc
        return self._call("get_object", response["Body"].read, key=key)

    def put_object(
        self,
        bucket: str,
        key: str,
        body: bytes = b"",
        *,
        content_type: str | None = None,
    ) -> None:
        kwargs: dict[str, Any] = {"Bucket": bucket, "Key": key, "Body": body}
        if content_type:
            kwargs["ContentType"] = content_type
        self._call("put_object", lambda: self._client.put_object(**kwargs), key=key)

    def delete_objects(self, bucket: str, keys: Sequence[str]) -> None:
        keys = list(keys)
        chunks = [keys[i : i + DELETE_BATCH_SIZE] for i in range(0, len(keys), DELETE_BATCH_SIZE)]
        for chunk in chunks:
            response = self._call(
                "delete_objects",
                lambda chunk=chunk: self._client.delete_objects(
                    Bucket=bucket,
                    Delete={"Objects": [{"Key": key} for key in chunk], "Quiet": True},
                ),
                key=chunk[0],
            )
            errors = response.get("Errors") or []
            if errors:
                first = errors[0]
                raise StorageError(
                    f"delete_objects failed for {len(errors)} key(s), "
                    f"first {first.get('Key')}: {first.get('Message') or first.get('Code')}",
                    operation="delete_objects",
                    key=first.get("Key"),
                    code=first.get("Code"),
                )

    def generate_signed_url(self, bucket: str, key: str, *, expires_in: int) -> str:
        return self._call(
            "generate_signed_url",
            lambda: self._client.generate_presigned_url(
                "get_object",
                Params={"Bucket": bucket, "Key": key},
                ExpiresIn=expires_in,
            ),
            key=key,
        )
