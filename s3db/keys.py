from __future__ import annotations

from s3db.errors import ValidationError

DELIMITER = "/"
DOCUMENT_FILENAME = "data.json"


def validate_segment(value: object, *, field: str) -> str:
    """Return ``value`` when it can be used as exactly one key path component."""

    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string, got {type(value).__name__}")
    if not value:
        raise ValidationError(f"{field} is required")
    if DELIMITER in value:
        raise ValidationError(f"{field} must not contain '{DELIMITER}': {value!r}")
    if value in {".", ".."}:
        raise ValidationError(f"{field} must not be a relative path marker: {value!r}")
    return value


def collection_prefix(collection: str) -> str:
    return f"{collection}{DELIMITER}"


def document_prefix(collection: str, document_id: str) -> str:
    return f"{collection}{DELIMITER}{document_id}{DELIMITER}"


def document_key(collection: str, document_id: str) -> str:
    return document_prefix(collection, document_id) + DOCUMENT_FILENAME


def media_key(collection: str, document_id: str, name: str) -> str:
    return document_prefix(collection, document_id) + name


def child_segment(key: str, prefix: str | None) -> str:
    """Strip ``prefix`` from ``key`` and return the next path component.

    ``child_segment("c1/u1/", "c1/")`` -> ``"u1"``.
    """

    rest = key[len(prefix) :] if prefix and key.startswith(prefix) else key
    return rest.split(DELIMITER, 1)[0]
