from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from s3db.config import get_s3db_config
from s3db.document_store import DEFAULT_URL_EXPIRES_IN, DocumentStore
from s3db.errors import S3dbError, ValidationError
from s3db.media import MediaFile
from s3db.store.boto3_client import Boto3ObjectClient
from s3db.store.object_store import ObjectStoreClient


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="s3db", description="JSON documents on S3.")
    parser.add_argument("--bucket", type=str, required=True)
    parser.add_argument("--collection", type=str, required=True)
    parser.add_argument("--auto-create", action="store_true", default=False)
    parser.add_argument("--region", type=str, default=None)
    parser.add_argument("--access-key-id", type=str, default=None)
    parser.add_argument("--secret-access-key", type=str, default=None)
    parser.add_argument("--endpoint-url", type=str, default=None)
    parser.add_argument("--url-style", choices=["virtual", "path"], default="virtual")
    parser.add_argument("--verbose", "-v", action="store_true", default=False)

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("ids", help="List document ids in the collection.")

    get = commands.add_parser("get", help="Print a document.")
    get.add_argument("id")

    put = commands.add_parser("put", help="Upload a JSON document from a file or '-' for stdin.")
    put.add_argument("source")

    delete = commands.add_parser("delete", help="Delete a document and all of its media.")
    delete.add_argument("id")

    url = commands.add_parser("url", help="Print a signed read URL for a document.")
    url.add_argument("id")
    url.add_argument("--expires-in", type=int, default=DEFAULT_URL_EXPIRES_IN)

    media = commands.add_parser("media", help="List media attached to a document.")
    media.add_argument("id")

    upload_media = commands.add_parser("upload-media", help="Attach local files to a document.")
    upload_media.add_argument("id")
    upload_media.add_argument("files", nargs="+", type=Path)
    upload_media.add_argument("--max-workers", type=int, default=None)

    delete_media = commands.add_parser("delete-media", help="Remove named media from a document.")
    delete_media.add_argument("id")
    delete_media.add_argument("names", nargs="+")
    return parser


def _build_client(args: argparse.Namespace) -> ObjectStoreClient:
    config = get_s3db_config(
        region=args.region,
        access_key_id=args.access_key_id,
        secret_access_key=args.secret_access_key,
        endpoint_url=args.endpoint_url,
    )
    return Boto3ObjectClient.from_config(config, url_style=args.url_style)


def _read_document(source: str) -> dict[str, Any]:
    try:
        text = sys.stdin.read() if source == "-" else Path(source).read_text(encoding="utf-8")
    except OSError as exc:
        raise ValidationError(f"Cannot read {source}: {exc}") from exc
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"{source} is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ValidationError(f"{source} must contain a JSON object")
    return payload


def run_command(store: DocumentStore, args: argparse.Namespace) -> Any:
    if args.command == "ids":
        return store.list_document_ids()
    if args.command == "get":
        return store.get_document(args.id)
    if args.command == "put":
        return {"id": store.upload_document(_read_document(args.source))}
    if args.command == "delete":
        store.delete_document(args.id)
        return {"deleted": args.id}
    if args.command == "url":
        return {"url": store.get_document_url(args.id, expires_in=args.expires_in)}
    if args.command == "media":
        return [
            {"name": obj.name, "last_modified": obj.last_modified.isoformat()}
            for obj in store.get_document_media(args.id)
        ]
    if args.command == "upload-media":
        try:
            files = [MediaFile.from_path(path) for path in args.files]
        except OSError as exc:
            raise ValidationError(f"Cannot read media file: {exc}") from exc
        store.upload_document_media(args.id, files, max_workers=args.max_workers)
        return {"id": args.id, "uploaded": [f.name for f in files]}
    if args.command == "delete-media":
        store.delete_document_media(args.id, args.names)
        return {"id": args.id, "deleted": list(args.names)}
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None, *, client: ObjectStoreClient | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(message)s",
    )

    try:
        store = DocumentStore.initialize(
            client or _build_client(args),
            args.bucket,
            args.collection,
            auto_create=args.auto_create,
        )
        result = run_command(store, args)
    except S3dbError as exc:
        print(f"s3db: {type(exc).__name__}: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
