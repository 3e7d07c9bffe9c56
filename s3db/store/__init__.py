"""Object storage capability interface and adapters."""

from s3db.store.boto3_client import Boto3ObjectClient
from s3db.store.object_store import ListObjectsPage, ObjectStoreClient, StoredObject

__all__ = ["Boto3ObjectClient", "ListObjectsPage", "ObjectStoreClient", "StoredObject"]
