"""Test doubles for s3db."""

from s3db.testing.memory_store import InMemoryObjectClient, StoreOp

__all__ = ["InMemoryObjectClient", "StoreOp"]
