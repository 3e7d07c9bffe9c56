"""Global pytest configuration.

``pyproject.toml`` puts the project root on ``sys.path`` (``pythonpath = ["."]``),
so the suite runs from a plain checkout as well as from an installed package.
"""

from __future__ import annotations

import pytest

from s3db.document_store import DocumentStore
from s3db.testing.memory_store import InMemoryObjectClient


@pytest.fixture
def client() -> InMemoryObjectClient:
    return InMemoryObjectClient(buckets=["b1"])


@pytest.fixture
def store(client: InMemoryObjectClient) -> DocumentStore:
    return DocumentStore.initialize(client, "b1", "c1", auto_create=True)
