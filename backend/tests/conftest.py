"""
SalesTrack Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixtures (function-scoped):
    ├── fake_store: In-memory versioned DocumentStore with call counters,
    │               injectable errors and a hook simulating concurrent writers
    ├── synchronizer: DocumentSynchronizer over fake_store (no real sleeps)
    ├── session: DocumentSession over the seeded document
    └── test_client: HTTPX AsyncClient wired to an app using `synchronizer`
"""

import asyncio
import copy
import os
import tempfile
from typing import Callable, Dict, List, Optional, Tuple
from unittest.mock import AsyncMock

# Override settings for testing BEFORE any salestrack imports
os.environ["STORE_BACKEND"] = "file"
os.environ["FILE_STORE_ROOT"] = tempfile.mkdtemp(prefix="salestrack_test_")
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["WRITE_BACKOFF_SECONDS"] = "0"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from salestrack.codec import decode_document, encode_document
from salestrack.dependencies import DocumentSession
from salestrack.exceptions import DocumentNotFoundError, VersionConflictError
from salestrack.models.document import Document
from salestrack.services.cache import DocumentCache
from salestrack.services.store_base import DocumentStore, StoredDocument
from salestrack.services.synchronizer import DocumentSynchronizer

DOCUMENT_PATH = "database.json"


class FakeDocumentStore(DocumentStore):
    """
    Versioned in-memory store mirroring the GitHub contents API contract.

    Every call yields to the event loop once, so concurrent writers
    interleave at the same points they would against the real store.
    Content goes through the transport codec on the way in.

    Knobs:
        fetch_errors / store_errors  exceptions raised (in order) by the
                                     next calls before normal behavior
        on_store                     called at the start of every store(),
                                     e.g. to land a concurrent write first
    """

    name = "memory"

    def __init__(self) -> None:
        self.documents: Dict[str, Tuple[Document, str]] = {}
        self.fetch_calls = 0
        self.store_calls = 0
        self.fetch_errors: List[Exception] = []
        self.store_errors: List[Exception] = []
        self.on_store: Optional[Callable[[], None]] = None
        self.healthy = True
        self._revision = 0

    def put_remote(self, path: str, content: Document) -> str:
        """Write out of band (another process) and return the new version."""
        self._revision += 1
        version = f"sha{self._revision}"
        self.documents[path] = (decode_document(encode_document(content)), version)
        return version

    def remote(self, path: str = DOCUMENT_PATH) -> Document:
        return copy.deepcopy(self.documents[path][0])

    async def fetch(self, path: str) -> StoredDocument:
        self.fetch_calls += 1
        await asyncio.sleep(0)
        if self.fetch_errors:
            raise self.fetch_errors.pop(0)
        if path not in self.documents:
            raise DocumentNotFoundError(path=path)
        content, version = self.documents[path]
        return StoredDocument(content=copy.deepcopy(content), version=version)

    async def store(self, path: str, content: Document, expected_version: Optional[str]) -> str:
        self.store_calls += 1
        if self.on_store is not None:
            self.on_store()
        await asyncio.sleep(0)
        if self.store_errors:
            raise self.store_errors.pop(0)
        current = self.documents.get(path)
        current_version = current[1] if current else None
        if current_version != expected_version:
            raise VersionConflictError(path=path, expected_version=expected_version)
        return self.put_remote(path, content)

    async def health_check(self) -> bool:
        return self.healthy


class FakeClock:
    """Manually advanced clock for cache validity tests."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def sample_document() -> Document:
    """A small document distinct from the seed."""
    return {
        "categories": [
            {"id": "cat_10", "name": "Ropa", "description": "", "active": True},
        ],
        "sellers": [
            {
                "id": "v_10",
                "name": "Lucía Pérez",
                "login": "lucia_p",
                "secret": "s3cret",
                "status": "active",
                "store": "Tienda Sur",
            },
        ],
        "products": [
            {
                "id": "p_10",
                "name": "Camisa",
                "categoryId": "cat_10",
                "price": 25.0,
                "stock": 8,
                "minStock": 3,
                "status": "active",
            },
        ],
        "sales": [],
    }


@pytest.fixture
def fake_store() -> FakeDocumentStore:
    return FakeDocumentStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleep_mock() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def synchronizer(fake_store, clock, sleep_mock) -> DocumentSynchronizer:
    return DocumentSynchronizer(
        store=fake_store,
        cache=DocumentCache(ttl_seconds=30, clock=clock),
        path=DOCUMENT_PATH,
        max_retries=3,
        backoff_seconds=0.5,
        sleep=sleep_mock,
    )


@pytest_asyncio.fixture
async def session(synchronizer) -> DocumentSession:
    """Session over the default seed (first read seeds the fake store)."""
    document = await synchronizer.read()
    return DocumentSession(synchronizer, document)


@pytest_asyncio.fixture
async def test_client(synchronizer):
    """
    HTTPX AsyncClient talking to an app built around `synchronizer`.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from salestrack.main import create_app

    app = create_app(synchronizer=synchronizer)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
