from __future__ import annotations

from pathlib import Path
import sys

import httpx
import pytest


# Ensure the repository root (parent of ./tests) is importable during pytest collection.
# This avoids ModuleNotFoundError for `import docstore` under pytest import modes
# that don't automatically prepend the cwd/rootdir to sys.path.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from docstore import Client, InMemoryDocumentStore  # noqa: E402

from tests.reference_server import INDEX_MAP, SampleDocument, create_app  # noqa: E402

BASE_URL = "http://docstore.test"


@pytest.fixture
def backing_store() -> InMemoryDocumentStore:
    """The store living behind the reference server."""
    return InMemoryDocumentStore()


@pytest.fixture
def client(backing_store: InMemoryDocumentStore) -> Client:
    transport = httpx.ASGITransport(app=create_app(backing_store))
    return Client(BASE_URL, transport=transport)


@pytest.fixture
def remote_store(client: Client):
    return client.get_store("", SampleDocument, INDEX_MAP)


@pytest.fixture(params=["local", "remote"])
def store(request: pytest.FixtureRequest, client: Client):
    """Each contract test runs once per backend."""
    if request.param == "local":
        return InMemoryDocumentStore()
    return client.get_store("", SampleDocument, INDEX_MAP)


@pytest.fixture
def mock_client():
    """Build a client whose requests are answered by `handler(request) -> httpx.Response`."""

    def _make(handler, **kwargs) -> Client:
        return Client(BASE_URL, transport=httpx.MockTransport(handler), **kwargs)

    return _make
