# ==============================================
# Pytest Configuration and Fixtures
# ==============================================
#
# Shared fixtures for all tests. Documents used by the buffer tests
# carry their own size in a "size" field so that limits can be hit
# exactly; sized_doc() builds them.
#
# ==============================================

from unittest.mock import MagicMock

import pytest

from docbuffer.buffering import BufferManager, DocumentBuffer
from docbuffer.config import BufferConfig, reset_config
from docbuffer.storage import InsertManyResult


def sized_doc(doc_id, size):
    """Document whose estimated size is exactly `size`."""
    return {"_id": doc_id, "size": size}


def size_of(document):
    return document["size"]


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    """Every test starts without a cached config or BUFFER_/MONGO_/IMPORT_ env vars."""
    import os
    for name in list(os.environ):
        if name.startswith(("BUFFER_", "MONGO_", "IMPORT_")):
            monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def small_config():
    return BufferConfig(max_item_count=3, max_total_size_bytes=100, max_single_item_size_bytes=50)


@pytest.fixture
def buffer(small_config):
    return DocumentBuffer(small_config, size_of)


@pytest.fixture
def manager(small_config):
    return BufferManager(cluster_id="test-cluster", config=small_config, size_estimator=size_of)


@pytest.fixture
def writer():
    """Write executor that accepts every document."""
    mock = MagicMock()
    mock.insert_documents.side_effect = lambda database, collection, documents: InsertManyResult(
        inserted_count=len(documents)
    )
    return mock
