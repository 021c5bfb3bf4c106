# ==============================================
# Tests for BufferSessionStore
# ==============================================

import pytest

from docbuffer.buffering import BufferManager, BufferSessionStore
from docbuffer.exceptions import UnknownSessionError

from conftest import size_of, sized_doc


@pytest.fixture
def store():
    return BufferSessionStore()


class TestSessionLifecycle:
    def test_create_and_get(self, store):
        token = store.create(cluster_id="c1", size_estimator=size_of)
        manager = store.get(token)
        assert isinstance(manager, BufferManager)
        assert manager.cluster_id == "c1"
        assert token in store
        assert len(store) == 1

    def test_tokens_are_unique(self, store):
        assert store.create() != store.create()

    def test_sessions_are_isolated(self, store):
        first = store.create(size_estimator=size_of)
        second = store.create(size_estimator=size_of)
        store.get(first).insert("db", "c", sized_doc(1, 10))
        assert store.get(second).get_buffer_stats("db", "c").item_count == 0

    def test_manager_kwargs_are_forwarded(self, store):
        token = store.create(provider="cosmos", max_item_count=7)
        assert store.get(token).config.max_item_count == 7

    def test_dispose_returns_leftovers(self, store):
        token = store.create(size_estimator=size_of)
        manager = store.get(token)
        manager.insert("db", "a", sized_doc(1, 10))
        manager.insert("db", "b", sized_doc(2, 10))

        leftovers = store.dispose(token)

        assert [d["_id"] for d in leftovers] == [1, 2]
        assert token not in store
        with pytest.raises(UnknownSessionError):
            store.get(token)

    def test_dispose_unknown_token(self, store):
        with pytest.raises(UnknownSessionError):
            store.dispose("nope")

    def test_unknown_session_is_a_key_error(self, store):
        with pytest.raises(KeyError):
            store.get("nope")

    def test_close_disposes_everything(self, store):
        busy = store.create(size_estimator=size_of)
        store.create()
        store.get(busy).insert("db", "a", sized_doc(1, 10))

        leftovers = store.close()

        assert list(leftovers) == [busy]
        assert len(store) == 0
