"""
Tests for generation stores and the auth-scoped service.

Every store test runs against both backends.
"""

import itertools
import time

import pytest

from genui.a2ui.component_catalog import build_default_catalog
from genui.a2ui.message_validator import validate_message
from genui.a2ui.surface_state import apply_message, empty_surface
from genui.common.exceptions import AuthorizationError, PersistenceError
from genui.session import AnonymousAuthProvider, ChatMessage, SessionSnapshot, StaticAuthProvider
from genui.storage import (
    GenerationFilter,
    GenerationService,
    InMemoryGenerationStore,
    SQLiteGenerationStore,
)


# ============================================================
# Fixtures
# ============================================================

@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    if request.param == "memory":
        backend = InMemoryGenerationStore()
    else:
        backend = SQLiteGenerationStore({"database": str(tmp_path / "nested" / "generations.db")})
    yield backend
    backend.close()


@pytest.fixture
def fake_clock(monkeypatch):
    """Strictly increasing timestamps so ordering is deterministic."""
    ticks = itertools.count(start=int(time.time()))
    monkeypatch.setattr(time, "time", lambda: float(next(ticks)))


@pytest.fixture
def snapshot():
    catalog = build_default_catalog()
    message = {"surfaceUpdate": {"components": [{"id": "m1", "component": {"Markdown": {"data": {"content": "x"}}}}]}}
    surface = apply_message(empty_surface(), validate_message(message, catalog))
    messages = (ChatMessage(role="user", content="hi"), ChatMessage(role="assistant", content="done"))
    return SessionSnapshot(messages=messages, surface_state=surface)


# ============================================================
# Store Tests
# ============================================================

class TestStore:
    """Behavior shared by all backends."""

    def test_save_and_get(self, store, snapshot):
        generation_id = store.save(snapshot, user_id="u1", name="First", description="demo")
        assert generation_id.startswith("gen_")
        assert store.get(generation_id) == snapshot
        record = store.get_record(generation_id, user_id="u1")
        assert record.name == "First"
        assert record.version == 1

    def test_update_bumps_version(self, store, snapshot, fake_clock):
        generation_id = store.save(snapshot, user_id="u1", name="First")
        before = store.get_record(generation_id)
        same_id = store.save(SessionSnapshot(), user_id="u1", name="Renamed", generation_id=generation_id)
        after = store.get_record(generation_id)
        assert same_id == generation_id
        assert after.version == 2
        assert after.name == "Renamed"
        assert after.created_at == before.created_at
        assert after.updated_at > before.updated_at
        assert store.get(generation_id) == SessionSnapshot()

    def test_explicit_id_for_new_record(self, store, snapshot):
        assert store.save(snapshot, user_id="u1", name="Pinned", generation_id="gen_fixed") == "gen_fixed"
        assert store.get_record("gen_fixed").version == 1

    def test_other_users_records_are_invisible(self, store, snapshot):
        generation_id = store.save(snapshot, user_id="u1", name="Mine")
        assert store.get(generation_id, user_id="u2") is None
        assert store.delete(generation_id, user_id="u2") is False
        assert store.get(generation_id, user_id="u1") == snapshot

    def test_saving_over_another_users_record_rejected(self, store, snapshot):
        generation_id = store.save(snapshot, user_id="u1", name="Mine")
        with pytest.raises(AuthorizationError):
            store.save(snapshot, user_id="u2", name="Theirs", generation_id=generation_id)

    def test_invalid_record_rejected(self, store, snapshot):
        with pytest.raises(PersistenceError):
            store.save(snapshot, user_id="u1", name="")
        with pytest.raises(PersistenceError):
            store.save({"messages": []}, user_id="u1", name="raw dict")

    def test_delete(self, store, snapshot):
        generation_id = store.save(snapshot, user_id="u1", name="Gone")
        assert store.delete(generation_id, user_id="u1") is True
        assert store.get(generation_id) is None
        assert store.delete(generation_id) is False

    def test_list_newest_first_with_paging(self, store, snapshot, fake_clock):
        ids = [store.save(snapshot, user_id="u1", name=f"Gen {index}") for index in range(5)]
        store.save(snapshot, user_id="u2", name="Other user")
        store.save(snapshot, user_id="u1", name="Gen 0 again", generation_id=ids[0])

        page = store.list_records(GenerationFilter(user_id="u1", limit=2))
        assert [record.id for record in page.records] == [ids[0], ids[4]]
        assert page.total == 5
        assert page.has_more

        last = store.list_records(GenerationFilter(user_id="u1", limit=2, offset=4))
        assert [record.id for record in last.records] == [ids[1]]
        assert not last.has_more
        assert len(store.list(GenerationFilter(user_id="u1"))) == 5

    def test_search_matches_name_and_description(self, store, snapshot):
        store.save(snapshot, user_id="u1", name="Roman History", description="timeline")
        store.save(snapshot, user_id="u1", name="Maps", description="a HISTORY of borders")
        store.save(snapshot, user_id="u1", name="100% done_ok")
        assert store.list_records(GenerationFilter(user_id="u1", search="history")).total == 2
        assert store.list_records(GenerationFilter(user_id="u1", search="0%")).total == 1
        assert store.list_records(GenerationFilter(user_id="u1", search="_o")).total == 1
        assert store.list_records(GenerationFilter(user_id="u1", search="nothing")).total == 0

    def test_context_manager_closes(self, snapshot):
        with InMemoryGenerationStore() as store:
            generation_id = store.save(snapshot, user_id="u1", name="Temp")
            assert store.get(generation_id) is not None
        assert store.get(generation_id) is None


class TestFilter:

    @pytest.mark.parametrize("limit", [0, 101])
    def test_limit_bounds(self, limit):
        with pytest.raises(ValueError):
            GenerationFilter(limit=limit)

    def test_defaults(self):
        generation_filter = GenerationFilter()
        assert generation_filter.limit == 20
        assert generation_filter.offset == 0


def test_sqlite_persists_across_connections(tmp_path, snapshot):
    path = str(tmp_path / "generations.db")
    with SQLiteGenerationStore({"database": path}) as first:
        generation_id = first.save(snapshot, user_id="u1", name="Durable")
    with SQLiteGenerationStore({"database": path}) as second:
        assert second.get(generation_id, user_id="u1") == snapshot


# ============================================================
# Service Tests
# ============================================================

class TestGenerationService:
    """Every call is scoped to the signed-in user."""

    def test_scoped_to_current_user(self, snapshot):
        store = InMemoryGenerationStore()
        alice = GenerationService(store, StaticAuthProvider("alice"))
        bob = GenerationService(store, StaticAuthProvider("bob"))

        generation_id = alice.save(snapshot, "Alice's board")
        assert alice.get(generation_id) == snapshot
        assert alice.get_record(generation_id).user_id == "alice"
        assert bob.get(generation_id) is None
        assert bob.delete(generation_id) is False
        assert bob.list().total == 0
        assert alice.list(search="board").total == 1
        assert alice.delete(generation_id) is True

    def test_anonymous_user_rejected(self, snapshot):
        service = GenerationService(InMemoryGenerationStore(), AnonymousAuthProvider())
        with pytest.raises(AuthorizationError):
            service.save(snapshot, "nope")
        with pytest.raises(AuthorizationError):
            service.list()
