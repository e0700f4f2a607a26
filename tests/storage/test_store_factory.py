"""
Tests for the generation store factory.
"""

import pytest

from genui.config.settings import configure_genui_runtime, reset_genui_runtime
from genui.storage import (
    GenerationStoreFactory,
    InMemoryGenerationStore,
    SQLiteGenerationStore,
    create_generation_store,
)


@pytest.fixture(autouse=True)
def clean_runtime():
    reset_genui_runtime()
    yield
    reset_genui_runtime()


class TestGenerationStoreFactory:

    @pytest.mark.parametrize("name", ["memory", "in_memory", " InMemory "])
    def test_memory_aliases(self, name):
        assert isinstance(GenerationStoreFactory.create(name), InMemoryGenerationStore)

    @pytest.mark.parametrize("name", ["sqlite", "sqlite3"])
    def test_sqlite_aliases(self, name):
        store = GenerationStoreFactory.create(name, {"database": ":memory:"})
        assert isinstance(store, SQLiteGenerationStore)
        store.close()

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unsupported"):
            GenerationStoreFactory.create("postgres")

    def test_config_object_with_attributes(self):
        class Config:
            def __init__(self):
                self.database = ":memory:"

        store = GenerationStoreFactory.create("sqlite", Config())
        assert store.database == ":memory:"
        store.close()

    def test_bad_config_type(self):
        with pytest.raises(TypeError):
            GenerationStoreFactory.create("memory", 42)


class TestCreateGenerationStore:
    """Runtime settings pick the backend unless overridden."""

    def test_default_is_memory(self):
        assert isinstance(create_generation_store(), InMemoryGenerationStore)

    def test_settings_choose_sqlite_path(self, tmp_path):
        path = str(tmp_path / "from_settings.db")
        configure_genui_runtime({"genui": {"storage_provider": "sqlite", "storage_path": path}})
        store = create_generation_store()
        assert isinstance(store, SQLiteGenerationStore)
        assert store.database == path
        store.close()

    def test_explicit_database_wins(self, tmp_path):
        path = str(tmp_path / "explicit.db")
        with create_generation_store("sqlite", database=path) as store:
            assert store.database == path
