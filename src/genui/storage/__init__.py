from .generation_store import (
    GenerationFilter,
    GenerationPage,
    GenerationRecord,
    GenerationService,
    GenerationStore,
    InMemoryGenerationStore,
)
from .sqlite_store import SQLiteGenerationStore
from .store_factory import GenerationStoreFactory, create_generation_store

__all__ = [
    "GenerationFilter",
    "GenerationPage",
    "GenerationRecord",
    "GenerationService",
    "GenerationStore",
    "GenerationStoreFactory",
    "InMemoryGenerationStore",
    "SQLiteGenerationStore",
    "create_generation_store",
]
