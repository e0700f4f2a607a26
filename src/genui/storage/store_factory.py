"""Factory helpers for generation store backends."""

import importlib
from typing import Any, Dict, Optional, Type

from genui.config.settings import get_genui_runtime_settings


def load_class(class_path: str) -> Type:
    """Load a class from a dotted import path."""
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)


def _normalize_provider_name(provider_name: str) -> str:
    normalized = provider_name.strip().lower()
    aliases: Dict[str, str] = {
        "in_memory": "memory",
        "inmemory": "memory",
        "sqlite3": "sqlite",
    }
    return aliases.get(normalized, normalized)


class GenerationStoreFactory:
    """Create generation stores by provider name."""

    provider_to_class = {
        "memory": "genui.storage.generation_store.InMemoryGenerationStore",
        "sqlite": "genui.storage.sqlite_store.SQLiteGenerationStore",
    }

    @classmethod
    def create(cls, provider_name: str, config: Any = None) -> Any:
        provider = _normalize_provider_name(provider_name)
        class_path = cls.provider_to_class.get(provider)
        if not class_path:
            raise ValueError(f"Unsupported generation store provider: {provider_name}")

        store_class = load_class(class_path)
        if config is None or isinstance(config, dict):
            return store_class(config or {})
        if hasattr(config, "to_dict"):
            return store_class(config.to_dict())
        if hasattr(config, "__dict__"):
            return store_class(vars(config))
        raise TypeError("Config must be a dict or an object with to_dict()/__dict__.")


def create_generation_store(provider: Optional[str] = None, **kwargs: Any) -> Any:
    """
    Build a store from runtime settings, overridden by explicit arguments.

    The sqlite provider reads its file from `database`, falling back to the
    configured `storage_path`.
    """
    settings = get_genui_runtime_settings()
    provider = provider or settings.storage_provider
    config = dict(kwargs)
    if _normalize_provider_name(provider) == "sqlite":
        config.setdefault("database", settings.storage_path)
    return GenerationStoreFactory.create(provider, config)
