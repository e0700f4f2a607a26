from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Iterable, Optional, Tuple

from dotenv import load_dotenv

from genui.common.exceptions import ConfigurationError
from genui.util.file_utils import from_json_or_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "configs" / "genui_config.yaml"
ENV_PREFIX = "GENUI_"

_PROMPT_LEVELS = ("full", "minimal")


@dataclass(frozen=True)
class GenUIRuntimeSettings:
    json_fence_languages: Tuple[str, ...] = ("json",)
    jsx_fence_languages: Tuple[str, ...] = ("jsx", "tsx")
    tolerant_json: bool = True
    expose_provisional: bool = True
    max_jsx_depth: int = 64
    fallback_show_raw_payload: bool = True
    catalog_prompt_level: str = "full"
    storage_provider: str = "memory"
    storage_path: str = "storage/genui/generations.db"


_RUNTIME_SETTINGS = GenUIRuntimeSettings()

__all__ = [
    "GenUIRuntimeSettings",
    "configure_genui_runtime",
    "get_genui_runtime_settings",
    "load_genui_config",
    "reset_genui_runtime",
]


def _normalize_int(value: Any, default: int, *, minimum: int = 0) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    if parsed < minimum:
        return default
    return parsed


def _normalize_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("1", "true", "yes", "on"):
        return True
    if text in ("0", "false", "no", "off"):
        return False
    return default


def _normalize_languages(value: Any, default: Tuple[str, ...]) -> Tuple[str, ...]:
    if value is None:
        return default
    if isinstance(value, str):
        items: Iterable[Any] = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        return default
    cleaned = tuple(str(item).strip().lower() for item in items if str(item).strip())
    return cleaned or default


def configure_genui_runtime(config_dict: dict[str, Any]) -> GenUIRuntimeSettings:
    """Configure process-wide genui runtime defaults from a config mapping."""
    global _RUNTIME_SETTINGS

    block = config_dict.get("genui")
    if not isinstance(block, dict):
        return _RUNTIME_SETTINGS

    level = str(block.get("catalog_prompt_level") or _RUNTIME_SETTINGS.catalog_prompt_level).strip().lower()
    if level not in _PROMPT_LEVELS:
        logger.warning(f"Unknown catalog_prompt_level '{level}', keeping '{_RUNTIME_SETTINGS.catalog_prompt_level}'")
        level = _RUNTIME_SETTINGS.catalog_prompt_level

    _RUNTIME_SETTINGS = replace(
        _RUNTIME_SETTINGS,
        json_fence_languages=_normalize_languages(
            block.get("json_fence_languages"), _RUNTIME_SETTINGS.json_fence_languages
        ),
        jsx_fence_languages=_normalize_languages(
            block.get("jsx_fence_languages"), _RUNTIME_SETTINGS.jsx_fence_languages
        ),
        tolerant_json=_normalize_bool(block.get("tolerant_json"), _RUNTIME_SETTINGS.tolerant_json),
        expose_provisional=_normalize_bool(
            block.get("expose_provisional"), _RUNTIME_SETTINGS.expose_provisional
        ),
        max_jsx_depth=_normalize_int(block.get("max_jsx_depth"), _RUNTIME_SETTINGS.max_jsx_depth, minimum=1),
        fallback_show_raw_payload=_normalize_bool(
            block.get("fallback_show_raw_payload"), _RUNTIME_SETTINGS.fallback_show_raw_payload
        ),
        catalog_prompt_level=level,
        storage_provider=str(block.get("storage_provider") or _RUNTIME_SETTINGS.storage_provider).strip().lower(),
        storage_path=str(block.get("storage_path") or _RUNTIME_SETTINGS.storage_path),
    )
    return _RUNTIME_SETTINGS


def get_genui_runtime_settings() -> GenUIRuntimeSettings:
    return _RUNTIME_SETTINGS


def reset_genui_runtime() -> GenUIRuntimeSettings:
    global _RUNTIME_SETTINGS
    _RUNTIME_SETTINGS = GenUIRuntimeSettings()
    return _RUNTIME_SETTINGS


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for field_name in GenUIRuntimeSettings.__dataclass_fields__:
        value = os.getenv(f"{ENV_PREFIX}{field_name.upper()}")
        if value is not None:
            overrides[field_name] = value
    return overrides


def load_genui_config(path: Optional[str | Path] = None) -> GenUIRuntimeSettings:
    """
    Load runtime settings from a YAML/JSON file and the environment.

    `.env` is read first, then the file's `genui` block is applied, then any
    GENUI_<FIELD> environment variable overrides the file.
    """
    load_dotenv()

    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    try:
        config_data = from_json_or_yaml(config_path)
    except (OSError, ValueError) as exc:
        raise ConfigurationError(f"Failed to load genui config: {exc}", context={"path": str(config_path)}) from exc

    block = dict(config_data.get("genui") or {})
    block.update(_env_overrides())
    settings = configure_genui_runtime({"genui": block})
    logger.debug(f"genui runtime configured from {config_path}: {settings}")
    return settings
