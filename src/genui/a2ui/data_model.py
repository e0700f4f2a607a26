from __future__ import annotations

from copy import deepcopy
from typing import Any, Dict, List, Mapping


def _decode_pointer_token(token: str) -> str:
    return str(token).replace("~1", "/").replace("~0", "~")


def _encode_pointer_token(token: str) -> str:
    return str(token).replace("~", "~0").replace("/", "~1")


def pointer_segments(path: str) -> List[str]:
    text = str(path or "").strip()
    if not text or text == "/":
        return []
    if not text.startswith("/"):
        raise ValueError(f"JSON Pointer must start with '/': {path}")
    return [_decode_pointer_token(part) for part in text[1:].split("/")]


def to_json_pointer(segments: List[str]) -> str:
    if not segments:
        return "/"
    return "/" + "/".join(_encode_pointer_token(segment) for segment in segments)


def _merge_dict(base: Dict[str, Any], incoming: Mapping[str, Any]) -> Dict[str, Any]:
    out = dict(base)
    for key, value in incoming.items():
        if isinstance(value, Mapping) and isinstance(out.get(key), dict):
            out[key] = _merge_dict(out[key], value)
        else:
            out[key] = deepcopy(value)
    return out


def get_at_pointer(model: Mapping[str, Any], path: str, default: Any = None) -> Any:
    cursor: Any = model
    for segment in pointer_segments(path):
        if isinstance(cursor, Mapping) and segment in cursor:
            cursor = cursor[segment]
        elif isinstance(cursor, list) and segment.isdigit() and int(segment) < len(cursor):
            cursor = cursor[int(segment)]
        else:
            return default
    return cursor


def apply_data_model_update(
    model: Mapping[str, Any],
    *,
    path: str,
    value: Any = None,
    operation: str = "set",
) -> Dict[str, Any]:
    """
    Return a new data model with one update applied at a JSON pointer.

    `set` replaces the value, `merge` deep-merges mappings (falls back to set
    for non-mappings) and `delete` removes the key. The input is never mutated.
    """
    next_model: Dict[str, Any] = deepcopy(dict(model or {}))
    segments = pointer_segments(path)

    if not segments:
        if operation == "delete":
            return {}
        if operation == "merge" and isinstance(value, Mapping):
            return _merge_dict(next_model, value)
        return deepcopy(dict(value)) if isinstance(value, Mapping) else next_model

    cursor: Dict[str, Any] = next_model
    for segment in segments[:-1]:
        current = cursor.get(segment)
        if not isinstance(current, dict):
            if operation == "delete":
                return next_model
            current = {}
            cursor[segment] = current
        cursor = current

    leaf = segments[-1]
    if operation == "delete":
        cursor.pop(leaf, None)
    elif operation == "merge" and isinstance(value, Mapping) and isinstance(cursor.get(leaf), dict):
        cursor[leaf] = _merge_dict(cursor[leaf], value)
    else:
        cursor[leaf] = deepcopy(value)
    return next_model
