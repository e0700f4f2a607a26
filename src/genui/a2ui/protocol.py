"""
A2UI wire-level types shared by the validator, the reducer and the renderer.

Envelope:

    {"surfaceUpdate": {"components": [
        {"id": "t1", "component": {"Timeline": {"data": {...}, "options": {...}}}}
    ]}}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

SURFACE_UPDATE_KEY = "surfaceUpdate"
COMPONENTS_KEY = "components"
DATA_MODEL_UPDATE_KEY = "dataModelUpdate"

DATA_MODEL_OPERATIONS = ("set", "merge", "delete")


def format_path(path: Sequence[Any]) -> str:
    """Render a field path the way it is shown to people: events.[0].start_date.year"""
    return ".".join(str(part) for part in path)


@dataclass(frozen=True)
class FieldError:
    path: Tuple[str, ...]
    message: str

    @property
    def dotted(self) -> str:
        return format_path(self.path)

    def prefixed(self, *prefix: str) -> "FieldError":
        return FieldError(path=tuple(prefix) + self.path, message=self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"path": list(self.path), "message": self.message}


@dataclass(frozen=True)
class ComponentEntry:
    """One entry of `surfaceUpdate.components` that passed validation.

    `known` is False when the type has no catalog entry. Such entries are
    forwarded untouched and rendered with the unknown-type fallback.
    """

    id: str
    type_name: str
    data: Dict[str, Any] = field(default_factory=dict)
    options: Dict[str, Any] = field(default_factory=dict)
    known: bool = True
    children: Tuple[str, ...] = ()

    def payload(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"data": self.data}
        if self.options:
            out["options"] = self.options
        return out

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"id": self.id, "component": {self.type_name: self.payload()}}
        if self.children:
            out["children"] = list(self.children)
        return out


@dataclass(frozen=True)
class InvalidEntry:
    entry: Any
    errors: Tuple[FieldError, ...]
    kind: str = "schema"
    component_id: Optional[str] = None
    type_name: Optional[str] = None
    index: Optional[int] = None
    # "root" (whole envelope), "entry" or "dataModelUpdate".
    scope: str = "entry"


@dataclass(frozen=True)
class DataModelUpdate:
    path: str
    value: Any = None
    operation: str = "set"


@dataclass(frozen=True)
class MessageValidation:
    valid: Tuple[ComponentEntry, ...] = ()
    invalid: Tuple[InvalidEntry, ...] = ()
    data_model_update: Optional[DataModelUpdate] = None
    # Message order of every entry as ("valid"|"invalid", position in that tuple).
    order: Tuple[Tuple[str, int], ...] = ()

    @property
    def ok(self) -> bool:
        return not self.invalid

    @property
    def unknown(self) -> Tuple[ComponentEntry, ...]:
        return tuple(entry for entry in self.valid if not entry.known)

    @property
    def is_root_failure(self) -> bool:
        return any(item.scope == "root" for item in self.invalid)

    def in_message_order(self) -> List[Any]:
        """Valid and invalid entries interleaved as they appeared on the wire."""
        if not self.order:
            return [*self.valid, *self.invalid]
        out: List[Any] = []
        for bucket, position in self.order:
            out.append(self.valid[position] if bucket == "valid" else self.invalid[position])
        return out


def component_type_of(raw_entry: Any) -> Optional[str]:
    """Best-effort type name of a raw entry, used for error reporting only."""
    if not isinstance(raw_entry, Mapping):
        return None
    component = raw_entry.get("component")
    if isinstance(component, Mapping) and len(component) == 1:
        return str(next(iter(component)))
    return None
