"""
Surface state reducer.

A surface is an ordered mapping of component id -> last validated payload.
`apply_message` is pure: it returns a new `SurfaceState` and never touches the
one it was given.

Rules:
- an id already on the surface is replaced wholesale but keeps its position;
- new ids are appended in message order;
- duplicate ids inside one message: the last payload wins, one slot;
- unknown types keep a slot (known=False) and can be upgraded in place later;
- invalid entries and omitted ids leave the surface untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from genui.a2ui.data_model import apply_data_model_update
from genui.a2ui.protocol import ComponentEntry, MessageValidation


@dataclass(frozen=True)
class SurfaceEntry:
    id: str
    type_name: str
    data: Dict[str, Any] = field(default_factory=dict)
    options: Dict[str, Any] = field(default_factory=dict)
    sequence: int = 0
    known: bool = True
    children: Tuple[str, ...] = ()

    def payload(self) -> Dict[str, Any]:
        return {"type_name": self.type_name, "data": self.data, "options": self.options}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type_name": self.type_name,
            "data": self.data,
            "options": self.options,
            "sequence": self.sequence,
            "known": self.known,
            "children": list(self.children),
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "SurfaceEntry":
        return cls(
            id=str(raw["id"]),
            type_name=str(raw["type_name"]),
            data=dict(raw.get("data") or {}),
            options=dict(raw.get("options") or {}),
            sequence=int(raw.get("sequence", 0)),
            known=bool(raw.get("known", True)),
            children=tuple(raw.get("children") or ()),
        )


@dataclass(frozen=True)
class SurfaceState:
    components: Dict[str, SurfaceEntry] = field(default_factory=dict)
    next_sequence: int = 0
    data_model: Dict[str, Any] = field(default_factory=dict)

    def ordered(self) -> List[SurfaceEntry]:
        return sorted(self.components.values(), key=lambda entry: entry.sequence)

    def ids(self) -> List[str]:
        return [entry.id for entry in self.ordered()]

    def get(self, component_id: str) -> Optional[SurfaceEntry]:
        return self.components.get(component_id)

    def payloads(self) -> Dict[str, Dict[str, Any]]:
        return {entry.id: entry.payload() for entry in self.ordered()}

    def __len__(self) -> int:
        return len(self.components)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "components": [entry.to_dict() for entry in self.ordered()],
            "next_sequence": self.next_sequence,
            "data_model": self.data_model,
        }

    @classmethod
    def from_dict(cls, raw: Optional[Mapping[str, Any]]) -> "SurfaceState":
        raw = raw or {}
        entries = [SurfaceEntry.from_dict(item) for item in raw.get("components") or []]
        next_sequence = int(raw.get("next_sequence", 0))
        if entries:
            next_sequence = max(next_sequence, max(entry.sequence for entry in entries) + 1)
        return cls(
            components={entry.id: entry for entry in entries},
            next_sequence=next_sequence,
            data_model=dict(raw.get("data_model") or {}),
        )


def empty_surface() -> SurfaceState:
    return SurfaceState()


def _upsert(
    components: Dict[str, SurfaceEntry],
    entry: ComponentEntry,
    next_sequence: int,
) -> int:
    existing = components.get(entry.id)
    if existing is not None:
        sequence = existing.sequence
    else:
        sequence = next_sequence
        next_sequence += 1
    components[entry.id] = SurfaceEntry(
        id=entry.id,
        type_name=entry.type_name,
        data=entry.data,
        options=entry.options,
        sequence=sequence,
        known=entry.known,
        children=entry.children,
    )
    return next_sequence


def apply_message(state: SurfaceState, message: MessageValidation) -> SurfaceState:
    """Apply one validated message and return the new surface."""
    components = dict(state.components)
    next_sequence = state.next_sequence
    for entry in message.valid:
        next_sequence = _upsert(components, entry, next_sequence)

    data_model = state.data_model
    update = message.data_model_update
    if update is not None:
        data_model = apply_data_model_update(
            data_model,
            path=update.path,
            value=update.value,
            operation=update.operation,
        )

    return SurfaceState(components=components, next_sequence=next_sequence, data_model=data_model)


def apply_messages(state: SurfaceState, messages: Iterable[MessageValidation]) -> SurfaceState:
    for message in messages:
        state = apply_message(state, message)
    return state
