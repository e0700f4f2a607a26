"""
Saved generations: named snapshots of a chat session and its surface.

`GenerationStore` is the backend contract. Stores are user-scoped when a
user_id is passed: a record owned by someone else behaves exactly like a
missing one. `GenerationService` binds a store to an `AuthProvider` so callers
never pass user ids by hand.
"""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

from pydantic import BaseModel, Field, ValidationError

from genui.common.exceptions import AuthorizationError, PersistenceError
from genui.session.auth import AuthProvider
from genui.session.chat_session import SessionSnapshot

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def new_generation_id() -> str:
    return f"gen_{uuid4().hex[:12]}"


class GenerationRecord(BaseModel):
    id: str = Field(default_factory=new_generation_id, min_length=1, max_length=128)
    user_id: str = Field(min_length=1, max_length=128)
    name: str = Field(min_length=1, max_length=256)
    description: Optional[str] = Field(default=None, max_length=2048)
    snapshot: Dict[str, Any] = Field(default_factory=dict)
    created_at: float = Field(default_factory=lambda: time.time())
    updated_at: float = Field(default_factory=lambda: time.time())
    version: int = Field(default=1, ge=1)

    def to_snapshot(self) -> SessionSnapshot:
        return SessionSnapshot.from_dict(self.snapshot)

    def matches(self, search: Optional[str]) -> bool:
        if not search:
            return True
        needle = search.lower()
        return needle in self.name.lower() or needle in (self.description or "").lower()


class GenerationFilter(BaseModel):
    user_id: Optional[str] = None
    search: Optional[str] = None
    limit: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    offset: int = Field(default=0, ge=0)


@dataclass(frozen=True)
class GenerationPage:
    records: Tuple[GenerationRecord, ...]
    total: int
    limit: int = DEFAULT_PAGE_SIZE
    offset: int = 0

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.records) < self.total


class GenerationStore(ABC):
    """Abstract store of saved generations."""

    @abstractmethod
    def save(
        self,
        snapshot: SessionSnapshot,
        *,
        user_id: str,
        name: str,
        description: Optional[str] = None,
        generation_id: Optional[str] = None,
    ) -> str:
        """Insert, or update when generation_id names an existing record of user_id. Returns the id."""
        ...

    @abstractmethod
    def get_record(self, generation_id: str, user_id: Optional[str] = None) -> Optional[GenerationRecord]:
        ...

    @abstractmethod
    def list_records(self, filter: Optional[GenerationFilter] = None) -> GenerationPage:
        """Newest first (by updated_at)."""
        ...

    @abstractmethod
    def delete(self, generation_id: str, user_id: Optional[str] = None) -> bool:
        ...

    @abstractmethod
    def close(self) -> None:
        """Release resources."""
        ...

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def get(self, generation_id: str, user_id: Optional[str] = None) -> Optional[SessionSnapshot]:
        record = self.get_record(generation_id, user_id)
        return record.to_snapshot() if record is not None else None

    def list(self, filter: Optional[GenerationFilter] = None) -> List[SessionSnapshot]:
        return [record.to_snapshot() for record in self.list_records(filter).records]


def build_record(
    existing: Optional[GenerationRecord],
    snapshot: SessionSnapshot,
    user_id: str,
    name: str,
    description: Optional[str],
    generation_id: Optional[str],
) -> GenerationRecord:
    if not isinstance(snapshot, SessionSnapshot):
        raise PersistenceError("save expects a SessionSnapshot", context={"actual": type(snapshot).__name__})
    fields: Dict[str, Any] = {
        "user_id": user_id,
        "name": name,
        "description": description,
        "snapshot": snapshot.to_dict(),
    }
    if existing is not None:
        fields = {
            **existing.model_dump(),
            **fields,
            "updated_at": max(time.time(), existing.updated_at),
            "version": existing.version + 1,
        }
    elif generation_id:
        fields["id"] = generation_id
    try:
        return GenerationRecord.model_validate(fields)
    except ValidationError as exc:
        raise PersistenceError(f"Invalid generation record: {exc.error_count()} error(s)", context={"name": name}) from exc


def _owned(record: Optional[GenerationRecord], user_id: Optional[str]) -> Optional[GenerationRecord]:
    if record is None:
        return None
    if user_id is not None and record.user_id != user_id:
        return None
    return record


class InMemoryGenerationStore(GenerationStore):
    """Process-local store. Records are lost on exit."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = dict(config or {})
        self._records: Dict[str, GenerationRecord] = {}
        self._lock = threading.Lock()

    def save(
        self,
        snapshot: SessionSnapshot,
        *,
        user_id: str,
        name: str,
        description: Optional[str] = None,
        generation_id: Optional[str] = None,
    ) -> str:
        with self._lock:
            existing = self._records.get(generation_id) if generation_id else None
            if existing is not None and existing.user_id != user_id:
                raise AuthorizationError(
                    "Generation belongs to another user",
                    context={"generation_id": generation_id},
                )
            record = build_record(existing, snapshot, user_id, name, description, generation_id)
            self._records[record.id] = record
        logger.debug(f"Saved generation {record.id} v{record.version} for {user_id}")
        return record.id

    def get_record(self, generation_id: str, user_id: Optional[str] = None) -> Optional[GenerationRecord]:
        with self._lock:
            return _owned(self._records.get(generation_id), user_id)

    def list_records(self, filter: Optional[GenerationFilter] = None) -> GenerationPage:
        filter = filter or GenerationFilter()
        with self._lock:
            matches = [
                record
                for record in self._records.values()
                if _owned(record, filter.user_id) is not None and record.matches(filter.search)
            ]
        matches.sort(key=lambda record: (record.updated_at, record.created_at), reverse=True)
        page = matches[filter.offset: filter.offset + filter.limit]
        return GenerationPage(records=tuple(page), total=len(matches), limit=filter.limit, offset=filter.offset)

    def delete(self, generation_id: str, user_id: Optional[str] = None) -> bool:
        with self._lock:
            if _owned(self._records.get(generation_id), user_id) is None:
                return False
            del self._records[generation_id]
        return True

    def close(self) -> None:
        with self._lock:
            self._records.clear()


class GenerationService:
    """A store scoped to whoever the auth provider says is signed in."""

    def __init__(self, store: GenerationStore, auth: AuthProvider):
        self.store = store
        self.auth = auth

    def _user(self) -> str:
        user_id = self.auth.current_user_id()
        if not user_id:
            raise AuthorizationError("Sign in to manage saved generations")
        return user_id

    def save(
        self,
        snapshot: SessionSnapshot,
        name: str,
        description: Optional[str] = None,
        generation_id: Optional[str] = None,
    ) -> str:
        return self.store.save(
            snapshot,
            user_id=self._user(),
            name=name,
            description=description,
            generation_id=generation_id,
        )

    def get(self, generation_id: str) -> Optional[SessionSnapshot]:
        return self.store.get(generation_id, user_id=self._user())

    def get_record(self, generation_id: str) -> Optional[GenerationRecord]:
        return self.store.get_record(generation_id, user_id=self._user())

    def list(self, search: Optional[str] = None, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0) -> GenerationPage:
        filter = GenerationFilter(user_id=self._user(), search=search, limit=limit, offset=offset)
        return self.store.list_records(filter)

    def delete(self, generation_id: str) -> bool:
        return self.store.delete(generation_id, user_id=self._user())
