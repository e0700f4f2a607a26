from __future__ import annotations

import json
import logging
import sqlite3
import threading
from typing import Any, Dict, List, Optional

from genui.common.exceptions import AuthorizationError, PersistenceError
from genui.session.chat_session import SessionSnapshot
from genui.storage.generation_store import (
    GenerationFilter,
    GenerationPage,
    GenerationRecord,
    GenerationStore,
    build_record,
)
from genui.util.file_utils import ensure_dir

logger = logging.getLogger(__name__)

MEMORY_PATH = ":memory:"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS generations (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    description TEXT,
    snapshot TEXT NOT NULL,
    created_at REAL NOT NULL,
    updated_at REAL NOT NULL,
    version INTEGER NOT NULL DEFAULT 1
);
CREATE INDEX IF NOT EXISTS idx_generations_user_updated ON generations (user_id, updated_at DESC);
"""

_COLUMNS = ("id", "user_id", "name", "description", "snapshot", "created_at", "updated_at", "version")


class SQLiteGenerationStore(GenerationStore):
    """
    Generations in a single SQLite file; the snapshot is a JSON text column.

    Config keys:
        database: file path, or ":memory:" (default).
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = dict(config or {})
        self.database = str(self.config.get("database") or MEMORY_PATH)
        if self.database != MEMORY_PATH:
            ensure_dir(self.database)
        self._lock = threading.Lock()
        try:
            self.connection = sqlite3.connect(self.database, check_same_thread=False)
            self.connection.row_factory = sqlite3.Row
            self.connection.executescript(_SCHEMA)
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to open generation store: {exc}", context={"database": self.database}) from exc

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
            existing = self._fetch(generation_id) if generation_id else None
            if existing is not None and existing.user_id != user_id:
                raise AuthorizationError(
                    "Generation belongs to another user",
                    context={"generation_id": generation_id},
                )
            record = build_record(existing, snapshot, user_id, name, description, generation_id)
            row = self._to_row(record)
            try:
                with self.connection:
                    self.connection.execute(
                        f"INSERT OR REPLACE INTO generations ({', '.join(_COLUMNS)}) "
                        f"VALUES ({', '.join('?' for _ in _COLUMNS)})",
                        [row[column] for column in _COLUMNS],
                    )
            except sqlite3.Error as exc:
                raise PersistenceError(f"Failed to save generation: {exc}", context={"generation_id": record.id}) from exc
        logger.debug(f"Saved generation {record.id} v{record.version} for {user_id}")
        return record.id

    def get_record(self, generation_id: str, user_id: Optional[str] = None) -> Optional[GenerationRecord]:
        with self._lock:
            record = self._fetch(generation_id)
        if record is None or (user_id is not None and record.user_id != user_id):
            return None
        return record

    def list_records(self, filter: Optional[GenerationFilter] = None) -> GenerationPage:
        filter = filter or GenerationFilter()
        clauses: List[str] = []
        params: List[Any] = []
        if filter.user_id is not None:
            clauses.append("user_id = ?")
            params.append(filter.user_id)
        if filter.search:
            clauses.append("(LOWER(name) LIKE ? ESCAPE '\\' OR LOWER(COALESCE(description, '')) LIKE ? ESCAPE '\\')")
            pattern = f"%{_escape_like(filter.search.lower())}%"
            params.extend([pattern, pattern])
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with self._lock:
            total = self.connection.execute(f"SELECT COUNT(*) FROM generations {where}", params).fetchone()[0]
            rows = self.connection.execute(
                f"SELECT * FROM generations {where} ORDER BY updated_at DESC, created_at DESC LIMIT ? OFFSET ?",
                params + [filter.limit, filter.offset],
            ).fetchall()
        records = tuple(self._from_row(row) for row in rows)
        return GenerationPage(records=records, total=int(total), limit=filter.limit, offset=filter.offset)

    def delete(self, generation_id: str, user_id: Optional[str] = None) -> bool:
        query = "DELETE FROM generations WHERE id = ?"
        params: List[Any] = [generation_id]
        if user_id is not None:
            query += " AND user_id = ?"
            params.append(user_id)
        with self._lock, self.connection:
            cursor = self.connection.execute(query, params)
        return cursor.rowcount > 0

    def close(self) -> None:
        with self._lock:
            self.connection.close()

    # ------------------------------------------------------------------

    def _fetch(self, generation_id: str) -> Optional[GenerationRecord]:
        row = self.connection.execute("SELECT * FROM generations WHERE id = ?", (generation_id,)).fetchone()
        return self._from_row(row) if row is not None else None

    @staticmethod
    def _to_row(record: GenerationRecord) -> Dict[str, Any]:
        row = record.model_dump()
        row["snapshot"] = json.dumps(record.snapshot, ensure_ascii=False)
        return row

    @staticmethod
    def _from_row(row: sqlite3.Row) -> GenerationRecord:
        data = {column: row[column] for column in _COLUMNS}
        data["snapshot"] = json.loads(data["snapshot"] or "{}")
        return GenerationRecord.model_validate(data)


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
