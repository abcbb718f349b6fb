# src/db/db.py
import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Protocol

from models.task import Task

logger = logging.getLogger(__name__)

STORAGE_KEY = "task-console-v23"

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""


class StoragePort(Protocol):
    """Where the task list lives between runs."""

    def load(self) -> List[Task]: ...

    def save(self, tasks: List[Task]) -> None: ...


def encode_tasks(tasks: List[Task]) -> str:
    return json.dumps([t.to_dict() for t in tasks], ensure_ascii=False)


def decode_tasks(raw: Optional[str]) -> List[Task]:
    """Decode the stored JSON array. Anything unreadable counts as an empty store."""
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except (ValueError, RecursionError):
        logger.warning("stored task list is not valid JSON, starting empty")
        return []
    if not isinstance(data, list):
        logger.warning("stored task list is %s, not an array, starting empty", type(data).__name__)
        return []
    tasks = []
    for entry in data:
        if not isinstance(entry, dict):
            logger.warning("skipping stored entry that is not an object: %r", entry)
            continue
        tasks.append(Task.from_dict(entry))
    return tasks


class MemoryStorage:
    """Keeps the serialized list in memory, for tests and throwaway sessions."""

    def __init__(self, raw: Optional[str] = None):
        self.raw = raw
        self.saves = 0

    def load(self) -> List[Task]:
        return decode_tasks(self.raw)

    def save(self, tasks: List[Task]) -> None:
        self.raw = encode_tasks(tasks)
        self.saves += 1


class SqliteStorage:
    """One key in a small SQLite key/value table holds the whole task list."""

    def __init__(self, db_path, key: str = STORAGE_KEY):
        self.db_path = Path(db_path)
        self.key = key
        self.init_db_if_needed()

    def get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        return conn

    def init_db_if_needed(self) -> str:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = self.get_conn()
        try:
            conn.executescript(CREATE_TABLE_SQL)
            conn.commit()
        finally:
            conn.close()
        return str(self.db_path)

    def read_raw(self) -> Optional[str]:
        conn = self.get_conn()
        try:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (self.key,)).fetchone()
        finally:
            conn.close()
        return row["value"] if row else None

    def write_raw(self, value: str) -> None:
        conn = self.get_conn()
        try:
            conn.execute(
                """
                INSERT INTO kv_store (key, value, updated_at)
                VALUES (:key, :value, :updated_at)
                ON CONFLICT(key) DO UPDATE SET
                    value=excluded.value,
                    updated_at=excluded.updated_at
                """,
                {
                    "key": self.key,
                    "value": value,
                    "updated_at": datetime.now(timezone.utc).isoformat(),
                },
            )
            conn.commit()
        finally:
            conn.close()

    def load(self) -> List[Task]:
        tasks = decode_tasks(self.read_raw())
        logger.debug("loaded %d tasks from %s[%s]", len(tasks), self.db_path, self.key)
        return tasks

    def save(self, tasks: List[Task]) -> None:
        self.write_raw(encode_tasks(tasks))
        logger.debug("saved %d tasks to %s[%s]", len(tasks), self.db_path, self.key)
