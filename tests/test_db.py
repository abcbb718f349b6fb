# tests/test_db.py
import json
import sqlite3
from pathlib import Path

import pytest

from db.db import MemoryStorage, SqliteStorage, decode_tasks, encode_tasks
from models.task import Task
from services.store import TaskStore


NESTED = "[" * 100000 + "]" * 100000


@pytest.mark.parametrize(
    "raw",
    [None, "", "not json", "{\"id\": 1}", "42", "null", pytest.param(NESTED, id="deeply-nested")],
)
def test_unreadable_state_is_empty(raw):
    assert decode_tasks(raw) == []
    assert MemoryStorage(raw).load() == []


def test_non_object_entries_are_skipped():
    tasks = decode_tasks('[1, "x", {"id": "a", "title": "ok"}]')
    assert [t.id for t in tasks] == ["a"]


def test_encoded_shape(sample_task):
    data = json.loads(encode_tasks([sample_task, Task(id="b", title="bare")]))
    assert data[0] == {
        "id": "1",
        "title": 'Titolo con "virgolette"',
        "customer": "Cliente X",
        "due": "2025-09-16",
        "priority": "High",
        "category": "Other",
        "status": "To do",
        "channel": "Email",
        "notes": "Riga1\nRiga2",
        "createdAt": "2025-09-01T08:30:00+00:00",
        "pipe": "Lead",
        "valueEUR": 123.45,
    }
    assert data[1]["due"] is None
    assert data[1]["pipe"] is None
    assert data[1]["valueEUR"] is None


def test_sqlite_round_trip(tmp_path: Path, tricky_tasks):
    db_path = tmp_path / "nested" / "tasks.sqlite3"
    SqliteStorage(db_path).save(tricky_tasks)
    assert SqliteStorage(db_path).load() == tricky_tasks


def test_sqlite_keys_are_isolated(tmp_path: Path, sample_task):
    db_path = tmp_path / "tasks.sqlite3"
    SqliteStorage(db_path, key="a").save([sample_task])
    assert SqliteStorage(db_path, key="b").load() == []
    assert SqliteStorage(db_path, key="a").load() == [sample_task]


def test_sqlite_overwrites_single_row(tmp_path: Path, sample_task):
    db_path = tmp_path / "tasks.sqlite3"
    s = SqliteStorage(db_path)
    s.save([sample_task])
    s.save([])
    assert s.load() == []
    conn = sqlite3.connect(str(db_path))
    try:
        assert conn.execute("SELECT COUNT(*) FROM kv_store").fetchone()[0] == 1
    finally:
        conn.close()


def test_sqlite_corrupt_value_loads_empty(tmp_path: Path):
    s = SqliteStorage(tmp_path / "tasks.sqlite3")
    s.write_raw("{broken")
    assert s.load() == []


def test_oversized_value_loads_without_amount():
    raw = '[{"id": "a", "title": "x", "valueEUR": 1' + "0" * 400 + "}]"
    store = TaskStore(MemoryStorage(raw))
    assert store.get("a").value_eur is None
