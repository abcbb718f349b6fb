# tests/test_store.py
from datetime import date

from db.db import MemoryStorage
from models.task import Category, PipeStage, Priority, Status, Task
from services.store import QUICK_TEMPLATES, TaskStore


def test_add_assigns_identity_and_defaults(store, storage):
    t = store.add(title="  Call Mario  ")
    assert t.id
    assert t.created_at
    assert t.title == "Call Mario"
    assert t.due == date.today()
    assert t.priority is Priority.MEDIUM
    assert t.category is Category.OTHER
    assert t.status is Status.TODO
    assert t.pipe is None
    assert t.value_eur is None
    assert storage.saves == 1
    assert TaskStore(MemoryStorage(storage.raw)).tasks == [t]


def test_add_blank_title_gets_default(store):
    assert store.add().title == "New task"
    assert store.add(title="   ").title == "New task"


def test_add_prepends_and_ids_are_unique(store):
    a = store.add(title="a")
    b = store.add({"title": "b", "priority": "High", "pipe": "Lead", "valueEUR": "1500"})
    assert store.tasks == [b, a]
    assert a.id != b.id
    assert b.priority is Priority.HIGH
    assert b.pipe is PipeStage.LEAD
    assert b.value_eur == 1500.0


def test_add_explicit_no_due(store):
    assert store.add(title="x", due=None).due is None


def test_quick_templates_are_valid(store):
    for name, partial in QUICK_TEMPLATES.items():
        t = store.add(partial)
        assert t.title == name
        assert t.pipe is not None


def test_update_merges_and_keeps_identity(store):
    t = store.add(title="Offer", customer="ACME")
    updated = store.update(
        t.id,
        {"status": "Done", "notes": "sent", "id": "hijack", "createdAt": "1970-01-01", "created_at": "x"},
    )
    assert updated.id == t.id
    assert updated.created_at == t.created_at
    assert updated.status is Status.DONE
    assert updated.notes == "sent"
    assert updated.customer == "ACME"
    assert store.get(t.id) == updated


def test_update_missing_id_is_noop(store, storage):
    store.add(title="a")
    saves = storage.saves
    assert store.update("nope", {"title": "b"}) is None
    assert storage.saves == saves


def test_update_unknown_enum_value_falls_back(store):
    t = store.add(title="a", priority="High")
    assert store.update(t.id, {"priority": "Urgent!!"}).priority is Priority.MEDIUM


def test_remove(store):
    a = store.add(title="a")
    b = store.add(title="b")
    assert store.remove(a.id) is True
    assert store.tasks == [b]
    assert store.remove(a.id) is False


def test_replace_all_and_duplicate_ids(store, tricky_tasks):
    store.add(title="old")
    store.replace_all(tricky_tasks + [Task(id="1", title="dupe")])
    ids = [t.id for t in store.tasks]
    assert ids[:3] == ["1", "2", "3"]
    assert len(set(ids)) == 4


def test_move_stage_rewrites_title_forward_only(store):
    t = store.add(title="Offerta ABC", pipe="Lead")
    t = store.move_stage(t.id, 1)
    assert t.pipe is PipeStage.QUALIFICA
    assert t.title == "Qualifica: Offerta ABC"
    t = store.move_stage(t.id, 1)
    assert t.title == "Offerta inviata: Offerta ABC"
    t = store.move_stage(t.id, -1)
    assert t.pipe is PipeStage.QUALIFICA
    assert t.title == "Offerta inviata: Offerta ABC"


def test_move_stage_ignores_tasks_outside_pipeline(store):
    t = store.add(title="no pipe")
    assert store.move_stage(t.id, 1) is None
    assert store.get(t.id).title == "no pipe"
    assert store.move_stage("missing", 1) is None


def test_mark_all_done(store):
    store.add(title="a")
    store.add(title="b", status="Waiting")
    store.mark_all_done()
    assert {t.status for t in store.tasks} == {Status.DONE}


def test_spread_over_week(store):
    for i in range(7):
        store.add(title=f"t{i}")
    store.spread_over_week(today=date(2025, 9, 17))  # a Wednesday
    dues = [t.due for t in store.tasks]
    assert dues[:5] == [date(2025, 9, d) for d in range(15, 20)]
    assert dues[5:] == [date(2025, 9, 15), date(2025, 9, 16)]


def test_listeners_run_after_each_change(store):
    calls = []
    store.subscribe(lambda: calls.append(len(store)))
    t = store.add(title="a")
    store.update(t.id, {"title": "b"})
    store.remove(t.id)
    assert calls == [1, 1, 0]


def test_loads_existing_state():
    raw = '[{"id": "x", "title": "kept", "priority": "Low", "createdAt": "2025-01-01T00:00:00"}]'
    store = TaskStore(MemoryStorage(raw))
    assert len(store) == 1
    assert store.get("x").priority is Priority.LOW
