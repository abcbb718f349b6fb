# src/services/store.py
import logging
from dataclasses import replace
from datetime import date, timedelta
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from db.db import StoragePort
from models.task import (
    DEFAULT_TITLE,
    Category,
    PipeStage,
    Priority,
    Status,
    Task,
    new_id,
    now_iso,
    parse_due,
    parse_value,
)
from services.pipeline import format_title_with_stage, next_stage
from services.views import week_bounds

logger = logging.getLogger(__name__)

# one-click presets offered by the UI
QUICK_TEMPLATES: Dict[str, Dict[str, Any]] = {
    "Quote follow-up": {
        "title": "Quote follow-up",
        "category": Category.QUOTE_FOLLOW_UP,
        "priority": Priority.HIGH,
        "channel": "Email",
        "notes": "Write to the customer. Ask for feedback. Offer a 15' call. Attach the quote PDF.",
        "pipe": PipeStage.QUALIFICA,
    },
    "Customer visit": {
        "title": "Customer visit",
        "category": Category.CUSTOMER_VISIT,
        "priority": Priority.MEDIUM,
        "channel": "Fair",
        "notes": "Hall/stand, contacts, volumes, trade lanes, current pain points.",
        "pipe": PipeStage.LEAD,
    },
    "Post-visit follow-up": {
        "title": "Post-visit follow-up",
        "category": Category.POST_FAIR,
        "priority": Priority.HIGH,
        "channel": "Email/LinkedIn",
        "notes": "Material, case studies, propose a test shipment.",
        "pipe": PipeStage.OFFERTA_INVIATA,
    },
    "Offer to send": {
        "title": "Offer to send",
        "category": Category.OFFER_TO_SEND,
        "priority": Priority.HIGH,
        "channel": "Email",
        "notes": "Door/port quote, free time, cut-off, valid 14 days.",
        "pipe": PipeStage.OFFERTA_INVIATA,
    },
}

_PROTECTED = {"id", "created_at", "createdAt"}
_PATCH_KEYS = {"valueEUR": "value_eur"}


def _coerce_patch(patch: Mapping[str, Any]) -> Dict[str, Any]:
    out = {}
    for key, value in patch.items():
        if key in _PROTECTED:
            continue
        key = _PATCH_KEYS.get(key, key)
        if key == "priority":
            value = Priority.coerce(value)
        elif key == "category":
            value = Category.coerce(value)
        elif key == "status":
            value = Status.coerce(value)
        elif key == "pipe":
            value = PipeStage.coerce(value)
        elif key == "due":
            value = parse_due(value)
        elif key == "value_eur":
            value = parse_value(value)
        elif key in ("title", "customer", "channel", "notes"):
            value = "" if value is None else str(value)
        else:
            raise KeyError(f"unknown task field {key!r}")
        out[key] = value
    return out


class TaskStore:
    """Ordered in-memory task list, written through the storage port after every change."""

    def __init__(self, storage: StoragePort):
        self.storage = storage
        self._tasks: List[Task] = storage.load()
        self._listeners: List[Callable[[], None]] = []
        logger.info("task store ready with %d tasks", len(self._tasks))

    @property
    def tasks(self) -> List[Task]:
        return list(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def subscribe(self, callback: Callable[[], None]) -> None:
        self._listeners.append(callback)

    def _commit(self) -> None:
        self.storage.save(self._tasks)
        for cb in self._listeners:
            cb()

    def get(self, task_id: str) -> Optional[Task]:
        for t in self._tasks:
            if t.id == task_id:
                return t
        return None

    def _index(self, task_id: str) -> int:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return -1

    def add(self, partial: Optional[Mapping[str, Any]] = None, **fields) -> Task:
        data = _coerce_patch({**(partial or {}), **fields})
        t = Task(
            id=new_id(),
            title=(data.get("title") or DEFAULT_TITLE).strip() or DEFAULT_TITLE,
            customer=(data.get("customer") or "").strip(),
            due=data["due"] if "due" in data else date.today(),
            priority=data.get("priority") or Priority.MEDIUM,
            category=data.get("category") or Category.OTHER,
            status=data.get("status") or Status.TODO,
            channel=data.get("channel") or "",
            notes=data.get("notes") or "",
            created_at=now_iso(),
            pipe=data.get("pipe"),
            value_eur=data.get("value_eur"),
        )
        self._tasks.insert(0, t)
        logger.info("added task %s %r", t.id, t.title)
        self._commit()
        return t

    def update(self, task_id: str, patch: Mapping[str, Any]) -> Optional[Task]:
        idx = self._index(task_id)
        if idx < 0:
            logger.debug("update of unknown task %s ignored", task_id)
            return None
        updated = replace(self._tasks[idx], **_coerce_patch(patch))
        self._tasks[idx] = updated
        logger.info("updated task %s", task_id)
        self._commit()
        return updated

    def remove(self, task_id: str) -> bool:
        idx = self._index(task_id)
        if idx < 0:
            return False
        del self._tasks[idx]
        logger.info("removed task %s", task_id)
        self._commit()
        return True

    def replace_all(self, tasks: Iterable[Task]) -> None:
        incoming = list(tasks)
        seen = set()
        unique = []
        for t in incoming:
            if t.id in seen:
                logger.warning("duplicate id %s in import, assigning a new one", t.id)
                t = replace(t, id=new_id())
            seen.add(t.id)
            unique.append(t)
        self._tasks = unique
        logger.info("replaced store with %d tasks", len(unique))
        self._commit()

    def move_stage(self, task_id: str, direction: int) -> Optional[Task]:
        t = self.get(task_id)
        if t is None or t.pipe is None:
            return None
        stage = next_stage(t.pipe, direction)
        return self.update(
            task_id,
            {"pipe": stage, "title": format_title_with_stage(t.title, stage, direction)},
        )

    def mark_all_done(self) -> None:
        self._tasks = [replace(t, status=Status.DONE) for t in self._tasks]
        self._commit()

    def spread_over_week(self, today: Optional[date] = None) -> None:
        """Give tasks due dates Monday..Friday of this week, round-robin."""
        monday, _ = week_bounds(today)
        self._tasks = [
            replace(t, due=monday + timedelta(days=i % 5)) for i, t in enumerate(self._tasks)
        ]
        self._commit()
