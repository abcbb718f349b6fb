# tests/conftest.py
from datetime import date

import pytest

from db.db import MemoryStorage
from models.task import Category, PipeStage, Priority, Status, Task
from services.store import TaskStore


@pytest.fixture()
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture()
def store(storage: MemoryStorage) -> TaskStore:
    return TaskStore(storage)


@pytest.fixture()
def sample_task() -> Task:
    return Task(
        id="1",
        title='Titolo con "virgolette"',
        customer="Cliente X",
        due=date(2025, 9, 16),
        priority=Priority.HIGH,
        category=Category.OTHER,
        status=Status.TODO,
        channel="Email",
        notes="Riga1\nRiga2",
        created_at="2025-09-01T08:30:00+00:00",
        pipe=PipeStage.LEAD,
        value_eur=123.45,
    )


@pytest.fixture()
def tricky_tasks(sample_task: Task) -> list:
    """Tasks whose text fields exercise every CSV quoting rule."""
    return [
        sample_task,
        Task(
            id="2",
            title="Offer, revised; v2",
            customer='ACME "Italia", S.p.A.',
            due=None,
            priority=Priority.LOW,
            category=Category.DISPUTE,
            status=Status.WAITING,
            channel="",
            notes='line one\r\nline "two", with comma\n\nafter blank line',
            created_at="2025-09-02T10:00:00+00:00",
            pipe=None,
            value_eur=None,
        ),
        Task(
            id="3",
            title="Plain",
            customer="",
            due=date(2025, 12, 31),
            priority=Priority.MEDIUM,
            category=Category.CUSTOMER_VISIT,
            status=Status.DONE,
            channel="Fair",
            notes="",
            created_at="2025-09-03T10:00:00+00:00",
            pipe=PipeStage.CHIUSO_VINTO,
            value_eur=100.0,
        ),
    ]
