# tests/test_views.py
from datetime import date

import pytest

from models.task import PIPE_STAGES, PipeStage, Priority, Status, Task
from services import views

TODAY = date(2025, 9, 17)  # Wednesday


@pytest.fixture()
def board():
    return [
        Task(id="today", title="Call", due=TODAY, priority=Priority.LOW, created_at="2025-09-03"),
        Task(id="monday", title="Offer", due=date(2025, 9, 15), customer="ACME", created_at="2025-09-01"),
        Task(id="late-done", title="Old", due=date(2025, 9, 1), status=Status.DONE, created_at="2025-08-01"),
        Task(id="next-week", title="Visit", due=date(2025, 9, 22), priority=Priority.HIGH, created_at="2025-09-02",
             pipe=PipeStage.CHIUSO_PERSO, value_eur=999.0),
        Task(id="undated", title="Someday", due=None, notes="ask about trade lanes", created_at="2025-07-01",
             pipe=PipeStage.LEAD, value_eur=1000.0),
    ]


def ids(tasks):
    return [t.id for t in tasks]


def test_week_bounds():
    assert views.week_bounds(TODAY) == (date(2025, 9, 15), date(2025, 9, 21))
    assert views.week_bounds(date(2025, 9, 21)) == (date(2025, 9, 15), date(2025, 9, 21))


def test_period_filters(board):
    assert ids(views.filter_tasks(board, period="today", today=TODAY)) == ["today"]
    assert ids(views.filter_tasks(board, period="week", today=TODAY)) == ["today", "monday"]
    assert ids(views.filter_tasks(board, period="all", today=TODAY)) == ids(board)
    # done tasks are never overdue
    late = Task(id="late", title="Late", due=date(2025, 9, 10))
    assert ids(views.filter_tasks(board + [late], period="overdue", today=TODAY)) == ["monday", "late"]


def test_undated_tasks_only_in_all(board):
    for period in ("today", "week", "overdue"):
        assert "undated" not in ids(views.filter_tasks(board, period=period, today=TODAY))


def test_query_matches_any_text_field(board):
    assert ids(views.filter_tasks(board, query="acme", today=TODAY)) == ["monday"]
    assert ids(views.filter_tasks(board, query="TRADE", today=TODAY)) == ["undated"]
    assert ids(views.filter_tasks(board, query="chiuso", today=TODAY)) == ["next-week"]
    assert ids(views.filter_tasks(board, query="   ", today=TODAY)) == ids(board)


def test_unknown_period_raises(board):
    with pytest.raises(ValueError):
        views.filter_tasks(board, period="month", today=TODAY)


def test_sorting(board):
    assert ids(views.sort_tasks(board, "due")) == ["late-done", "monday", "today", "next-week", "undated"]
    assert ids(views.sort_tasks(board, "priority"))[0] == "next-week"
    assert ids(views.sort_tasks(board, "priority"))[-1] == "today"
    assert ids(views.sort_tasks(board, "created")) == ["undated", "late-done", "monday", "next-week", "today"]


def test_kpis(board):
    k = views.compute_kpis(board, today=TODAY)
    assert k.total == 5
    assert k.done == 1
    assert k.overdue == 1
    assert k.this_week == 2
    # closed-lost deals are not pipeline value
    assert k.pipeline_value == 1000.0


def test_group_by_stage(board):
    grouped = views.group_by_stage(board)
    assert list(grouped) == list(PIPE_STAGES)
    assert ids(grouped[PipeStage.LEAD]) == ["undated"]
    assert ids(grouped[PipeStage.CHIUSO_PERSO]) == ["next-week"]
    assert sum(len(v) for v in grouped.values()) == 2


def test_month_grid():
    grid = views.month_grid(2025, 9)
    assert len(grid) == 42
    assert grid[0] == date(2025, 9, 1)  # September 2025 starts on a Monday
    grid = views.month_grid(2025, 10)
    assert grid[0] == date(2025, 9, 29)
    assert all(d.weekday() == i % 7 for i, d in enumerate(grid))


def test_tasks_by_day(board):
    days = views.tasks_by_day(board)
    assert ids(days[TODAY]) == ["today"]
    assert len(days) == 4


def test_format_eur():
    assert views.format_eur(1234.5) == "1.234,50 €"
    assert views.format_eur(0) == "0,00 €"
    assert views.format_eur(None) == ""
