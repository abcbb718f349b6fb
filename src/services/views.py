# src/services/views.py
"""Read-side projections over the task list: filters, sorting, KPIs, board and calendar layouts."""
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from models.task import PIPE_STAGES, PipeStage, Priority, Status, Task

PERIODS = ("today", "week", "overdue", "all")
SORT_KEYS = ("due", "priority", "created")
PRIORITY_ORDER = {p: i for i, p in enumerate(Priority)}
CLOSED_LOST = PipeStage.CHIUSO_PERSO


@dataclass(frozen=True)
class Kpis:
    total: int
    done: int
    overdue: int
    this_week: int
    pipeline_value: float


def week_bounds(today: Optional[date] = None) -> Tuple[date, date]:
    """Monday and Sunday of the week containing `today`."""
    today = today or date.today()
    monday = today - timedelta(days=today.weekday())
    return monday, monday + timedelta(days=6)


def matches_query(task: Task, query: str) -> bool:
    q = (query or "").strip().lower()
    if not q:
        return True
    haystack = [
        task.title,
        task.customer,
        task.category,
        task.priority,
        task.status,
        task.channel,
        task.notes,
        task.pipe,
    ]
    return any(q in str(v).lower() for v in haystack if v)


def is_overdue(task: Task, today: date) -> bool:
    return task.due is not None and task.due < today and task.status != Status.DONE


def in_period(task: Task, period: str, today: date) -> bool:
    if period == "all":
        return True
    if task.due is None:
        return False
    if period == "today":
        return task.due == today
    if period == "week":
        monday, sunday = week_bounds(today)
        return monday <= task.due <= sunday
    if period == "overdue":
        return is_overdue(task, today)
    raise ValueError(f"unknown period {period!r}")


def filter_tasks(
    tasks: Iterable[Task], query: str = "", period: str = "all", today: Optional[date] = None
) -> List[Task]:
    today = today or date.today()
    return [t for t in tasks if matches_query(t, query) and in_period(t, period, today)]


def sort_tasks(tasks: Iterable[Task], by: str = "due") -> List[Task]:
    if by == "due":
        # no due date sorts last
        return sorted(tasks, key=lambda t: (t.due is None, t.due or date.max))
    if by == "priority":
        return sorted(tasks, key=lambda t: PRIORITY_ORDER[t.priority])
    if by == "created":
        return sorted(tasks, key=lambda t: t.created_at)
    raise ValueError(f"unknown sort key {by!r}")


def compute_kpis(tasks: Iterable[Task], today: Optional[date] = None) -> Kpis:
    tasks = list(tasks)
    today = today or date.today()
    monday, sunday = week_bounds(today)
    return Kpis(
        total=len(tasks),
        done=sum(1 for t in tasks if t.status == Status.DONE),
        overdue=sum(1 for t in tasks if is_overdue(t, today)),
        this_week=sum(1 for t in tasks if t.due and monday <= t.due <= sunday),
        pipeline_value=sum(
            t.value_eur or 0.0 for t in tasks if t.pipe and t.pipe != CLOSED_LOST
        ),
    )


def group_by_stage(tasks: Iterable[Task]) -> Dict[PipeStage, List[Task]]:
    board = {stage: [] for stage in PIPE_STAGES}
    for t in tasks:
        if t.pipe:
            board[t.pipe].append(t)
    return board


def month_grid(year: int, month: int) -> List[date]:
    """Six Monday-first weeks covering the month."""
    first = date(year, month, 1)
    start = first - timedelta(days=first.weekday())
    return [start + timedelta(days=i) for i in range(42)]


def tasks_by_day(tasks: Iterable[Task]) -> Dict[date, List[Task]]:
    days: Dict[date, List[Task]] = {}
    for t in tasks:
        if t.due:
            days.setdefault(t.due, []).append(t)
    return days


def format_eur(value: Optional[float]) -> str:
    """Euro amount with Italian separators, e.g. 1234.5 -> '1.234,50 €'."""
    if value is None:
        return ""
    text = f"{value:,.2f}".replace(",", "\x00").replace(".", ",").replace("\x00", ".")
    return f"{text} €"
