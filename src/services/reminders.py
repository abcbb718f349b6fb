# src/services/reminders.py
import re
from urllib.parse import quote

from models.task import Task

_NON_ALNUM = re.compile(r"[^a-z0-9]+", re.IGNORECASE)


def mailto_link(task: Task, to: str = "") -> str:
    subject = f"Reminder: {task.title}"
    body = "\n".join(
        [
            f"Task: {task.title}",
            f"Customer: {task.customer or '-'}",
            f"Due: {task.due.isoformat() if task.due else '-'}",
            f"Pipeline: {task.pipe or '-'}",
            f"Notes: {task.notes or '-'}",
        ]
    )
    return f"mailto:{to}?subject={quote(subject, safe='')}&body={quote(body, safe='')}"


def ics_filename(task: Task) -> str:
    slug = _NON_ALNUM.sub("-", task.title or "task").lower()
    return f"reminder-{slug}.ics"
