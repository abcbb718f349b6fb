# src/services/ics.py
from datetime import date, datetime, timezone
from typing import Optional

from models.task import Task, new_id

ICS_MIME = "text/calendar;charset=utf-8"
PRODID = "-//Task Console//Task//EN"
CRLF = "\r\n"


def escape_ics(text: str) -> str:
    """Escape TEXT values. Backslashes go first so later escapes are not doubled."""
    return (
        (text or "")
        .replace("\\", "\\\\")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
        .replace(",", "\\,")
        .replace(";", "\\;")
    )


def to_ics(task: Task, today: Optional[date] = None, uid: Optional[str] = None) -> str:
    """Single-event calendar for a task: 07:00-07:30 UTC on its due date (or today)."""
    # calendar times are UTC, so is the fallback day
    day = task.due or today or datetime.now(timezone.utc).date()
    stamp = day.strftime("%Y%m%d")
    description = f"Customer: {task.customer or ''} | Notes: {task.notes or ''}"
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODID}",
        "BEGIN:VEVENT",
        f"UID:{uid or new_id()}",
        f"DTSTAMP:{stamp}T080000Z",
        f"DTSTART:{stamp}T070000Z",
        f"DTEND:{stamp}T073000Z",
        f"SUMMARY:{escape_ics(task.title)}",
        f"DESCRIPTION:{escape_ics(description)}",
        "END:VEVENT",
        "END:VCALENDAR",
    ]
    return CRLF.join(lines)
