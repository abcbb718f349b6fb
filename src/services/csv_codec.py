# src/services/csv_codec.py
import csv
import io
import logging
from typing import Dict, Iterable, List, Optional

from models.task import Category, PipeStage, Priority, Status, Task, new_id, now_iso, parse_due, parse_value

logger = logging.getLogger(__name__)

HEADER = [
    "id",
    "title",
    "customer",
    "due",
    "priority",
    "category",
    "status",
    "channel",
    "notes",
    "createdAt",
    "pipe",
    "valueEUR",
]
LINE_SEP = "\r\n"


def format_value(value: Optional[float]) -> str:
    if value is None:
        return ""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def task_to_row(t: Task) -> List[str]:
    return [
        t.id,
        t.title,
        t.customer or "",
        t.due.isoformat() if t.due else "",
        t.priority.value,
        t.category.value,
        t.status.value,
        t.channel or "",
        t.notes or "",
        t.created_at,
        t.pipe.value if t.pipe else "",
        format_value(t.value_eur),
    ]


def to_csv(tasks: Iterable[Task]) -> str:
    buf = io.StringIO(newline="")
    buf.write(",".join(HEADER) + LINE_SEP)
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator=LINE_SEP)
    writer.writerows(task_to_row(t) for t in tasks)
    # separator goes between records, not after the last one
    return buf.getvalue().removesuffix(LINE_SEP)


def split_csv_line(line: str) -> List[str]:
    """Split one record into fields, honoring quotes and doubled quotes."""
    fields = []
    cur = []
    in_quotes = False
    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        if ch == '"':
            if in_quotes and i + 1 < n and line[i + 1] == '"':
                cur.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            fields.append("".join(cur))
            cur = []
        else:
            cur.append(ch)
        i += 1
    fields.append("".join(cur))
    return fields


def split_records(text: str) -> List[str]:
    """Break text into records on line breaks outside quoted fields; blank records are dropped."""
    records = []
    cur = []
    in_quotes = False
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == '"':
            in_quotes = not in_quotes
            cur.append(ch)
        elif not in_quotes and ch in "\r\n":
            if ch == "\r" and i + 1 < n and text[i + 1] == "\n":
                i += 1
            records.append("".join(cur))
            cur = []
        else:
            cur.append(ch)
        i += 1
    records.append("".join(cur))
    return [r for r in records if r.strip()]


def _header_index(header_line: str) -> Dict[str, int]:
    index = {}
    for pos, name in enumerate(split_csv_line(header_line)):
        key = name.strip().lstrip("\ufeff").strip()
        index.setdefault(key, pos)
    return index


def parse_csv(text: str) -> List[Task]:
    records = split_records(text or "")
    if len(records) < 2:
        logger.info("csv has %d non-blank records, need a header and at least one row", len(records))
        return []
    index = _header_index(records[0])

    tasks = []
    for lineno, record in enumerate(records[1:], start=2):
        cols = split_csv_line(record)

        def g(key: str) -> str:
            pos = index.get(key)
            if pos is None or pos >= len(cols):
                return ""
            return cols[pos]

        t = Task(
            id=g("id") or new_id(),
            title=g("title"),
            customer=g("customer"),
            due=parse_due(g("due")),
            priority=Priority.coerce(g("priority")),
            category=Category.coerce(g("category")),
            status=Status.coerce(g("status")),
            channel=g("channel"),
            notes=g("notes"),
            created_at=g("createdAt") or now_iso(),
            pipe=PipeStage.coerce(g("pipe")),
            value_eur=parse_value(g("valueEUR")),
        )
        logger.debug("csv record %d -> task %s", lineno, t.id)
        tasks.append(t)
    return tasks
