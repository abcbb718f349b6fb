# src/services/export.py
import json
import logging
from datetime import date
from pathlib import Path
from typing import List, Optional

import pandas as pd

from models.task import Task
from services.csv_codec import HEADER, parse_csv, task_to_row, to_csv
from services.ics import to_ics
from services.reminders import ics_filename

logger = logging.getLogger(__name__)


class ImportFormatError(ValueError):
    """The file does not hold a task list; nothing was imported."""


def export_tasks_to_json(tasks: List[Task], filepath) -> Path:
    path = Path(filepath)
    path.write_text(
        json.dumps([t.to_dict() for t in tasks], indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    logger.info("exported %d tasks to %s", len(tasks), path)
    return path


def parse_json_tasks(text: str) -> List[Task]:
    try:
        data = json.loads(text)
    except (ValueError, RecursionError) as e:
        raise ImportFormatError(f"invalid JSON: {e}") from e
    if not isinstance(data, list):
        raise ImportFormatError("invalid format: expected a JSON array of tasks")
    tasks = []
    for i, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise ImportFormatError(f"invalid format: entry {i} is not an object")
        tasks.append(Task.from_dict(entry))
    return tasks


def import_tasks_from_json(filepath) -> List[Task]:
    path = Path(filepath)
    tasks = parse_json_tasks(path.read_text(encoding="utf-8"))
    logger.info("read %d tasks from %s", len(tasks), path)
    return tasks


def export_tasks_to_csv(tasks: List[Task], filepath) -> Path:
    path = Path(filepath)
    # newline="" keeps the CRLF separators exactly as written
    with path.open("w", newline="", encoding="utf-8") as f:
        f.write(to_csv(tasks))
    logger.info("exported %d tasks to %s", len(tasks), path)
    return path


def import_tasks_from_csv(filepath) -> List[Task]:
    path = Path(filepath)
    # utf-8-sig drops the BOM spreadsheet tools like to add
    with path.open("r", newline="", encoding="utf-8-sig") as f:
        tasks = parse_csv(f.read())
    if not tasks:
        raise ImportFormatError("empty or invalid CSV")
    logger.info("read %d tasks from %s", len(tasks), path)
    return tasks


def export_tasks_to_excel(tasks: List[Task], filepath) -> Path:
    # use pandas for ease
    rows = [dict(zip(HEADER, task_to_row(t))) for t in tasks]
    df = pd.DataFrame(rows, columns=HEADER)
    df["valueEUR"] = pd.to_numeric(df["valueEUR"], errors="coerce")
    path = Path(filepath)
    df.to_excel(path, index=False, sheet_name="Tasks")
    logger.info("exported %d tasks to %s", len(tasks), path)
    return path


def export_task_to_ics(task: Task, directory, today: Optional[date] = None) -> Path:
    path = Path(directory) / ics_filename(task)
    with path.open("w", newline="", encoding="utf-8") as f:
        f.write(to_ics(task, today=today))
    logger.info("wrote calendar reminder %s", path)
    return path
