# tests/test_reminders.py
from urllib.parse import parse_qs, urlsplit

from models.task import Task
from services.reminders import ics_filename, mailto_link


def test_mailto_link(sample_task):
    link = mailto_link(sample_task, to="me@example.com")
    parts = urlsplit(link)
    assert parts.scheme == "mailto"
    assert parts.path == "me@example.com"
    query = parse_qs(parts.query)
    assert query["subject"] == ['Reminder: Titolo con "virgolette"']
    assert query["body"][0].split("\n") == [
        'Task: Titolo con "virgolette"',
        "Customer: Cliente X",
        "Due: 2025-09-16",
        "Pipeline: Lead",
        "Notes: Riga1",
        "Riga2",
    ]


def test_mailto_missing_fields_use_dash():
    body = parse_qs(urlsplit(mailto_link(Task(title="x"))).query)["body"][0]
    assert "Customer: -" in body
    assert "Due: -" in body
    assert "Pipeline: -" in body
    assert "Notes: -" in body


def test_ics_filename():
    assert ics_filename(Task(title="Follow-up: ACME / Q3")) == "reminder-follow-up-acme-q3.ics"
    assert ics_filename(Task(title="Offerta ABC")) == "reminder-offerta-abc.ics"


def test_ics_filename_keeps_edge_hyphens():
    assert ics_filename(Task(title="!Hello!")) == "reminder--hello-.ics"
