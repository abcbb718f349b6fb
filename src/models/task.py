from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import StrEnum
from typing import Any, Mapping, Optional
import logging
import math
import uuid

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "New task"


def new_id() -> str:
    return uuid.uuid4().hex


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class _Choice(StrEnum):
    """Closed set of labels; `coerce` maps loose input onto a member."""

    @classmethod
    def default(cls):
        raise NotImplementedError

    @classmethod
    def coerce(cls, raw):
        if isinstance(raw, cls):
            return raw
        text = str(raw or "").strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        if text:
            logger.warning("unknown %s %r, using %s", cls.__name__, raw, cls.default())
        return cls.default()


class Priority(_Choice):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @classmethod
    def default(cls):
        return cls.MEDIUM


class Category(_Choice):
    QUOTE_FOLLOW_UP = "Quote follow-up"
    CUSTOMER_VISIT = "Customer visit"
    POST_FAIR = "Post-fair"
    OFFER_TO_SEND = "Offer to send"
    DISPUTE = "Dispute"
    OTHER = "Other"

    @classmethod
    def default(cls):
        return cls.OTHER


class Status(_Choice):
    TODO = "To do"
    IN_PROGRESS = "In progress"
    WAITING = "Waiting"
    DONE = "Done"

    @classmethod
    def default(cls):
        return cls.TODO


class PipeStage(StrEnum):
    """Sales pipeline, in board order."""

    LEAD = "Lead"
    QUALIFICA = "Qualifica"
    OFFERTA_INVIATA = "Offerta inviata"
    NEGOZIAZIONE = "Negoziazione"
    TEST_SHIPMENT = "Test shipment"
    CHIUSO_VINTO = "Chiuso vinto"
    CHIUSO_PERSO = "Chiuso perso"

    @classmethod
    def coerce(cls, raw) -> Optional["PipeStage"]:
        """Empty input means "not in pipeline"."""
        if raw is None or isinstance(raw, cls):
            return raw
        text = str(raw).strip().lower()
        if not text:
            return None
        for member in cls:
            if member.value.lower() == text:
                return member
        logger.warning("unknown pipeline stage %r, dropping it", raw)
        return None

    @property
    def position(self) -> int:
        return list(PipeStage).index(self)


PIPE_STAGES = tuple(PipeStage)


def parse_due(raw) -> Optional[date]:
    """Parse a due date in either yyyy-mm-dd or dd/mm/yyyy form."""
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    text = str(raw).strip()
    for fmt in ("%Y-%m-%d", "%d/%m/%Y"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    logger.warning("unparseable due date %r, ignoring it", raw)
    return None


def parse_value(raw) -> Optional[float]:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        try:
            value = float(raw)
        except OverflowError:
            logger.warning("value is too large for an amount, ignoring it")
            return None
    else:
        text = str(raw).strip()
        if not text:
            return None
        try:
            value = float(text)
        except ValueError:
            logger.warning("value %r is not a number, ignoring it", raw)
            return None
    if not math.isfinite(value) or value < 0:
        logger.warning("value %r is not a valid amount, ignoring it", raw)
        return None
    return value


@dataclass
class Task:
    id: str = field(default_factory=new_id)
    title: str = DEFAULT_TITLE
    customer: str = ""
    due: Optional[date] = None
    priority: Priority = Priority.MEDIUM
    category: Category = Category.OTHER
    status: Status = Status.TODO
    channel: str = ""  # Email, Phone, LinkedIn, Fair...
    notes: str = ""
    created_at: str = field(default_factory=now_iso)
    pipe: Optional[PipeStage] = None  # None -> not in pipeline
    value_eur: Optional[float] = None

    def __post_init__(self):
        if not self.title or not self.title.strip():
            self.title = DEFAULT_TITLE
        self.priority = Priority.coerce(self.priority)
        self.category = Category.coerce(self.category)
        self.status = Status.coerce(self.status)
        self.pipe = PipeStage.coerce(self.pipe)
        self.due = parse_due(self.due)
        if self.value_eur is not None and self.value_eur < 0:
            raise ValueError(f"value_eur must not be negative: {self.value_eur}")

    def to_dict(self) -> dict:
        """JSON shape used for persistence and JSON export."""
        return {
            "id": self.id,
            "title": self.title,
            "customer": self.customer,
            "due": self.due.isoformat() if self.due else None,
            "priority": self.priority.value,
            "category": self.category.value,
            "status": self.status.value,
            "channel": self.channel,
            "notes": self.notes,
            "createdAt": self.created_at,
            "pipe": self.pipe.value if self.pipe else None,
            "valueEUR": self.value_eur,
        }

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "Task":
        # accept both the camelCase JSON keys and attribute names
        return Task(
            id=str(d.get("id") or new_id()),
            title=str(d.get("title") or ""),
            customer=str(d.get("customer") or ""),
            due=parse_due(d.get("due")),
            priority=Priority.coerce(d.get("priority")),
            category=Category.coerce(d.get("category")),
            status=Status.coerce(d.get("status")),
            channel=str(d.get("channel") or ""),
            notes=str(d.get("notes") or ""),
            created_at=str(d.get("createdAt") or d.get("created_at") or now_iso()),
            pipe=PipeStage.coerce(d.get("pipe")),
            value_eur=parse_value(d.get("valueEUR", d.get("value_eur"))),
        )
