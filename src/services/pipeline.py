# src/services/pipeline.py
import re

from models.task import PIPE_STAGES, PipeStage

# longest names first so a stage is never cut short by a shorter one
_STAGES_ALT = "|".join(re.escape(s.value) for s in sorted(PIPE_STAGES, key=len, reverse=True))
_PREFIX_RE = re.compile(r"^(?:" + _STAGES_ALT + r")(?::|\s*[–-])\s*", re.IGNORECASE)
_SUFFIX_RE = re.compile(r"\s*[–-]\s*(?:" + _STAGES_ALT + r")$", re.IGNORECASE)


def strip_stage(title: str) -> str:
    """Drop one leading "Stage: " / "Stage – " and one trailing " – Stage"."""
    base = _PREFIX_RE.sub("", title, count=1)
    base = _SUFFIX_RE.sub("", base, count=1)
    return base.strip()


def format_title_with_stage(title: str, next_stage, direction: int) -> str:
    """Title shown after moving a card; only forward moves rewrite it."""
    if direction != 1:
        return title
    stage = PipeStage.coerce(next_stage) or next_stage
    return f"{stage}: {strip_stage(title)}"


def next_stage(current: PipeStage, direction: int) -> PipeStage:
    idx = min(max(current.position + direction, 0), len(PIPE_STAGES) - 1)
    return PIPE_STAGES[idx]
