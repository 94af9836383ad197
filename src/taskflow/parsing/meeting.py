# src/taskflow/parsing/meeting.py

"""
Multi-task extraction from meeting minutes.

Per segment:
- gate: does it look like an assignment at all?
- pull assignee, cleaned description, due-date phrase and priority cue
- rebuild "<description> assigned to <who> by <when> with <P> priority"
- hand that sentence to the single-task parser

One bad segment is logged and skipped; it never aborts the batch.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from ..core.models import ParsedTask, Priority
from ..core.ports import LocalTaskParser, NameRecognizer
from .dates import DAY_MONTH_RE, MONTH_DAY_RE, NUMERIC_DATE_RE, WEEKDAYS
from .names import DEFAULT_NAME_RECOGNIZER, is_name_candidate
from .single import parse_task
from .transcript import segment_transcript

logger = logging.getLogger(__name__)

TASK_INDICATORS: tuple[str, ...] = (
    "take", "do", "finish", "complete", "handle", "prepare", "create",
    "make", "write", "review", "check", "update", "send", "share",
    "follow up", "follow-up", "followup", "get back", "call", "email",
    "schedule", "organize", "arrange", "book", "reserve", "confirm",
    "please", "need to", "should", "must", "will", "would", "could",
    "assigned", "responsible", "in charge", "work on", "develop",
)

TIME_INDICATORS: tuple[str, ...] = (
    "by", "before", "after", "tomorrow", "today", "tonight", "next",
    *WEEKDAYS,
    "week", "month", "morning", "afternoon", "evening", "noon", "day",
    "deadline", "due", "eod", "eow", "end of", "cob", "asap",
)

FILLER_PREFIXES: tuple[str, ...] = (
    "please", "can you", "could you", "will you", "would you",
    "you need to", "you should", "you must", "you will", "you have to",
    "need to", "should", "must", "will", "have to",
    "i will", "i'll", "i can", "we need to", "we should", "let's",
    "you",
)


def _phrase_re(
        phrases: tuple[str, ...],
        flags: int = re.IGNORECASE,
        *,
        inflected: bool = False,
) -> re.Pattern[str]:
    ordered = sorted(phrases, key=len, reverse=True)
    parts = []
    for p in ordered:
        part = re.escape(p).replace(r"\ ", r"\s+")
        if inflected and p.isalpha():
            # sends, finishes, reviewed, taking
            if p.endswith("e"):
                part = re.escape(p[:-1]) + "(?:e|es|ed|ing)"
            else:
                part += "(?:s|es|ed|ing)?"
        parts.append(part)
    return re.compile(rf"(?<![\w'-])(?:{'|'.join(parts)})(?![\w'-])", flags)


_TASK_INDICATOR_RE = _phrase_re(TASK_INDICATORS, inflected=True)
_TIME_INDICATOR_RE = _phrase_re(TIME_INDICATORS)
_PRONOUN_RE = re.compile(r"\b(?:you|he|she|they|we)\b", re.IGNORECASE)
_CAPITALIZED_RE = re.compile(r"\b[A-Z][a-z]+\b")
_FILLER_PREFIX_RE = re.compile(
    r"^(?:" + "|".join(re.escape(p).replace(r"\ ", r"\s+") for p in FILLER_PREFIXES) + r")\b[\s,]*",
    re.IGNORECASE,
)
_INDICATOR_WORDS = frozenset(w for w in TASK_INDICATORS if " " not in w and "-" not in w)


def contains_task_assignment(segment: str) -> bool:
    has_task = _TASK_INDICATOR_RE.search(segment) is not None
    has_capitalized = _CAPITALIZED_RE.search(segment) is not None

    if has_capitalized and has_task:
        return True

    has_time = _TIME_INDICATOR_RE.search(segment) is not None
    has_assignee = (
        ":" in segment
        or _PRONOUN_RE.search(segment) is not None
        or has_capitalized
        or "assigned to" in segment.lower()
    )
    return has_task and (has_time or has_assignee)


# ---------------------------------------------------------------------------
# Assignee
# ---------------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class _AssigneeRule:
    name: str
    pattern: re.Pattern[str]
    loose: bool = False


ASSIGNEE_RULES: tuple[_AssigneeRule, ...] = (
    _AssigneeRule("explicit_label", re.compile(r"^([A-Z][A-Za-z]*(?:\s+[A-Z][A-Za-z]*){0,2})\s*:\s*\S")),
    _AssigneeRule(
        "name_then_modal",
        re.compile(r"^([A-Z][a-z]+),?\s+(?:please|will|should|can|could|would|must|need\s+to)\b"),
    ),
    _AssigneeRule("name_you", re.compile(r"^([A-Z][a-z]+),?\s+you\b")),
    _AssigneeRule("name_to", re.compile(r"\b([A-Z][a-z]+)\s+(?:to|will|should|can|please)\b")),
    _AssigneeRule(
        "before_modal",
        re.compile(
            r"\b(\w+)\s+(?:will|should|to|needs\s+to|has\s+to|must|can\s+you|could\s+you|would\s+you|please)\b",
            re.IGNORECASE,
        ),
        loose=True,
    ),
    _AssigneeRule(
        "assigned_to",
        re.compile(r"\b(?:assigned\s+to|give\s+to|for|goes\s+to)\s+(\w+)", re.IGNORECASE),
        loose=True,
    ),
    _AssigneeRule(
        "possessive",
        re.compile(r"\b(\w+)'s\s+(?:task|job|responsibility|assignment)\b", re.IGNORECASE),
        loose=True,
    ),
)


def _acceptable_name(candidate: str, *, loose: bool, names: NameRecognizer) -> bool:
    first = candidate.split()[0] if candidate.split() else ""
    if not is_name_candidate(first) or first.lower() in _INDICATOR_WORDS:
        return False
    if loose:
        return first[:1].isupper() or names.is_likely_name(first)
    return True


def extract_assignee(segment: str, names: NameRecognizer = DEFAULT_NAME_RECOGNIZER) -> str:
    text = segment.strip()
    for rule in ASSIGNEE_RULES:
        for m in rule.pattern.finditer(text):
            candidate = m.group(1).strip()
            if _acceptable_name(candidate, loose=rule.loose, names=names):
                logger.debug("Assignee rule %s -> %r", rule.name, candidate)
                return candidate[:1].upper() + candidate[1:]
    return ""


# ---------------------------------------------------------------------------
# Description
# ---------------------------------------------------------------------------

DUE_PHRASE_RES: tuple[re.Pattern[str], ...] = (
    re.compile(r"\bby\s+[^,.]+", re.IGNORECASE),
    re.compile(r"\bbefore\s+[^,.]+", re.IGNORECASE),
    re.compile(r"\bdue\s+[^,.]+", re.IGNORECASE),
    re.compile(r"\bdeadline\s+[^,.]+", re.IGNORECASE),
    re.compile(r"\bon\s+(?:" + "|".join(WEEKDAYS) + r")\b", re.IGNORECASE),
)


def extract_task_description(segment: str, assignee: str) -> str:
    description = segment.strip()

    # Loose assignee rules capitalize the name; the segment may not.
    if assignee and re.match(rf"{re.escape(assignee)}\b", description, re.IGNORECASE):
        description = description[len(assignee):].lstrip(" ,")
        if description.startswith(":"):
            description = description[1:]
        description = description.strip()

    while True:
        m = _FILLER_PREFIX_RE.match(description)
        if not m or not m.group(0):
            break
        description = description[m.end():]

    for pattern in DUE_PHRASE_RES:
        description = pattern.sub("", description)

    description = " ".join(description.split()).strip(" ,;:-")
    return description[:1].upper() + description[1:]


# ---------------------------------------------------------------------------
# Due-date phrase and priority cue (run on the raw segment)
# ---------------------------------------------------------------------------

_TIME_CUE_RE = re.compile(r"\b\d{1,2}(?::\d{2})?\s*(?:am|pm)\b|\b\d{1,2}:\d{2}\b")
_DAY_CUE_RES: tuple[re.Pattern[str], ...] = (
    re.compile(r"\b(?:tomorrow|today|tonight)\b"),
    re.compile(r"\b(?:this|next)\s+week\b"),
    re.compile(r"\bend\s+of\s+(?:the\s+)?(?:day|week|month)\b"),
    re.compile(r"\b(?:eod|eow|eom|cob)\b"),
    re.compile(r"\b(?:next\s+)?(?:" + "|".join(WEEKDAYS) + r")\b"),
    DAY_MONTH_RE,
    MONTH_DAY_RE,
    NUMERIC_DATE_RE,
)
# "by friday", "due on 20th june", "before 10pm tomorrow": a deadline beats a passing mention.
_DEADLINE_CUE_RES: tuple[re.Pattern[str], ...] = tuple(
    re.compile(
        r"\b(?:by|due(?:\s+on)?|before|on)\s+"
        r"(?:(?:\d{1,2}(?::\d{2})?\s*(?:am|pm)|\d{1,2}:\d{2})\s+)?"
        r"(?:the\s+)?"
        rf"(?P<cue>{p.pattern})"
    )
    for p in _DAY_CUE_RES
)
_DESCRIPTION_DAY_CUE_RES: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p.pattern, re.IGNORECASE) for p in _DAY_CUE_RES
)
_SPACE_BEFORE_PUNCT_RE = re.compile(r"\s+([,;:])")


def _day_cue(t: str) -> str:
    for group, patterns in (("cue", _DEADLINE_CUE_RES), (0, _DAY_CUE_RES)):
        for pattern in patterns:
            m = pattern.search(t)
            if m:
                return " ".join(m.group(group).split())
    return ""


def extract_due_date(segment: str) -> str:
    """
    Due-date phrase found in a segment, e.g. "10pm tomorrow" or "wednesday".

    Deadline-anchored cues ("by friday") are tried before bare ones ("today").
    Returns "" when the segment carries no date or time cue.
    """
    t = segment.lower()

    day_cue = _day_cue(t)

    time_cue = ""
    m = _TIME_CUE_RE.search(t)
    if m:
        time_cue = m.group(0).replace(" ", "")

    return " ".join(p for p in (time_cue, day_cue) if p)


_EXPLICIT_PRIORITY_RE = re.compile(
    r"\b(p[1-4]|priority\s*[1-4]|high\s+priority|medium\s+priority|low\s+priority)\b",
    re.IGNORECASE,
)
_URGENT_RE = re.compile(r"\b(?:urgent|critical|asap|immediately|right\s+away)\b", re.IGNORECASE)
_IMPORTANT_RE = re.compile(r"\b(?:important|significant|key|major)\b", re.IGNORECASE)


def extract_priority(segment: str) -> Priority:
    m = _EXPLICIT_PRIORITY_RE.search(segment)
    if m:
        cue = " ".join(m.group(1).lower().split())
        if cue in ("p1", "high priority") or cue.endswith("1"):
            return Priority.P1
        if cue.endswith("2"):
            return Priority.P2
        if cue in ("p3", "medium priority") or cue.endswith("3"):
            return Priority.P3
        return Priority.P4

    if _URGENT_RE.search(segment):
        return Priority.P1
    if _IMPORTANT_RE.search(segment):
        return Priority.P2
    return Priority.P3


def build_structured_sentence(description: str, assignee: str, due_phrase: str, priority: str) -> str:
    sentence = description
    if assignee:
        sentence += f" assigned to {assignee}"
    if due_phrase:
        sentence += f" by {due_phrase}"
    if priority:
        sentence += f" with {priority} priority"
    return sentence


# ---------------------------------------------------------------------------
# Batch extraction
# ---------------------------------------------------------------------------


def _without_day_cues(description: str) -> str:
    """Drop date words left in the description so only the rebuilt "by ..." clause dates the task."""
    out = description
    for pattern in _DESCRIPTION_DAY_CUE_RES:
        out = pattern.sub(" ", out)
    out = _SPACE_BEFORE_PUNCT_RE.sub(r"\1", " ".join(out.split())).strip(" ,;:-")
    return out[:1].upper() + out[1:] if out else description


def _extract_one(
        segment: str,
        *,
        now: datetime,
        names: NameRecognizer,
        parser: LocalTaskParser,
) -> ParsedTask | None:
    assignee = extract_assignee(segment, names)
    description = extract_task_description(segment, assignee)
    if not description:
        logger.debug("Segment has no description left after cleanup: %r", segment)
        return None

    due_phrase = extract_due_date(segment)
    if _day_cue(segment.lower()):
        description = _without_day_cues(description)

    sentence = build_structured_sentence(
        description,
        assignee,
        due_phrase,
        str(extract_priority(segment)),
    )
    parsed = parser(sentence, now=now, names=names)

    if assignee and not parsed.assignee:
        parsed.assignee = assignee
    if not parsed.title.strip():
        return None

    parsed.context = segment
    return parsed


def extract_meeting_tasks(
        text: str,
        *,
        now: datetime,
        names: NameRecognizer | None = None,
        parser: LocalTaskParser | Callable[..., ParsedTask] = parse_task,
) -> list[ParsedTask]:
    """Tasks found in a transcript, one per accepted segment, in source order."""
    names = names or DEFAULT_NAME_RECOGNIZER
    tasks: list[ParsedTask] = []

    for segment in segment_transcript(text):
        if not contains_task_assignment(segment):
            logger.debug("Dropped segment (no assignment signal): %r", segment)
            continue
        try:
            task = _extract_one(segment, now=now, names=names, parser=parser)
        except Exception:
            logger.exception("Task extraction failed for segment %r", segment)
            continue
        if task is not None:
            tasks.append(task)

    logger.debug("Meeting extraction: %d task(s)", len(tasks))
    return tasks
