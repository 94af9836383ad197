# src/taskflow/parsing/single.py

"""
Rule-based parser for one task sentence, e.g. "Call client Rajeev tomorrow 5pm P1".

This is the always-available path: it never raises, and missing signals
degrade to defaults (no assignee, P3, 5 PM today rolled forward, whole input
as title).
"""

from __future__ import annotations

import logging
import re
from datetime import datetime

from ..core.models import DEFAULT_TITLE, ParsedTask
from ..core.ports import NameRecognizer
from .dates import WEEKDAYS, format_due_date, format_due_time, resolve_due, to_iso_instant
from .names import DEFAULT_NAME_RECOGNIZER, is_name_candidate
from .priority import classify_priority

logger = logging.getLogger(__name__)

TITLE_STOP_TOKENS: tuple[str, ...] = (
    "for",
    "by",
    "with",
    "assigned to",
    "p1",
    "p2",
    "p3",
    "p4",
    "tomorrow",
    "today",
    "tonight",
    "next week",
    "this week",
    *WEEKDAYS,
)

_STOP_TOKEN_RE = re.compile(
    r"\b(?:" + "|".join(re.escape(t).replace(r"\ ", r"\s+") for t in TITLE_STOP_TOKENS) + r")\b",
    re.IGNORECASE,
)
_WORD_RE = re.compile(r"[A-Za-z][\w'-]*")
_NAME_PAIR = r"\s+([A-Za-z][\w'-]*)(?:\s+([A-Za-z][\w'-]*))?"
# "assigned to X" is checked before "for/with X" wherever it sits in the sentence.
_INTRODUCED_NAME_RES = (
    re.compile(r"\bassigned\s+to" + _NAME_PAIR, re.IGNORECASE),
    re.compile(r"\b(?:for|with)" + _NAME_PAIR, re.IGNORECASE),
)

_TITLE_TRAILING = " \t,;:-"


def _is_capitalized(word: str) -> bool:
    return word[:1].isupper() and word[1:].islower()


def _same_case_style(a: str, b: str) -> bool:
    return _is_capitalized(a) == _is_capitalized(b) and a.islower() == b.islower()


def extract_title(text: str, names: NameRecognizer = DEFAULT_NAME_RECOGNIZER) -> str:
    """Everything before the earliest stop token or likely name (ignoring position 0)."""
    stripped = (text or "").strip()
    if not stripped:
        return DEFAULT_TITLE

    cuts = [m.start() for m in _STOP_TOKEN_RE.finditer(stripped) if m.start() > 0]
    cuts.extend(
        m.start() for m in _WORD_RE.finditer(stripped) if m.start() > 0 and names.is_likely_name(m.group(0))
    )

    title = stripped[: min(cuts)] if cuts else stripped
    title = title.strip(_TITLE_TRAILING)
    return title or stripped


# ---------------------------------------------------------------------------
# Assignee: ordered strategies, first non-empty result wins.
# ---------------------------------------------------------------------------


def _assignee_after_preposition(text: str, names: NameRecognizer) -> str | None:
    for pattern in _INTRODUCED_NAME_RES:
        for m in pattern.finditer(text):
            first, second = m.group(1), m.group(2)
            if not is_name_candidate(first):
                continue
            if second and is_name_candidate(second) and _same_case_style(first, second):
                return f"{first} {second}"
            return first
    return None


def _assignee_capitalized(text: str, names: NameRecognizer) -> str | None:
    words = list(_WORD_RE.finditer(text))
    for i, m in enumerate(words):
        word = m.group(0)
        if not _is_capitalized(word) or not is_name_candidate(word):
            continue
        if i == 0 and not names.is_likely_name(word):
            # Sentence-initial capital is usually the verb ("Call", "Finish").
            continue
        if i + 1 < len(words):
            nxt = words[i + 1]
            between = text[m.end() : nxt.start()]
            if between.isspace() and _is_capitalized(nxt.group(0)) and is_name_candidate(nxt.group(0)):
                return f"{word} {nxt.group(0)}"
        return word
    return None


def _assignee_from_recognizer(text: str, names: NameRecognizer) -> str | None:
    for m in _WORD_RE.finditer(text):
        word = m.group(0)
        if names.is_likely_name(word):
            return word[:1].upper() + word[1:]
    return None


ASSIGNEE_STRATEGIES = (
    _assignee_after_preposition,
    _assignee_capitalized,
    _assignee_from_recognizer,
)


def extract_assignee(text: str, names: NameRecognizer = DEFAULT_NAME_RECOGNIZER) -> str:
    for strategy in ASSIGNEE_STRATEGIES:
        found = strategy(text or "", names)
        if found:
            return found.strip()
    return ""


def parse_task(text: str, *, now: datetime, names: NameRecognizer | None = None) -> ParsedTask:
    names = names or DEFAULT_NAME_RECOGNIZER
    raw = text or ""

    resolved = resolve_due(raw, now=now)
    assessment = classify_priority(raw)

    parsed = ParsedTask(
        title=extract_title(raw, names),
        assignee=extract_assignee(raw, names),
        due_date=to_iso_instant(resolved.due),
        priority=assessment.priority,
        due_date_formatted=format_due_date(resolved.due),
        due_time_formatted=format_due_time(resolved.due) if resolved.time_specified else None,
        time_specified=resolved.time_specified,
        priority_text=assessment.label,
        priority_reason=assessment.reason,
    )
    logger.debug(
        "Parsed task title=%r assignee=%r due=%s priority=%s",
        parsed.title,
        parsed.assignee,
        parsed.due_date,
        parsed.priority,
    )
    return parsed
