# src/taskflow/parsing/priority.py

from __future__ import annotations

import re
from dataclasses import dataclass

from ..core.models import PRIORITY_LABELS, Priority

EXPLICIT_PRIORITY_RE = re.compile(r"\bp([1-4])\b", re.IGNORECASE)

URGENCY_WORDS: tuple[str, ...] = ("urgent", "asap", "emergency", "critical", "immediately")
IMPORTANCE_WORDS: tuple[str, ...] = ("important", "high priority", "significant", "key", "major")
LOW_PRIORITY_WORDS: tuple[str, ...] = ("low priority", "whenever")


def _words_re(words: tuple[str, ...]) -> re.Pattern[str]:
    alt = "|".join(re.escape(w).replace(r"\ ", r"\s+") for w in words)
    return re.compile(rf"\b(?:{alt})\b", re.IGNORECASE)


@dataclass(slots=True, frozen=True)
class PriorityAssessment:
    priority: Priority
    label: str
    reason: str


_KEYWORD_RULES: tuple[tuple[re.Pattern[str], Priority, str], ...] = (
    (_words_re(URGENCY_WORDS), Priority.P1, "Marked urgent ('{}')"),
    (_words_re(IMPORTANCE_WORDS), Priority.P2, "Described as important ('{}')"),
    (_words_re(LOW_PRIORITY_WORDS), Priority.P4, "Flagged as low priority ('{}')"),
)


def _assessment(priority: Priority, reason: str) -> PriorityAssessment:
    return PriorityAssessment(priority=priority, label=PRIORITY_LABELS[priority], reason=reason)


def classify_priority(text: str) -> PriorityAssessment:
    """
    First matching signal wins: explicit P1..P4, urgency, importance, low-priority words.
    Nothing found -> P3.
    """
    t = text or ""

    m = EXPLICIT_PRIORITY_RE.search(t)
    if m:
        priority = Priority(f"P{m.group(1)}")
        return _assessment(priority, f"Explicit priority {priority} in the task text")

    for pattern, priority, reason in _KEYWORD_RULES:
        m = pattern.search(t)
        if m:
            return _assessment(priority, reason.format(" ".join(m.group(0).lower().split())))

    return _assessment(Priority.P3, "No priority signal found; using the default")
