# src/taskflow/core/models.py

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from enum import StrEnum
from typing import Any

from ..parsing.dates import DEFAULT_DUE_TIME, roll_forward, to_iso_instant

DEFAULT_TITLE = "Untitled Task"


class Priority(StrEnum):
    """P1 is the most urgent level, P4 the least."""

    P1 = "P1"
    P2 = "P2"
    P3 = "P3"
    P4 = "P4"

    @classmethod
    def from_raw(cls, raw: Any) -> Priority | None:
        s = str(raw or "").strip().upper()
        try:
            return cls(s)
        except ValueError:
            return None


PRIORITY_LABELS: dict[Priority, str] = {
    Priority.P1: "High",
    Priority.P2: "Medium-High",
    Priority.P3: "Medium",
    Priority.P4: "Low",
}


class TaskStatus(StrEnum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"

    @classmethod
    def from_raw(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.PENDING
        try:
            return cls(raw)
        except ValueError:
            return cls.PENDING


@dataclass(slots=True)
class ParsedTask:
    """Structured extraction result, before the user confirms it."""

    title: str
    assignee: str
    due_date: str
    priority: Priority

    due_date_formatted: str | None = None
    due_time_formatted: str | None = None
    time_specified: bool = False
    priority_text: str | None = None
    priority_reason: str | None = None
    context: str | None = None

    @property
    def due_at(self) -> datetime:
        return datetime.fromisoformat(self.due_date)

    def to_dict(self) -> dict[str, Any]:
        """Wire shape, using the field names the remote model is asked for."""
        out: dict[str, Any] = {
            "title": self.title,
            "assignee": self.assignee,
            "dueDate": self.due_date,
            "priority": str(self.priority),
            "dueDateFormatted": self.due_date_formatted,
            "dueTimeFormatted": self.due_time_formatted,
            "timeSpecified": self.time_specified,
            "priorityText": self.priority_text,
            "priorityReason": self.priority_reason,
        }
        if self.context:
            out["context"] = self.context
        return out


@dataclass(slots=True)
class Task:
    id: str
    status: TaskStatus
    created_at: str

    title: str
    assignee: str
    due_date: str
    priority: Priority

    description: str | None = None


def promote_parsed_task(parsed: ParsedTask, *, now: datetime, task_id: str | None = None) -> Task:
    """
    Turn a confirmed ParsedTask into a Task.

    The due date is re-checked against `now`: confirmation can happen long after
    parsing, and an unreadable date becomes tomorrow at the default hour.
    """
    try:
        due = parsed.due_at
        if now.tzinfo is not None:
            due = due.astimezone(now.tzinfo)
        elif due.tzinfo is not None:
            # Naive `now` is local wall time.
            due = due.astimezone().replace(tzinfo=None)
    except (TypeError, ValueError):
        due = datetime.combine(now.date() + timedelta(days=1), time(*DEFAULT_DUE_TIME), tzinfo=now.tzinfo)

    due = roll_forward(due, now)

    description = None
    if parsed.context:
        description = f"{parsed.title}\n\nContext: {parsed.context}"

    return Task(
        id=task_id or uuid.uuid4().hex,
        status=TaskStatus.PENDING,
        created_at=to_iso_instant(now),
        title=parsed.title,
        assignee=parsed.assignee,
        due_date=to_iso_instant(due),
        priority=parsed.priority,
        description=description,
    )


def describe_due(parsed: ParsedTask) -> str:
    """One-line due string for display: date, plus time only if it was stated."""
    date_s = parsed.due_date_formatted or parsed.due_date
    if parsed.time_specified and parsed.due_time_formatted:
        return f"{date_s} at {parsed.due_time_formatted}"
    return date_s


__all__ = [
    "DEFAULT_TITLE",
    "PRIORITY_LABELS",
    "ParsedTask",
    "Priority",
    "Task",
    "TaskStatus",
    "describe_due",
    "promote_parsed_task",
]
