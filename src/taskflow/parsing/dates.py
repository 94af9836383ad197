# src/taskflow/parsing/dates.py

"""
Due date/time resolution for free-text task sentences.

Rules are ordered; the first rule whose pattern matches anywhere in the
sentence decides the day:
- relative words (tomorrow, today, tonight, next week, this week),
- end-of-period markers (end of day/week/month, eod/eow/eom/cob),
- weekday names,
- absolute forms (20th June, June 20, 6/20).

Time of day is scanned separately and applied afterwards (17:00 when absent).
Everything is computed against an explicit reference instant `now`; nothing
here reads the system clock.
"""

from __future__ import annotations

import calendar
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta

logger = logging.getLogger(__name__)

DEFAULT_DUE_TIME: tuple[int, int] = (17, 0)
TONIGHT_DUE_TIME: tuple[int, int] = (20, 0)

WEEKDAYS: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

MONTHS: dict[str, int] = {
    "january": 1, "jan": 1,
    "february": 2, "feb": 2,
    "march": 3, "mar": 3,
    "april": 4, "apr": 4,
    "may": 5,
    "june": 6, "jun": 6,
    "july": 7, "jul": 7,
    "august": 8, "aug": 8,
    "september": 9, "sept": 9, "sep": 9,
    "october": 10, "oct": 10,
    "november": 11, "nov": 11,
    "december": 12, "dec": 12,
}

_FRIDAY = 4

_MONTH_ALT = "|".join(sorted(MONTHS, key=len, reverse=True))
_WEEKDAY_ALT = "|".join(WEEKDAYS)

DAY_MONTH_RE = re.compile(rf"\b(\d{{1,2}})(?:st|nd|rd|th)?\s+(?:of\s+)?({_MONTH_ALT})\b")
MONTH_DAY_RE = re.compile(rf"\b({_MONTH_ALT})\.?\s+(\d{{1,2}})(?:st|nd|rd|th)?\b")
NUMERIC_DATE_RE = re.compile(r"(?<![\d/])(\d{1,2})/(\d{1,2})(?![\d/])")
WEEKDAY_RE = re.compile(rf"\b(?:next\s+)?({_WEEKDAY_ALT})\b")

_AMPM_TIME_RE = re.compile(r"\b(\d{1,2})(?::(\d{2}))?\s*(am|pm)\b")
_BARE_TIME_RE = re.compile(r"\b(?:at\s+)?(\d{1,2}):(\d{2})\b|\bat\s+(\d{1,2})\b")


@dataclass(slots=True, frozen=True)
class ResolvedDue:
    due: datetime
    time_specified: bool


# ---------------------------------------------------------------------------
# Calendar helpers
# ---------------------------------------------------------------------------


def days_until_weekday(today_weekday: int, target_weekday: int) -> int:
    """Days to the next occurrence of `target_weekday`; a same-day match means next week."""
    days = (target_weekday - today_weekday + 7) % 7
    return days or 7


def _friday_this_week(today: date) -> date:
    # Saturday and Sunday move on to the coming Friday.
    return today + timedelta(days=(_FRIDAY - today.weekday()) % 7)


def _last_day_of_month(today: date) -> date:
    return today.replace(day=calendar.monthrange(today.year, today.month)[1])


def _calendar_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _add_years(dt: datetime, years: int) -> datetime:
    try:
        return dt.replace(year=dt.year + years)
    except ValueError:
        # February 29 in a non-leap target year.
        return dt.replace(year=dt.year + years, day=28)


# ---------------------------------------------------------------------------
# Roll-forward
# ---------------------------------------------------------------------------


def roll_forward(due: datetime, now: datetime) -> datetime:
    """
    Push a resolved due date into the future.

    Only the calendar date is compared. A date before today moves forward a
    year at a time; today with a clock time already gone becomes tomorrow.
    """
    if due.date() == now.date():
        return due + timedelta(days=1) if due < now else due

    while due.date() < now.date():
        due = _add_years(due, 1)
    return due


def roll_forward_years(due: datetime, now: datetime) -> datetime:
    """Year-increment-only variant used on dates coming back from a remote model."""
    while due.date() < now.date():
        due = _add_years(due, 1)
    return due


# ---------------------------------------------------------------------------
# Day resolution
# ---------------------------------------------------------------------------

_DayResolver = Callable[[re.Match[str], date], date | None]


@dataclass(slots=True, frozen=True)
class _DateRule:
    name: str
    pattern: re.Pattern[str]
    resolve: _DayResolver
    default_time: tuple[int, int] = DEFAULT_DUE_TIME


def _weekday(m: re.Match[str], today: date) -> date:
    target = WEEKDAYS.index(m.group(1))
    return today + timedelta(days=days_until_weekday(today.weekday(), target))


def _day_month(m: re.Match[str], today: date) -> date | None:
    return _calendar_date(today.year, MONTHS[m.group(2)], int(m.group(1)))


def _month_day(m: re.Match[str], today: date) -> date | None:
    return _calendar_date(today.year, MONTHS[m.group(1)], int(m.group(2)))


def _numeric(m: re.Match[str], today: date) -> date | None:
    return _calendar_date(today.year, int(m.group(1)), int(m.group(2)))


DATE_RULES: tuple[_DateRule, ...] = (
    # relative words
    _DateRule("tomorrow", re.compile(r"\btomorrow\b"), lambda _m, d: d + timedelta(days=1)),
    _DateRule("today", re.compile(r"\btoday\b"), lambda _m, d: d),
    _DateRule("tonight", re.compile(r"\btonight\b"), lambda _m, d: d, TONIGHT_DUE_TIME),
    _DateRule("next_week", re.compile(r"\bnext\s+week\b"), lambda _m, d: d + timedelta(days=7)),
    _DateRule("this_week", re.compile(r"\bthis\s+week\b"), lambda _m, d: _friday_this_week(d)),
    # end-of-period markers
    _DateRule("end_of_day", re.compile(r"\bend\s+of\s+(?:the\s+)?day\b|\b(?:eod|cob)\b"), lambda _m, d: d),
    _DateRule(
        "end_of_week",
        re.compile(r"\bend\s+of\s+(?:the\s+)?week\b|\beow\b"),
        lambda _m, d: _friday_this_week(d),
    ),
    _DateRule(
        "end_of_month",
        re.compile(r"\bend\s+of\s+(?:the\s+)?month\b|\beom\b"),
        lambda _m, d: _last_day_of_month(d),
    ),
    # weekday names
    _DateRule("weekday", WEEKDAY_RE, _weekday),
    # absolute forms
    _DateRule("day_month", DAY_MONTH_RE, _day_month),
    _DateRule("month_day", MONTH_DAY_RE, _month_day),
    _DateRule("numeric", NUMERIC_DATE_RE, _numeric),
)


def resolve_day(text: str, today: date) -> tuple[date | None, tuple[int, int]]:
    """
    Find the day a lowercased sentence refers to.

    Returns (day or None, default time of day for that rule).
    A rule whose match is not a real calendar date is skipped.
    """
    for rule in DATE_RULES:
        for m in rule.pattern.finditer(text):
            day = rule.resolve(m, today)
            if day is not None:
                logger.debug("Date rule %s matched %r -> %s", rule.name, m.group(0), day)
                return day, rule.default_time
    return None, DEFAULT_DUE_TIME


# ---------------------------------------------------------------------------
# Time of day
# ---------------------------------------------------------------------------


def _blank_absolute_dates(text: str) -> str:
    for pattern in (DAY_MONTH_RE, MONTH_DAY_RE, NUMERIC_DATE_RE):
        text = pattern.sub(lambda m: " " * len(m.group(0)), text)
    return text


def _checked_time(hour: int, minute: int, meridiem: str | None) -> tuple[int, int] | None:
    if meridiem == "pm" and hour < 12:
        hour += 12
    elif meridiem == "am" and hour == 12:
        hour = 0
    if 0 <= hour <= 23 and 0 <= minute <= 59:
        return hour, minute
    return None


def extract_time_of_day(text: str) -> tuple[int, int] | None:
    """
    Explicit time of day in a lowercased sentence, as (hour, minute).

    `5pm`, `11:30 am` win over bare `17:30` / `at 7`. Only the first token
    counts; an out-of-range one yields None.
    """
    scan = _blank_absolute_dates(text)

    m = _AMPM_TIME_RE.search(scan)
    if m:
        return _checked_time(int(m.group(1)), int(m.group(2) or 0), m.group(3))

    m = _BARE_TIME_RE.search(scan)
    if m:
        if m.group(1) is not None:
            return _checked_time(int(m.group(1)), int(m.group(2)), None)
        return _checked_time(int(m.group(3)), 0, None)

    return None


# ---------------------------------------------------------------------------
# Public entry point + display helpers
# ---------------------------------------------------------------------------


def resolve_due(text: str, *, now: datetime) -> ResolvedDue:
    t = (text or "").lower()

    day, default_time = resolve_day(t, now.date())
    clock = extract_time_of_day(t)
    hour, minute = clock or default_time

    due = datetime.combine(day or now.date(), time(hour, minute), tzinfo=now.tzinfo)
    due = roll_forward(due, now)
    return ResolvedDue(due=due, time_specified=clock is not None)


def format_due_date(dt: datetime) -> str:
    return f"{dt:%B} {dt.day}, {dt.year}"


def format_due_time(dt: datetime) -> str:
    hour12 = dt.hour % 12 or 12
    suffix = "AM" if dt.hour < 12 else "PM"
    return f"{hour12}:{dt.minute:02d} {suffix}"


def to_iso_instant(dt: datetime) -> str:
    if dt.tzinfo is None:
        return dt.isoformat(timespec="seconds")
    return dt.astimezone(UTC).isoformat(timespec="seconds")
