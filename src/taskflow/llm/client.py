# src/taskflow/llm/client.py

from __future__ import annotations

import json
import logging
import re
from datetime import UTC, datetime, time, timedelta
from typing import Any

import httpx
from openai import AsyncOpenAI

from ..config import get_settings
from ..core.models import DEFAULT_TITLE, PRIORITY_LABELS, ParsedTask, Priority
from ..core.ports import ChatMessage
from ..parsing.dates import DEFAULT_DUE_TIME, format_due_date, format_due_time, roll_forward_years, to_iso_instant
from .errors import MalformedResponse, NoCredential, RemoteParsingError, TransportFailure

logger = logging.getLogger(__name__)

_FIELDS_DOC = """
- title: A clear, concise task title (string)
- assignee: The person assigned (string, empty if not specified)
- dueDate: ISO date string in UTC (default to tomorrow 5PM if not specified)
- dueDateFormatted: Human-readable date (e.g., "June 20, 2025")
- dueTimeFormatted: Human-readable time (e.g., "11:00 PM"), or null if no time was stated
- priority: One of "P1", "P2", "P3", "P4" (P3 is default, P1 is highest priority)
- priorityText: Human-readable priority (e.g., "High", "Medium", "Low")
- priorityReason: Brief explanation of why this priority was assigned
""".strip()

_DATE_RULES_DOC = """
IMPORTANT DATE HANDLING RULES:
1. Today's date is {today_mdy} ({now_iso}).
2. When a date is mentioned without a year (e.g., "May 15", "June 2"), ALWAYS set it to a FUTURE date.
3. If the date would occur in the past for the current year, use NEXT year instead.
4. ALWAYS include the year in dueDateFormatted.
5. ALWAYS set the dueDate ISO string with the correct year, month, day, hour and minute.

Priority guidelines:
- P1 (High): urgent/emergency tasks, ASAP, critical deadlines
- P2 (Medium-High): important tasks, high priority
- P3 (Medium): normal priority (default)
- P4 (Low): low priority, nice to have
""".strip()

SINGLE_TASK_SYSTEM_PROMPT = (
    "You are a task management assistant. Parse the user's task description and extract "
    "structured information. Respond with a single valid JSON object with these fields:\n"
    f"{_FIELDS_DOC}\n\n{_DATE_RULES_DOC}\n\n"
    "Return STRICT JSON only. No extra text. No Markdown."
)

TRANSCRIPT_SYSTEM_PROMPT = (
    "You are a meeting assistant. Extract every actionable task from the meeting transcript. "
    'Respond with a JSON object {{"tasks": [...]}} where each element has these fields:\n'
    f"{_FIELDS_DOC}\n"
    "- context: The sentence(s) of the transcript the task came from (string)\n\n"
    f"{_DATE_RULES_DOC}\n\n"
    'If there are no tasks, return {{"tasks": []}}. Return STRICT JSON only. No extra text. No Markdown.'
)

_REQUIRED_FIELDS = ("title", "dueDate", "priority")
_CODE_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Error classification (SDK exception names vary across versions)
# ---------------------------------------------------------------------------


def _is_auth_error(exc: Exception) -> bool:
    return exc.__class__.__name__ in {
        "AuthenticationError",
        "PermissionDeniedError",
        "UnauthorizedError",
    }


def _is_rate_limit_error(exc: Exception) -> bool:
    return exc.__class__.__name__ in {"RateLimitError", "TooManyRequestsError"}


def _is_connection_error(exc: Exception) -> bool:
    if isinstance(exc, httpx.TransportError):
        return True
    return exc.__class__.__name__ in {
        "APIConnectionError",
        "APITimeoutError",
        "Timeout",
        "ConnectTimeout",
        "ReadTimeout",
        "WriteTimeout",
    }


def _transport_failure(exc: Exception) -> TransportFailure:
    if _is_auth_error(exc):
        return TransportFailure("LLM authentication failed. Check your API key (TASKFLOW_OPENAI_API_KEY).")
    if _is_rate_limit_error(exc):
        return TransportFailure("LLM is rate-limited. Try again later.")
    if _is_connection_error(exc):
        return TransportFailure("LLM network/timeout error. Try again later.")
    return TransportFailure(f"LLM request failed ({exc.__class__.__name__}).")


def friendly_remote_error_message(err: Exception) -> str:
    if isinstance(err, NoCredential):
        return "Remote parsing is not configured (missing API key). Set TASKFLOW_OPENAI_API_KEY in .env."
    if isinstance(err, MalformedResponse):
        return f"The model returned an unusable answer: {err}"
    if isinstance(err, RemoteParsingError):
        return str(err).strip() or "Remote parsing failed."
    return f"Remote parsing failed ({err.__class__.__name__})."


# ---------------------------------------------------------------------------
# Response decoding
# ---------------------------------------------------------------------------


def _extract_json_value(raw: str) -> str:
    raw = _CODE_FENCE_RE.sub("", raw.strip()).strip()
    if raw[:1] in "{[" and raw[-1:] in "}]":
        return raw
    for open_ch, close_ch in (("{", "}"), ("[", "]")):
        first = raw.find(open_ch)
        last = raw.rfind(close_ch)
        if first != -1 and last > first:
            return raw[first : last + 1]
    return raw


def _load_json(raw: str) -> Any:
    try:
        return json.loads(_extract_json_value(raw))
    except json.JSONDecodeError as e:
        raise MalformedResponse("Response is not valid JSON.") from e


def _parse_due(raw: Any, now: datetime) -> datetime | None:
    if not isinstance(raw, str) or not raw.strip():
        return None
    try:
        due = datetime.fromisoformat(raw.strip())
    except ValueError:
        return None
    if due.tzinfo is None:
        due = due.replace(tzinfo=UTC)
    if now.tzinfo is None:
        return due.astimezone().replace(tzinfo=None)
    return due.astimezone(now.tzinfo)


def _text_field(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    return str(value).strip() if value is not None else ""


def _to_parsed_task(
        data: dict[str, Any],
        *,
        title: str,
        due: datetime,
        time_specified: bool,
        priority: Priority,
        now: datetime,
) -> ParsedTask:
    due = roll_forward_years(due, now)
    return ParsedTask(
        title=title,
        assignee=_text_field(data, "assignee"),
        due_date=to_iso_instant(due),
        priority=priority,
        due_date_formatted=format_due_date(due),
        due_time_formatted=format_due_time(due) if time_specified else None,
        time_specified=time_specified,
        priority_text=PRIORITY_LABELS[priority],
        priority_reason=_text_field(data, "priorityReason") or None,
        context=_text_field(data, "context") or None,
    )


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class OpenAITaskParser:
    """
    Remote parsing via an OpenAI-compatible chat completion endpoint.

    Configuration is read once here. Without an API key the object can still be
    built, but every call raises NoCredential. No retries: a failed call is
    reported to the caller, which falls back to the local parser.
    """

    def __init__(self, settings=None, *, client: Any | None = None) -> None:
        if settings is None:
            settings = get_settings()

        self._api_key = str(getattr(settings, "openai_api_key", None) or "").strip() or None
        self._model = str(getattr(settings, "llm_model", "gpt-3.5-turbo"))
        self._transcript_model = str(getattr(settings, "llm_transcript_model", self._model))
        self._temperature = float(getattr(settings, "llm_temperature", 0.3))

        self._client = client
        if self._client is None and self._api_key:
            connect_s = float(getattr(settings, "llm_connect_timeout", 5.0))
            read_s = float(getattr(settings, "llm_read_timeout", 30.0))
            self._client = AsyncOpenAI(
                api_key=self._api_key,
                base_url=str(getattr(settings, "openai_base_url", "") or "") or None,
                timeout=httpx.Timeout(connect=connect_s, read=read_s, write=10.0, pool=connect_s),
                max_retries=0,
            )

    @property
    def configured(self) -> bool:
        return self._client is not None

    def _require_client(self) -> Any:
        if self._client is None:
            raise NoCredential("OpenAI API key is not set. Set TASKFLOW_OPENAI_API_KEY in your .env.")
        return self._client

    async def _complete(self, *, model: str, system_prompt: str, text: str, max_tokens: int) -> str:
        client = self._require_client()
        messages: list[ChatMessage] = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": text},
        ]

        logger.info("LLM: requesting model=%s (%d chars of input)", model, len(text))
        try:
            completion = await client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=self._temperature,
                max_tokens=max_tokens,
                response_format={"type": "json_object"},
            )
        except Exception as e:
            logger.info("LLM: call failed on model=%s (%s)", model, e.__class__.__name__)
            raise _transport_failure(e) from e

        try:
            content = completion.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise MalformedResponse("Model returned no choices.") from e

        if not content or not str(content).strip():
            raise MalformedResponse("Model returned no content.")
        return str(content)

    @staticmethod
    def _prompt_context(now: datetime) -> dict[str, str]:
        return {
            "today_mdy": f"{now.month}/{now.day}/{now.year}",
            "now_iso": to_iso_instant(now),
        }

    async def parse_one(self, text: str, *, now: datetime) -> ParsedTask:
        prompt = SINGLE_TASK_SYSTEM_PROMPT.format(**self._prompt_context(now))
        raw = await self._complete(model=self._model, system_prompt=prompt, text=text, max_tokens=400)

        data = _load_json(raw)
        if not isinstance(data, dict):
            raise MalformedResponse("Expected a JSON object describing one task.")

        missing = [k for k in _REQUIRED_FIELDS if not _text_field(data, k)]
        if missing:
            raise MalformedResponse(f"Missing required field(s): {', '.join(missing)}")

        priority = Priority.from_raw(data["priority"])
        if priority is None:
            raise MalformedResponse(f"Unknown priority: {data['priority']!r}")

        due = _parse_due(data["dueDate"], now)
        if due is None:
            raise MalformedResponse(f"Unparseable dueDate: {data['dueDate']!r}")

        return _to_parsed_task(
            data,
            title=_text_field(data, "title"),
            due=due,
            time_specified=bool(_text_field(data, "dueTimeFormatted")),
            priority=priority,
            now=now,
        )

    def _coerce_item(self, item: Any, now: datetime) -> ParsedTask:
        data: dict[str, Any] = item if isinstance(item, dict) else {}
        if not data:
            logger.warning("LLM: malformed task element replaced with defaults: %r", item)

        due = _parse_due(data.get("dueDate"), now)
        time_specified = bool(_text_field(data, "dueTimeFormatted"))
        if due is None:
            due = datetime.combine(now.date() + timedelta(days=1), time(*DEFAULT_DUE_TIME), tzinfo=now.tzinfo)
            time_specified = False

        return _to_parsed_task(
            data,
            title=_text_field(data, "title") or DEFAULT_TITLE,
            due=due,
            time_specified=time_specified,
            priority=Priority.from_raw(data.get("priority")) or Priority.P3,
            now=now,
        )

    async def parse_many(self, text: str, *, now: datetime) -> list[ParsedTask]:
        prompt = TRANSCRIPT_SYSTEM_PROMPT.format(**self._prompt_context(now))
        raw = await self._complete(
            model=self._transcript_model,
            system_prompt=prompt,
            text=text,
            max_tokens=1500,
        )

        data = _load_json(raw)
        items = data.get("tasks") if isinstance(data, dict) else data
        if not isinstance(items, list):
            raise MalformedResponse("Expected a list of tasks.")

        return [self._coerce_item(item, now) for item in items]

    async def verify_credential(self) -> bool:
        """Cheap authenticated call; False when the key is rejected."""
        client = self._require_client()
        try:
            await client.models.list()
        except Exception as e:
            if _is_auth_error(e):
                return False
            raise _transport_failure(e) from e
        return True

    async def aclose(self) -> None:
        close = getattr(self._client, "close", None)
        if callable(close):
            await close()
