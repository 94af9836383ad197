# tests/test_remote_parser.py

from __future__ import annotations

from datetime import UTC, datetime
from types import SimpleNamespace

import pytest

from taskflow.core.models import DEFAULT_TITLE, Priority
from taskflow.llm.client import OpenAITaskParser, friendly_remote_error_message
from taskflow.llm.errors import MalformedResponse, NoCredential, TransportFailure

from .fakes import APIConnectionError, AuthenticationError, FakeChatCompletions, RateLimitError


def _task(**overrides):
    data = {
        "title": "Call client",
        "assignee": "Rajeev",
        "dueDate": "2026-10-15T17:00:00Z",
        "dueDateFormatted": "October 15, 2026",
        "dueTimeFormatted": "5:00 PM",
        "priority": "P2",
        "priorityText": "Medium-High",
        "priorityReason": "Client is waiting",
    }
    data.update(overrides)
    return data


@pytest.mark.asyncio
async def test_parse_one_maps_schema_fields(settings, now) -> None:
    client = FakeChatCompletions(_task(priority="p2"))
    parser = OpenAITaskParser(settings, client=client)

    t = await parser.parse_one("Call client Rajeev tomorrow 5pm", now=now)

    assert (t.title, t.assignee, t.priority) == ("Call client", "Rajeev", Priority.P2)
    assert t.due_at == datetime(2026, 10, 15, 17, 0, tzinfo=UTC)
    assert t.time_specified is True
    assert t.due_time_formatted == "5:00 PM"
    assert t.priority_text == "Medium-High"
    assert t.priority_reason == "Client is waiting"

    req = client.requests[0]
    assert req["model"] == "model-single"
    assert req["response_format"] == {"type": "json_object"}
    assert "10/14/2026" in req["messages"][0]["content"]
    assert req["messages"][1] == {"role": "user", "content": "Call client Rajeev tomorrow 5pm"}


@pytest.mark.asyncio
async def test_past_dates_from_the_model_are_rolled_to_next_year(settings, now) -> None:
    client = FakeChatCompletions(_task(dueDate="2026-06-20T23:00:00", dueTimeFormatted="11:00 PM"))
    t = await OpenAITaskParser(settings, client=client).parse_one("x", now=now)
    assert t.due_at == datetime(2027, 6, 20, 23, 0, tzinfo=UTC)
    assert t.due_date_formatted == "June 20, 2027"


@pytest.mark.asyncio
async def test_code_fenced_json_is_accepted(settings, now) -> None:
    fenced = '```json\n{"title": "Pay rent", "dueDate": "2026-11-01T09:00:00Z", "priority": "P4"}\n```'
    t = await OpenAITaskParser(settings, client=FakeChatCompletions(fenced)).parse_one("x", now=now)
    assert t.title == "Pay rent"
    assert t.assignee == ""
    assert t.priority is Priority.P4
    assert t.time_specified is False
    assert t.due_time_formatted is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "reply",
    [
        "definitely not json",
        "",
        ["a", "list"],
        {"title": "No due date", "priority": "P1"},
        _task(priority="P9"),
        _task(dueDate="next tuesday-ish"),
        _task(title="   "),
    ],
)
async def test_malformed_single_responses(settings, now, reply) -> None:
    parser = OpenAITaskParser(settings, client=FakeChatCompletions(reply))
    with pytest.raises(MalformedResponse):
        await parser.parse_one("x", now=now)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("exc", "needle"),
    [
        (AuthenticationError("401"), "authentication"),
        (RateLimitError("429"), "rate-limited"),
        (APIConnectionError("down"), "network"),
        (RuntimeError("500"), "RuntimeError"),
    ],
)
async def test_transport_errors_are_wrapped(settings, now, exc, needle) -> None:
    parser = OpenAITaskParser(settings, client=FakeChatCompletions(exc))
    with pytest.raises(TransportFailure) as info:
        await parser.parse_one("x", now=now)
    assert needle in str(info.value)
    assert info.value.__cause__ is exc


@pytest.mark.asyncio
async def test_missing_key_raises_no_credential(now) -> None:
    parser = OpenAITaskParser(SimpleNamespace(openai_api_key=None))
    assert parser.configured is False
    with pytest.raises(NoCredential):
        await parser.parse_one("x", now=now)
    with pytest.raises(NoCredential):
        await parser.parse_many("x", now=now)


def test_real_sdk_client_is_built_when_key_present(settings) -> None:
    assert OpenAITaskParser(settings).configured is True


@pytest.mark.asyncio
async def test_parse_many_defaults_bad_elements(settings, now) -> None:
    reply = {
        "tasks": [
            _task(context="Rajeev, call the client tomorrow at 5"),
            "garbage",
            {"title": "", "priority": "urgent", "dueDate": None},
        ]
    }
    client = FakeChatCompletions(reply)
    tasks = await OpenAITaskParser(settings, client=client).parse_many("minutes", now=now)

    assert client.requests[0]["model"] == "model-transcript"
    assert len(tasks) == 3
    assert tasks[0].context == "Rajeev, call the client tomorrow at 5"

    for t in tasks[1:]:
        assert t.title == DEFAULT_TITLE
        assert t.priority is Priority.P3
        assert t.due_at == datetime(2026, 10, 15, 17, 0, tzinfo=UTC)
        assert t.time_specified is False


@pytest.mark.asyncio
async def test_parse_many_accepts_bare_list_and_empty(settings, now) -> None:
    parser = OpenAITaskParser(settings, client=FakeChatCompletions([_task()], {"tasks": []}))
    assert [t.title for t in await parser.parse_many("a", now=now)] == ["Call client"]
    assert await parser.parse_many("b", now=now) == []


@pytest.mark.asyncio
async def test_parse_many_rejects_non_list(settings, now) -> None:
    parser = OpenAITaskParser(settings, client=FakeChatCompletions({"tasks": "none"}))
    with pytest.raises(MalformedResponse):
        await parser.parse_many("x", now=now)


@pytest.mark.asyncio
async def test_verify_credential(settings) -> None:
    client = FakeChatCompletions()
    parser = OpenAITaskParser(settings, client=client)
    assert await parser.verify_credential() is True

    client.models_error = AuthenticationError("bad key")
    assert await parser.verify_credential() is False

    client.models_error = RateLimitError("slow down")
    with pytest.raises(TransportFailure):
        await parser.verify_credential()

    await parser.aclose()
    assert client.closed is True


def test_friendly_messages() -> None:
    assert "API key" in friendly_remote_error_message(NoCredential("x"))
    assert "unusable" in friendly_remote_error_message(MalformedResponse("bad json"))
    assert friendly_remote_error_message(TransportFailure("LLM is rate-limited.")) == "LLM is rate-limited."
    assert "ValueError" in friendly_remote_error_message(ValueError())
