# tests/test_single_parser.py

from __future__ import annotations

from datetime import UTC, datetime

from taskflow.core.models import DEFAULT_TITLE, Priority
from taskflow.parsing.names import GazetteerNameRecognizer
from taskflow.parsing.single import extract_assignee, extract_title, parse_task


def test_call_client_tomorrow_at_five(now) -> None:
    t = parse_task("Call client Rajeev tomorrow 5pm", now=now)
    assert "Call client" in t.title
    assert t.assignee == "Rajeev"
    assert t.time_specified is True
    assert t.due_time_formatted == "5:00 PM"
    assert t.due_date_formatted == "October 15, 2026"
    assert t.due_at.date() == datetime(2026, 10, 15).date()
    assert t.priority is Priority.P3


def test_landing_page_for_aman_p1(now) -> None:
    t = parse_task("Finish landing page for Aman by 11pm 20th June P1", now=now)
    assert t.title == "Finish landing page"
    assert t.assignee == "Aman"
    assert t.priority is Priority.P1
    assert t.due_at == datetime(2027, 6, 20, 23, 0, tzinfo=UTC)


def test_missing_signals_degrade_to_defaults(now) -> None:
    t = parse_task("buy milk", now=now)
    assert t.title == "buy milk"
    assert t.assignee == ""
    assert t.priority is Priority.P3
    assert t.priority_text == "Medium"
    assert t.time_specified is False
    assert t.due_time_formatted is None
    assert t.due_at == datetime(2026, 10, 14, 17, 0, tzinfo=UTC)


def test_blank_input_never_raises(now) -> None:
    for text in ("", "   ", None):
        t = parse_task(text, now=now)  # type: ignore[arg-type]
        assert t.title == DEFAULT_TITLE
        assert t.assignee == ""
        assert t.priority is Priority.P3


def test_stop_tokens_match_whole_words_only() -> None:
    assert extract_title("Format the forms by friday") == "Format the forms"
    assert extract_title("Update the byline") == "Update the byline"


def test_title_is_never_cut_to_empty() -> None:
    assert extract_title("Tomorrow") == "Tomorrow"
    assert extract_title("for the team") == "for the team"


def test_assigned_to_takes_precedence_over_for() -> None:
    assert extract_assignee("Prepare slides for the offsite assigned to John Smith") == "John Smith"


def test_priority_phrase_is_not_an_assignee() -> None:
    assert extract_assignee("Review PR with P3 priority") == ""


def test_sentence_initial_verb_is_not_an_assignee() -> None:
    assert extract_assignee("Schedule the retro") == ""
    assert extract_assignee("Sarah schedule the retro") == "Sarah"


def test_lowercase_gazetteer_name_is_found() -> None:
    assert extract_assignee("email the report to sarah friday") == "Sarah"


def test_custom_name_recognizer_is_used(now) -> None:
    names = GazetteerNameRecognizer(["zoltan"])
    t = parse_task("ping zoltan about invoices", now=now, names=names)
    assert t.title == "ping"
    assert t.assignee == "Zoltan"


def test_reassembled_sentence_is_stable(now) -> None:
    first = parse_task("Take the landing page assigned to Aman by 10pm tomorrow with P2 priority", now=now)
    again = parse_task(
        f"{first.title} assigned to {first.assignee} by 10pm tomorrow with {first.priority} priority",
        now=now,
    )
    assert (again.assignee, again.priority) == (first.assignee, first.priority) == ("Aman", Priority.P2)
    assert again.due_at == datetime(2026, 10, 15, 22, 0, tzinfo=UTC)
