# tests/test_priority.py

from __future__ import annotations

import pytest

from taskflow.core.models import Priority
from taskflow.parsing.priority import classify_priority


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Ship the release p1", Priority.P1),
        ("fix login P4 urgent", Priority.P4),
        ("This is urgent, call the bank", Priority.P1),
        ("send the deck ASAP", Priority.P1),
        ("important: renew the domain", Priority.P2),
        ("this is high priority", Priority.P2),
        ("clean the backlog, low priority", Priority.P4),
        ("update the wiki whenever", Priority.P4),
        ("buy milk", Priority.P3),
        ("", Priority.P3),
    ],
)
def test_first_matching_rule_wins(text: str, expected: Priority) -> None:
    assert classify_priority(text).priority is expected


def test_words_must_match_whole_words() -> None:
    assert classify_priority("update the keyboard shortcuts").priority is Priority.P3
    assert classify_priority("email p10 list").priority is Priority.P3


def test_label_and_reason_are_filled() -> None:
    a = classify_priority("Call the vendor asap")
    assert a.label == "High"
    assert "asap" in a.reason

    default = classify_priority("water the plants")
    assert default.label == "Medium"
    assert default.reason


def test_urgency_beats_importance() -> None:
    assert classify_priority("important and urgent").priority is Priority.P1
