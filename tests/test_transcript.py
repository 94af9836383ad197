# tests/test_transcript.py

from __future__ import annotations

from taskflow.parsing.transcript import normalize_transcript, segment_transcript


def test_blank_transcript_yields_no_segments() -> None:
    assert segment_transcript("") == []
    assert segment_transcript("   \n\t ") == []


def test_splits_on_sentence_punctuation() -> None:
    text = "Aman you take the landing page. Rajeev, follow up with the client! Done?"
    assert segment_transcript(text) == [
        "Aman you take the landing page",
        "Rajeev, follow up with the client",
        "Done",
    ]


def test_speaker_labels_and_timestamps_are_flattened() -> None:
    text = "[10:15] [Aman]: I will fix the build\n(10:16) (Priya): Sure"
    normalized = normalize_transcript(text)
    assert "[" not in normalized and "10:15" not in normalized
    assert "Aman: I will fix the build" in normalized
    assert "Priya: Sure" in normalized


def test_newline_speaker_turns_become_segments() -> None:
    text = "Aman: I will fix the build\nPriya: I will write the notes"
    assert segment_transcript(text) == [
        "Aman: I will fix the build",
        "Priya: I will write the notes",
    ]


def test_bullets_become_segments() -> None:
    text = "Action items:\n- Aman to fix the build\n2. Priya to write notes"
    assert segment_transcript(text) == [
        "Action items:",
        "Aman to fix the build",
        "Priya to write notes",
    ]


def test_period_runs_and_missing_spaces() -> None:
    assert segment_transcript("Wait... ok.Next item") == ["Wait", "ok", "Next item"]


def test_decimal_numbers_are_not_split() -> None:
    assert segment_transcript("Budget grew 3.5 percent this quarter.") == ["Budget grew 3.5 percent this quarter"]
