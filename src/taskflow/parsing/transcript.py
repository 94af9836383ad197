# src/taskflow/parsing/transcript.py

"""
Meeting transcript segmentation.

Normalization passes run over the whole text, in order, before splitting:
1. "[Name]: " / "(Name): " speaker labels -> "Name: "
2. timestamps "[10:15]", "(1:02:03)" removed
3. newline-led speaker turns ("\\nName: ") and bullets become sentence breaks
4. runs of periods collapsed; a space forced after . ! ? before a letter
Then the text is split on . ! ? followed by whitespace.
"""

from __future__ import annotations

import re

_BRACKET_SPEAKER_RE = re.compile(r"\[([^\]]+)\]:\s*")
_PAREN_SPEAKER_RE = re.compile(r"\(([^)]+)\):\s*")
_BRACKET_TIMESTAMP_RE = re.compile(r"\[\d{1,2}:\d{2}(?::\d{2})?\]")
_PAREN_TIMESTAMP_RE = re.compile(r"\(\d{1,2}:\d{2}(?::\d{2})?\)")
_SPEAKER_TURN_RE = re.compile(r"\n[ \t]*([A-Za-z]+):[ \t]*")
_BULLET_RE = re.compile(r"\n[ \t]*(?:[-*•]|\d{1,2}[.)])[ \t]+")
_PERIOD_RUN_RE = re.compile(r"\.{2,}")
_MISSING_SPACE_RE = re.compile(r"([.!?])([A-Za-z])")
_SENTENCE_SPLIT_RE = re.compile(r"[.!?]\s+")

_SEGMENT_TRAILING = " \t\r\n.!?"


def normalize_transcript(text: str) -> str:
    processed = text or ""

    processed = _BRACKET_SPEAKER_RE.sub(r"\1: ", processed)
    processed = _PAREN_SPEAKER_RE.sub(r"\1: ", processed)

    processed = _BRACKET_TIMESTAMP_RE.sub(" ", processed)
    processed = _PAREN_TIMESTAMP_RE.sub(" ", processed)

    processed = _SPEAKER_TURN_RE.sub(r". \1: ", processed)
    processed = _BULLET_RE.sub(". ", processed)

    processed = _PERIOD_RUN_RE.sub(".", processed)
    processed = _MISSING_SPACE_RE.sub(r"\1 \2", processed)

    return processed


def split_segments(normalized: str) -> list[str]:
    out: list[str] = []
    for part in _SENTENCE_SPLIT_RE.split(normalized):
        segment = " ".join(part.split()).strip(_SEGMENT_TRAILING)
        if segment:
            out.append(segment)
    return out


def segment_transcript(text: str) -> list[str]:
    """Candidate task sentences, in source order. Blank input -> []."""
    if not text or not text.strip():
        return []
    return split_segments(normalize_transcript(text))
