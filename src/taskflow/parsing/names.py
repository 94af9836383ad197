# src/taskflow/parsing/names.py

"""
Name recognition used by the parsers.

Parsers only call `is_likely_name(word)`, so a smarter recognizer (NER model,
team roster) can replace the gazetteer below without touching parsing code.
"""

from __future__ import annotations

from collections.abc import Iterable

COMMON_FIRST_NAMES: frozenset[str] = frozenset(
    {
        "john",
        "jane",
        "alex",
        "sarah",
        "mike",
        "lisa",
        "tom",
        "anna",
        "david",
        "emma",
        "aman",
        "rajeev",
        "priya",
        "raj",
        "neha",
        "amit",
        "sanya",
        "rohit",
    }
)


# Words that can follow "for"/"with" or start a sentence capitalized, but never name a person.
NOT_NAMES: frozenset[str] = frozenset(
    {
        # articles, pronouns, determiners
        "a", "an", "the", "this", "that", "these", "those", "my", "our", "your", "his", "her",
        "their", "its", "i", "me", "we", "us", "you", "he", "him", "she", "they", "them", "it",
        "everyone", "everybody", "someone", "somebody", "anyone", "all", "each", "both", "team",
        # prepositions and connectives
        "to", "by", "at", "on", "in", "of", "for", "with", "before", "after", "from", "and", "or",
        "but", "so", "then", "also", "about", "as", "if", "when",
        # filler and modal verbs
        "please", "kindly", "can", "could", "would", "will", "should", "must", "need", "needs",
        "let", "lets", "let's", "ok", "okay", "yes", "no", "hi", "hello", "thanks", "action",
        "have", "has", "had", "is", "are", "was", "were", "be", "been", "do", "does", "did",
        "going", "want", "wants", "able", "got", "get", "try", "trying", "assigned",
        # calendar words
        "today", "tomorrow", "tonight", "yesterday", "next", "last", "week", "month", "year",
        "day", "days", "end", "eod", "eow", "eom", "cob", "noon", "midnight", "morning",
        "afternoon", "evening", "am", "pm", "due", "deadline",
        "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
        "january", "february", "march", "april", "may", "june", "july", "august",
        "september", "october", "november", "december",
        # priority vocabulary
        "p1", "p2", "p3", "p4", "priority", "high", "medium", "low", "urgent", "asap",
        "important", "critical", "emergency", "immediately", "whenever",
    }
)


def is_name_candidate(word: str) -> bool:
    """Shape check only: alphabetic-looking and not a known non-name word."""
    w = (word or "").strip()
    if len(w) < 2 or not w[0].isalpha():
        return False
    return w.lower() not in NOT_NAMES


class GazetteerNameRecognizer:
    """Case-insensitive lookup in a fixed set of first names."""

    def __init__(self, names: Iterable[str] = COMMON_FIRST_NAMES) -> None:
        self._names = frozenset(n.strip().lower() for n in names if n and n.strip())

    def is_likely_name(self, word: str) -> bool:
        return (word or "").strip().lower() in self._names

    @property
    def names(self) -> frozenset[str]:
        return self._names


DEFAULT_NAME_RECOGNIZER = GazetteerNameRecognizer()
