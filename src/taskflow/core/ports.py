# src/taskflow/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

Parsing code depends on these Protocols instead of concrete classes, so the
name gazetteer, the hosted model provider and the local parser stay swappable
(and trivially faked in tests).
"""

from datetime import datetime
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .models import ParsedTask

ChatMessage = dict[str, str]
# OpenAI-style chat messages: {"role": "...", "content": "..."}.


class NameRecognizer(Protocol):
    def is_likely_name(self, word: str) -> bool: ...


class LocalTaskParser(Protocol):
    """Signature of the single-sentence parser (taskflow.parsing.single.parse_task)."""

    def __call__(
            self,
            text: str,
            *,
            now: datetime,
            names: NameRecognizer | None = None,
    ) -> ParsedTask: ...


class RemoteTaskParser(Protocol):
    """
    Hosted-model parsing capability.

    Both calls either return validated, future-corrected tasks or raise a
    RemoteParsingError subclass. They never return partial success.
    """

    async def parse_one(self, text: str, *, now: datetime) -> ParsedTask: ...

    async def parse_many(self, text: str, *, now: datetime) -> list[ParsedTask]: ...
