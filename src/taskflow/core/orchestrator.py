# src/taskflow/core/orchestrator.py

"""
Remote-first parsing with a guaranteed local fallback.

Each request is a two-step state machine: try the hosted model (only when a
remote parser is configured and enabled), and on any failure run the local
rule-based parser. The caller always gets a result, plus the path that
produced it and, after a fallback, a human-readable warning.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Generic, TypeVar

from ..llm.client import friendly_remote_error_message
from ..llm.errors import RemoteParsingError
from ..parsing.meeting import extract_meeting_tasks
from ..parsing.single import parse_task as parse_task_locally
from .models import ParsedTask
from .ports import NameRecognizer, RemoteTaskParser

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ParsePath(StrEnum):
    REMOTE = "remote"
    LOCAL = "local"


@dataclass(frozen=True, slots=True)
class ParseOutcome(Generic[T]):
    result: T
    path: ParsePath
    warning: str | None = None

    @property
    def fell_back(self) -> bool:
        return self.path is ParsePath.LOCAL and self.warning is not None


@dataclass(frozen=True, slots=True)
class RemoteOk(Generic[T]):
    value: T


@dataclass(frozen=True, slots=True)
class RemoteErr:
    error: Exception

    @property
    def message(self) -> str:
        return friendly_remote_error_message(self.error)


RemoteAttempt = RemoteOk[T] | RemoteErr


class ParsingOrchestrator:
    def __init__(
            self,
            remote: RemoteTaskParser | None = None,
            *,
            use_remote: bool = True,
            names: NameRecognizer | None = None,
    ) -> None:
        self.remote = remote
        self.use_remote = use_remote
        self.names = names

    def remote_enabled(self, use_remote: bool | None = None) -> bool:
        wanted = self.use_remote if use_remote is None else use_remote
        return bool(wanted) and self.remote is not None

    async def _attempt(self, label: str, call: Callable[[], Awaitable[T]]) -> RemoteAttempt[T]:
        try:
            return RemoteOk(await call())
        except RemoteParsingError as e:
            logger.warning("Remote %s parsing failed, using local parser: %s", label, e)
            return RemoteErr(e)
        except Exception as e:
            logger.exception("Remote %s parser crashed, using local parser.", label)
            return RemoteErr(e)

    async def parse_task(
            self,
            text: str,
            *,
            now: datetime | None = None,
            use_remote: bool | None = None,
    ) -> ParseOutcome[ParsedTask]:
        now = now or datetime.now().astimezone()

        warning: str | None = None
        if self.remote_enabled(use_remote):
            remote = self.remote
            attempt = await self._attempt("task", lambda: remote.parse_one(text, now=now))
            if isinstance(attempt, RemoteOk):
                logger.info("Task parsed by the remote model.")
                return ParseOutcome(attempt.value, ParsePath.REMOTE)
            warning = attempt.message

        parsed = parse_task_locally(text, now=now, names=self.names)
        logger.info("Task parsed locally%s.", " (fallback)" if warning else "")
        return ParseOutcome(parsed, ParsePath.LOCAL, warning)

    async def parse_transcript(
            self,
            text: str,
            *,
            now: datetime | None = None,
            use_remote: bool | None = None,
    ) -> ParseOutcome[list[ParsedTask]]:
        now = now or datetime.now().astimezone()

        if not (text or "").strip():
            return ParseOutcome([], ParsePath.LOCAL)

        warning: str | None = None
        if self.remote_enabled(use_remote):
            remote = self.remote
            attempt = await self._attempt("transcript", lambda: remote.parse_many(text, now=now))
            if isinstance(attempt, RemoteOk):
                logger.info("Remote transcript extraction produced %d task(s).", len(attempt.value))
                return ParseOutcome(list(attempt.value), ParsePath.REMOTE)
            warning = attempt.message

        tasks = extract_meeting_tasks(text, now=now, names=self.names)
        logger.info("Local transcript extraction produced %d task(s).", len(tasks))
        return ParseOutcome(tasks, ParsePath.LOCAL, warning)
