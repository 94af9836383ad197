# src/taskflow/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .models import ParsedTask, Task
from .orchestrator import ParsingOrchestrator


@dataclass(slots=True)
class AppState:
    """
    Console session state.

    `pending` holds the last parse result awaiting confirmation (/add);
    `tasks` holds confirmed tasks for this session only.
    """

    settings: Any
    orchestrator: ParsingOrchestrator
    use_remote: bool

    pending: list[ParsedTask] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)

    @property
    def remote_available(self) -> bool:
        return self.orchestrator.remote is not None
