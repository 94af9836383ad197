# src/taskflow/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root": it loads settings once, ensures the
local (gitignored) data directory exists and wires the remote parser into the
orchestrator when an API key is available.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.orchestrator import ParsingOrchestrator
from ..core.ports import RemoteTaskParser
from ..core.state import AppState
from ..llm.client import OpenAITaskParser

logger = logging.getLogger(__name__)


def create_initial_state(*, settings=None, remote: RemoteTaskParser | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    If settings is None, falls back to get_settings(). A remote parser is built
    only when remote parsing is enabled and an API key is configured; otherwise
    the app runs local-only.
    """
    if settings is None:
        settings = get_settings()

    settings.data_dir.mkdir(parents=True, exist_ok=True)

    use_remote = bool(getattr(settings, "use_remote", True))
    if remote is None and use_remote and getattr(settings, "openai_api_key", None):
        remote = OpenAITaskParser(settings)

    if remote is None:
        logger.info("Remote parsing unavailable; using the local parser only.")
    else:
        logger.info("Remote parsing enabled (model=%s).", getattr(settings, "llm_model", "?"))

    return AppState(
        settings=settings,
        orchestrator=ParsingOrchestrator(remote, use_remote=use_remote),
        use_remote=use_remote,
    )


async def shutdown_state(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    remote = state.orchestrator.remote
    close = getattr(remote, "aclose", None)
    if close is None:
        return
    try:
        await close()
    except Exception:
        logger.debug("Remote parser close failed.", exc_info=True)
