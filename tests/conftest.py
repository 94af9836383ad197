# tests/conftest.py

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from taskflow.core.orchestrator import ParsingOrchestrator
from taskflow.core.state import AppState

from .fakes import FakeRemoteParser


@pytest.fixture()
def now() -> datetime:
    """Fixed reference instant: Wednesday 2026-10-14 09:30 UTC."""
    return datetime(2026, 10, 14, 9, 30, tzinfo=UTC)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the remote client.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment and any .env file.
    """
    return SimpleNamespace(
        app_name="taskflow-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        use_remote=True,
        openai_api_key="sk-test",
        openai_base_url="https://example.invalid/v1",
        llm_model="model-single",
        llm_transcript_model="model-transcript",
        llm_temperature=0.0,
        llm_connect_timeout=1.0,
        llm_read_timeout=1.0,
    )


@pytest.fixture()
def remote() -> FakeRemoteParser:
    return FakeRemoteParser()


@pytest.fixture()
def state(settings: SimpleNamespace, remote: FakeRemoteParser) -> AppState:
    """AppState wired with a scripted remote parser (no network)."""
    return AppState(
        settings=settings,
        orchestrator=ParsingOrchestrator(remote, use_remote=True),
        use_remote=True,
    )
