# tests/test_config.py

from __future__ import annotations

import logging
from pathlib import Path

from taskflow.config import Settings
from taskflow.logging_setup import setup_logging


def test_defaults(monkeypatch) -> None:
    for name in (
        "TASKFLOW_USE_REMOTE",
        "TASKFLOW_OPENAI_API_KEY",
        "OPENAI_API_KEY",
        "TASKFLOW_LLM_MODEL",
        "TASKFLOW_LLM_TEMPERATURE",
        "TASKFLOW_DATA_DIR",
    ):
        monkeypatch.delenv(name, raising=False)

    s = Settings.from_env()
    assert s.use_remote is True
    assert s.openai_api_key is None
    assert s.remote_configured is False
    assert s.llm_model == "gpt-3.5-turbo"
    assert s.llm_transcript_model
    assert s.llm_temperature == 0.3
    assert s.data_dir == Path(".local/taskflow")


def test_overrides_and_fallbacks(monkeypatch) -> None:
    monkeypatch.delenv("TASKFLOW_OPENAI_API_KEY", raising=False)
    monkeypatch.setenv("OPENAI_API_KEY", "sk-plain")
    monkeypatch.setenv("TASKFLOW_USE_REMOTE", "off")
    monkeypatch.setenv("TASKFLOW_LLM_TEMPERATURE", "warm")
    monkeypatch.setenv("TASKFLOW_LLM_READ_TIMEOUT_SECONDS", "12.5")

    s = Settings.from_env()
    assert s.openai_api_key == "sk-plain"
    assert s.remote_configured is True
    assert s.use_remote is False
    assert s.llm_temperature == 0.3
    assert s.llm_read_timeout == 12.5


def test_setup_logging_writes_file(tmp_path: Path) -> None:
    log_file = setup_logging(log_dir=tmp_path / "logs", console_level=logging.WARNING)
    logging.getLogger("taskflow.test").debug("hello file")
    for h in logging.getLogger().handlers:
        h.flush()
    assert log_file == tmp_path / "logs" / "taskflow.log"
    assert "hello file" in log_file.read_text("utf-8")

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    logging.captureWarnings(False)


def test_console_filter_keeps_parser_trace_in_the_file_only() -> None:
    from taskflow.logging_setup import _ConsoleNoiseFilter

    def record(name: str, level: int) -> logging.LogRecord:
        return logging.LogRecord(name, level, __file__, 1, "msg", None, None)

    f = _ConsoleNoiseFilter()
    assert f.filter(record("taskflow.core.orchestrator", logging.INFO))
    assert not f.filter(record("taskflow.parsing.meeting", logging.DEBUG))
    assert f.filter(record("taskflow.parsing.meeting", logging.ERROR))
    assert not f.filter(record("httpx", logging.WARNING))
    assert f.filter(record("openai", logging.ERROR))
