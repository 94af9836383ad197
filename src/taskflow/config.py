# src/taskflow/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time: without an API key the app runs local-only.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKFLOW"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Parsing ----
    use_remote: bool

    # ---- LLM / OpenAI ----
    openai_api_key: str | None
    openai_base_url: str
    llm_model: str
    llm_transcript_model: str
    llm_temperature: float
    llm_connect_timeout: float
    llm_read_timeout: float

    @property
    def remote_configured(self) -> bool:
        return bool(self.openai_api_key)

    @staticmethod
    def from_env() -> Settings:
        llm_model = _env(_k("LLM_MODEL"), "gpt-3.5-turbo")

        return Settings(
            app_name=_env(_k("APP_NAME"), "taskflow") or "taskflow",
            log_level=_env(_k("LOG_LEVEL"), "INFO"),
            data_dir=_env_path(_k("DATA_DIR"), Path(".local/taskflow")),
            use_remote=_env_bool(_k("USE_REMOTE"), True),
            openai_api_key=_first_env(_k("OPENAI_API_KEY"), "OPENAI_API_KEY", default=None),
            openai_base_url=_env(_k("OPENAI_BASE_URL"), "https://api.openai.com/v1"),
            llm_model=llm_model,
            llm_transcript_model=_env(_k("LLM_TRANSCRIPT_MODEL"), "gpt-4"),
            llm_temperature=_env_float(_k("LLM_TEMPERATURE"), 0.3),
            llm_connect_timeout=_env_float(_k("LLM_CONNECT_TIMEOUT_SECONDS"), 5.0),
            llm_read_timeout=_env_float(_k("LLM_READ_TIMEOUT_SECONDS"), 30.0),
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
