# src/pomofocus/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time.
- Real environment variables always win over values from .env.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "POMOFOCUS"


class ConfigError(RuntimeError):
    """Raised when configuration values are present but invalid."""


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


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer.") from exc


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number.") from exc


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

    # ---- LLM / OpenAI-compatible API ----
    openai_api_key: str | None
    openai_base_url: str | None
    chat_model: str
    enhance_model: str
    chat_temperature: float
    enhance_temperature: float
    llm_max_tokens: int
    llm_connect_timeout: float
    llm_read_timeout: float
    chat_history_turns: int

    # ---- Agent endpoint ----
    agent_token: str | None

    # ---- HTTP server ----
    host: str
    port: int

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    db_path: Path
    identity_path: Path

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "pomofocus").strip() or "pomofocus"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        openai_api_key = _first_env(_k("OPENAI_API_KEY"), "OPENAI_API_KEY", default=None)
        openai_base_url = _first_env(_k("OPENAI_BASE_URL"), "OPENAI_BASE_URL", default=None)

        chat_model = _env(_k("CHAT_MODEL"), "gpt-3.5-turbo").strip() or "gpt-3.5-turbo"
        enhance_model = _env(_k("ENHANCE_MODEL"), chat_model).strip() or chat_model
        chat_temperature = _env_float(_k("CHAT_TEMPERATURE"), 0.7)
        enhance_temperature = _env_float(_k("ENHANCE_TEMPERATURE"), 0.3)
        llm_max_tokens = _env_int(_k("LLM_MAX_TOKENS"), 500)
        llm_connect_timeout = _env_float(_k("LLM_CONNECT_TIMEOUT_SECONDS"), 5.0)
        llm_read_timeout = _env_float(_k("LLM_READ_TIMEOUT_SECONDS"), 60.0)
        chat_history_turns = max(0, _env_int(_k("CHAT_HISTORY_TURNS"), 5))

        # An empty token means "not configured": the agent endpoint is then open.
        agent_token = (_first_env(_k("AGENT_TOKEN"), "AGENT_TOKEN", default="") or "").strip()

        host = _env(_k("HOST"), "127.0.0.1").strip() or "127.0.0.1"
        port = _env_int(_k("PORT"), 8000)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/pomofocus"))
        db_path = _env_path(_k("DB_PATH"), data_dir / "pomofocus.sqlite3")
        identity_path = _env_path(_k("IDENTITY_PATH"), data_dir / "identity.json")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            openai_api_key=openai_api_key,
            openai_base_url=openai_base_url,
            chat_model=chat_model,
            enhance_model=enhance_model,
            chat_temperature=chat_temperature,
            enhance_temperature=enhance_temperature,
            llm_max_tokens=llm_max_tokens,
            llm_connect_timeout=llm_connect_timeout,
            llm_read_timeout=llm_read_timeout,
            chat_history_turns=chat_history_turns,
            agent_token=agent_token or None,
            host=host,
            port=port,
            data_dir=data_dir,
            db_path=db_path,
            identity_path=identity_path,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading .env on first use."""
    global _SETTINGS
    if _SETTINGS is None:
        load_dotenv(override=False)
        _SETTINGS = Settings.from_env()
    return _SETTINGS
