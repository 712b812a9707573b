# config.py
"""Settings loaded from environment variables (prefix TODO_).

Nothing is required at import time; every value has a default that runs the
server against an in-process SQLite database.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Mapping, Optional

ENV_PREFIX = "TODO"


def _k(suffix: str) -> str:
    return f"{ENV_PREFIX}_{suffix}"


def _env(env: Mapping[str, str], name: str, default: str) -> str:
    v = env.get(name)
    if v is None or v.strip() == "":
        return default
    return v.strip()


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    raw = raw.strip().lower()
    if raw in {"1", "true", "yes", "y", "on"}:
        return True
    if raw in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_list(env: Mapping[str, str], name: str, default: List[str]) -> List[str]:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [p.strip() for p in raw.replace(",", " ").split() if p.strip()]


@dataclass(frozen=True)
class Settings:
    # app / logging
    app_name: str = "todo-api"
    log_level: str = "INFO"
    configure_logging: bool = True

    # storage
    database_url: str = "sqlite://"
    seed_sample_tasks: bool = True

    # http
    cors_origins: tuple = ("*",)
    host: str = "127.0.0.1"
    port: int = 3030

    # "today" for overdue / due-soon
    timezone: str = "UTC"


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from ``env`` (defaults to ``os.environ``)."""
    env = os.environ if env is None else env
    return Settings(
        app_name=_env(env, _k("APP_NAME"), "todo-api"),
        log_level=_env(env, _k("LOG_LEVEL"), "INFO").upper(),
        configure_logging=_env_bool(env, _k("CONFIGURE_LOGGING"), True),
        database_url=_env(env, _k("DATABASE_URL"), "sqlite://"),
        seed_sample_tasks=_env_bool(env, _k("SEED_SAMPLE_TASKS"), True),
        cors_origins=tuple(_env_list(env, _k("CORS_ORIGINS"), ["*"])),
        host=_env(env, _k("HOST"), "127.0.0.1"),
        port=_env_int(env, _k("PORT"), 3030),
        timezone=_env(env, _k("TIMEZONE"), "UTC"),
    )
