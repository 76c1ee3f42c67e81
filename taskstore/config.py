from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKSTORE"
BACKENDS = ("memory", "jsonl", "sql")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _k(suffix: str) -> str:
    return f"{ENV_PREFIX}_{suffix}"


def load_env(base_dirs: list[Path] | None = None) -> None:
    """Wczytuje `.env`, a potem `.env.<TASKSTORE_ENV>` (nadpisuje)."""
    env_name = os.getenv(_k("ENV"), "development")
    candidates = base_dirs or [Path.cwd()]
    for base in candidates:
        env_path = base / ".env"
        if env_path.exists():
            load_dotenv(env_path)
            break

    for base in candidates:
        env_specific = base / f".env.{env_name}"
        if env_specific.exists():
            load_dotenv(env_specific, override=True)
            break


@dataclass(frozen=True)
class Settings:
    backend: str = "memory"
    data_file: Path = Path("data/tasks.jsonl")
    database_url: str = "sqlite:///data/tasks.db"
    log_level: str = "WARNING"
    log_dir: Path | None = None

    def with_overrides(self, **changes) -> Settings:
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def load_settings(base_dirs: list[Path] | None = None) -> Settings:
    load_env(base_dirs)

    backend = os.getenv(_k("BACKEND"), "memory").strip().lower()
    if backend not in BACKENDS:
        raise ValueError(f"{_k('BACKEND')} must be one of {', '.join(BACKENDS)}, got {backend!r}")

    log_level = os.getenv(_k("LOG_LEVEL"), "").strip().upper() or "WARNING"
    if log_level not in LOG_LEVELS:
        raise ValueError(f"{_k('LOG_LEVEL')} must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}")

    log_dir = os.getenv(_k("LOG_DIR"), "").strip()
    return Settings(
        backend=backend,
        data_file=Path(os.getenv(_k("FILE"), "data/tasks.jsonl")).expanduser(),
        database_url=os.getenv(_k("DATABASE_URL"), "").strip() or "sqlite:///data/tasks.db",
        log_level=log_level,
        log_dir=Path(log_dir).expanduser() if log_dir else None,
    )
