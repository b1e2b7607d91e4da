"""
Environment-driven connection settings for the audit store.
"""

from __future__ import annotations

import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
ENV_FILENAMES: tuple[str, ...] = (".env", ".env.local")


def load_env_files() -> None:
    """
    Load KEY=VALUE lines from `.env` and `.env.local` at the project root.
    Variables already present in the process environment are kept.
    """

    for filename in ENV_FILENAMES:
        env_path = PROJECT_ROOT / filename
        if not env_path.is_file():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            key = key.strip().removeprefix("export ").strip()
            if key and key not in os.environ:
                os.environ[key] = value.strip().strip('"').strip("'")


def normalize_postgres_url(url: str) -> str:
    """
    Rewrite postgres URLs to the psycopg (v3) driver form SQLAlchemy expects.
    """

    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            return "postgresql+psycopg://" + url[len(prefix) :]
    return url


def resolve_database_url(url: str | None = None) -> str:
    """
    Return the PostgreSQL URL of the audit store.

    ``url`` overrides DATABASE_URL. Raises RuntimeError when no URL is set or
    the URL is not PostgreSQL (JSONB columns and the migrations need it).
    """

    load_env_files()

    candidate = (url or os.getenv("DATABASE_URL") or "").strip()
    if not candidate:
        raise RuntimeError("No audit database URL configured. Set DATABASE_URL.")

    normalized = normalize_postgres_url(candidate)
    if not normalized.startswith("postgresql"):
        raise RuntimeError("Only PostgreSQL URLs are supported for the audit store.")
    return normalized
