"""
tests/test_db_config.py

Audit store URL resolution.
"""

from __future__ import annotations

import pytest

import db.config as db_config
from db.config import normalize_postgres_url, resolve_database_url


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path) -> None:
    monkeypatch.setattr(db_config, "PROJECT_ROOT", tmp_path)
    monkeypatch.delenv("DATABASE_URL", raising=False)


@pytest.mark.parametrize(
    "url, expected",
    [
        ("postgres://u:p@db/audits", "postgresql+psycopg://u:p@db/audits"),
        ("postgresql://u:p@db/audits", "postgresql+psycopg://u:p@db/audits"),
        ("postgresql+psycopg://u:p@db/audits", "postgresql+psycopg://u:p@db/audits"),
    ],
)
def test_normalize_postgres_url(url: str, expected: str) -> None:
    assert normalize_postgres_url(url) == expected


class TestResolveDatabaseUrl:
    def test_reads_database_url(self, monkeypatch) -> None:
        monkeypatch.setenv("DATABASE_URL", "postgres://u:p@db/audits")
        assert resolve_database_url() == "postgresql+psycopg://u:p@db/audits"

    def test_explicit_url_wins(self, monkeypatch) -> None:
        monkeypatch.setenv("DATABASE_URL", "postgres://u:p@db/audits")
        assert resolve_database_url("postgresql://u:p@other/audits") == "postgresql+psycopg://u:p@other/audits"

    def test_missing_url_raises(self) -> None:
        with pytest.raises(RuntimeError, match="DATABASE_URL"):
            resolve_database_url()

    def test_non_postgres_url_is_rejected(self, monkeypatch) -> None:
        monkeypatch.setenv("DATABASE_URL", "sqlite:///audits.db")
        with pytest.raises(RuntimeError, match="PostgreSQL"):
            resolve_database_url()

    def test_env_file_fills_unset_variables(self, monkeypatch, tmp_path) -> None:
        (tmp_path / ".env").write_text(
            "# local store\nexport DATABASE_URL='postgres://u:p@localhost/audits'\n",
            encoding="utf-8",
        )
        assert resolve_database_url() == "postgresql+psycopg://u:p@localhost/audits"
