import os
import uuid
from collections.abc import Generator
from pathlib import Path
from typing import Any

import psycopg
import pytest

from invoice_ingest.config.settings import Settings
from invoice_ingest.database.connection import close_pool, get_connection, init_pool

_SCHEMA_PATH = Path(__file__).resolve().parents[2] / "invoice_ingest" / "database" / "schema.sql"


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "invoice_ingest_test")
    return Settings(extraction_provider="example", finalize_pause_seconds=0)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            conn.execute(_SCHEMA_PATH.read_text(encoding="utf-8"))
            conn.commit()
    except Exception as e:
        close_pool()
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env to point at a disposable database"
        )
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def owner_id(integration_pool: None) -> Generator[str, None, None]:
    """A fresh owner id; every row it owns is deleted after the test."""
    owner = f"test-owner-{uuid.uuid4().hex}"
    yield owner
    with get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute("DELETE FROM jobs WHERE owner_id = %s", (owner,))
            cur.execute("DELETE FROM synonyms WHERE owner_id = %s", (owner,))
        conn.commit()


@pytest.fixture
def files_root(tmp_path: Path) -> Path:
    return tmp_path
