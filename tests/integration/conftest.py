import os
import uuid
from collections.abc import Generator
from typing import Any

import psycopg
import pytest

from docforensics.config.settings import Settings
from docforensics.database.connection import (
    build_conninfo,
    close_pool,
    get_connection,
    init_pool,
)
from docforensics.database.repositories.chunk_repository import PostgresChunkStore
from docforensics.database.repositories.job_repository import PostgresJobStore


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "docforensics_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        with psycopg.connect(build_conninfo(test_settings), connect_timeout=3):
            pass
    except Exception as e:
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env to point at a disposable database"
        )
    init_pool(test_settings)
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def chunk_store(integration_pool: None) -> PostgresChunkStore:
    store = PostgresChunkStore(ttl_seconds=600)
    store.ensure_schema()
    return store


@pytest.fixture
def job_store(integration_pool: None) -> PostgresJobStore:
    store = PostgresJobStore()
    store.ensure_schema()
    return store


@pytest.fixture
def upload_id(integration_pool: None) -> Generator[str, None, None]:
    value = f"it-{uuid.uuid4()}"
    yield value
    with get_connection() as conn:
        conn.execute("DELETE FROM chunk_uploads WHERE upload_id = %s", (value,))
        conn.commit()


@pytest.fixture
def integration_cleanup(integration_pool: None) -> Generator[list[str], None, None]:
    job_ids: list[str] = []
    yield job_ids
    if not job_ids:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            for job_id in job_ids:
                cur.execute("DELETE FROM processing_jobs WHERE id = %s", (job_id,))
        conn.commit()
