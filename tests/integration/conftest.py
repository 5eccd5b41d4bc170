import os
from collections.abc import Generator
from typing import Any

import psycopg
import pytest

from faxmonitor.config.settings import Settings
from faxmonitor.database.connection import (
    close_pool,
    ensure_schema,
    get_connection,
    init_pool,
)


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "faxmonitor_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        ensure_schema()
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run.")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def integration_cleanup(integration_pool: None) -> Generator[list[str], None, None]:
    """Collects server job ids whose rows (and events) are deleted after the test."""
    cleanup: list[str] = []
    yield cleanup
    if not cleanup:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            for server_job_id in cleanup:
                cur.execute("DELETE FROM fax_jobs WHERE server_job_id = %s", (server_job_id,))
        conn.commit()
