"""Settings — database URL normalization."""

import pytest

from doconnect.config import Settings


@pytest.mark.parametrize("raw", [
    "postgres://u:p@host:5432/db",
    "postgresql://u:p@host:5432/db",
])
def test_plain_postgres_urls_use_asyncpg(raw):
    assert Settings(database_url=raw).database_url == "postgresql+asyncpg://u:p@host:5432/db"


def test_async_urls_are_kept():
    url = "sqlite+aiosqlite:///./doconnect.db"
    assert Settings(database_url=url).database_url == url


def test_upload_limit_in_bytes():
    assert Settings(max_upload_size_mb=2).max_upload_size_bytes == 2 * 1024 * 1024
