# tests/integration/conftest.py
import asyncio
import os
import time

import pytest_asyncio
from psycopg_pool import AsyncConnectionPool
from redis.asyncio import Redis

from passwordless.settings import get_settings


async def _wait_pool_ready(p: AsyncConnectionPool, timeout: float = 30.0) -> None:
    """Retry simple SELECT until Postgres accepts connections."""
    deadline = time.monotonic() + timeout
    last_exc: Exception | None = None
    while time.monotonic() < deadline:
        try:
            async with p.connection(timeout=1) as conn:
                await conn.execute("SELECT 1;")
            return
        except Exception as e:
            last_exc = e
            await asyncio.sleep(0.5)
    if last_exc:
        raise last_exc
    raise TimeoutError("database not ready")


@pytest_asyncio.fixture
async def pool():
    p = AsyncConnectionPool(get_settings().database_url, open=False, timeout=30)
    await p.open()
    await _wait_pool_ready(p)
    async with p.connection() as conn:
        await conn.execute("TRUNCATE verification_tokens;")
    try:
        yield p
    finally:
        await p.close()


@pytest_asyncio.fixture
async def redis_client():
    url = os.environ.get("REDIS_URL", get_settings().redis_url)
    r = Redis.from_url(url, encoding="utf-8", decode_responses=True)
    try:
        yield r
    finally:
        await r.aclose()
