from __future__ import annotations

from typing import Optional
from psycopg_pool import AsyncConnectionPool
from passwordless.settings import get_settings

_pool: Optional[AsyncConnectionPool] = None


def with_connect_timeout(dsn: str, seconds: int = 3) -> str:
    """Append `connect_timeout` unless the DSN already sets one."""
    if "connect_timeout=" in dsn:
        return dsn
    sep = "&" if "?" in dsn else "?"
    return f"{dsn}{sep}connect_timeout={seconds}"


def get_pool() -> AsyncConnectionPool:
    """
    Pool backing `PgCredentialStore`, built unopened on first use.

    Every store call checks out one connection for one statement, so the
    pool bounds concurrent issue/verify requests rather than transactions.
    """
    global _pool
    if _pool is None:
        _pool = AsyncConnectionPool(
            with_connect_timeout(get_settings().database_url),
            min_size=1,
            max_size=10,
            timeout=5,
            open=False,
        )
    return _pool


async def open_pool() -> AsyncConnectionPool:
    pool = get_pool()
    await pool.open()
    return pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
