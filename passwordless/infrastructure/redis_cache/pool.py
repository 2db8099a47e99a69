from __future__ import annotations

from typing import Optional

from redis.asyncio import Redis

from passwordless.settings import get_settings

_client: Optional[Redis] = None


def get_redis() -> Redis:
    """
    Client backing `RedisCredentialStore` when CREDENTIAL_STORE=redis.

    Responses are decoded, so hash fields (secret hashes) and values
    (ISO expiries) come back as str.
    """
    global _client
    if _client is None:
        _client = Redis.from_url(
            get_settings().redis_url, encoding="utf-8", decode_responses=True
        )
    return _client


async def close_redis() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
