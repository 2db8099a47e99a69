from __future__ import annotations

from datetime import datetime

from redis.asyncio import Redis

from passwordless.domain.entities import VerificationCredential
from passwordless.domain.ports.credential_store import CredentialStorePort


class RedisCredentialStore(CredentialStorePort):
    """
    One Redis hash per identifier: field = secret hash, value = ISO-8601 expiry.

    HDEL is a single atomic command and returns how many fields it removed,
    which is exactly the consume primitive the verifier needs. Keys carry no
    TTL: credentials are only ever removed by verification.
    """

    def __init__(self, redis: Redis, *, key_prefix: str = "vt:") -> None:
        self._redis = redis
        self._prefix = key_prefix

    def _key(self, identifier: str) -> str:
        return f"{self._prefix}{identifier}"

    async def create(
        self, identifier: str, secret_hash: str, expires_at: datetime
    ) -> None:
        await self._redis.hset(
            self._key(identifier), secret_hash, expires_at.isoformat()
        )

    async def find_all_by_identifier(
        self, identifier: str
    ) -> list[VerificationCredential]:
        stored = await self._redis.hgetall(self._key(identifier))
        credentials = [
            VerificationCredential(
                identifier=identifier,
                secret_hash=secret_hash,
                expires_at=datetime.fromisoformat(expires_at),
            )
            for secret_hash, expires_at in stored.items()
        ]
        credentials.sort(key=lambda c: c.expires_at)
        return credentials

    async def delete_by_identifier_and_hash(
        self, identifier: str, secret_hash: str
    ) -> bool:
        removed = await self._redis.hdel(self._key(identifier), secret_hash)
        return int(removed) == 1
