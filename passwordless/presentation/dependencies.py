from datetime import datetime
from typing import Callable

from fastapi import Header, HTTPException, Request, status

from passwordless.domain.ports.code_delivery import CodeDeliveryPort
from passwordless.domain.ports.credential_store import CredentialStorePort
from passwordless.domain.services import secure_compare, utcnow
from passwordless.infrastructure.db.credential_store import PgCredentialStore
from passwordless.infrastructure.db.pool import get_pool
from passwordless.infrastructure.redis_cache.credential_store import (
    RedisCredentialStore,
)
from passwordless.infrastructure.redis_cache.pool import get_redis
from passwordless.infrastructure.security.hashing import hash_secret, verify_secret
from passwordless.settings import get_settings


def get_credential_store() -> CredentialStorePort:
    if get_settings().credential_store == "redis":
        return RedisCredentialStore(get_redis())
    return PgCredentialStore(get_pool())


def get_code_delivery(request: Request) -> CodeDeliveryPort:
    # This is set in passwordless.main lifespan()
    return request.app.state.code_delivery


def get_hash_secret() -> Callable[[str], str]:
    return hash_secret


def get_verify_secret() -> Callable[[str, str], bool]:
    return verify_secret


def get_clock() -> Callable[[], datetime]:
    return utcnow


def get_credential_ttl_seconds() -> int:
    return get_settings().credential_ttl_seconds


def require_api_key(x_api_key: str | None = Header(default=None)) -> None:
    settings = get_settings()
    if not settings.api_key:
        if settings.app_env == "dev":
            return
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid or missing API key",
        )
    if not x_api_key or not secure_compare(x_api_key, settings.api_key):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid or missing API key",
        )
