import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable

import passwordless.domain.services as domain_services
from passwordless.domain.entities import (
    IssuedLinkToken,
    IssuedNumericCode,
    validate_identifier,
)
from passwordless.domain.errors import DeliveryFailure, StoreFailure
from passwordless.domain.ports.code_delivery import CodeDeliveryPort
from passwordless.domain.ports.credential_store import CredentialStorePort

logger = logging.getLogger(__name__)

CODE_SENT_MESSAGE = "Verification code sent to your email"


async def _persist(
    store: CredentialStorePort,
    identifier: str,
    secret: str,
    hash_secret: Callable[[str], str],
    expires_at: datetime,
) -> None:
    # bcrypt is CPU-bound; keep it off the event loop
    secret_hash = await asyncio.to_thread(hash_secret, secret)
    try:
        await store.create(identifier, secret_hash, expires_at)
    except Exception as exc:
        logger.exception(
            "credential store failed on create", extra={"identifier": identifier}
        )
        raise StoreFailure("failed to store verification credential") from exc


async def issue_link_token(
    store: CredentialStorePort,
    identifier: str,
    hash_secret: Callable[[str], str],
    clock: Callable[[], datetime] = domain_services.utcnow,
    ttl_seconds: int = 900,
) -> IssuedLinkToken:
    normalized_identifier = validate_identifier(identifier)
    token = domain_services.generate_link_token()
    expires_at = clock() + timedelta(seconds=ttl_seconds)

    await _persist(store, normalized_identifier, token, hash_secret, expires_at)

    logger.info(
        "link token issued",
        extra={"identifier": normalized_identifier, "expires_at": expires_at.isoformat()},
    )
    # The caller embeds the token in the link it delivers.
    return IssuedLinkToken(token=token, expires_at=expires_at)


async def issue_numeric_code(
    store: CredentialStorePort,
    delivery: CodeDeliveryPort,
    identifier: str,
    hash_secret: Callable[[str], str],
    clock: Callable[[], datetime] = domain_services.utcnow,
    ttl_seconds: int = 900,
) -> IssuedNumericCode:
    normalized_identifier = validate_identifier(identifier)
    code = domain_services.generate_numeric_code()
    expires_at = clock() + timedelta(seconds=ttl_seconds)

    await _persist(store, normalized_identifier, code, hash_secret, expires_at)

    try:
        await delivery.send_code(to=normalized_identifier, code=code)
    except Exception as exc:
        # The stored credential stays; it is unusable without the code and
        # expires on its own.
        logger.warning(
            "verification code delivery failed",
            extra={"identifier": normalized_identifier, "error": type(exc).__name__},
        )
        raise DeliveryFailure("failed to send verification code") from exc

    logger.info(
        "numeric code issued",
        extra={"identifier": normalized_identifier, "expires_at": expires_at.isoformat()},
    )
    return IssuedNumericCode(message=CODE_SENT_MESSAGE, expires_at=expires_at)
