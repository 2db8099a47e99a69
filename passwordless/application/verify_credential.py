import asyncio
import logging
from datetime import datetime
from typing import Callable

import passwordless.domain.services as domain_services
from passwordless.domain.entities import (
    CredentialKind,
    VerificationCredential,
    VerifiedIdentity,
    normalize_identifier,
)
from passwordless.domain.errors import (
    InvalidOrExpired,
    InvalidSecretFormat,
    StoreFailure,
)
from passwordless.domain.ports.credential_store import CredentialStorePort

logger = logging.getLogger(__name__)


async def _load_candidates(
    store: CredentialStorePort, identifier: str
) -> list[VerificationCredential]:
    try:
        return await store.find_all_by_identifier(identifier)
    except Exception as exc:
        logger.exception(
            "credential store failed on lookup", extra={"identifier": identifier}
        )
        raise StoreFailure("failed to load verification credentials") from exc


async def _consume(
    store: CredentialStorePort, candidate: VerificationCredential
) -> bool:
    try:
        return await store.delete_by_identifier_and_hash(
            candidate.identifier, candidate.secret_hash
        )
    except Exception as exc:
        logger.exception(
            "credential store failed on delete",
            extra={"identifier": candidate.identifier},
        )
        raise StoreFailure("failed to consume verification credential") from exc


def _reject(identifier: str, kind: CredentialKind, reason: str) -> InvalidOrExpired:
    logger.info(
        "verification rejected",
        extra={"identifier": identifier, "kind": kind, "reason": reason},
    )
    return InvalidOrExpired(f"invalid or expired {kind.replace('_', ' ')}")


async def verify_credential(
    store: CredentialStorePort,
    identifier: str,
    presented: str,
    verify_secret: Callable[[str, str], bool],
    clock: Callable[[], datetime] = domain_services.utcnow,
    kind: CredentialKind = "link_token",
) -> VerifiedIdentity:
    """
    Match `presented` against the identifier's outstanding credentials and
    consume the match exactly once.

    Candidates are hashed with per-row salts, so there is no lookup by hash:
    each one is checked in turn with `verify_secret`. The first match is
    deleted unconditionally; the delete is the only atomic step, so a caller
    that loses the race to a concurrent verifier sees `InvalidOrExpired`.
    An expired match is deleted too, and still rejected.

    Every rejection raises the same `InvalidOrExpired`.
    """
    now = clock()
    normalized_identifier = normalize_identifier(identifier)
    candidates = await _load_candidates(store, normalized_identifier)
    if not candidates:
        raise _reject(normalized_identifier, kind, "no_credentials")

    for candidate in candidates:
        if not await asyncio.to_thread(
            verify_secret, presented, candidate.secret_hash
        ):
            continue

        removed = await _consume(store, candidate)
        if not removed:
            raise _reject(normalized_identifier, kind, "already_consumed")
        if candidate.is_expired(now):
            raise _reject(normalized_identifier, kind, "expired")

        logger.info(
            "verification accepted",
            extra={"identifier": normalized_identifier, "kind": kind},
        )
        return VerifiedIdentity(identifier=normalized_identifier)

    raise _reject(normalized_identifier, kind, "mismatch")


async def verify_link_token(
    store: CredentialStorePort,
    identifier: str,
    token: str,
    verify_secret: Callable[[str, str], bool],
    clock: Callable[[], datetime] = domain_services.utcnow,
) -> VerifiedIdentity:
    if not token:
        raise InvalidSecretFormat("token is required")
    return await verify_credential(
        store, identifier, token, verify_secret, clock=clock, kind="link_token"
    )


async def verify_numeric_code(
    store: CredentialStorePort,
    identifier: str,
    code: str,
    verify_secret: Callable[[str, str], bool],
    clock: Callable[[], datetime] = domain_services.utcnow,
) -> VerifiedIdentity:
    if not domain_services.is_numeric_code(code):
        raise InvalidSecretFormat("code must be exactly 6 digits")
    return await verify_credential(
        store, identifier, code, verify_secret, clock=clock, kind="numeric_code"
    )
