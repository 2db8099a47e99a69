from __future__ import annotations

from passlib.context import CryptContext

from passwordless.settings import get_settings

# One global context; bcrypt is the only scheme we use.
_ctx = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_secret(plain: str, *, rounds: int | None = None) -> str:
    """
    Hash a one-time secret using bcrypt. If rounds is None, use settings.bcrypt_rounds.
    """
    if rounds is None:
        rounds = int(get_settings().bcrypt_rounds)
    return _ctx.using(bcrypt__rounds=rounds).hash(plain)


def verify_secret(plain: str, secret_hash: str) -> bool:
    """
    Verify a secret against its bcrypt hash (safe timing).
    A hash passlib does not recognise never matches.
    """
    try:
        return _ctx.verify(plain, secret_hash)
    except (ValueError, TypeError):
        return False
