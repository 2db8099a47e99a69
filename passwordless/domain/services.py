# passwordless/domain/services.py
from __future__ import annotations

import hmac
import re
import secrets
from datetime import datetime, timezone

LINK_TOKEN_BYTES = 32
NUMERIC_CODE_DIGITS = 6

_NUMERIC_CODE_RE = re.compile(r"[0-9]{%d}" % NUMERIC_CODE_DIGITS)


def generate_link_token() -> str:
    """URL-safe magic-link token carrying 256 bits from the OS CSPRNG."""
    return secrets.token_urlsafe(LINK_TOKEN_BYTES)


def generate_numeric_code() -> str:
    """Zero-padded 6-digit code, uniform over 000000-999999."""
    return f"{secrets.randbelow(10**NUMERIC_CODE_DIGITS):0{NUMERIC_CODE_DIGITS}d}"


def is_numeric_code(value: str) -> bool:
    # ASCII digits only; str.isdigit() would also accept e.g. Arabic-Indic digits
    return bool(_NUMERIC_CODE_RE.fullmatch(value or ""))


def secure_compare(a: str, b: str) -> bool:
    """
    Constant-time comparison for secrets.
    Accepts strings; falls back to bytes if needed.
    """
    try:
        return hmac.compare_digest(a, b)
    except TypeError:
        return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
