from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from passwordless.domain.errors import InvalidIdentifier

_EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

CredentialKind = Literal["link_token", "numeric_code"]


def normalize_identifier(identifier: str) -> str:
    return identifier.strip().lower()


def validate_identifier(identifier: str) -> str:
    """Normalize an email-shaped identifier or raise InvalidIdentifier."""
    normalized = normalize_identifier(identifier or "")
    if not _EMAIL_RE.fullmatch(normalized):
        raise InvalidIdentifier("invalid email format")
    return normalized


@dataclass(frozen=True)
class VerificationCredential:
    identifier: str
    secret_hash: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        # still valid at the exact expiry instant
        return self.expires_at < now


@dataclass(frozen=True)
class IssuedLinkToken:
    token: str
    expires_at: datetime


@dataclass(frozen=True)
class IssuedNumericCode:
    message: str
    expires_at: datetime


@dataclass(frozen=True)
class VerifiedIdentity:
    identifier: str
