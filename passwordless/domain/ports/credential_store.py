from __future__ import annotations

from datetime import datetime
from typing import Protocol

from passwordless.domain.entities import VerificationCredential


class CredentialStorePort(Protocol):
    async def create(
        self, identifier: str, secret_hash: str, expires_at: datetime
    ) -> None:
        """
        Insert a credential row. Several rows may exist for one identifier.
        """

    async def find_all_by_identifier(
        self, identifier: str
    ) -> list[VerificationCredential]:
        """Return every outstanding credential for the identifier (maybe [])."""

    async def delete_by_identifier_and_hash(
        self, identifier: str, secret_hash: str
    ) -> bool:
        """
        Atomically delete at most one matching row.
        Return True only if this call actually removed it.
        """
