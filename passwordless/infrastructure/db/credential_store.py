from __future__ import annotations

from datetime import datetime
from typing import Sequence

from psycopg.rows import tuple_row
from psycopg_pool import AsyncConnectionPool

from passwordless.domain.entities import VerificationCredential
from passwordless.domain.ports.credential_store import CredentialStorePort


class PgCredentialStore(CredentialStorePort):
    """
    Postgres implementation of CredentialStorePort over `verification_tokens`.

    NOTE:
    - Every call borrows its own connection; the pool commits on clean exit.
    - (identifier, token) is the primary key, so the delete touches at most
      one row and its rowcount tells whether *this* call consumed it.
    - Driver errors propagate; the use cases turn them into StoreFailure.
    """

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool

    async def create(
        self, identifier: str, secret_hash: str, expires_at: datetime
    ) -> None:
        sql = """
        INSERT INTO verification_tokens (identifier, token, expires)
        VALUES (%s, %s, %s)
        """
        async with self._pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(sql, (identifier, secret_hash, expires_at))

    async def find_all_by_identifier(
        self, identifier: str
    ) -> list[VerificationCredential]:
        sql = """
        SELECT identifier, token, expires
        FROM verification_tokens
        WHERE identifier = %s
        ORDER BY expires
        """
        async with self._pool.connection() as conn:
            async with conn.cursor(row_factory=tuple_row) as cur:
                await cur.execute(sql, (identifier,))
                rows: Sequence[tuple] = await cur.fetchall()

        return [
            VerificationCredential(
                identifier=str(db_identifier),
                secret_hash=str(db_token),
                expires_at=db_expires,
            )
            for db_identifier, db_token, db_expires in rows
        ]

    async def delete_by_identifier_and_hash(
        self, identifier: str, secret_hash: str
    ) -> bool:
        sql = """
        DELETE FROM verification_tokens
        WHERE identifier = %s AND token = %s
        """
        async with self._pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(sql, (identifier, secret_hash))
                return cur.rowcount == 1
