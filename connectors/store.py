"""
Connection store — encrypted key-value storage ``user_id -> Connection``.

Each record is serialized to JSON, encrypted with ``TokenCipher`` and kept in
a single ``connections`` row.  Every operation runs in its own transaction,
so a single write is never partially visible.  Storage failures are raised
as ``PersistenceError``; deciding what to do with them is the caller's job.
"""

from __future__ import annotations

import json
import logging
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from connectors.encryption import TokenCipher
from connectors.errors import PersistenceError
from connectors.models import Connection
from database.models import ConnectionRow

logger = logging.getLogger(__name__)

Mutation = Callable[[Optional[Connection]], Optional[Connection]]


class ConnectionStore:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        cipher: TokenCipher,
    ):
        self._session_factory = session_factory
        self._cipher = cipher

    # ── encoding ───────────────────────────────────────────────────────

    def _encode(self, connection: Connection) -> str:
        return self._cipher.encrypt(json.dumps(connection.to_record()))

    def _decode(self, user_id: str, stored: str) -> Connection:
        try:
            return Connection.from_record(json.loads(self._cipher.decrypt(stored)))
        except ValueError as exc:
            raise PersistenceError(f"Unreadable connection record for {user_id}: {exc}") from exc

    # ── operations ─────────────────────────────────────────────────────

    async def get(self, user_id: str) -> Optional[Connection]:
        try:
            async with self._session_factory() as session:
                row = await session.get(ConnectionRow, user_id)
                if row is None:
                    return None
                return self._decode(user_id, row.payload)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"DB error reading connection: {exc}") from exc

    async def set(self, user_id: str, connection: Connection) -> bool:
        if connection.user_id != user_id:
            raise ValueError("Connection.user_id does not match the storage key")
        await self.modify(user_id, lambda _current: connection)
        return True

    async def delete(self, user_id: str) -> bool:
        removed = False

        def _drop(current: Optional[Connection]) -> None:
            nonlocal removed
            removed = current is not None
            return None

        await self.modify(user_id, _drop)
        return removed

    async def modify(self, user_id: str, mutate: Mutation) -> Optional[Connection]:
        """
        Read-modify-write ``user_id``'s record in one transaction.

        ``mutate`` gets the current record (``None`` if absent) and returns
        the new one, or ``None`` to delete it.  The row is locked for the
        duration where the database supports ``SELECT ... FOR UPDATE``.
        Two first-time inserts racing on the primary key are retried once.
        """
        for attempt in (1, 2):
            try:
                async with self._session_factory() as session:
                    async with session.begin():
                        row = await session.get(ConnectionRow, user_id, with_for_update=True)
                        current = self._decode(user_id, row.payload) if row is not None else None
                        updated = mutate(current)
                        if updated is None:
                            if row is not None:
                                await session.delete(row)
                        elif row is None:
                            session.add(ConnectionRow(user_id=user_id, payload=self._encode(updated)))
                        else:
                            row.payload = self._encode(updated)
                return updated
            except IntegrityError as exc:
                if attempt == 2:
                    raise PersistenceError(f"DB conflict writing connection: {exc}") from exc
                logger.info("Concurrent insert for user %s; retrying", user_id)
            except SQLAlchemyError as exc:
                raise PersistenceError(f"DB error writing connection: {exc}") from exc
        return None
