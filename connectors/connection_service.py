"""
Connection lifecycle — the single owner of Connection records.

All writes go through here: OAuth callbacks and the API-key endpoints add
fields with ``upsert``, the API-key delete drops one field with
``remove_fields``, account unlink removes the whole record with ``delete``.

Writes for the same user are serialized by a per-user ``asyncio.Lock`` (one
process) and by the store's transactional read-modify-write (many
processes), so two OAuth legs completing at the same instant never lose
each other's token.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from typing import Optional

from connectors.errors import PersistenceError
from connectors.models import Connection, ConnectionUpdate
from connectors.store import ConnectionStore

logger = logging.getLogger(__name__)


class ConnectionService:
    def __init__(self, store: ConnectionStore):
        self._store = store
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _lock_for(self, user_id: str) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock

    async def get_by_user_id(self, user_id: str) -> Optional[Connection]:
        try:
            return await self._store.get(user_id)
        except PersistenceError as exc:
            logger.error("Failed to retrieve connection for user %s: %s", user_id, exc)
            raise

    async def upsert(
        self,
        user_id: str,
        update: Optional[ConnectionUpdate] = None,
        **fields: str,
    ) -> Connection:
        """
        Create or merge-update ``user_id``'s record.

        Only the fields set on ``update`` (or passed as keywords) are
        written; every other field keeps its stored value.
        """
        if update is None:
            update = ConnectionUpdate(**fields)
        elif fields:
            update = ConnectionUpdate(**{**update.changes(), **fields})

        def _merge(current: Optional[Connection]) -> Connection:
            base = current if current is not None else Connection.empty(user_id)
            return base.merge(update).model_copy(update={"user_id": user_id})

        async with self._lock_for(user_id):
            try:
                connection = await self._store.modify(user_id, _merge)
            except PersistenceError as exc:
                logger.error("Failed to upsert connection for user %s: %s", user_id, exc)
                raise
        if connection is None:
            raise PersistenceError(f"Upsert for user {user_id} produced no record")
        logger.info(
            "Connection updated for user %s (fields: %s)",
            user_id,
            ", ".join(sorted(update.changes())) or "none",
        )
        return connection

    async def remove_fields(self, user_id: str, *fields: str) -> Optional[Connection]:
        """Drop individual credential fields, keeping the rest of the record."""

        def _drop(current: Optional[Connection]) -> Optional[Connection]:
            if current is None:
                return None
            return current.without(*fields)

        async with self._lock_for(user_id):
            try:
                connection = await self._store.modify(user_id, _drop)
            except PersistenceError as exc:
                logger.error("Failed to remove %s for user %s: %s", fields, user_id, exc)
                raise
        logger.info("Removed %s from connection for user %s", ", ".join(fields), user_id)
        return connection

    async def delete(self, user_id: str) -> bool:
        """Delete the whole record (account unlink)."""
        async with self._lock_for(user_id):
            try:
                removed = await self._store.delete(user_id)
            except PersistenceError as exc:
                logger.error("Failed to delete connection for user %s: %s", user_id, exc)
                raise
        logger.info("Connection deleted for user %s (existed=%s)", user_id, removed)
        return removed
