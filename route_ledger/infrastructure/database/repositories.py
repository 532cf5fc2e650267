"""Data access layer for the persistent cache store"""

import asyncio
from typing import Callable, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from route_ledger.domain.exceptions import CacheReadError, CacheWriteError
from route_ledger.infrastructure.database.models import CacheSlot
from route_ledger.infrastructure.database.session import SessionLocal


class CacheSlotRepository:
    """Repository for key-value cache slots"""

    def __init__(self, db: Session):
        self.db = db

    def get_value(self, key: str) -> Optional[str]:
        """Fetch the stored value for a key"""
        slot = self.db.query(CacheSlot).filter(CacheSlot.key == key).first()
        return slot.value if slot else None

    def put_value(self, key: str, value: str) -> CacheSlot:
        """Insert or overwrite the value for a key"""
        slot = self.db.query(CacheSlot).filter(CacheSlot.key == key).first()
        if slot is None:
            slot = CacheSlot(key=key, value=value)
            self.db.add(slot)
        else:
            slot.value = value
        self.db.flush()
        return slot

    def delete_value(self, key: str) -> None:
        self.db.query(CacheSlot).filter(CacheSlot.key == key).delete()


class SqlKeyValueStore:
    """
    KeyValueStore backed by SQLAlchemy.

    Blocking database work runs in a worker thread so the event loop only
    suspends at this boundary. Every SQLAlchemy failure is converted to
    CacheReadError / CacheWriteError.
    """

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory

    def _read(self, key: str) -> Optional[str]:
        with self.session_factory() as db:
            return CacheSlotRepository(db).get_value(key)

    def _write(self, key: str, value: str) -> None:
        with self.session_factory() as db:
            try:
                CacheSlotRepository(db).put_value(key, value)
                db.commit()
            except SQLAlchemyError:
                db.rollback()
                raise

    def _delete(self, key: str) -> None:
        with self.session_factory() as db:
            try:
                CacheSlotRepository(db).delete_value(key)
                db.commit()
            except SQLAlchemyError:
                db.rollback()
                raise

    async def get(self, key: str) -> Optional[str]:
        try:
            return await asyncio.to_thread(self._read, key)
        except SQLAlchemyError as e:
            raise CacheReadError(f"Cache store read failed: {e}") from e

    async def set(self, key: str, value: str) -> None:
        try:
            await asyncio.to_thread(self._write, key, value)
        except SQLAlchemyError as e:
            raise CacheWriteError(f"Cache store write failed: {e}") from e

    async def delete(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._delete, key)
        except SQLAlchemyError as e:
            raise CacheWriteError(f"Cache store delete failed: {e}") from e
