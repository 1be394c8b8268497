"""
Trade-In Client — Client Storage Backends

A minimal string key/value interface (get/set/remove), the shape of
browser local storage. The cart engine only ever talks to this interface.

- MemoryStorage: process-local, used in tests and throwaway sessions.
- SqlAlchemyStorage: durable, one row per key in `client_storage`.

Backends raise PersistenceError; the cart engine catches and logs it.
"""

from __future__ import annotations

from typing import Protocol

import structlog
from sqlalchemy import Engine, create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from tradein.config import settings
from tradein.errors import PersistenceError
from tradein.models.base import Base
from tradein.models.storage_entry import StorageEntry

logger = structlog.get_logger(__name__)


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """Dict-backed storage."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self.data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove_item(self, key: str) -> None:
        self.data.pop(key, None)


class SqlAlchemyStorage:
    """
    Durable storage on any SQLAlchemy database (SQLite file by default).

    Usage:
        storage = SqlAlchemyStorage()  # settings.STORAGE_DATABASE_URL
        engine = CartEngine(storage)
    """

    def __init__(self, engine: Engine | None = None, database_url: str | None = None):
        self._engine = engine or create_engine(database_url or settings.STORAGE_DATABASE_URL)
        try:
            Base.metadata.create_all(self._engine)
        except SQLAlchemyError as e:
            raise PersistenceError("could not initialize client storage", cause=e) from e
        self._session_factory: sessionmaker[Session] = sessionmaker(
            self._engine, expire_on_commit=False
        )

    def get_item(self, key: str) -> str | None:
        try:
            with self._session_factory() as session:
                entry = session.get(StorageEntry, key)
                return entry.value if entry is not None else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"read failed for key '{key}'", cause=e) from e

    def set_item(self, key: str, value: str) -> None:
        try:
            with self._session_factory.begin() as session:
                entry = session.get(StorageEntry, key)
                if entry is None:
                    session.add(StorageEntry(key=key, value=value))
                else:
                    entry.value = value
        except SQLAlchemyError as e:
            raise PersistenceError(f"write failed for key '{key}'", cause=e) from e

        logger.debug("storage_item_written", key=key, size=len(value))

    def remove_item(self, key: str) -> None:
        try:
            with self._session_factory.begin() as session:
                entry = session.get(StorageEntry, key)
                if entry is not None:
                    session.delete(entry)
        except SQLAlchemyError as e:
            raise PersistenceError(f"remove failed for key '{key}'", cause=e) from e

    def dispose(self) -> None:
        self._engine.dispose()
