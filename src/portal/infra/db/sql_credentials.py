from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from src.portal.infra.db.models import KeyValueEntryORM
from src.portal.infra.db.session import SessionFactory
from src.portal.infra.storage.credentials import CredentialStore


class SqlCredentialStore(CredentialStore):
    """SQL-backed CredentialStore.

    Values survive process restarts; with the default SQLite URL the store is
    a single local file.
    """

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def get(self, key: str) -> Optional[str]:
        session = self._session_factory()
        try:
            orm = session.get(KeyValueEntryORM, key)
            if orm is None:
                return None
            return orm.value
        finally:
            session.close()

    def set(self, key: str, value: str) -> None:
        session = self._session_factory()
        try:
            now = datetime.now(timezone.utc)
            existing = session.get(KeyValueEntryORM, key)
            if existing is None:
                session.add(KeyValueEntryORM(key=key, value=value, updated_at=now))
            else:
                existing.value = value
                existing.updated_at = now
            session.commit()
        finally:
            session.close()

    def remove(self, key: str) -> None:
        session = self._session_factory()
        try:
            existing = session.get(KeyValueEntryORM, key)
            if existing is not None:
                session.delete(existing)
                session.commit()
        finally:
            session.close()
