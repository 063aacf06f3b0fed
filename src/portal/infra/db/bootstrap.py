from __future__ import annotations

import logging
from typing import Optional

from src.portal.config import settings
from src.portal.infra.db.session import create_sqlalchemy_session_factory
from src.portal.infra.db.sql_credentials import SqlCredentialStore
from src.portal.infra.storage.credentials import CredentialStore, InMemoryCredentialStore

logger = logging.getLogger("portal_storage")


def build_credential_store(backend: Optional[str] = None, database_url: Optional[str] = None) -> CredentialStore:
    """Return the credential store selected by PORTAL_CREDENTIAL_STORE.

    "memory" keeps the credential in-process only; anything else is treated as
    "sql" and uses PORTAL_CREDENTIAL_DB_URL.
    """

    choice = (backend or settings.credential_store).lower()
    if choice == "memory":
        return InMemoryCredentialStore()

    if choice != "sql":
        logger.warning("Unknown credential store %r, falling back to sql", choice)

    db_url = database_url or settings.credential_db_url
    return SqlCredentialStore(create_sqlalchemy_session_factory(db_url))
