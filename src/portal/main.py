from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import httpx

from src.portal.domain.models.directory import DirectoryKind
from src.portal.infra.db.bootstrap import build_credential_store
from src.portal.infra.storage.credentials import CredentialStore
from src.portal.services.access.gate import GateOutcome
from src.portal.services.access.routes import resolve
from src.portal.services.api.client import PortalApiClient
from src.portal.services.search.directory import staff_lookup, user_lookup
from src.portal.services.search.engine import OnSelect, RemoteSearch, TypeaheadEngine
from src.portal.services.session.service import Navigator, SessionStore


@dataclass
class Portal:
    """Wired client core handed to the host UI."""

    api: PortalApiClient
    session: SessionStore
    credentials: CredentialStore

    def guard(self, path: str) -> GateOutcome:
        return resolve(path, self.session.state)

    def user_lookup(self, on_select: Optional[OnSelect] = None, *, search_action: Optional[RemoteSearch] = None) -> TypeaheadEngine:
        return user_lookup(self.api, on_select, search_action=search_action)

    def staff_lookup(self, kind: DirectoryKind, on_select: Optional[OnSelect] = None) -> TypeaheadEngine:
        return staff_lookup(self.api, kind, on_select)

    async def aclose(self) -> None:
        await self.api.aclose()


async def create_portal(
    navigate: Optional[Navigator] = None,
    *,
    credential_store: Optional[CredentialStore] = None,
    base_url: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Portal:
    """Process-start wiring.

    Builds the credential store and API client, then resolves the stored
    credential so the session has left Loading before the first navigation.
    """

    store = credential_store or build_credential_store()
    api = PortalApiClient(store, base_url=base_url, transport=transport)
    session = SessionStore(api, store, navigate=navigate)
    await session.start()
    return Portal(api=api, session=session, credentials=store)
