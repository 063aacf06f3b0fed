from __future__ import annotations

import logging
from typing import Any, Callable, List, Mapping, Optional

from src.portal.config import settings
from src.portal.domain.models.session import SessionState
from src.portal.domain.models.user import User
from src.portal.infra.storage.credentials import CredentialStore
from src.portal.services.api.client import AuthApi
from src.portal.services.audit.service import AuditService, audit_service

logger = logging.getLogger("session")

Navigator = Callable[[str], None]
SessionListener = Callable[[SessionState], None]


class SessionStore:
    """Single source of truth for who is logged in.

    The store starts in Loading and leaves it on the first ``fetch_user()``.
    Only ``fetch_user``, ``login``, ``logout`` and ``update_profile`` (plus the
    token-login variants built on them) change the state; listeners registered
    through ``subscribe`` see every transition.
    """

    def __init__(
        self,
        auth_api: AuthApi,
        credential_store: CredentialStore,
        *,
        navigate: Optional[Navigator] = None,
        credential_key: Optional[str] = None,
        entry_route: Optional[str] = None,
        dashboard_route: Optional[str] = None,
        audit: Optional[AuditService] = None,
    ) -> None:
        self._auth_api = auth_api
        self._credentials = credential_store
        self._navigate = navigate
        self._credential_key = credential_key or settings.credential_key
        self._entry_route = entry_route or settings.entry_route
        self._dashboard_route = dashboard_route or settings.dashboard_route
        self._audit = audit or audit_service
        self._state = SessionState.loading()
        self._listeners: List[SessionListener] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def identity(self) -> Optional[User]:
        return self._state.identity

    @property
    def is_admin(self) -> bool:
        return self._state.identity is not None and self._state.identity.is_admin

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register ``listener`` for state changes; returns an unsubscribe callable."""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _set_state(self, state: SessionState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Session listener failed")

    def _go(self, path: str) -> None:
        if self._navigate is None:
            logger.debug("No navigator configured, dropping navigation to %s", path)
            return
        self._navigate(path)

    async def fetch_user(self) -> SessionState:
        """Resolve the stored credential into a session state.

        Any failure erases the credential and ends Unauthenticated; the
        Loading state never survives this call.
        """

        try:
            try:
                token = self._credentials.get(self._credential_key)
            except Exception:
                logger.exception("Credential store read failed")
                self._set_state(SessionState.unauthenticated())
                return self._state

            if not token:
                self._set_state(SessionState.unauthenticated())
                return self._state

            try:
                identity = await self._auth_api.me()
            except Exception as exc:
                logger.warning("Stored credential rejected: %s", exc)
                self._drop_credential()
                self._audit.log_event(action="fetch_user", outcome="rejected", extra={"error": type(exc).__name__})
                self._set_state(SessionState.unauthenticated())
            else:
                self._set_state(SessionState.authenticated(identity))
            return self._state
        finally:
            if self._state.is_loading:
                self._set_state(SessionState.unauthenticated())

    def _drop_credential(self) -> None:
        try:
            self._credentials.remove(self._credential_key)
        except Exception:
            logger.exception("Credential store delete failed")

    async def start(self) -> SessionState:
        """Process-start bootstrap; leaves Loading."""

        return await self.fetch_user()

    async def login(self, username: str, password: str) -> None:
        """Log in with username/password and navigate to the dashboard.

        Errors from the remote login propagate unchanged and leave the session
        untouched, so the caller can report them.
        """

        try:
            token = await self._auth_api.login(username, password)
        except Exception as exc:
            self._audit.log_event(action="login", outcome="failure", extra={"error": type(exc).__name__})
            raise
        await self._complete_login(token, action="login")

    async def login_with_token(self, token: Optional[str]) -> None:
        """Adopt a token handed over by the OAuth success redirect."""

        if not token:
            self._go(self._entry_route)
            return
        await self._complete_login(token, action="oauth_token")

    async def login_with_google(self, provider_token: str) -> None:
        """Exchange a Google access token, then log in with the result."""

        try:
            token = await self._auth_api.google_login(provider_token)
        except Exception as exc:
            self._audit.log_event(action="google_login", outcome="failure", extra={"error": type(exc).__name__})
            raise
        await self._complete_login(token, action="google_login")

    async def _complete_login(self, token: str, *, action: str) -> None:
        self._credentials.set(self._credential_key, token)
        state = await self.fetch_user()
        identity = state.identity
        self._audit.log_event(
            action=action,
            outcome="success" if identity is not None else "rejected",
            user_id=identity.id if identity is not None else None,
            role=identity.role.value if identity is not None else None,
        )
        self._go(self._dashboard_route)

    def logout(self) -> None:
        identity = self._state.identity
        self._drop_credential()
        self._set_state(SessionState.unauthenticated())
        if identity is not None:
            self._audit.log_event(action="logout", outcome="success", user_id=identity.id, role=identity.role.value)
        self._go(self._entry_route)

    async def update_profile(self, changes: Mapping[str, Any]) -> SessionState:
        """Refresh the identity after a profile edit.

        ``changes`` is not merged locally: the server stays the only source of
        truth and the identity is re-fetched.
        """

        logger.debug("Profile updated (%s), re-fetching identity", ", ".join(sorted(changes)))
        return await self.fetch_user()
