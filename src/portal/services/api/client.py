from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol

import httpx
from pydantic import ValidationError

from src.portal.config import settings
from src.portal.domain.models.directory import Candidate, DirectoryKind
from src.portal.domain.models.user import User
from src.portal.errors import AuthError, NetworkError, PortalError
from src.portal.infra.storage.credentials import CredentialStore


logger = logging.getLogger("portal_api")


class AuthApi(Protocol):
    """Remote authentication operations consumed by the session store."""

    async def login(self, username: str, password: str) -> str:  # pragma: no cover - interface
        raise NotImplementedError

    async def google_login(self, provider_token: str) -> str:  # pragma: no cover - interface
        raise NotImplementedError

    async def me(self) -> User:  # pragma: no cover - interface
        raise NotImplementedError


class DirectoryApi(Protocol):
    """Remote directory search consumed by the typeahead lookups."""

    async def search(self, kind: DirectoryKind, query: str) -> List[Candidate]:  # pragma: no cover - interface
        raise NotImplementedError


SEARCH_PATHS: Dict[DirectoryKind, str] = {
    DirectoryKind.STAFF_DOCTOR: "/doctors/search",
    DirectoryKind.STAFF_NURSE: "/nurses/search",
    DirectoryKind.USER: "/users/search",
}


class PortalApiClient:
    """Async HTTP client for the clinic API.

    The stored credential is attached as a bearer token on every request.
    Failures are translated into the portal error taxonomy here, so callers
    only ever see AuthError, NetworkError or PortalError.
    """

    def __init__(
        self,
        credential_store: CredentialStore,
        *,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        credential_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._credentials = credential_store
        self._credential_key = credential_key or settings.credential_key
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            timeout=timeout_seconds if timeout_seconds is not None else settings.http_timeout_seconds,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "PortalApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def _auth_headers(self) -> Dict[str, str]:
        token = self._credentials.get(self._credential_key)
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    async def _request(self, method: str, path: str, *, credentials_call: bool = False, **kwargs: Any) -> Any:
        headers = {**self._auth_headers(), **kwargs.pop("headers", {})}
        try:
            response = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("Request %s %s failed: %s", method, path, exc)
            raise NetworkError(f"{method} {path} failed: {exc}") from exc

        status_code = response.status_code
        # Login endpoints answer bad credentials with 400.
        if status_code in (401, 403) or (credentials_call and status_code == 400):
            raise AuthError(_error_detail(response, "Not authenticated"), status_code=status_code)
        if status_code >= 500:
            logger.error("Request %s %s returned %s", method, path, status_code)
            raise NetworkError(f"{method} {path} returned {status_code}", status_code=status_code)
        if status_code >= 400:
            raise PortalError(_error_detail(response, f"{method} {path} returned {status_code}"), status_code=status_code)

        try:
            return response.json()
        except ValueError as exc:
            logger.error("Request %s %s returned non-JSON response", method, path)
            raise NetworkError(f"{method} {path} returned non-JSON response") from exc

    async def login(self, username: str, password: str) -> str:
        """Exchange username/password for an access token (form-encoded)."""

        data = await self._request(
            "POST",
            "/auth/login/access-token",
            credentials_call=True,
            data={"username": username, "password": password},
        )
        return _access_token(data)

    async def google_login(self, provider_token: str) -> str:
        """Exchange a Google access token for a portal access token."""

        data = await self._request("POST", "/auth/google", credentials_call=True, json={"token": provider_token})
        return _access_token(data)

    async def me(self) -> User:
        data = await self._request("GET", "/auth/me")
        try:
            return User.model_validate(data)
        except ValidationError as exc:
            raise NetworkError("Unexpected /auth/me payload") from exc

    async def search(self, kind: DirectoryKind, query: str) -> List[Candidate]:
        data = await self._request("GET", SEARCH_PATHS[kind], params={"q": query})
        if not isinstance(data, list):
            raise NetworkError(f"Unexpected search payload for {kind.value}")
        if kind is DirectoryKind.USER:
            return [Candidate.from_user_record(record) for record in data]
        return [Candidate.from_staff_record(record) for record in data]


def _access_token(data: Any) -> str:
    token = data.get("access_token") if isinstance(data, dict) else None
    if not token:
        raise AuthError("Login response did not include an access token")
    return token


def _error_detail(response: httpx.Response, default: str) -> str:
    try:
        detail = response.json().get("detail")
    except (ValueError, AttributeError):
        return default
    return detail if isinstance(detail, str) and detail else default
