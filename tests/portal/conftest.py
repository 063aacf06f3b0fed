from __future__ import annotations

from typing import Dict, List, Optional
from urllib.parse import parse_qs

import httpx
import pytest
from fastapi import FastAPI, Header, HTTPException, Request

from src.portal.domain.models.user import User
from src.portal.errors import AuthError
from src.portal.infra.storage.credentials import InMemoryCredentialStore
from src.portal.services.api.client import PortalApiClient


TOKEN_KEY = "lh_token"

ACCOUNTS: Dict[str, Dict] = {
    "doc1": {
        "password": "s3cret",
        "token": "token-doc1",
        "record": {"id": "d-1", "email": "doc1@lifehealth.org", "full_name": "Ada Lovelace", "role": "doctor"},
    },
    "nurse1": {
        "password": "s3cret",
        "token": "token-nurse1",
        "record": {"id": "n-1", "email": "nurse1@lifehealth.org", "full_name": "Florence N", "role": "nurse"},
    },
    "admin1": {
        "password": "s3cret",
        "token": "token-admin1",
        "record": {
            "id": "a-1",
            "email": "admin1@lifehealth.org",
            "full_name": "Hospital Admin",
            "role": "hospital_admin",
            "image": "https://cdn.clinic.test/a-1.png",
            "phone_number": "+100200300",
            "hospital_id": "h-1",
        },
    },
    # On-prem deployments use internal mail domains.
    "onprem1": {
        "password": "s3cret",
        "token": "token-onprem1",
        "record": {"id": "d-9", "email": "doc@clinic.local", "role": "doctor"},
    },
}

GOOGLE_TOKENS = {"google-doc1": "doc1"}

USER_RECORDS: List[Dict] = [
    {"id": "u1", "email": "maria@lifehealth.org", "full_name": "Maria Lopez", "image": None},
    {"id": "u2", "email": "mario@lifehealth.org", "full_name": None},
    {"id": "u3", "email": "zoe@lifehealth.org", "full_name": "Zoe Park"},
]

DOCTOR_RECORDS: List[Dict] = [
    {"id": "doc-1", "user": {"full_name": "Ada Lovelace"}, "specialization": "Cardiology"},
    {"id": "doc-2", "user": {"full_name": "Adam Smith"}, "specialization": "Neurology"},
]

NURSE_RECORDS: List[Dict] = [
    {"id": "nur-1", "user": {"full_name": "Florence N"}, "shift_type": "night"},
]


def _matches(record: Dict, q: str) -> bool:
    person = record.get("user") or record
    haystack = " ".join(str(v) for v in (person.get("full_name"), person.get("email")) if v)
    return q.lower() in haystack.lower()


def build_fake_api() -> FastAPI:
    """In-process stand-in for the clinic API."""

    app = FastAPI()
    tokens = {account["token"]: account["record"] for account in ACCOUNTS.values()}

    def _identity(authorization: Optional[str]) -> Dict:
        if not authorization or not authorization.startswith("Bearer "):
            raise HTTPException(status_code=401, detail="Not authenticated")
        record = tokens.get(authorization[len("Bearer "):])
        if record is None:
            raise HTTPException(status_code=401, detail="Could not validate credentials")
        return record

    @app.post("/auth/login/access-token")
    async def login(request: Request) -> Dict:
        form = parse_qs((await request.body()).decode())
        username = form.get("username", [""])[0]
        password = form.get("password", [""])[0]
        account = ACCOUNTS.get(username)
        if account is None or account["password"] != password:
            raise HTTPException(status_code=400, detail="Incorrect email or password")
        return {"access_token": account["token"], "token_type": "bearer"}

    @app.post("/auth/google")
    async def google(payload: Dict) -> Dict:
        username = GOOGLE_TOKENS.get(payload.get("token", ""))
        if username is None:
            raise HTTPException(status_code=401, detail="Invalid Google token")
        return {"access_token": ACCOUNTS[username]["token"], "token_type": "bearer"}

    @app.get("/auth/me")
    async def me(authorization: Optional[str] = Header(None)) -> Dict:
        return _identity(authorization)

    @app.get("/users/search")
    async def search_users(q: str, authorization: Optional[str] = Header(None)) -> List[Dict]:
        _identity(authorization)
        return [r for r in USER_RECORDS if _matches(r, q)]

    @app.get("/doctors/search")
    async def search_doctors(q: str, authorization: Optional[str] = Header(None)) -> List[Dict]:
        _identity(authorization)
        return [r for r in DOCTOR_RECORDS if _matches(r, q)]

    @app.get("/nurses/search")
    async def search_nurses(q: str, authorization: Optional[str] = Header(None)) -> List[Dict]:
        _identity(authorization)
        if q == "boom":
            raise HTTPException(status_code=503, detail="Directory unavailable")
        return [r for r in NURSE_RECORDS if _matches(r, q)]

    return app


class FakeAuthApi:
    """AuthApi double that resolves identities from the shared credential store."""

    def __init__(self, store: InMemoryCredentialStore) -> None:
        self._store = store
        self.me_calls = 0
        self.me_error: Optional[Exception] = None

    async def login(self, username: str, password: str) -> str:
        account = ACCOUNTS.get(username)
        if account is None or account["password"] != password:
            raise AuthError("Incorrect email or password", status_code=400)
        return account["token"]

    async def google_login(self, provider_token: str) -> str:
        username = GOOGLE_TOKENS.get(provider_token)
        if username is None:
            raise AuthError("Invalid Google token", status_code=401)
        return ACCOUNTS[username]["token"]

    async def me(self) -> User:
        self.me_calls += 1
        if self.me_error is not None:
            raise self.me_error
        token = self._store.get(TOKEN_KEY)
        for account in ACCOUNTS.values():
            if account["token"] == token:
                return User.model_validate(account["record"])
        raise AuthError("Could not validate credentials", status_code=401)


@pytest.fixture
def credential_store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture
def auth_api(credential_store: InMemoryCredentialStore) -> FakeAuthApi:
    return FakeAuthApi(credential_store)


@pytest.fixture
def navigations() -> List[str]:
    return []


@pytest.fixture
def fake_api() -> FastAPI:
    return build_fake_api()


@pytest.fixture
async def api_client(fake_api: FastAPI, credential_store: InMemoryCredentialStore):
    client = PortalApiClient(
        credential_store,
        base_url="http://test",
        transport=httpx.ASGITransport(app=fake_api),
    )
    yield client
    await client.aclose()


def user(role: str, user_id: str = "x-1") -> User:
    return User.model_validate({"id": user_id, "email": f"{user_id}@lifehealth.org", "role": role})


@pytest.fixture
def make_user():
    return user
