from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from src.portal.domain.models.user import User


class SessionStatus(str, Enum):
    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class SessionState:
    """Tagged session state: exactly one of Loading, Unauthenticated or
    Authenticated(identity).

    Build instances through the ``loading``/``unauthenticated``/``authenticated``
    constructors; the identity is present iff the status is AUTHENTICATED.
    """

    status: SessionStatus
    identity: Optional[User] = None

    def __post_init__(self) -> None:
        has_identity = self.identity is not None
        if has_identity != (self.status is SessionStatus.AUTHENTICATED):
            raise ValueError(f"identity must be set only for authenticated sessions (status={self.status.value})")

    @classmethod
    def loading(cls) -> "SessionState":
        return cls(SessionStatus.LOADING)

    @classmethod
    def unauthenticated(cls) -> "SessionState":
        return cls(SessionStatus.UNAUTHENTICATED)

    @classmethod
    def authenticated(cls, identity: User) -> "SessionState":
        return cls(SessionStatus.AUTHENTICATED, identity)

    @property
    def is_loading(self) -> bool:
        return self.status is SessionStatus.LOADING

    @property
    def is_authenticated(self) -> bool:
        return self.status is SessionStatus.AUTHENTICATED
