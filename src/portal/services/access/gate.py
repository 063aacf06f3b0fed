from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional, Union

from src.portal.config import settings
from src.portal.domain.models.session import SessionState
from src.portal.domain.models.user import ADMIN_ROLES, User, UserRole


@dataclass(frozen=True)
class AnyAuthenticated:
    """Any logged-in identity may pass."""


@dataclass(frozen=True)
class RoleIn:
    """The identity's role must be one of ``roles``."""

    roles: FrozenSet[UserRole]

    @classmethod
    def of(cls, *roles: UserRole) -> "RoleIn":
        return cls(frozenset(roles))

    def admits(self, role: UserRole) -> bool:
        return role in self.roles


Capability = Union[AnyAuthenticated, RoleIn]

PROTECTED: Capability = AnyAuthenticated()
ADMIN_ONLY: Capability = RoleIn(ADMIN_ROLES)
DOCTOR_ONLY: Capability = RoleIn.of(UserRole.DOCTOR)


class GateDecision(str, Enum):
    PENDING = "pending"
    RENDER = "render"
    REDIRECT = "redirect"


@dataclass(frozen=True)
class GateOutcome:
    decision: GateDecision
    redirect_to: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.decision is GateDecision.RENDER


def has_capability(identity: Optional[User], capability: Capability) -> bool:
    if identity is None:
        return False
    if isinstance(capability, AnyAuthenticated):
        return True
    if isinstance(capability, RoleIn):
        return capability.admits(identity.role)
    raise TypeError(f"Unknown capability: {capability!r}")


def evaluate(
    state: SessionState,
    capability: Capability,
    *,
    entry_route: Optional[str] = None,
    dashboard_route: Optional[str] = None,
) -> GateOutcome:
    """Decide whether content guarded by ``capability`` may render.

    While the session is loading no decision is made. Logged-out callers go to
    the entry route; logged-in callers without the required role go to the
    dashboard instead.
    """

    if state.is_loading:
        return GateOutcome(GateDecision.PENDING)
    if not state.is_authenticated:
        return GateOutcome(GateDecision.REDIRECT, entry_route or settings.entry_route)
    if not has_capability(state.identity, capability):
        return GateOutcome(GateDecision.REDIRECT, dashboard_route or settings.dashboard_route)
    return GateOutcome(GateDecision.RENDER)
