from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from src.portal.domain.models.session import SessionState
from src.portal.domain.models.user import User, UserRole
from src.portal.services.access.gate import (
    ADMIN_ONLY,
    DOCTOR_ONLY,
    PROTECTED,
    Capability,
    GateDecision,
    GateOutcome,
    RoleIn,
    evaluate,
    has_capability,
)


# Routes reachable without a session.
PUBLIC_ROUTES = frozenset({"/", "/oauth-success", "/google-callback", "/features"})

# Exact application paths and the gate guarding each of them.
ROUTE_GATES: Dict[str, Capability] = {
    "/dashboard": PROTECTED,
    "/doctors": ADMIN_ONLY,
    "/nurses": ADMIN_ONLY,
    "/lab-assistants": ADMIN_ONLY,
    "/inventory": ADMIN_ONLY,
    "/medicines": ADMIN_ONLY,
    "/lab-tests": ADMIN_ONLY,
    "/floors": ADMIN_ONLY,
    "/patients": PROTECTED,
    "/availability": PROTECTED,
    "/appointments": PROTECTED,
    "/lab-reports": PROTECTED,
    "/documents": PROTECTED,
    "/events": PROTECTED,
    "/profile": PROTECTED,
    "/onboarding": PROTECTED,
}

# Parameterised paths, matched by prefix ("/consultation/<id>").
PREFIX_GATES: Dict[str, Capability] = {
    "/consultation/": DOCTOR_ONLY,
}


def capability_for(path: str) -> Optional[Capability]:
    """Return the gate for ``path``; None for public routes.

    Unknown paths still require a session.
    """

    normalized = path.split("?", 1)[0].rstrip("/") or "/"
    if normalized in PUBLIC_ROUTES:
        return None
    if normalized in ROUTE_GATES:
        return ROUTE_GATES[normalized]
    for prefix, capability in PREFIX_GATES.items():
        if normalized.startswith(prefix):
            return capability
    return PROTECTED


def resolve(path: str, state: SessionState) -> GateOutcome:
    capability = capability_for(path)
    if capability is None:
        return GateOutcome(GateDecision.RENDER)
    return evaluate(state, capability)


@dataclass(frozen=True)
class NavItem:
    title: str
    path: str
    visible_to: RoleIn


_ADMINS = (UserRole.SUPER_ADMIN, UserRole.HOSPITAL_ADMIN)

NAV_ITEMS: List[NavItem] = [
    NavItem("Dashboard", "/dashboard", RoleIn.of(*_ADMINS, UserRole.DOCTOR, UserRole.NURSE, UserRole.PATIENT)),
    NavItem("Doctors", "/doctors", RoleIn.of(*_ADMINS)),
    NavItem("Nurses", "/nurses", RoleIn.of(*_ADMINS)),
    NavItem("Patients", "/patients", RoleIn.of(*_ADMINS, UserRole.DOCTOR, UserRole.NURSE)),
    NavItem("Inventory", "/inventory", RoleIn.of(*_ADMINS)),
    NavItem("Lab Tests", "/lab-tests", RoleIn.of(*_ADMINS)),
    NavItem("Floors", "/floors", RoleIn.of(*_ADMINS)),
    NavItem("Availability", "/availability", RoleIn.of(*_ADMINS, UserRole.DOCTOR, UserRole.NURSE)),
]


def visible_nav_items(identity: Optional[User]) -> List[NavItem]:
    """Menu entries shown to ``identity``.

    Presentation only: hiding a link does not protect its route, the gate in
    ``resolve`` does.
    """

    return [item for item in NAV_ITEMS if has_capability(identity, item.visible_to)]
