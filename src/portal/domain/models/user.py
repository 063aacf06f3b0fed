from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class UserRole(str, Enum):
    SUPER_ADMIN = "super_admin"
    HOSPITAL_ADMIN = "hospital_admin"
    DOCTOR = "doctor"
    NURSE = "nurse"
    PATIENT = "patient"
    USER = "user"
    LAB_ASSISTANT = "lab_assistant"


ADMIN_ROLES = frozenset({UserRole.SUPER_ADMIN, UserRole.HOSPITAL_ADMIN})


class User(BaseModel):
    """Authenticated identity as returned by ``GET /auth/me``.

    The API uses ``full_name``, ``image`` and ``phone_number``; both the wire
    names and the attribute names are accepted on input.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    email: str
    role: UserRole
    display_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("display_name", "full_name")
    )
    is_active: Optional[bool] = None
    is_verified: Optional[bool] = None
    avatar_url: Optional[str] = Field(default=None, validation_alias=AliasChoices("avatar_url", "image"))
    phone: Optional[str] = Field(default=None, validation_alias=AliasChoices("phone", "phone_number"))
    hospital_id: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES
