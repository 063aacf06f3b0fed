from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict


class DirectoryKind(str, Enum):
    STAFF_DOCTOR = "staff-doctor"
    STAFF_NURSE = "staff-nurse"
    USER = "user"


class Candidate(BaseModel):
    """One selectable record returned by a directory search."""

    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
    subtitle: Optional[str] = None
    avatar_url: Optional[str] = None

    @classmethod
    def from_user_record(cls, record: Mapping[str, Any]) -> "Candidate":
        """Build a candidate from a ``/users/search`` record.

        Users are shown by full name, falling back to e-mail; the e-mail is
        the subtitle.
        """

        email = record.get("email")
        return cls(
            id=str(record["id"]),
            display_name=record.get("full_name") or email or "Unknown Name",
            subtitle=email,
            avatar_url=record.get("image"),
        )

    @classmethod
    def from_staff_record(cls, record: Mapping[str, Any]) -> "Candidate":
        """Build a candidate from a doctor/nurse search record.

        Staff records nest the person under ``user``; doctors carry a
        specialization and nurses a shift type.
        """

        person = record.get("user") or {}
        return cls(
            id=str(record["id"]),
            display_name=person.get("full_name") or "Unknown",
            subtitle=record.get("specialization") or record.get("shift_type"),
            avatar_url=person.get("image"),
        )
