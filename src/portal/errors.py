from __future__ import annotations

from typing import Optional


class PortalError(Exception):
    """Base class for failures raised by the portal client core."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class AuthError(PortalError):
    """Bad credentials, or a stored credential the server no longer accepts."""


class NetworkError(PortalError):
    """The remote call could not be completed (transport failure or 5xx)."""
