from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Optional


class CredentialStore(ABC):
    """Durable key-value store holding the session credential.

    Absence of the key is the only signal for "no session"; callers never
    store empty strings.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None when the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Insert or replace the value stored under ``key``."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key``. Removing an absent key is a no-op."""


class InMemoryCredentialStore(CredentialStore):
    """Process-local store. Used in tests and for throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)
