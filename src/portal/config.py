from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Centralized client settings.

    This keeps environment-variable handling in one place so other modules can
    depend on strongly-typed attributes instead of calling os.getenv
    directly.
    """

    # Base URL of the clinic API, including the version prefix.
    api_base_url: str = os.getenv("PORTAL_API_BASE_URL", "http://localhost:8000/api/v1")
    http_timeout_seconds: float = float(os.getenv("PORTAL_HTTP_TIMEOUT_SECONDS", "10"))

    # Credential persistence: "memory" (tests, throwaway sessions) or "sql".
    credential_store: str = os.getenv("PORTAL_CREDENTIAL_STORE", "sql")
    credential_db_url: str = os.getenv("PORTAL_CREDENTIAL_DB_URL", "sqlite:///portal_credentials.db")
    # Key under which the bearer token is persisted.
    credential_key: str = os.getenv("PORTAL_CREDENTIAL_KEY", "lh_token")

    # Typeahead defaults shared by all directory lookups.
    search_min_query_length: int = int(os.getenv("PORTAL_SEARCH_MIN_QUERY_LENGTH", "2"))
    search_debounce_ms: int = int(os.getenv("PORTAL_SEARCH_DEBOUNCE_MS", "300"))

    # Navigation targets used by the session store and access gate.
    entry_route: str = os.getenv("PORTAL_ENTRY_ROUTE", "/")
    dashboard_route: str = os.getenv("PORTAL_DASHBOARD_ROUTE", "/dashboard")


settings = Settings()
