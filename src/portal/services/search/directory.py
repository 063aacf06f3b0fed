from __future__ import annotations

from typing import Optional

from src.portal.domain.models.directory import DirectoryKind
from src.portal.services.api.client import DirectoryApi
from src.portal.services.search.engine import (
    OnSelect,
    RemoteSearch,
    SelectionMode,
    TypeaheadConfig,
    TypeaheadEngine,
)


def directory_search(api: DirectoryApi, kind: DirectoryKind) -> RemoteSearch:
    """Bind a directory kind into a ``query -> candidates`` search function."""

    async def _search(query: str):
        return await api.search(kind, query)

    return _search


def user_lookup(
    api: DirectoryApi,
    on_select: Optional[OnSelect] = None,
    *,
    search_action: Optional[RemoteSearch] = None,
) -> TypeaheadEngine:
    """Single-select identity picker over the user directory.

    ``search_action`` replaces the default user search, e.g. when a form
    needs to look up patients through a narrower endpoint.
    """

    remote = search_action or directory_search(api, DirectoryKind.USER)
    return TypeaheadEngine(TypeaheadConfig(remote_search=remote, mode=SelectionMode.SINGLE), on_select)


def staff_lookup(api: DirectoryApi, kind: DirectoryKind, on_select: Optional[OnSelect] = None) -> TypeaheadEngine:
    """Multi-select picker over doctors or nurses."""

    if kind not in (DirectoryKind.STAFF_DOCTOR, DirectoryKind.STAFF_NURSE):
        raise ValueError(f"staff_lookup needs a staff directory, got {kind.value}")
    remote = directory_search(api, kind)
    return TypeaheadEngine(TypeaheadConfig(remote_search=remote, mode=SelectionMode.MULTI), on_select)
