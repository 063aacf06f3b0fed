from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Set, Tuple, Union

from src.portal.config import settings
from src.portal.domain.models.directory import Candidate

logger = logging.getLogger("typeahead")

RemoteSearch = Callable[[str], Awaitable[List[Candidate]]]
Selection = Union[Candidate, Tuple[Candidate, ...]]
OnSelect = Callable[[Selection], None]


class SelectionMode(str, Enum):
    SINGLE = "single"
    MULTI = "multi"


class SearchStatus(str, Enum):
    # Query too short to search.
    IDLE = "idle"
    LOADING = "loading"
    RESULTS = "results"
    EMPTY = "empty"


@dataclass(frozen=True)
class SearchQuery:
    text: str
    generation: int


@dataclass(frozen=True)
class TypeaheadConfig:
    remote_search: RemoteSearch
    min_query_length: int = field(default_factory=lambda: settings.search_min_query_length)
    debounce_ms: int = field(default_factory=lambda: settings.search_debounce_ms)
    mode: SelectionMode = SelectionMode.SINGLE


@dataclass(frozen=True)
class TypeaheadState:
    """Snapshot handed to subscribers after every transition."""

    query: str
    results: Tuple[Candidate, ...]
    selection: Tuple[Candidate, ...]
    is_open: bool
    is_loading: bool
    status: SearchStatus


class TypeaheadEngine:
    """Debounced, race-safe search-and-select state machine.

    Every query change bumps a generation counter. A debounce task only fires
    the remote search if its generation is still the newest once the delay
    has elapsed, and a response is only applied if the query it was fired for
    is still the most recently fired one. Superseded work is never cancelled at
    the transport level; its result is simply dropped.

    Must be driven from inside a running event loop.
    """

    def __init__(
        self,
        config: TypeaheadConfig,
        on_select: Optional[OnSelect] = None,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._config = config
        self._on_select = on_select
        self._sleep = sleep

        self._query = ""
        self._generation = 0
        self._latest_fired: Optional[SearchQuery] = None
        self._results: Tuple[Candidate, ...] = ()
        self._selection: Tuple[Candidate, ...] = ()
        self._open = False
        self._loading = False
        self._disposed = False

        self._armed: Set[asyncio.Task] = set()
        self._tasks: Set[asyncio.Task] = set()
        self._listeners: List[Callable[[TypeaheadState], None]] = []

    @property
    def mode(self) -> SelectionMode:
        return self._config.mode

    @property
    def query(self) -> str:
        return self._query

    @property
    def results(self) -> Tuple[Candidate, ...]:
        return self._results

    @property
    def selection(self) -> Tuple[Candidate, ...]:
        return self._selection

    @property
    def selected(self) -> Optional[Candidate]:
        """The single selection (SINGLE mode), or the last one added."""

        return self._selection[-1] if self._selection else None

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def status(self) -> SearchStatus:
        if len(self._query) < self._config.min_query_length:
            return SearchStatus.IDLE
        if self._loading:
            return SearchStatus.LOADING
        if self._results:
            return SearchStatus.RESULTS
        return SearchStatus.EMPTY

    def snapshot(self) -> TypeaheadState:
        return TypeaheadState(
            query=self._query,
            results=self._results,
            selection=self._selection,
            is_open=self._open,
            is_loading=self._loading,
            status=self.status,
        )

    def subscribe(self, listener: Callable[[TypeaheadState], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        state = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Typeahead listener failed")

    # -- query handling -------------------------------------------------

    def set_query(self, text: str) -> None:
        """Handle a keystroke: clear for short input, otherwise re-arm the debounce."""

        if self._disposed:
            return
        self._change_query(text)
        self._notify()

    def _change_query(self, text: str) -> None:
        self._query = text
        self._generation += 1

        if len(text) < self._config.min_query_length:
            self._results = ()
            self._latest_fired = None
            self._loading = False
            return

        query = SearchQuery(text, self._generation)
        task = asyncio.get_running_loop().create_task(self._debounced(query))
        self._armed.add(task)
        self._tasks.add(task)
        task.add_done_callback(self._forget)

    def _forget(self, task: asyncio.Task) -> None:
        self._armed.discard(task)
        self._tasks.discard(task)

    def _is_current(self, query: SearchQuery) -> bool:
        return not self._disposed and self._latest_fired == query

    async def _debounced(self, query: SearchQuery) -> None:
        await self._sleep(self._config.debounce_ms / 1000)
        task = asyncio.current_task()
        if task is not None:
            self._armed.discard(task)
        if self._disposed or query.generation != self._generation:
            return

        self._latest_fired = query
        self._loading = True
        self._notify()

        try:
            candidates = await self._config.remote_search(query.text)
        except Exception:
            if not self._is_current(query):
                logger.debug("Ignoring failure of superseded search %r", query.text)
                return
            logger.exception("Directory search for %r failed", query.text)
            self._results = ()
            self._loading = False
            self._notify()
            return

        if not self._is_current(query):
            logger.debug("Discarding stale results for %r", query.text)
            return

        self._results = tuple(candidates)
        self._loading = False
        self._notify()

    async def wait_idle(self) -> None:
        """Wait until every armed timer and in-flight search has settled."""

        pending = [task for task in self._tasks if not task.done()]
        while pending:
            await asyncio.gather(*pending, return_exceptions=True)
            pending = [task for task in self._tasks if not task.done()]

    # -- selection ------------------------------------------------------

    def select(self, candidate: Candidate) -> None:
        if self._disposed:
            return
        if self._config.mode is SelectionMode.SINGLE:
            self._selection = (candidate,)
            self._open = False
            self._change_query("")
            self._notify()
            if self._on_select is not None:
                self._on_select(candidate)
            return

        if any(item.id == candidate.id for item in self._selection):
            return
        self._selection = self._selection + (candidate,)
        self._change_query("")
        self._notify()
        if self._on_select is not None:
            self._on_select(self._selection)

    def remove(self, candidate_id: str) -> None:
        if self._config.mode is not SelectionMode.MULTI:
            raise ValueError("remove() is only supported in multi-select mode")
        if self._disposed:
            return
        remaining = tuple(item for item in self._selection if item.id != candidate_id)
        if len(remaining) == len(self._selection):
            return
        self._selection = remaining
        self._notify()
        if self._on_select is not None:
            self._on_select(self._selection)

    # -- open/close -----------------------------------------------------

    def open(self) -> None:
        if not self._open:
            self._open = True
            self._notify()

    def toggle(self) -> None:
        self._open = not self._open
        self._notify()

    def dismiss(self) -> None:
        """The host UI saw an interaction outside the widget."""

        if self._open:
            self._open = False
            self._notify()

    def dispose(self) -> None:
        """Unmount: cancel armed timers and drop any in-flight response."""

        self._disposed = True
        self._open = False
        self._loading = False
        for task in list(self._armed):
            task.cancel()
        self._listeners.clear()
