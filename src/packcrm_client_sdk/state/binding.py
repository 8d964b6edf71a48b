from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from ..exceptions import CommandFailedError
from ..logger import get_logger
from .intents import ClearFilters, Intent, SetFilters, SetPage
from .resource_state import ResourceState

_VIEW_INTENTS = (SetFilters, ClearFilters, SetPage)


class QueryBinding:
    """Re-fetch a slice's list whenever the caller changes its query.

    Only view intents count; a fetch that rewrites pagination from the server
    response never triggers another fetch.
    """

    def __init__(self, resource_slice: Any, *, logger: logging.Logger | None = None) -> None:
        self._slice = resource_slice
        self._logger = logger or get_logger("packcrm_client_sdk.binding")
        self._last_key = resource_slice.store.state.query_key()
        self._tasks: set[asyncio.Task[Any]] = set()
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def active(self) -> bool:
        return self._unsubscribe is not None

    def start(self, *, fetch_now: bool = True) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self._slice.store.subscribe(self._on_change)
        if fetch_now:
            self._spawn()

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def drain(self) -> None:
        """Wait for every fetch this binding started."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    def _on_change(self, state: ResourceState, intent: Intent) -> None:
        key = state.query_key()
        changed = key != self._last_key
        self._last_key = key
        if changed and isinstance(intent, _VIEW_INTENTS):
            self._spawn()

    def _spawn(self) -> None:
        task = asyncio.get_running_loop().create_task(self._fetch())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _fetch(self) -> None:
        try:
            await self._slice.fetch_list()
        except CommandFailedError as exc:
            # Already stored on the slice as its error.
            self._logger.warning("list refresh failed for %s: %s", exc.resource, exc.message)
