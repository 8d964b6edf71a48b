from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from ..logger import get_logger
from .intents import ClearError, ClearFilters, ClearSelected, Intent, SetFilters, SetPage
from .reducer import reduce
from .resource_state import ResourceState

Listener = Callable[[ResourceState, Intent], None]


class ResourceStore:
    """Single source of truth for one resource type.

    Intents are applied one at a time on the caller's thread. Listeners receive
    the new state and the intent that produced it.
    """

    def __init__(
        self,
        state: ResourceState,
        *,
        dependents: ClearSelected | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._state = state
        self._dependents = dependents or ClearSelected()
        self._listeners: list[Listener] = []
        self._logger = logger or get_logger("packcrm_client_sdk.store")

    @property
    def state(self) -> ResourceState:
        return self._state

    def dispatch(self, intent: Intent) -> ResourceState:
        self._state = reduce(self._state, intent)
        for listener in list(self._listeners):
            try:
                listener(self._state, intent)
            except Exception:  # noqa: BLE001
                # Logged and skipped; later listeners still run.
                self._logger.exception("Listener failed on %s", type(intent).__name__)
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_filters(self, partial: Mapping[str, Any]) -> ResourceState:
        return self.dispatch(SetFilters(dict(partial)))

    def clear_filters(self) -> ResourceState:
        return self.dispatch(ClearFilters())

    def set_page(self, page: int) -> ResourceState:
        return self.dispatch(SetPage(page))

    def clear_selected(self) -> ResourceState:
        return self.dispatch(self._dependents)

    def clear_error(self) -> ResourceState:
        return self.dispatch(ClearError())
