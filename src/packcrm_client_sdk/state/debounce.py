from __future__ import annotations

import asyncio
from typing import Any, Callable, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


Scheduler = Callable[[float, Callable[[], None]], TimerHandle]


def loop_scheduler(delay: float, callback: Callable[[], None]) -> TimerHandle:
    return asyncio.get_running_loop().call_later(delay, callback)


class SearchDebouncer:
    """Promote a search box into the filter set once typing pauses.

    Every ``push`` cancels the pending timer and starts a new one. When a timer
    fires, the last pushed value is written through ``set_filters`` unless it
    already matches the current filter.
    """

    def __init__(
        self,
        target: Any,
        wait_ms: int = 300,
        *,
        field: str = "search",
        schedule: Scheduler | None = None,
    ) -> None:
        self.target = target
        self.wait_ms = wait_ms
        self.field = field
        self._schedule = schedule or loop_scheduler
        self._pending: TimerHandle | None = None
        self._value: str | None = None

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def push(self, value: str) -> None:
        self.cancel()
        self._value = value
        if self.wait_ms <= 0:
            self.flush()
            return
        self._pending = self._schedule(self.wait_ms / 1000, self.flush)

    def flush(self) -> None:
        self.cancel()
        value, self._value = self._value, None
        if value is None:
            return
        if value == self.target.state.filters.get(self.field, ""):
            return
        self.target.set_filters({self.field: value})

    def cancel(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
