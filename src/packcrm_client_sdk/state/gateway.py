from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Sequence, TypeVar

from ..error_mapper import failure_message
from ..exceptions import ApiError, CommandFailedError
from ..logger import get_logger, log_command
from .intents import CommandFailed, CommandStarted, CommandSucceeded, Intent
from .store import ResourceStore

T = TypeVar("T")

Runner = Callable[[Callable[[], Any]], Awaitable[Any]]
Merge = Callable[[Any], "Intent | Sequence[Intent] | None"]


@dataclass(frozen=True)
class CommandSpec:
    name: str
    fallback: str
    track_loading: bool = True


class CommandGateway:
    """Runs blocking SDK calls off the loop and folds their outcome into a store.

    The call is scheduled as its own task, so the store settles even when the
    awaiting caller goes away. Results are applied in the order calls resolve.
    """

    def __init__(
        self,
        store: ResourceStore,
        resource: str,
        *,
        runner: Runner | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.store = store
        self.resource = resource
        self._runner = runner or asyncio.to_thread
        self._logger = logger or get_logger("packcrm_client_sdk.gateway")
        self._inflight: set[asyncio.Future[Any]] = set()

    @property
    def inflight(self) -> int:
        return len(self._inflight)

    async def run(
        self,
        spec: CommandSpec,
        call: Callable[[], T],
        merge: Merge | None = None,
    ) -> T:
        loop = asyncio.get_running_loop()
        outcome: asyncio.Future[T] = loop.create_future()
        if spec.track_loading:
            self.store.dispatch(CommandStarted(spec.name))
        started = time.perf_counter()
        task = asyncio.ensure_future(self._runner(call))
        self._inflight.add(task)

        def settle(done: asyncio.Future[Any]) -> None:
            self._inflight.discard(done)
            try:
                self._settle(spec, done, merge, started, outcome)
            except Exception as exc:
                # The store rejected the merge; the caller still gets an outcome.
                if outcome.done():
                    raise
                outcome.set_exception(exc)

        task.add_done_callback(settle)
        return await outcome

    def _settle(
        self,
        spec: CommandSpec,
        done: asyncio.Future[Any],
        merge: Merge | None,
        started: float,
        outcome: asyncio.Future[Any],
    ) -> None:
        elapsed = int((time.perf_counter() - started) * 1000)
        try:
            if done.cancelled():
                raise asyncio.CancelledError()
            result = done.result()
            intents = _as_intents(merge(result) if merge is not None else None)
        except (Exception, asyncio.CancelledError) as exc:
            message = failure_message(exc, spec.fallback)
            self.store.dispatch(CommandFailed(spec.name, message, spec.track_loading))
            request_id = exc.request_id if isinstance(exc, ApiError) else None
            log_command(self._logger, self.resource, spec.name, "failure", elapsed, request_id, message)
            if not outcome.done():
                outcome.set_exception(CommandFailedError(message, resource=self.resource, command=spec.name, cause=exc))
            return
        if spec.track_loading:
            self.store.dispatch(CommandSucceeded(spec.name, intents))
        else:
            for intent in intents:
                self.store.dispatch(intent)
        log_command(self._logger, self.resource, spec.name, "success", elapsed)
        if not outcome.done():
            outcome.set_result(result)


def _as_intents(value: Intent | Sequence[Intent] | None) -> tuple[Intent, ...]:
    if value is None:
        return ()
    if isinstance(value, (tuple, list)):
        return tuple(value)
    return (value,)
