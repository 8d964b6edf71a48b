from __future__ import annotations

import asyncio

from packcrm_client_sdk.models import ListPage, ListQuery, PageMeta
from packcrm_client_sdk.state.binding import QueryBinding
from packcrm_client_sdk.state.slices import EventsSlice

from conftest import inline_runner


class CountingEventsApi:
    def __init__(self, server_page: int | None = None, fail: bool = False) -> None:
        self.queries: list[ListQuery] = []
        self.server_page = server_page
        self.fail = fail

    def list_events(self, query: ListQuery) -> ListPage:
        self.queries.append(query)
        if self.fail:
            raise ValueError("unexpected payload")
        page = self.server_page or query.page
        return ListPage(items=[{"_id": f"e{page}"}], meta=PageMeta(page=page, limit=10, totalDocs=30, totalPages=3))


def _events(api: CountingEventsApi) -> EventsSlice:
    return EventsSlice(api, exports=object(), runner=inline_runner)  # type: ignore[arg-type]


def test_each_view_change_triggers_one_fetch() -> None:
    api = CountingEventsApi()
    events = _events(api)
    binding = QueryBinding(events)

    async def scenario() -> None:
        binding.start()
        await binding.drain()
        events.set_filters({"status": "upcoming"})
        await binding.drain()
        events.set_page(2)
        await binding.drain()
        events.set_page(2)
        await binding.drain()

    asyncio.run(scenario())

    assert [(query.page, query.filters.get("status")) for query in api.queries] == [
        (1, ""),
        (1, "upcoming"),
        (2, "upcoming"),
    ]


def test_server_pagination_does_not_refetch() -> None:
    api = CountingEventsApi(server_page=1)
    events = _events(api)
    binding = QueryBinding(events)

    async def scenario() -> None:
        binding.start(fetch_now=False)
        events.set_page(3)
        await binding.drain()

    asyncio.run(scenario())

    assert len(api.queries) == 1
    assert events.state.pagination.page == 1


def test_stop_unsubscribes() -> None:
    api = CountingEventsApi()
    events = _events(api)
    binding = QueryBinding(events)

    async def scenario() -> None:
        binding.start(fetch_now=False)
        binding.stop()
        events.set_filters({"search": "expo"})
        await binding.drain()

    asyncio.run(scenario())
    assert api.queries == []
    assert binding.active is False


def test_failed_refresh_is_recorded_on_slice() -> None:
    events = _events(CountingEventsApi(fail=True))
    binding = QueryBinding(events)

    async def scenario() -> None:
        binding.start()
        await binding.drain()

    asyncio.run(scenario())
    assert events.state.error == "Failed to fetch events"
