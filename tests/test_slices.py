from __future__ import annotations

import asyncio

import pytest
import responses
from responses import matchers

from packcrm_client_sdk.clients import ClientsClient, EventsClient, SuperAdminClient
from packcrm_client_sdk.exceptions import ClientValidationError, CommandFailedError
from packcrm_client_sdk.http_client import HttpClient
from packcrm_client_sdk.state.slices import (
    ClientsSlice,
    EventsSlice,
    PlatformActivitySlice,
    PlatformDashboardSlice,
    TenantsSlice,
)

from conftest import BASE_URL, inline_runner


def _clients(http: HttpClient) -> ClientsSlice:
    return ClientsSlice(ClientsClient(http=http, access_token="tok"), runner=inline_runner)


def _client_rows(count: int) -> list[dict]:
    return [{"_id": f"c{n}", "name": f"Client {n}"} for n in range(1, count + 1)]


def test_slice_defaults() -> None:
    http = object()
    clients = ClientsSlice(ClientsClient(http=http), runner=inline_runner)  # type: ignore[arg-type]
    tenants = TenantsSlice(SuperAdminClient(http=http), runner=inline_runner)  # type: ignore[arg-type]
    activity = PlatformActivitySlice(SuperAdminClient(http=http), runner=inline_runner)  # type: ignore[arg-type]

    assert clients.state.filters == {
        "search": "",
        "event": "",
        "marketingPerson": "",
        "followUpStatus": "",
        "priority": "",
    }
    assert clients.state.pagination.limit == 10
    assert tenants.state.filters == {"search": "", "plan": "", "isActive": ""}
    assert tenants.state.pagination.limit == 20
    assert activity.state.filters == {"action": ""}
    assert activity.state.pagination.limit == 30


@responses.activate
def test_fetch_list_sends_current_query(http: HttpClient) -> None:
    responses.add(
        responses.GET,
        f"{BASE_URL}/clients",
        match=[matchers.query_param_matcher({"page": "1", "limit": "10", "priority": "high"})],
        json={"data": _client_rows(2), "pagination": {"page": 1, "limit": 10, "totalDocs": 2, "totalPages": 1}},
        status=200,
    )
    clients = _clients(http)
    clients.set_filters({"priority": "high"})

    asyncio.run(clients.fetch_list())

    assert [row["_id"] for row in clients.state.items] == ["c1", "c2"]
    assert clients.state.pagination.total == 2


@responses.activate
def test_fetch_list_failure_keeps_items(http: HttpClient) -> None:
    responses.add(
        responses.GET,
        f"{BASE_URL}/clients",
        json={"data": _client_rows(3), "pagination": {"page": 1, "limit": 10, "totalDocs": 3, "totalPages": 1}},
        status=200,
    )
    responses.add(responses.GET, f"{BASE_URL}/clients", json={"success": False}, status=500)
    clients = _clients(http)
    asyncio.run(clients.fetch_list())

    with pytest.raises(CommandFailedError, match="Failed to fetch clients"):
        asyncio.run(clients.fetch_list())

    assert len(clients.state.items) == 3
    assert clients.state.error == "Failed to fetch clients"
    assert clients.state.is_loading is False


@responses.activate
def test_error_persists_until_next_command(http: HttpClient) -> None:
    responses.add(responses.GET, f"{BASE_URL}/clients", json={"message": "Token expired"}, status=401)
    responses.add(responses.GET, f"{BASE_URL}/clients", json={"data": []}, status=200)
    clients = _clients(http)

    with pytest.raises(CommandFailedError):
        asyncio.run(clients.fetch_list())
    clients.set_filters({"search": "x"})
    assert clients.state.error == "Token expired"

    asyncio.run(clients.fetch_list())
    assert clients.state.error is None


@responses.activate
def test_create_update_and_selection(http: HttpClient) -> None:
    responses.add(
        responses.POST,
        f"{BASE_URL}/clients",
        json={"data": {"client": {"_id": "new", "name": "Fresh"}}},
        status=201,
    )
    responses.add(
        responses.GET,
        f"{BASE_URL}/clients/new",
        json={"data": {"client": {"_id": "new", "name": "Fresh"}}},
        status=200,
    )
    responses.add(
        responses.PUT,
        f"{BASE_URL}/clients/new",
        json={"data": {"client": {"_id": "new", "name": "Renamed"}}},
        status=200,
    )
    responses.add(
        responses.GET,
        f"{BASE_URL}/clients/new/remarks",
        json={"data": [{"_id": "r1", "text": "first call"}]},
        status=200,
    )
    clients = _clients(http)

    async def scenario() -> None:
        await clients.create({"name": "Fresh"})
        async with clients.selection("new") as selected:
            assert selected == {"_id": "new", "name": "Fresh"}
            await clients.fetch_remarks("new")
            await clients.update("new", {"name": "Renamed"})
            assert clients.state.selected["name"] == "Renamed"
            assert clients.state.collection("remarks")[0]["_id"] == "r1"

    asyncio.run(scenario())

    state = clients.state
    assert state.items[0] == {"_id": "new", "name": "Renamed"}
    assert state.pagination.total == 1
    assert state.selected is None
    assert state.collection("remarks") == ()


@responses.activate
def test_selection_is_released_when_fetch_fails(http: HttpClient) -> None:
    responses.add(responses.GET, f"{BASE_URL}/clients/gone", json={"message": "Client not found"}, status=404)
    clients = _clients(http)

    async def scenario() -> None:
        async with clients.selection("gone"):
            pass

    with pytest.raises(CommandFailedError, match="Client not found"):
        asyncio.run(scenario())
    assert clients.state.selected is None


def test_validation_happens_before_dispatch(http: HttpClient) -> None:
    clients = _clients(http)
    before = clients.state

    with pytest.raises(ClientValidationError):
        asyncio.run(clients.update("", {"name": "x"}))
    with pytest.raises(ClientValidationError):
        asyncio.run(clients.bulk_assign([], "m1"))

    assert clients.state is before


@responses.activate
def test_remark_commands_touch_only_the_sub_collection(http: HttpClient) -> None:
    responses.add(
        responses.GET,
        f"{BASE_URL}/clients/c1/remarks",
        json={"data": [{"_id": "r1", "text": "a"}]},
        status=200,
    )
    responses.add(
        responses.POST,
        f"{BASE_URL}/clients/c1/remarks",
        json={"data": {"remark": {"_id": "r2", "text": "b"}}},
        status=201,
    )
    responses.add(
        responses.PUT,
        f"{BASE_URL}/remarks/r1",
        json={"data": {"remark": {"_id": "r1", "text": "edited"}}},
        status=200,
    )
    responses.add(responses.DELETE, f"{BASE_URL}/remarks/r2", json={"success": True}, status=200)
    clients = _clients(http)

    async def scenario() -> None:
        await clients.fetch_remarks("c1")
        await clients.create_remark("c1", {"text": "b"})
        assert [row["_id"] for row in clients.state.collection("remarks")] == ["r2", "r1"]
        await clients.update_remark("r1", {"text": "edited"})
        await clients.delete_remark("r2")

    asyncio.run(scenario())

    assert clients.state.collection("remarks") == ({"_id": "r1", "text": "edited"},)
    assert clients.state.items == ()
    assert clients.state.pagination.total == 0


@responses.activate
def test_remark_failure_uses_remark_message(http: HttpClient) -> None:
    responses.add(responses.POST, f"{BASE_URL}/clients/c1/remarks", json={}, status=500)
    clients = _clients(http)
    with pytest.raises(CommandFailedError, match="Failed to add remark"):
        asyncio.run(clients.create_remark("c1", {"text": "x"}))


@responses.activate
def test_upload_visiting_card_merges_without_loading(http: HttpClient) -> None:
    responses.add(
        responses.GET,
        f"{BASE_URL}/clients",
        json={"data": _client_rows(2), "pagination": {"page": 1, "limit": 10, "totalDocs": 2, "totalPages": 1}},
        status=200,
    )
    responses.add(
        responses.POST,
        f"{BASE_URL}/clients/c2/visiting-card",
        json={"data": {"client": {"_id": "c2", "name": "Client 2", "visitingCard": "https://cdn/c2.jpg"}}},
        status=200,
    )
    clients = _clients(http)
    loading: list[bool] = []
    asyncio.run(clients.fetch_list())
    clients.subscribe(lambda state, intent: loading.append(state.is_loading))

    asyncio.run(clients.upload_visiting_card("c2", b"img"))

    assert clients.state.items[1]["visitingCard"] == "https://cdn/c2.jpg"
    assert loading == [False]


@responses.activate
def test_stats_follow_ups_and_bulk_assign(http: HttpClient) -> None:
    responses.add(responses.GET, f"{BASE_URL}/clients/stats", json={"data": {"stats": {"total": 9}}}, status=200)
    responses.add(
        responses.GET,
        f"{BASE_URL}/clients/follow-ups/pending",
        json={"data": {"clients": [{"_id": "c5"}]}},
        status=200,
    )
    responses.add(responses.PUT, f"{BASE_URL}/clients/bulk-assign", json={"data": {"modifiedCount": 1}}, status=200)
    clients = _clients(http)

    async def scenario() -> None:
        await clients.fetch_stats()
        await clients.fetch_pending_follow_ups()
        await clients.bulk_assign(["c5"], "m1")

    asyncio.run(scenario())

    assert clients.state.extras["stats"] == {"total": 9}
    assert clients.state.collection("pending_follow_ups") == ({"_id": "c5"},)
    assert clients.state.items == ()


@responses.activate
def test_export_uses_current_filters(http: HttpClient) -> None:
    responses.add(
        responses.GET,
        f"{BASE_URL}/export/clients",
        match=[matchers.query_param_matcher({"event": "e1"})],
        body=b"xlsx-bytes",
        status=200,
    )
    clients = _clients(http)
    clients.set_filters({"event": "e1"})

    assert asyncio.run(clients.export()) == b"xlsx-bytes"


@responses.activate
def test_events_active_and_stats(http: HttpClient) -> None:
    responses.add(responses.GET, f"{BASE_URL}/events/active", json={"data": {"events": [{"_id": "e1"}]}}, status=200)
    responses.add(
        responses.GET, f"{BASE_URL}/events/e1/stats", json={"data": {"totalClients": 12}}, status=200
    )
    responses.add(responses.GET, f"{BASE_URL}/events/e1", json={"data": {"event": {"_id": "e1"}}}, status=200)
    events = EventsSlice(EventsClient(http=http), runner=inline_runner)

    async def scenario() -> None:
        await events.fetch_active()
        await events.fetch_one("e1")
        await events.fetch_stats("e1")

    asyncio.run(scenario())
    assert events.state.collection("active") == ({"_id": "e1"},)
    assert events.state.extras["stats"] == {"totalClients": 12}

    events.clear_selected()
    assert events.state.selected is None
    assert "stats" not in events.state.extras
    assert events.state.collection("active") == ({"_id": "e1"},)


@responses.activate
def test_tenant_delete_is_a_soft_disable(http: HttpClient) -> None:
    responses.add(
        responses.GET,
        f"{BASE_URL}/superadmin/tenants",
        json={
            "data": {
                "tenants": [{"_id": "t1", "name": "Acme", "isActive": True}, {"_id": "t2", "isActive": True}],
                "pagination": {"page": 1, "limit": 20, "total": 2, "totalPages": 1},
            }
        },
        status=200,
    )
    responses.add(responses.DELETE, f"{BASE_URL}/superadmin/tenants/t1", json={"success": True}, status=200)
    tenants = TenantsSlice(SuperAdminClient(http=http), runner=inline_runner)

    async def scenario() -> None:
        await tenants.fetch_list()
        await tenants.delete("t1")

    asyncio.run(scenario())

    row = next(row for row in tenants.state.items if row["_id"] == "t1")
    assert row["isActive"] is False
    assert len(tenants.state.items) == 2
    assert tenants.state.pagination.total == 2


@responses.activate
def test_tenant_deactivate_failure_message(http: HttpClient) -> None:
    responses.add(responses.DELETE, f"{BASE_URL}/superadmin/tenants/t1", json={}, status=500)
    tenants = TenantsSlice(SuperAdminClient(http=http), runner=inline_runner)
    with pytest.raises(CommandFailedError, match="Failed to deactivate tenant"):
        asyncio.run(tenants.deactivate("t1"))


@responses.activate
def test_tenant_plan_is_checked_before_any_request(http: HttpClient) -> None:
    tenants = TenantsSlice(SuperAdminClient(http=http), runner=inline_runner)
    before = tenants.state

    with pytest.raises(ClientValidationError):
        tenants.set_filters({"plan": "platinum"})
    with pytest.raises(ClientValidationError):
        asyncio.run(tenants.create({"name": "Acme", "plan": "gold"}))
    with pytest.raises(ClientValidationError):
        asyncio.run(tenants.update("t1", {"plan": "basic"}))

    assert tenants.state is before
    assert len(responses.calls) == 0
    assert tenants.set_filters({"plan": "enterprise"}).filters["plan"] == "enterprise"
    assert tenants.set_filters({"plan": ""}).filters["plan"] == ""


@responses.activate
def test_tenant_detail_and_merge_update(http: HttpClient) -> None:
    detail = {"tenant": {"_id": "t1", "name": "Acme", "plan": "free"}, "users": [{"_id": "u1"}], "events": []}
    responses.add(responses.GET, f"{BASE_URL}/superadmin/tenants/t1", json={"data": detail}, status=200)
    responses.add(
        responses.PUT,
        f"{BASE_URL}/superadmin/tenants/t1",
        json={"data": {"tenant": {"_id": "t1", "plan": "pro"}}},
        status=200,
    )
    tenants = TenantsSlice(SuperAdminClient(http=http), runner=inline_runner)

    async def scenario() -> None:
        await tenants.fetch_one("t1")
        await tenants.update("t1", {"plan": "pro"})

    asyncio.run(scenario())

    assert tenants.state.selected == {"_id": "t1", "name": "Acme", "plan": "pro"}
    assert tenants.state.extras["tenant_detail"]["users"] == [{"_id": "u1"}]
    tenants.clear_selected()
    assert "tenant_detail" not in tenants.state.extras


@responses.activate
def test_activity_filters_and_dashboard(http: HttpClient) -> None:
    responses.add(
        responses.GET,
        f"{BASE_URL}/superadmin/activity",
        match=[matchers.query_param_matcher({"page": "1", "limit": "30", "action": "login"})],
        json={"data": {"logs": [{"_id": "l1", "action": "login"}], "pagination": {"page": 1, "total": 1}}},
        status=200,
    )
    responses.add(
        responses.GET, f"{BASE_URL}/superadmin/dashboard", json={"data": {"tenants": {"total": 3}}}, status=200
    )
    admin = SuperAdminClient(http=http)
    activity = PlatformActivitySlice(admin, runner=inline_runner)
    dashboard = PlatformDashboardSlice(admin, runner=inline_runner)

    async def scenario() -> None:
        activity.set_filters({"action": "login"})
        await activity.fetch_list()
        await dashboard.fetch_platform_dashboard()

    asyncio.run(scenario())

    assert activity.state.items == ({"_id": "l1", "action": "login"},)
    assert activity.state.pagination.total == 1
    assert dashboard.dashboard == {"tenants": {"total": 3}}


@responses.activate
def test_dashboard_failure_message(http: HttpClient) -> None:
    responses.add(responses.GET, f"{BASE_URL}/superadmin/dashboard", json={}, status=503)
    dashboard = PlatformDashboardSlice(SuperAdminClient(http=http), runner=inline_runner)
    with pytest.raises(CommandFailedError, match="Failed to load dashboard"):
        asyncio.run(dashboard.fetch_platform_dashboard())
    assert dashboard.state.error == "Failed to load dashboard"
