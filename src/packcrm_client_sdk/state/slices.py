"""Resource slices: a store, a gateway and the commands for one resource type.

Each slice owns its own :class:`ResourceStore`. Slices never share state, so a
failure in one degrades only that slice.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, BinaryIO, Callable, Mapping, Sequence

from ..clients import ClientsClient, EventsClient, ExportsClient, RemarksClient, SuperAdminClient
from ..clients.base import BaseClient, require_id
from ..exceptions import ClientValidationError, ProtectedPrincipalError, ValidationIssue
from ..models import ListPage, ListQuery, TenantPlan, UserRole, clean_filters
from .gateway import CommandGateway, CommandSpec, Runner
from .intents import (
    ClearSelected,
    CollectionFetched,
    CollectionItemCreated,
    CollectionItemDeleted,
    CollectionItemUpdated,
    DeletePolicy,
    ExtraFetched,
    HardDelete,
    Intent,
    ItemCreated,
    ItemDeleted,
    ItemFetched,
    ItemUpdated,
    ListFetched,
    MergeFields,
    ReplaceItem,
    SoftDisable,
    UpdatePolicy,
)
from .principals import is_protected_principal, partition_users
from .resource_state import ResourceState, initial_state, item_id
from .store import Listener, ResourceStore

Row = Mapping[str, Any]


def _with_id(item: Row, ident: str) -> dict[str, Any]:
    if item_id(item) is None:
        return {**item, "_id": ident}
    return dict(item)


def _exports_for(api: BaseClient) -> ExportsClient:
    return ExportsClient(api.http, access_token=api.access_token, tenant_id=api.tenant_id)


def _check_plan(plan: Any) -> None:
    if plan in (None, ""):
        return
    try:
        TenantPlan(plan)
    except ValueError:
        raise ClientValidationError([ValidationIssue(field="plan", reason=f"unknown plan {plan!r}")]) from None


class ResourceSlice:
    resource = "items"
    singular = "item"
    default_filters: Mapping[str, str] = {}
    default_limit = 10
    dependents = ClearSelected()
    messages: Mapping[str, str] = {}

    def __init__(
        self,
        *,
        limit: int | None = None,
        runner: Runner | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        state = initial_state(self.default_filters, limit=limit or self.default_limit)
        self.store = ResourceStore(state, dependents=self.dependents, logger=logger)
        self.gateway = CommandGateway(self.store, self.resource, runner=runner, logger=logger)

    @property
    def state(self) -> ResourceState:
        return self.store.state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self.store.subscribe(listener)

    def set_filters(self, partial: Mapping[str, Any]) -> ResourceState:
        return self.store.set_filters(partial)

    def clear_filters(self) -> ResourceState:
        return self.store.clear_filters()

    def set_page(self, page: int) -> ResourceState:
        return self.store.set_page(page)

    def clear_selected(self) -> ResourceState:
        return self.store.clear_selected()

    def clear_error(self) -> ResourceState:
        return self.store.clear_error()

    def _spec(self, command: str, default: str = "", *, track_loading: bool = True) -> CommandSpec:
        return CommandSpec(command, self.messages.get(command, default), track_loading)


class ListSlice(ResourceSlice):
    """Adds the paged list fetch driven by the slice's filters and page."""

    def _list(self, query: ListQuery) -> ListPage:
        raise NotImplementedError

    async def fetch_list(self) -> ListPage:
        query = self.state.query()
        spec = self._spec("fetch_list", f"Failed to fetch {self.resource}")
        return await self.gateway.run(spec, lambda: self._list(query), ListFetched)


class CrudSlice(ListSlice):
    delete_policy: DeletePolicy = HardDelete()
    update_policy: UpdatePolicy = ReplaceItem()

    def _get(self, ident: str) -> Any:
        raise NotImplementedError

    def _create(self, data: Mapping[str, Any]) -> dict[str, Any]:
        raise NotImplementedError

    def _update(self, ident: str, data: Mapping[str, Any]) -> dict[str, Any]:
        raise NotImplementedError

    def _delete(self, ident: str) -> None:
        raise NotImplementedError

    def _fetched(self, payload: Any) -> Intent | Sequence[Intent]:
        return ItemFetched(payload)

    async def fetch_one(self, ident: str) -> Any:
        ident = require_id(ident, f"{self.singular}_id")
        spec = self._spec("fetch_one", f"Failed to fetch {self.singular}")
        return await self.gateway.run(spec, lambda: self._get(ident), self._fetched)

    async def create(self, data: Mapping[str, Any]) -> dict[str, Any]:
        spec = self._spec("create", f"Failed to create {self.singular}")
        return await self.gateway.run(spec, lambda: self._create(data), ItemCreated)

    async def update(self, ident: str, data: Mapping[str, Any]) -> dict[str, Any]:
        ident = require_id(ident, f"{self.singular}_id")
        spec = self._spec("update", f"Failed to update {self.singular}")
        return await self.gateway.run(
            spec,
            lambda: self._update(ident, data),
            lambda item: ItemUpdated(_with_id(item, ident), self.update_policy),
        )

    async def delete(self, ident: str) -> None:
        ident = require_id(ident, f"{self.singular}_id")
        spec = self._spec("delete", f"Failed to delete {self.singular}")
        await self.gateway.run(spec, lambda: self._delete(ident), lambda _: ItemDeleted(ident, self.delete_policy))

    @asynccontextmanager
    async def selection(self, ident: str) -> AsyncIterator[Row | None]:
        """Hold the detail entity for the duration of the block; always released on exit."""
        try:
            await self.fetch_one(ident)
            yield self.state.selected
        finally:
            self.clear_selected()


class ClientsSlice(CrudSlice):
    resource = "clients"
    singular = "client"
    default_filters = {"search": "", "event": "", "marketingPerson": "", "followUpStatus": "", "priority": ""}
    dependents = ClearSelected(collections=("remarks", "timeline"))
    messages = {
        "upload_visiting_card": "Failed to upload visiting card",
        "fetch_stats": "Failed to fetch client stats",
        "fetch_pending_follow_ups": "Failed to fetch pending follow-ups",
        "bulk_assign": "Failed to assign clients",
        "fetch_remarks": "Failed to fetch remarks",
        "fetch_timeline": "Failed to fetch timeline",
        "create_remark": "Failed to add remark",
        "update_remark": "Failed to update remark",
        "delete_remark": "Failed to delete remark",
        "export": "Failed to export clients",
    }

    def __init__(
        self,
        api: ClientsClient,
        remarks: RemarksClient | None = None,
        exports: ExportsClient | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.api = api
        self.remarks_api = remarks or RemarksClient(api.http, access_token=api.access_token, tenant_id=api.tenant_id)
        self.exports_api = exports or _exports_for(api)

    def _list(self, query: ListQuery) -> ListPage:
        return self.api.list_clients(query)

    def _get(self, ident: str) -> dict[str, Any]:
        return self.api.get_client(ident)

    def _create(self, data: Mapping[str, Any]) -> dict[str, Any]:
        return self.api.create_client(data)

    def _update(self, ident: str, data: Mapping[str, Any]) -> dict[str, Any]:
        return self.api.update_client(ident, data)

    def _delete(self, ident: str) -> None:
        self.api.delete_client(ident)

    async def upload_visiting_card(
        self,
        client_id: str,
        file: BinaryIO | bytes,
        *,
        filename: str = "visiting-card.jpg",
        content_type: str = "image/jpeg",
    ) -> dict[str, Any]:
        client_id = require_id(client_id, "client_id")
        spec = self._spec("upload_visiting_card", track_loading=False)
        return await self.gateway.run(
            spec,
            lambda: self.api.upload_visiting_card(client_id, file, filename=filename, content_type=content_type),
            lambda item: ItemUpdated(_with_id(item, client_id)),
        )

    async def fetch_stats(self, params: Mapping[str, Any] | None = None) -> dict[str, Any]:
        spec = self._spec("fetch_stats")
        return await self.gateway.run(spec, lambda: self.api.get_stats(params), lambda stats: ExtraFetched("stats", stats))

    async def fetch_pending_follow_ups(self, days: int = 7) -> list[dict[str, Any]]:
        spec = self._spec("fetch_pending_follow_ups")
        return await self.gateway.run(
            spec,
            lambda: self.api.get_pending_follow_ups(days),
            lambda rows: CollectionFetched("pending_follow_ups", tuple(rows)),
        )

    async def bulk_assign(self, client_ids: Sequence[str], marketing_person_id: str) -> dict[str, Any]:
        if not client_ids:
            raise ClientValidationError([ValidationIssue(field="client_ids", reason="client_ids must not be empty")])
        marketing_person_id = require_id(marketing_person_id, "marketing_person_id")
        ids = [require_id(ident, "client_ids") for ident in client_ids]
        spec = self._spec("bulk_assign")
        # The server reassigns in place; the page stays stale until the next fetch.
        return await self.gateway.run(spec, lambda: self.api.bulk_assign(ids, marketing_person_id))

    async def fetch_remarks(self, client_id: str) -> ListPage:
        client_id = require_id(client_id, "client_id")
        spec = self._spec("fetch_remarks")
        return await self.gateway.run(
            spec,
            lambda: self.remarks_api.list_by_client(client_id),
            lambda page: CollectionFetched("remarks", tuple(page.items)),
        )

    async def fetch_timeline(self, client_id: str) -> list[dict[str, Any]]:
        client_id = require_id(client_id, "client_id")
        spec = self._spec("fetch_timeline")
        return await self.gateway.run(
            spec,
            lambda: self.remarks_api.get_timeline(client_id),
            lambda rows: CollectionFetched("timeline", tuple(rows)),
        )

    async def create_remark(self, client_id: str, data: Mapping[str, Any]) -> dict[str, Any]:
        client_id = require_id(client_id, "client_id")
        spec = self._spec("create_remark")
        return await self.gateway.run(
            spec,
            lambda: self.remarks_api.create_remark(client_id, data),
            lambda remark: CollectionItemCreated("remarks", remark),
        )

    async def update_remark(self, remark_id: str, data: Mapping[str, Any]) -> dict[str, Any]:
        remark_id = require_id(remark_id, "remark_id")
        spec = self._spec("update_remark")
        return await self.gateway.run(
            spec,
            lambda: self.remarks_api.update_remark(remark_id, data),
            lambda remark: CollectionItemUpdated("remarks", _with_id(remark, remark_id)),
        )

    async def delete_remark(self, remark_id: str) -> None:
        remark_id = require_id(remark_id, "remark_id")
        spec = self._spec("delete_remark")
        await self.gateway.run(
            spec,
            lambda: self.remarks_api.delete_remark(remark_id),
            lambda _: CollectionItemDeleted("remarks", remark_id),
        )

    async def export(self, params: Mapping[str, Any] | None = None) -> bytes:
        query = clean_filters(self.state.filters if params is None else params)
        spec = self._spec("export", track_loading=False)
        return await self.gateway.run(spec, lambda: self.exports_api.export_clients(query))


class EventsSlice(CrudSlice):
    resource = "events"
    singular = "event"
    default_filters = {"search": "", "status": ""}
    dependents = ClearSelected(extras=("stats",))
    messages = {
        "fetch_active": "Failed to fetch active events",
        "fetch_stats": "Failed to fetch event stats",
        "export": "Failed to export events",
    }

    def __init__(self, api: EventsClient, exports: ExportsClient | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.api = api
        self.exports_api = exports or _exports_for(api)

    def _list(self, query: ListQuery) -> ListPage:
        return self.api.list_events(query)

    def _get(self, ident: str) -> dict[str, Any]:
        return self.api.get_event(ident)

    def _create(self, data: Mapping[str, Any]) -> dict[str, Any]:
        return self.api.create_event(data)

    def _update(self, ident: str, data: Mapping[str, Any]) -> dict[str, Any]:
        return self.api.update_event(ident, data)

    def _delete(self, ident: str) -> None:
        self.api.delete_event(ident)

    async def fetch_active(self) -> list[dict[str, Any]]:
        spec = self._spec("fetch_active")
        return await self.gateway.run(
            spec, self.api.list_active_events, lambda rows: CollectionFetched("active", tuple(rows))
        )

    async def fetch_stats(self, event_id: str) -> dict[str, Any]:
        event_id = require_id(event_id, "event_id")
        spec = self._spec("fetch_stats")
        return await self.gateway.run(
            spec, lambda: self.api.get_event_stats(event_id), lambda stats: ExtraFetched("stats", stats)
        )

    async def export(self, params: Mapping[str, Any] | None = None) -> bytes:
        query = clean_filters(self.state.filters if params is None else params)
        spec = self._spec("export", track_loading=False)
        return await self.gateway.run(spec, lambda: self.exports_api.export_events(query))


class TenantsSlice(CrudSlice):
    """Tenants are never removed: delete deactivates and the row stays listed."""

    resource = "tenants"
    singular = "tenant"
    default_filters = {"search": "", "plan": "", "isActive": ""}
    default_limit = 20
    dependents = ClearSelected(extras=("tenant_detail",))
    delete_policy = SoftDisable("isActive")
    update_policy = MergeFields()
    messages = {
        "fetch_list": "Failed to load tenants",
        "fetch_one": "Failed to load tenant",
        "delete": "Failed to deactivate tenant",
    }

    def __init__(self, api: SuperAdminClient, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.api = api

    def _list(self, query: ListQuery) -> ListPage:
        return self.api.list_tenants(query)

    def _get(self, ident: str) -> dict[str, Any]:
        return self.api.get_tenant_detail(ident)

    def _create(self, data: Mapping[str, Any]) -> dict[str, Any]:
        return self.api.create_tenant(data)

    def _update(self, ident: str, data: Mapping[str, Any]) -> dict[str, Any]:
        return self.api.update_tenant(ident, data)

    def _delete(self, ident: str) -> None:
        self.api.deactivate_tenant(ident)

    def set_filters(self, partial: Mapping[str, Any]) -> ResourceState:
        _check_plan(partial.get("plan"))
        return super().set_filters(partial)

    async def create(self, data: Mapping[str, Any]) -> dict[str, Any]:
        _check_plan(data.get("plan"))
        return await super().create(data)

    async def update(self, ident: str, data: Mapping[str, Any]) -> dict[str, Any]:
        _check_plan(data.get("plan"))
        return await super().update(ident, data)

    def _fetched(self, detail: Any) -> Sequence[Intent]:
        tenant = detail.get("tenant") if isinstance(detail.get("tenant"), Mapping) else detail
        return (ItemFetched(tenant), ExtraFetched("tenant_detail", detail))

    async def deactivate(self, ident: str) -> None:
        await self.delete(ident)


class PlatformUsersSlice(ListSlice):
    resource = "users"
    singular = "user"
    default_filters = {"search": "", "role": "", "isActive": ""}
    default_limit = 25
    messages = {
        "fetch_list": "Failed to load users",
        "toggle_active": "Failed to toggle user",
        "change_role": "Failed to change role",
    }

    def __init__(self, api: SuperAdminClient, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.api = api

    def _list(self, query: ListQuery) -> ListPage:
        return self.api.list_users(query)

    @property
    def partitions(self) -> tuple[tuple[Row, ...], tuple[Row, ...]]:
        return partition_users(self.state.items)

    def _guard(self, user_id: str) -> None:
        for row in self.state.items:
            if item_id(row) == user_id and is_protected_principal(row):
                raise ProtectedPrincipalError(user_id)

    async def toggle_active(self, user_id: str) -> dict[str, Any]:
        user_id = require_id(user_id, "user_id")
        self._guard(user_id)
        spec = self._spec("toggle_active")
        return await self.gateway.run(
            spec,
            lambda: self.api.toggle_user_active(user_id),
            lambda user: ItemUpdated(_with_id(user, user_id), MergeFields(("isActive",))),
        )

    async def change_role(self, user_id: str, role: UserRole | str) -> dict[str, Any]:
        user_id = require_id(user_id, "user_id")
        try:
            resolved = UserRole(role)
        except ValueError:
            raise ClientValidationError([ValidationIssue(field="role", reason=f"unknown role {role!r}")]) from None
        self._guard(user_id)
        spec = self._spec("change_role")
        return await self.gateway.run(
            spec,
            lambda: self.api.change_user_role(user_id, resolved),
            lambda user: ItemUpdated(_with_id(user, user_id), MergeFields(("role",))),
        )


class PlatformActivitySlice(ListSlice):
    resource = "activity"
    singular = "activity"
    default_filters = {"action": ""}
    default_limit = 30
    messages = {
        "fetch_list": "Failed to load activity",
        "export": "Failed to export activity logs",
    }

    def __init__(self, api: SuperAdminClient, exports: ExportsClient | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.api = api
        self.exports_api = exports or _exports_for(api)

    def _list(self, query: ListQuery) -> ListPage:
        return self.api.list_activity(query)

    async def export(self, params: Mapping[str, Any] | None = None) -> bytes:
        query = clean_filters(self.state.filters if params is None else params)
        spec = self._spec("export", track_loading=False)
        return await self.gateway.run(spec, lambda: self.exports_api.export_activity_logs(query))


class PlatformDashboardSlice(ResourceSlice):
    resource = "dashboard"
    singular = "dashboard"
    messages = {"fetch_platform_dashboard": "Failed to load dashboard"}

    def __init__(self, api: SuperAdminClient, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.api = api

    @property
    def dashboard(self) -> dict[str, Any] | None:
        return self.state.extras.get("dashboard")

    async def fetch_platform_dashboard(self) -> dict[str, Any]:
        spec = self._spec("fetch_platform_dashboard")
        return await self.gateway.run(spec, self.api.get_dashboard, lambda data: ExtraFetched("dashboard", data))
