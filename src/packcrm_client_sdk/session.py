from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .clients import ClientsClient, EventsClient, ExportsClient, RemarksClient, SuperAdminClient
from .config import ClientConfig
from .http_client import HttpClient
from .state import (
    ClientsSlice,
    EventsSlice,
    PlatformActivitySlice,
    PlatformDashboardSlice,
    PlatformUsersSlice,
    SearchDebouncer,
    TenantsSlice,
)
from .tracing import RequestContext


@dataclass
class ApiSession:
    """Wires one HTTP client, the SDK clients and the resource slices for a signed-in user.

    Slices are built lazily and cached, so every view in a process shares the
    same store for a resource type.
    """

    config: ClientConfig
    token: str | None = None
    tenant_id: str | None = None
    context: RequestContext | None = None
    slice_options: dict[str, Any] = field(default_factory=dict)
    _http: HttpClient | None = field(default=None, init=False, repr=False)
    _slices: dict[str, Any] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        self.context = self.context or RequestContext()

    @property
    def http(self) -> HttpClient:
        if self._http is None:
            self._http = HttpClient(config=self.config, context=self.context)
        return self._http

    def clients_client(self) -> ClientsClient:
        return ClientsClient(http=self.http, access_token=self.token, tenant_id=self.tenant_id)

    def remarks_client(self) -> RemarksClient:
        return RemarksClient(http=self.http, access_token=self.token, tenant_id=self.tenant_id)

    def events_client(self) -> EventsClient:
        return EventsClient(http=self.http, access_token=self.token, tenant_id=self.tenant_id)

    def exports_client(self) -> ExportsClient:
        return ExportsClient(http=self.http, access_token=self.token, tenant_id=self.tenant_id)

    def superadmin_client(self) -> SuperAdminClient:
        return SuperAdminClient(http=self.http, access_token=self.token, tenant_id=self.tenant_id)

    def _slice(self, name: str, factory: Any) -> Any:
        if name not in self._slices:
            self._slices[name] = factory()
        return self._slices[name]

    def clients(self) -> ClientsSlice:
        return self._slice(
            "clients",
            lambda: ClientsSlice(
                self.clients_client(),
                self.remarks_client(),
                self.exports_client(),
                limit=self.config.page_limit,
                **self.slice_options,
            ),
        )

    def events(self) -> EventsSlice:
        return self._slice(
            "events",
            lambda: EventsSlice(
                self.events_client(), self.exports_client(), limit=self.config.page_limit, **self.slice_options
            ),
        )

    def tenants(self) -> TenantsSlice:
        return self._slice("tenants", lambda: TenantsSlice(self.superadmin_client(), **self.slice_options))

    def platform_users(self) -> PlatformUsersSlice:
        return self._slice("platform_users", lambda: PlatformUsersSlice(self.superadmin_client(), **self.slice_options))

    def platform_activity(self) -> PlatformActivitySlice:
        return self._slice(
            "platform_activity",
            lambda: PlatformActivitySlice(self.superadmin_client(), self.exports_client(), **self.slice_options),
        )

    def platform_dashboard(self) -> PlatformDashboardSlice:
        return self._slice(
            "platform_dashboard", lambda: PlatformDashboardSlice(self.superadmin_client(), **self.slice_options)
        )

    def search_debouncer(self, resource_slice: Any, **kwargs: Any) -> SearchDebouncer:
        return SearchDebouncer(resource_slice, self.config.search_debounce_ms, **kwargs)

    def establish(self, token: str, tenant_id: str | None = None) -> None:
        """Swap credentials; cached slices are dropped so no state leaks across users."""
        self.token = token
        self.tenant_id = tenant_id
        self._slices.clear()

    def clear(self) -> None:
        self.token = None
        self.tenant_id = None
        self._slices.clear()
