from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ..models import ListPage, ListQuery, UserRole, normalize_data, normalize_item, normalize_list
from .base import BaseClient, require_id


@dataclass
class SuperAdminClient(BaseClient):
    """Platform administration endpoints under ``/superadmin``."""

    module = "superadmin"

    def get_dashboard(self) -> dict[str, Any]:
        payload = self._request("GET", "/superadmin/dashboard", module=self.module, operation="dashboard.get")
        return normalize_data(payload) or {}

    def list_tenants(self, query: ListQuery) -> ListPage:
        payload = self._request(
            "GET", "/superadmin/tenants", params=query.to_params(), module=self.module, operation="tenants.list"
        )
        return normalize_list(payload, "tenants")

    def get_tenant_detail(self, tenant_id: str) -> dict[str, Any]:
        """Tenant detail carries the tenant plus related counts; returned as-is."""
        tenant_id = require_id(tenant_id, "tenant_id")
        payload = self._request(
            "GET", f"/superadmin/tenants/{tenant_id}", module=self.module, operation="tenants.get"
        )
        detail = normalize_data(payload)
        if not isinstance(detail, dict):
            raise ValueError("Expected tenant detail response to carry a data object")
        return detail

    def create_tenant(self, data: Mapping[str, Any]) -> dict[str, Any]:
        payload = self._request(
            "POST", "/superadmin/tenants", json_body=dict(data), module=self.module, operation="tenants.create"
        )
        return normalize_item(payload, "tenant")

    def update_tenant(self, tenant_id: str, data: Mapping[str, Any]) -> dict[str, Any]:
        tenant_id = require_id(tenant_id, "tenant_id")
        payload = self._request(
            "PUT",
            f"/superadmin/tenants/{tenant_id}",
            json_body=dict(data),
            module=self.module,
            operation="tenants.update",
        )
        return normalize_item(payload, "tenant")

    def deactivate_tenant(self, tenant_id: str) -> None:
        tenant_id = require_id(tenant_id, "tenant_id")
        self._request("DELETE", f"/superadmin/tenants/{tenant_id}", module=self.module, operation="tenants.deactivate")

    def list_users(self, query: ListQuery) -> ListPage:
        payload = self._request(
            "GET", "/superadmin/users", params=query.to_params(), module=self.module, operation="users.list"
        )
        return normalize_list(payload, "users")

    def toggle_user_active(self, user_id: str) -> dict[str, Any]:
        user_id = require_id(user_id, "user_id")
        payload = self._request(
            "PUT", f"/superadmin/users/{user_id}/toggle-active", module=self.module, operation="users.toggle_active"
        )
        return normalize_item(payload, "user")

    def change_user_role(self, user_id: str, role: UserRole | str) -> dict[str, Any]:
        user_id = require_id(user_id, "user_id")
        value = role.value if isinstance(role, UserRole) else str(role)
        payload = self._request(
            "PUT",
            f"/superadmin/users/{user_id}/role",
            json_body={"role": value},
            module=self.module,
            operation="users.change_role",
        )
        return normalize_item(payload, "user")

    def list_activity(self, query: ListQuery) -> ListPage:
        payload = self._request(
            "GET", "/superadmin/activity", params=query.to_params(), module=self.module, operation="activity.list"
        )
        return normalize_list(payload, "logs")
