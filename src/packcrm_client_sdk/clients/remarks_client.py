from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ..models import ListPage, normalize_collection, normalize_item, normalize_list
from .base import BaseClient, require_id


@dataclass
class RemarksClient(BaseClient):
    """Remarks are scoped to a client on read/create and addressed directly on update/delete."""

    module = "remarks"

    def list_by_client(self, client_id: str, params: Mapping[str, Any] | None = None) -> ListPage:
        client_id = require_id(client_id, "client_id")
        payload = self._request(
            "GET",
            f"/clients/{client_id}/remarks",
            params=dict(params or {}) or None,
            module=self.module,
            operation="remarks.list",
        )
        return normalize_list(payload, "remarks")

    def get_timeline(self, client_id: str, params: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        client_id = require_id(client_id, "client_id")
        payload = self._request(
            "GET",
            f"/clients/{client_id}/timeline",
            params=dict(params or {}) or None,
            module=self.module,
            operation="remarks.timeline",
        )
        return normalize_collection(payload, "timeline")

    def create_remark(self, client_id: str, data: Mapping[str, Any]) -> dict[str, Any]:
        client_id = require_id(client_id, "client_id")
        payload = self._request(
            "POST",
            f"/clients/{client_id}/remarks",
            json_body=dict(data),
            module=self.module,
            operation="remarks.create",
        )
        return normalize_item(payload, "remark")

    def update_remark(self, remark_id: str, data: Mapping[str, Any]) -> dict[str, Any]:
        remark_id = require_id(remark_id, "remark_id")
        payload = self._request(
            "PUT", f"/remarks/{remark_id}", json_body=dict(data), module=self.module, operation="remarks.update"
        )
        return normalize_item(payload, "remark")

    def delete_remark(self, remark_id: str) -> None:
        remark_id = require_id(remark_id, "remark_id")
        self._request("DELETE", f"/remarks/{remark_id}", module=self.module, operation="remarks.delete")
