from __future__ import annotations

from dataclasses import dataclass
from typing import Any, BinaryIO, Mapping, Sequence

from ..exceptions import ClientValidationError, ValidationIssue
from ..models import ListPage, ListQuery, normalize_collection, normalize_data, normalize_item, normalize_list
from .base import BaseClient, require_id


@dataclass
class ClientsClient(BaseClient):
    module = "clients"

    def list_clients(self, query: ListQuery) -> ListPage:
        payload = self._request(
            "GET", "/clients", params=query.to_params(), module=self.module, operation="clients.list"
        )
        return normalize_list(payload)

    def get_client(self, client_id: str) -> dict[str, Any]:
        client_id = require_id(client_id, "client_id")
        payload = self._request("GET", f"/clients/{client_id}", module=self.module, operation="clients.get")
        return normalize_item(payload, "client")

    def create_client(self, data: Mapping[str, Any]) -> dict[str, Any]:
        payload = self._request(
            "POST", "/clients", json_body=dict(data), module=self.module, operation="clients.create"
        )
        return normalize_item(payload, "client")

    def update_client(self, client_id: str, data: Mapping[str, Any]) -> dict[str, Any]:
        client_id = require_id(client_id, "client_id")
        payload = self._request(
            "PUT", f"/clients/{client_id}", json_body=dict(data), module=self.module, operation="clients.update"
        )
        return normalize_item(payload, "client")

    def delete_client(self, client_id: str) -> None:
        client_id = require_id(client_id, "client_id")
        self._request("DELETE", f"/clients/{client_id}", module=self.module, operation="clients.delete")

    def upload_visiting_card(
        self,
        client_id: str,
        file: BinaryIO | bytes,
        *,
        filename: str = "visiting-card.jpg",
        content_type: str = "image/jpeg",
    ) -> dict[str, Any]:
        client_id = require_id(client_id, "client_id")
        payload = self._request(
            "POST",
            f"/clients/{client_id}/visiting-card",
            files={"visitingCard": (filename, file, content_type)},
            module=self.module,
            operation="clients.visiting_card",
        )
        return normalize_item(payload, "client")

    def get_stats(self, params: Mapping[str, Any] | None = None) -> dict[str, Any]:
        payload = self._request(
            "GET", "/clients/stats", params=dict(params or {}) or None, module=self.module, operation="clients.stats"
        )
        return normalize_data(payload, "stats")

    def get_pending_follow_ups(self, days: int = 7) -> list[dict[str, Any]]:
        payload = self._request(
            "GET",
            "/clients/follow-ups/pending",
            params={"days": days},
            module=self.module,
            operation="clients.pending_follow_ups",
        )
        return normalize_collection(payload, "clients")

    def bulk_assign(self, client_ids: Sequence[str], marketing_person_id: str) -> dict[str, Any]:
        if not client_ids:
            raise ClientValidationError([ValidationIssue(field="client_ids", reason="client_ids must not be empty")])
        marketing_person_id = require_id(marketing_person_id, "marketing_person_id")
        payload = self._request(
            "PUT",
            "/clients/bulk-assign",
            json_body={"clientIds": list(client_ids), "marketingPersonId": marketing_person_id},
            module=self.module,
            operation="clients.bulk_assign",
        )
        return normalize_data(payload) or {}
