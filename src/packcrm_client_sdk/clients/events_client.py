from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ..models import ListPage, ListQuery, normalize_collection, normalize_data, normalize_item, normalize_list
from .base import BaseClient, require_id


@dataclass
class EventsClient(BaseClient):
    module = "events"

    def list_events(self, query: ListQuery) -> ListPage:
        payload = self._request(
            "GET", "/events", params=query.to_params(), module=self.module, operation="events.list"
        )
        return normalize_list(payload)

    def list_active_events(self) -> list[dict[str, Any]]:
        payload = self._request("GET", "/events/active", module=self.module, operation="events.active")
        return normalize_collection(payload, "events")

    def get_event(self, event_id: str) -> dict[str, Any]:
        event_id = require_id(event_id, "event_id")
        payload = self._request("GET", f"/events/{event_id}", module=self.module, operation="events.get")
        return normalize_item(payload, "event")

    def get_event_stats(self, event_id: str) -> dict[str, Any]:
        event_id = require_id(event_id, "event_id")
        payload = self._request("GET", f"/events/{event_id}/stats", module=self.module, operation="events.stats")
        return normalize_data(payload) or {}

    def create_event(self, data: Mapping[str, Any]) -> dict[str, Any]:
        payload = self._request(
            "POST", "/events", json_body=dict(data), module=self.module, operation="events.create"
        )
        return normalize_item(payload, "event")

    def update_event(self, event_id: str, data: Mapping[str, Any]) -> dict[str, Any]:
        event_id = require_id(event_id, "event_id")
        payload = self._request(
            "PUT", f"/events/{event_id}", json_body=dict(data), module=self.module, operation="events.update"
        )
        return normalize_item(payload, "event")

    def delete_event(self, event_id: str) -> None:
        event_id = require_id(event_id, "event_id")
        self._request("DELETE", f"/events/{event_id}", module=self.module, operation="events.delete")
