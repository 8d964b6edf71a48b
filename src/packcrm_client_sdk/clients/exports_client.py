from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ..models import clean_filters
from .base import BaseClient


@dataclass
class ExportsClient(BaseClient):
    """Spreadsheet downloads. The body is returned as opaque bytes."""

    module = "exports"

    def export_clients(self, params: Mapping[str, Any] | None = None) -> bytes:
        return self._download("/export/clients", params, "exports.clients")

    def export_events(self, params: Mapping[str, Any] | None = None) -> bytes:
        return self._download("/export/events", params, "exports.events")

    def export_activity_logs(self, params: Mapping[str, Any] | None = None) -> bytes:
        return self._download("/export/activity-logs", params, "exports.activity_logs")

    def _download(self, path: str, params: Mapping[str, Any] | None, operation: str) -> bytes:
        content = self._request(
            "GET",
            path,
            params=clean_filters(params or {}) or None,
            raw=True,
            module=self.module,
            operation=operation,
        )
        return content or b""
