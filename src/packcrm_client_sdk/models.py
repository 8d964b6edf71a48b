from __future__ import annotations

from enum import Enum
from typing import Any, List, Mapping

from pydantic import BaseModel, ConfigDict, Field

PLATFORM_TENANT_SLUG = "__platform__"


class UserRole(str, Enum):
    USER = "user"
    MARKETING = "marketing"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


class TenantPlan(str, Enum):
    FREE = "free"
    PRO = "pro"
    ENTERPRISE = "enterprise"


class PageMeta(BaseModel):
    """Pagination block as sent by the API.

    The server reports the total as ``totalDocs`` on tenant-scoped routes and
    as ``total`` on the superadmin namespace.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    page: int | None = None
    limit: int | None = None
    total_docs: int | None = Field(default=None, alias="totalDocs")
    total: int | None = None
    total_pages: int | None = Field(default=None, alias="totalPages")

    @property
    def resolved_total(self) -> int | None:
        return self.total_docs if self.total_docs is not None else self.total


class ListPage(BaseModel):
    items: List[dict[str, Any]] = Field(default_factory=list)
    meta: PageMeta = Field(default_factory=PageMeta)


class ListQuery(BaseModel):
    model_config = ConfigDict(extra="allow")

    page: int = 1
    limit: int = 10
    filters: dict[str, Any] = Field(default_factory=dict)

    def to_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {"page": self.page, "limit": self.limit}
        params.update(clean_filters(self.filters))
        return params


def clean_filters(filters: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in filters.items() if value not in (None, "")}


def _data_block(payload: Any, what: str) -> Any:
    if not isinstance(payload, dict):
        raise ValueError(f"Expected {what} response to be a JSON object")
    return payload.get("data")


def normalize_list(payload: Any, collection_key: str | None = None) -> ListPage:
    """Fold ``{data: [...], pagination}`` and ``{data: {<key>: [...], pagination}}`` into one shape."""
    data = _data_block(payload, "list")
    meta = payload.get("pagination")
    if isinstance(data, dict):
        meta = data.get("pagination", meta)
        data = data.get(collection_key) if collection_key else data.get("items")
    items = [item for item in (data or []) if isinstance(item, dict)]
    return ListPage(items=items, meta=PageMeta.model_validate(meta or {}))


def normalize_item(payload: Any, singular: str) -> dict[str, Any]:
    """Extract one entity from ``{data: {<singular>: {...}}}`` or a bare ``{data: {...}}``."""
    data = _data_block(payload, singular)
    if not isinstance(data, dict):
        raise ValueError(f"Expected {singular} response to carry a data object")
    nested = data.get(singular)
    if isinstance(nested, dict):
        return nested
    return data


def normalize_collection(payload: Any, key: str) -> list[dict[str, Any]]:
    data = _data_block(payload, key)
    if isinstance(data, dict):
        data = data.get(key)
    return [item for item in (data or []) if isinstance(item, dict)]


def normalize_data(payload: Any, key: str | None = None) -> Any:
    data = _data_block(payload, key or "data")
    if key and isinstance(data, dict) and key in data:
        return data[key]
    return data


def ref_id(value: Any) -> str | None:
    """Resolve a foreign reference stored either as a bare id or an expanded object."""
    if value is None:
        return None
    if isinstance(value, Mapping):
        ident = value.get("_id")
        return str(ident) if ident is not None else None
    return str(value)
