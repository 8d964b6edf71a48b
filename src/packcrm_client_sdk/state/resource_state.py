from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from ..models import ListQuery, PageMeta


@dataclass(frozen=True)
class Pagination:
    page: int = 1
    limit: int = 10
    total: int = 0
    total_pages: int = 0

    @classmethod
    def from_meta(cls, meta: PageMeta, default_limit: int) -> "Pagination":
        """Server values win; missing ones fall back to first-page defaults."""
        total = meta.resolved_total
        return cls(
            page=meta.page or 1,
            limit=meta.limit or default_limit,
            total=total or 0,
            total_pages=meta.total_pages or 0,
        )


@dataclass(frozen=True)
class ResourceState:
    default_filters: Mapping[str, str] = field(default_factory=dict)
    filters: Mapping[str, str] = field(default_factory=dict)
    pagination: Pagination = field(default_factory=Pagination)
    items: tuple[Mapping[str, Any], ...] = ()
    selected: Mapping[str, Any] | None = None
    collections: Mapping[str, tuple[Mapping[str, Any], ...]] = field(default_factory=dict)
    extras: Mapping[str, Any] = field(default_factory=dict)
    is_loading: bool = False
    error: str | None = None

    def query(self) -> ListQuery:
        return ListQuery(page=self.pagination.page, limit=self.pagination.limit, filters=dict(self.filters))

    def query_key(self) -> tuple[Any, ...]:
        return (self.pagination.page, self.pagination.limit, tuple(sorted(self.filters.items())))

    def collection(self, name: str) -> tuple[Mapping[str, Any], ...]:
        return self.collections.get(name, ())


def initial_state(default_filters: Mapping[str, str] | None = None, *, limit: int = 10) -> ResourceState:
    defaults = dict(default_filters or {})
    return ResourceState(
        default_filters=defaults,
        filters=dict(defaults),
        pagination=Pagination(page=1, limit=limit),
    )


def item_id(item: Mapping[str, Any] | None) -> str | None:
    if not item:
        return None
    ident = item.get("_id", item.get("id"))
    return str(ident) if ident is not None else None
