from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Mapping, Sequence

EMPTY_VALUE = "—"


@dataclass(frozen=True)
class ColumnDef:
    key: str
    label: str


@dataclass
class ListingViewState:
    visible_columns: list[str]
    sort_by: str | None = None
    sort_dir: str = "asc"


CLIENT_COLUMNS = [
    ColumnDef("_id", "ID"),
    ColumnDef("name", "Name"),
    ColumnDef("companyName", "Company"),
    ColumnDef("email", "Email"),
    ColumnDef("phone", "Phone"),
    ColumnDef("event", "Event"),
    ColumnDef("priority", "Priority"),
    ColumnDef("followUpStatus", "Follow-up"),
    ColumnDef("marketingPerson", "Assigned to"),
]
EVENT_COLUMNS = [
    ColumnDef("_id", "ID"),
    ColumnDef("name", "Name"),
    ColumnDef("location", "Location"),
    ColumnDef("startDate", "Starts"),
    ColumnDef("endDate", "Ends"),
    ColumnDef("status", "Status"),
]
TENANT_COLUMNS = [
    ColumnDef("_id", "ID"),
    ColumnDef("name", "Name"),
    ColumnDef("slug", "Slug"),
    ColumnDef("plan", "Plan"),
    ColumnDef("isActive", "Status"),
]
USER_COLUMNS = [
    ColumnDef("_id", "ID"),
    ColumnDef("name", "Name"),
    ColumnDef("email", "Email"),
    ColumnDef("role", "Role"),
    ColumnDef("tenantId", "Tenant"),
    ColumnDef("isActive", "Status"),
]
ACTIVITY_COLUMNS = [
    ColumnDef("createdAt", "When"),
    ColumnDef("action", "Action"),
    ColumnDef("resource", "Resource"),
    ColumnDef("user", "User"),
    ColumnDef("tenant", "Tenant"),
    ColumnDef("description", "Description"),
]


def default_view_state(columns: Sequence[ColumnDef]) -> ListingViewState:
    return ListingViewState(visible_columns=[column.key for column in columns], sort_by=None, sort_dir="asc")


def view_state_for(columns: Sequence[ColumnDef], sort_by: str | None, sort_dir: str = "asc") -> ListingViewState:
    """Build a view from user input, ignoring unknown sort keys."""
    view = default_view_state(columns)
    allowed = {column.key for column in columns}
    view.sort_by = sort_by if sort_by in allowed else None
    view.sort_dir = "desc" if str(sort_dir).lower() == "desc" else "asc"
    return view


def sort_rows(rows: Iterable[Mapping[str, Any]], view: ListingViewState) -> list[Mapping[str, Any]]:
    """Order one page in memory; empty values always sink to the bottom."""
    rows = list(rows)
    if not view.sort_by:
        return rows
    filled = [row for row in rows if normalize_value(row.get(view.sort_by)) != EMPTY_VALUE]
    empty = [row for row in rows if normalize_value(row.get(view.sort_by)) == EMPTY_VALUE]
    filled.sort(key=lambda row: normalize_value(row.get(view.sort_by)).lower(), reverse=view.sort_dir == "desc")
    return filled + empty


def search_rows(rows: Iterable[Mapping[str, Any]], term: str, keys: Sequence[str]) -> list[Mapping[str, Any]]:
    needle = term.strip().lower()
    if not needle:
        return list(rows)
    return [row for row in rows if any(needle in normalize_value(row.get(key)).lower() for key in keys)]


def normalize_value(value: Any) -> str:
    if value is None:
        return EMPTY_VALUE
    if isinstance(value, str):
        clean = value.strip()
        return clean or EMPTY_VALUE
    if isinstance(value, bool):
        return "ACTIVE" if value else "INACTIVE"
    if isinstance(value, datetime):
        return value.astimezone().strftime("%Y-%m-%d %H:%M:%S %z")
    if isinstance(value, Mapping):
        # Expanded references show their label instead of the raw object.
        for key in ("name", "slug", "email", "_id"):
            if value.get(key):
                return str(value[key])
        return EMPTY_VALUE
    return str(value)


def print_table(title: str, rows: Sequence[Mapping[str, Any]], columns: Sequence[ColumnDef]) -> None:
    print(f"\n{title}")
    if not rows:
        print("(no results)")
        return

    widths = []
    for column in columns:
        max_cell = max(len(normalize_value(row.get(column.key))) for row in rows)
        widths.append(max(len(column.label), max_cell))

    header_line = " | ".join(column.label.ljust(widths[idx]) for idx, column in enumerate(columns))
    separator = "-+-".join("-" * width for width in widths)
    print(header_line)
    print(separator)

    for row in rows:
        line = " | ".join(normalize_value(row.get(column.key)).ljust(widths[idx]) for idx, column in enumerate(columns))
        print(line)
