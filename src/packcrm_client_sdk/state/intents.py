"""Intents accepted by the resource reducer.

View intents (filters, paging, selection) are dispatched directly by callers.
Command intents are produced only by the command gateway.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from ..models import ListPage


@dataclass(frozen=True)
class HardDelete:
    """Remove the row and decrement the total."""


@dataclass(frozen=True)
class SoftDisable:
    """Keep the row and set ``field`` to False."""

    field: str = "isActive"


DeletePolicy = Union[HardDelete, SoftDisable]


@dataclass(frozen=True)
class ReplaceItem:
    """Swap the matching row for the server copy."""


@dataclass(frozen=True)
class MergeFields:
    """Shallow-merge the server copy into the matching row.

    ``fields=None`` merges every key the server returned.
    """

    fields: tuple[str, ...] | None = None


UpdatePolicy = Union[ReplaceItem, MergeFields]


@dataclass(frozen=True)
class SetFilters:
    values: Mapping[str, Any]


@dataclass(frozen=True)
class ClearFilters:
    pass


@dataclass(frozen=True)
class SetPage:
    page: int


@dataclass(frozen=True)
class ClearSelected:
    collections: tuple[str, ...] = ()
    extras: tuple[str, ...] = ()


@dataclass(frozen=True)
class ClearError:
    pass


@dataclass(frozen=True)
class ListFetched:
    page: ListPage


@dataclass(frozen=True)
class ItemFetched:
    item: Mapping[str, Any]


@dataclass(frozen=True)
class ItemCreated:
    item: Mapping[str, Any]


@dataclass(frozen=True)
class ItemUpdated:
    item: Mapping[str, Any]
    policy: UpdatePolicy = field(default_factory=ReplaceItem)


@dataclass(frozen=True)
class ItemDeleted:
    item_id: str
    policy: DeletePolicy = field(default_factory=HardDelete)


@dataclass(frozen=True)
class CollectionFetched:
    name: str
    items: tuple[Mapping[str, Any], ...]


@dataclass(frozen=True)
class CollectionItemCreated:
    name: str
    item: Mapping[str, Any]


@dataclass(frozen=True)
class CollectionItemUpdated:
    name: str
    item: Mapping[str, Any]


@dataclass(frozen=True)
class CollectionItemDeleted:
    name: str
    item_id: str


@dataclass(frozen=True)
class ExtraFetched:
    name: str
    value: Any


@dataclass(frozen=True)
class CommandStarted:
    command: str


@dataclass(frozen=True)
class CommandSucceeded:
    command: str
    merge: tuple["Intent", ...] = ()


@dataclass(frozen=True)
class CommandFailed:
    command: str
    message: str
    track_loading: bool = True


Intent = Union[
    SetFilters,
    ClearFilters,
    SetPage,
    ClearSelected,
    ClearError,
    ListFetched,
    ItemFetched,
    ItemCreated,
    ItemUpdated,
    ItemDeleted,
    CollectionFetched,
    CollectionItemCreated,
    CollectionItemUpdated,
    CollectionItemDeleted,
    ExtraFetched,
    CommandStarted,
    CommandSucceeded,
    CommandFailed,
]
