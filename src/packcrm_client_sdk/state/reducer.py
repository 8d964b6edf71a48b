"""Pure reducer for resource slices.

``reduce(state, intent)`` never mutates ``state`` and performs no I/O. Every
container on the returned state is a fresh copy whenever it changes.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable, Mapping

from .intents import (
    ClearError,
    ClearFilters,
    ClearSelected,
    CollectionFetched,
    CollectionItemCreated,
    CollectionItemDeleted,
    CollectionItemUpdated,
    CommandFailed,
    CommandStarted,
    CommandSucceeded,
    ExtraFetched,
    HardDelete,
    Intent,
    ItemCreated,
    ItemDeleted,
    ItemFetched,
    ItemUpdated,
    ListFetched,
    MergeFields,
    SetFilters,
    SetPage,
    SoftDisable,
)
from .resource_state import Pagination, ResourceState, item_id

Row = Mapping[str, Any]


def _set_filters(state: ResourceState, intent: SetFilters) -> ResourceState:
    # A page override is how pagination piggybacks on filter changes.
    if "page" in intent.values:
        return replace(state, pagination=replace(state.pagination, page=int(intent.values["page"])))
    filters = {**state.filters, **intent.values}
    return replace(state, filters=filters, pagination=replace(state.pagination, page=1))


def _clear_filters(state: ResourceState, intent: ClearFilters) -> ResourceState:
    return replace(state, filters=dict(state.default_filters), pagination=replace(state.pagination, page=1))


def _set_page(state: ResourceState, intent: SetPage) -> ResourceState:
    return replace(state, pagination=replace(state.pagination, page=intent.page))


def _clear_selected(state: ResourceState, intent: ClearSelected) -> ResourceState:
    collections = {name: rows for name, rows in state.collections.items() if name not in intent.collections}
    extras = {name: value for name, value in state.extras.items() if name not in intent.extras}
    return replace(state, selected=None, collections=collections, extras=extras)


def _clear_error(state: ResourceState, intent: ClearError) -> ResourceState:
    return replace(state, error=None)


def _list_fetched(state: ResourceState, intent: ListFetched) -> ResourceState:
    return replace(
        state,
        items=tuple(dict(row) for row in intent.page.items),
        pagination=Pagination.from_meta(intent.page.meta, state.pagination.limit),
    )


def _item_fetched(state: ResourceState, intent: ItemFetched) -> ResourceState:
    return replace(state, selected=dict(intent.item))


def _item_created(state: ResourceState, intent: ItemCreated) -> ResourceState:
    pagination = replace(state.pagination, total=state.pagination.total + 1)
    return replace(state, items=(dict(intent.item), *state.items), pagination=pagination)


def _apply_update(row: Row, incoming: Row, policy: Any) -> dict[str, Any]:
    if isinstance(policy, MergeFields):
        if policy.fields is None:
            return {**row, **incoming}
        return {**row, **{key: incoming[key] for key in policy.fields if key in incoming}}
    return dict(incoming)


def _item_updated(state: ResourceState, intent: ItemUpdated) -> ResourceState:
    target = item_id(intent.item)
    items = tuple(
        _apply_update(row, intent.item, intent.policy) if item_id(row) == target else row for row in state.items
    )
    selected = state.selected
    if selected is not None and item_id(selected) == target:
        selected = _apply_update(selected, intent.item, intent.policy)
    return replace(state, items=items, selected=selected)


def _item_deleted(state: ResourceState, intent: ItemDeleted) -> ResourceState:
    policy = intent.policy
    if isinstance(policy, SoftDisable):
        items = tuple(
            {**row, policy.field: False} if item_id(row) == intent.item_id else row for row in state.items
        )
        selected = state.selected
        if selected is not None and item_id(selected) == intent.item_id:
            selected = {**selected, policy.field: False}
        return replace(state, items=items, selected=selected)
    if not isinstance(policy, HardDelete):
        raise TypeError(f"Unsupported delete policy: {policy!r}")
    items = tuple(row for row in state.items if item_id(row) != intent.item_id)
    pagination = replace(state.pagination, total=max(0, state.pagination.total - 1))
    return replace(state, items=items, pagination=pagination)


def _with_collection(state: ResourceState, name: str, rows: tuple[Row, ...]) -> ResourceState:
    return replace(state, collections={**state.collections, name: rows})


def _collection_fetched(state: ResourceState, intent: CollectionFetched) -> ResourceState:
    return _with_collection(state, intent.name, tuple(dict(row) for row in intent.items))


def _collection_item_created(state: ResourceState, intent: CollectionItemCreated) -> ResourceState:
    return _with_collection(state, intent.name, (dict(intent.item), *state.collection(intent.name)))


def _collection_item_updated(state: ResourceState, intent: CollectionItemUpdated) -> ResourceState:
    target = item_id(intent.item)
    rows = tuple(dict(intent.item) if item_id(row) == target else row for row in state.collection(intent.name))
    return _with_collection(state, intent.name, rows)


def _collection_item_deleted(state: ResourceState, intent: CollectionItemDeleted) -> ResourceState:
    rows = tuple(row for row in state.collection(intent.name) if item_id(row) != intent.item_id)
    return _with_collection(state, intent.name, rows)


def _extra_fetched(state: ResourceState, intent: ExtraFetched) -> ResourceState:
    return replace(state, extras={**state.extras, intent.name: intent.value})


def _command_started(state: ResourceState, intent: CommandStarted) -> ResourceState:
    return replace(state, is_loading=True, error=None)


def _command_succeeded(state: ResourceState, intent: CommandSucceeded) -> ResourceState:
    for merge in intent.merge:
        state = reduce(state, merge)
    return replace(state, is_loading=False)


def _command_failed(state: ResourceState, intent: CommandFailed) -> ResourceState:
    if not intent.track_loading:
        return replace(state, error=intent.message)
    return replace(state, is_loading=False, error=intent.message)


_HANDLERS: dict[type, Callable[[ResourceState, Any], ResourceState]] = {
    SetFilters: _set_filters,
    ClearFilters: _clear_filters,
    SetPage: _set_page,
    ClearSelected: _clear_selected,
    ClearError: _clear_error,
    ListFetched: _list_fetched,
    ItemFetched: _item_fetched,
    ItemCreated: _item_created,
    ItemUpdated: _item_updated,
    ItemDeleted: _item_deleted,
    CollectionFetched: _collection_fetched,
    CollectionItemCreated: _collection_item_created,
    CollectionItemUpdated: _collection_item_updated,
    CollectionItemDeleted: _collection_item_deleted,
    ExtraFetched: _extra_fetched,
    CommandStarted: _command_started,
    CommandSucceeded: _command_succeeded,
    CommandFailed: _command_failed,
}


def reduce(state: ResourceState, intent: Intent) -> ResourceState:
    try:
        handler = _HANDLERS[type(intent)]
    except KeyError:
        raise TypeError(f"Unknown intent: {type(intent).__name__}") from None
    return handler(state, intent)
