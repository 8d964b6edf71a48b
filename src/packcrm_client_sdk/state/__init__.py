from .binding import QueryBinding
from .debounce import SearchDebouncer
from .gateway import CommandGateway, CommandSpec
from .intents import (
    ClearError,
    ClearFilters,
    ClearSelected,
    HardDelete,
    MergeFields,
    ReplaceItem,
    SetFilters,
    SetPage,
    SoftDisable,
)
from .principals import is_protected_principal, partition_users
from .reducer import reduce
from .resource_state import Pagination, ResourceState, initial_state, item_id
from .slices import (
    ClientsSlice,
    EventsSlice,
    PlatformActivitySlice,
    PlatformDashboardSlice,
    PlatformUsersSlice,
    TenantsSlice,
)
from .store import ResourceStore

__all__ = [
    "ClearError",
    "ClearFilters",
    "ClearSelected",
    "ClientsSlice",
    "CommandGateway",
    "CommandSpec",
    "EventsSlice",
    "HardDelete",
    "MergeFields",
    "Pagination",
    "PlatformActivitySlice",
    "PlatformDashboardSlice",
    "PlatformUsersSlice",
    "QueryBinding",
    "ReplaceItem",
    "ResourceState",
    "ResourceStore",
    "SearchDebouncer",
    "SetFilters",
    "SetPage",
    "SoftDisable",
    "TenantsSlice",
    "initial_state",
    "is_protected_principal",
    "item_id",
    "partition_users",
    "reduce",
]
