from .config import ClientConfig, ConfigError, load_config
from .exceptions import (
    ApiError,
    ClientValidationError,
    CommandFailedError,
    ForbiddenError,
    NotFoundError,
    ProtectedPrincipalError,
    TransportError,
    UnauthorizedError,
    ValidationError,
    ValidationIssue,
)
from .http_client import HttpClient
from .models import ListPage, ListQuery, PageMeta, TenantPlan, UserRole, ref_id
from .session import ApiSession
from .state import (
    ClientsSlice,
    EventsSlice,
    PlatformActivitySlice,
    PlatformDashboardSlice,
    PlatformUsersSlice,
    QueryBinding,
    ResourceState,
    ResourceStore,
    SearchDebouncer,
    TenantsSlice,
    partition_users,
    reduce,
)
from .tracing import RequestContext

__all__ = [
    "ApiError",
    "ApiSession",
    "ClientConfig",
    "ClientValidationError",
    "ClientsSlice",
    "CommandFailedError",
    "ConfigError",
    "EventsSlice",
    "ForbiddenError",
    "HttpClient",
    "ListPage",
    "ListQuery",
    "NotFoundError",
    "PageMeta",
    "PlatformActivitySlice",
    "PlatformDashboardSlice",
    "PlatformUsersSlice",
    "ProtectedPrincipalError",
    "QueryBinding",
    "RequestContext",
    "ResourceState",
    "ResourceStore",
    "SearchDebouncer",
    "TenantPlan",
    "TenantsSlice",
    "TransportError",
    "UnauthorizedError",
    "UserRole",
    "ValidationError",
    "ValidationIssue",
    "load_config",
    "partition_users",
    "reduce",
    "ref_id",
]
