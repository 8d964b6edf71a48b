from __future__ import annotations

from typing import Any, Iterable, Mapping

from ..models import PLATFORM_TENANT_SLUG, UserRole

Row = Mapping[str, Any]


def is_protected_principal(user: Row) -> bool:
    """The platform owner: flagged explicitly, or a superadmin of the platform tenant."""
    if user.get("isProtected"):
        return True
    tenant = user.get("tenantId")
    slug = tenant.get("slug") if isinstance(tenant, Mapping) else None
    return user.get("role") == UserRole.SUPERADMIN.value and slug == PLATFORM_TENANT_SLUG


def partition_users(users: Iterable[Row]) -> tuple[tuple[Row, ...], tuple[Row, ...]]:
    """Split users into ``(protected, mutable)``; only ``mutable`` rows get role/toggle controls."""
    protected: list[Row] = []
    mutable: list[Row] = []
    for user in users:
        (protected if is_protected_principal(user) else mutable).append(user)
    return tuple(protected), tuple(mutable)
