"""Role -> permission registry and the allow/deny decision used by route dependencies."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from app.core.config import Settings

PermissionMode = Literal["AND", "OR"]
PERMISSION_MODES: tuple[str, ...] = ("AND", "OR")

MANAGE_BRANCHES = "manage_branches"
MANAGE_LIBRARY_STUDENTS = "manage_library_students"
MANAGE_HOSTEL_BRANCHES = "manage_hostel_branches"
MANAGE_HOSTEL_STUDENTS = "manage_hostel_students"
VIEW_TRANSACTIONS = "view_transactions"
VIEW_COLLECTIONS = "view_collections"
VIEW_HOSTEL_COLLECTIONS = "view_hostel_collections"
VIEW_REPORTS = "view_reports"
MANAGE_EXPENSES = "manage_expenses"
MANAGE_PRODUCTS = "manage_products"

ALL_PERMISSIONS: frozenset[str] = frozenset(
    {
        MANAGE_BRANCHES,
        MANAGE_LIBRARY_STUDENTS,
        MANAGE_HOSTEL_BRANCHES,
        MANAGE_HOSTEL_STUDENTS,
        VIEW_TRANSACTIONS,
        VIEW_COLLECTIONS,
        VIEW_HOSTEL_COLLECTIONS,
        VIEW_REPORTS,
        MANAGE_EXPENSES,
        MANAGE_PRODUCTS,
    }
)

ADMIN_ROLE = "admin"

DEFAULT_ROLE_PERMISSIONS: Mapping[str, frozenset[str]] = {
    ADMIN_ROLE: ALL_PERMISSIONS,
    "staff": frozenset({MANAGE_LIBRARY_STUDENTS, VIEW_COLLECTIONS}),
}

EMPTY_PERMISSIONS: frozenset[str] = frozenset()


@dataclass(frozen=True)
class PermissionRegistry:
    """
    Immutable role -> permission-set mapping.

    version identifies the configuration the registry was built from, so a
    swapped registry (tests, reloaded config) is distinguishable in logs.
    """

    roles: Mapping[str, frozenset[str]] = field(default_factory=dict)
    version: int = 1

    def __post_init__(self) -> None:
        frozen = {role: frozenset(names) for role, names in self.roles.items()}
        object.__setattr__(self, "roles", MappingProxyType(frozen))

    @property
    def known_permissions(self) -> frozenset[str]:
        """Every permission name a user may be granted: built-in names plus any a role defines."""
        known = set(ALL_PERMISSIONS)
        for names in self.roles.values():
            known.update(names)
        return frozenset(known)

    def role_permissions(self, role: str | None) -> frozenset[str]:
        """Permissions granted by role; unknown or missing role -> empty set."""
        if not role:
            return EMPTY_PERMISSIONS
        return self.roles.get(role, EMPTY_PERMISSIONS)

    def effective_permissions(
        self,
        role: str | None,
        overrides: Iterable[str] | None = None,
    ) -> frozenset[str]:
        """
        Union of role defaults and explicit per-user overrides.

        Raises TypeError when overrides is not a collection of strings; callers
        must treat that as a denial.
        """
        granted = self.role_permissions(role)
        if overrides is None:
            return granted
        if isinstance(overrides, (str, bytes)) or isinstance(overrides, Mapping):
            raise TypeError("permission overrides must be a list of permission names")
        extra = frozenset(overrides)
        if any(not isinstance(name, str) for name in extra):
            raise TypeError("permission overrides must contain only strings")
        return granted | extra


def build_registry(settings: Settings) -> PermissionRegistry:
    """Built-in role defaults with ROLE_PERMISSIONS from settings merged over them."""
    roles: dict[str, frozenset[str]] = dict(DEFAULT_ROLE_PERMISSIONS)
    for role, names in settings.ROLE_PERMISSIONS.items():
        roles[role.strip()] = frozenset(name.strip() for name in names)
    return PermissionRegistry(roles=roles, version=settings.ROLE_PERMISSIONS_VERSION)


def normalize_required(names: Sequence[str], mode: str) -> tuple[str, ...]:
    """Validate a route's permission requirement; raises ValueError for misconfiguration."""
    if isinstance(names, str):
        raise ValueError("required permissions must be a list of names, not a single string")
    required = tuple(names)
    if not required:
        raise ValueError("at least one required permission name is needed")
    if any(not isinstance(name, str) or not name for name in required):
        raise ValueError("permission names must be non-empty strings")
    if mode not in PERMISSION_MODES:
        raise ValueError(f"mode must be one of {PERMISSION_MODES}, got {mode!r}")
    return required


def is_allowed(
    granted: frozenset[str],
    required: Sequence[str],
    mode: PermissionMode = "AND",
) -> bool:
    """AND: every required permission is granted. OR: at least one is."""
    if not required:
        return False
    if mode == "OR":
        return any(name in granted for name in required)
    return all(name in granted for name in required)
