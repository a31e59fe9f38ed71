"""
Role registry, permission matrix and route access policy.

Everything in this module is a pure lookup over module-level constants.
The tables are wrapped in read-only views at import time; changing the
policy means shipping a new POLICY_VERSION, not writing to these objects.
"""

from enum import Enum
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple

from outreach.config import DEFAULT_PATH, LOGIN_PATH


POLICY_VERSION = "2024.1"


class Role(str, Enum):
    ADMIN = "admin"
    BOARD = "board"
    STAFF = "staff"
    CHECKIN = "checkin"


class Resource(str, Enum):
    GUESTS = "guests"
    MEALS = "meals"
    SERVICES = "services"
    DONATIONS = "donations"
    SETTINGS = "settings"


class Action(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    EXPORT = "export"


# Record collections (everything except the settings store).
DATA_RESOURCES: Tuple[Resource, ...] = (
    Resource.GUESTS,
    Resource.MEALS,
    Resource.SERVICES,
    Resource.DONATIONS,
)

_CRUD = frozenset({Action.CREATE, Action.READ, Action.UPDATE, Action.DELETE})
_CRUD_EXPORT = _CRUD | {Action.EXPORT}
_READ = frozenset({Action.READ})
_CREATE_READ = frozenset({Action.CREATE, Action.READ})


def _freeze(table):
    return MappingProxyType({role: MappingProxyType(dict(grants)) for role, grants in table.items()})


# ── Permission matrix ────────────────────────────────────────────────
# Every (role, resource) pair is listed, even when the grant set is empty.
PERMISSIONS: Mapping[Role, Mapping[Resource, FrozenSet[Action]]] = _freeze({
    Role.ADMIN: {
        Resource.GUESTS: _CRUD_EXPORT,
        Resource.MEALS: _CRUD_EXPORT,
        Resource.SERVICES: _CRUD_EXPORT,
        Resource.DONATIONS: _CRUD_EXPORT,
        Resource.SETTINGS: _CRUD,
    },
    Role.BOARD: {
        Resource.GUESTS: _CRUD_EXPORT,
        Resource.MEALS: _CRUD_EXPORT,
        Resource.SERVICES: _CRUD_EXPORT,
        Resource.DONATIONS: _CRUD_EXPORT,
        Resource.SETTINGS: _READ,
    },
    Role.STAFF: {
        Resource.GUESTS: _CRUD,
        Resource.MEALS: _CRUD,
        Resource.SERVICES: _CRUD,
        Resource.DONATIONS: _CRUD,
        Resource.SETTINGS: _READ,
    },
    Role.CHECKIN: {
        Resource.GUESTS: _CREATE_READ,
        Resource.MEALS: _CREATE_READ,
        Resource.SERVICES: _CREATE_READ,
        Resource.DONATIONS: _READ,
        Resource.SETTINGS: _READ,
    },
})

# ── Route policy table ───────────────────────────────────────────────
ROUTE_ACCESS: Mapping[Role, Tuple[str, ...]] = MappingProxyType({
    Role.ADMIN: ("/check-in", "/services", "/admin", "/settings"),
    Role.BOARD: ("/check-in", "/services", "/admin"),
    Role.STAFF: ("/check-in", "/services", "/admin"),
    Role.CHECKIN: ("/check-in", "/services"),
})

# ── Explicit allow-lists ─────────────────────────────────────────────
# Applied on top of the matrix at specific endpoints.
EXPORT_ROLES: FrozenSet[Role] = frozenset({Role.ADMIN, Role.BOARD})
USER_ADMIN_ROLES: FrozenSet[Role] = frozenset({Role.ADMIN})


def has_permission(role: Optional[Role], resource: Resource, action: Action) -> bool:
    """Default-deny lookup of (role, resource, action) in the matrix."""
    if role is None:
        return False
    grants = PERMISSIONS.get(role)
    if not grants:
        return False
    actions = grants.get(resource)
    if not actions:
        return False
    return action in actions


def has_access(role: Optional[Role], pathname: str) -> bool:
    """True if *pathname* starts with one of the role's allowed prefixes.

    Matching is a plain string prefix test, so ``/admin`` also admits
    ``/administration``.
    """
    if role is None:
        return False
    return any(pathname.startswith(prefix) for prefix in ROUTE_ACCESS.get(role, ()))


def get_default_path(role: Optional[Role]) -> str:
    """Landing page after sign-in (or the login page without a role)."""
    if role is None:
        return LOGIN_PATH
    return DEFAULT_PATH


def roles_granted(resource: Resource, action: Action) -> FrozenSet[Role]:
    return frozenset(role for role in Role if has_permission(role, resource, action))


def permissions_for(role: Optional[Role]) -> Dict[str, List[str]]:
    """Serialisable {resource: [actions]} view of a role's grants."""
    return {
        resource.value: sorted(a.value for a in Action if has_permission(role, resource, a))
        for resource in Resource
    }


# ── Shortcuts ────────────────────────────────────────────────────────
# Coarse predicates used by the UI; each one is a query over PERMISSIONS.

def can_delete(role: Optional[Role]) -> bool:
    return all(has_permission(role, r, Action.DELETE) for r in DATA_RESOURCES)


def can_modify_settings(role: Optional[Role]) -> bool:
    return has_permission(role, Resource.SETTINGS, Action.UPDATE)


def is_admin_role(role: Optional[Role]) -> bool:
    return role is Role.ADMIN
