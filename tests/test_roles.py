"""
Unit tests for the role registry, permission matrix and route policy.
"""

import itertools
from types import MappingProxyType

import pytest

from outreach import roles
from outreach.roles import (
    DATA_RESOURCES,
    PERMISSIONS,
    ROUTE_ACCESS,
    Action,
    Resource,
    Role,
    can_delete,
    can_modify_settings,
    get_default_path,
    has_access,
    has_permission,
    is_admin_role,
    permissions_for,
    roles_granted,
)


# ── Canonical grants, written out independently of roles.py ─────────

CRUD = {"create", "read", "update", "delete"}
EXPECTED = {
    "admin": {
        "guests": CRUD | {"export"}, "meals": CRUD | {"export"},
        "services": CRUD | {"export"}, "donations": CRUD | {"export"},
        "settings": CRUD,
    },
    "board": {
        "guests": CRUD | {"export"}, "meals": CRUD | {"export"},
        "services": CRUD | {"export"}, "donations": CRUD | {"export"},
        "settings": {"read"},
    },
    "staff": {
        "guests": CRUD, "meals": CRUD, "services": CRUD, "donations": CRUD,
        "settings": {"read"},
    },
    "checkin": {
        "guests": {"create", "read"}, "meals": {"create", "read"},
        "services": {"create", "read"}, "donations": {"read"},
        "settings": {"read"},
    },
}

ALL_TRIPLES = list(itertools.product(Role, Resource, Action))


# ── Tests: registry ──────────────────────────────────────────────────

def test_closed_sets():
    assert {r.value for r in Role} == {"admin", "board", "staff", "checkin"}
    assert {r.value for r in Resource} == {"guests", "meals", "services", "donations", "settings"}
    assert {a.value for a in Action} == {"create", "read", "update", "delete", "export"}


def test_matrix_is_total():
    for role in Role:
        assert set(PERMISSIONS[role]) == set(Resource)


def test_matrix_is_read_only():
    with pytest.raises(TypeError):
        PERMISSIONS[Role.CHECKIN] = {}
    with pytest.raises(TypeError):
        PERMISSIONS[Role.CHECKIN][Resource.SETTINGS] = frozenset(Action)
    with pytest.raises(AttributeError):
        PERMISSIONS[Role.CHECKIN][Resource.GUESTS].add(Action.DELETE)
    with pytest.raises(TypeError):
        ROUTE_ACCESS[Role.CHECKIN] = ("/",)


# ── Tests: has_permission ────────────────────────────────────────────

@pytest.mark.parametrize("role,resource,action", ALL_TRIPLES)
def test_matrix_fidelity(role, resource, action):
    expected = action.value in EXPECTED[role.value][resource.value]
    assert has_permission(role, resource, action) is expected


@pytest.mark.parametrize("resource,action", list(itertools.product(Resource, Action)))
def test_null_role_is_denied(resource, action):
    assert has_permission(None, resource, action) is False


def test_missing_matrix_entry_is_denied(monkeypatch):
    partial = MappingProxyType({
        Role.ADMIN: MappingProxyType({Resource.GUESTS: frozenset(Action)}),
        Role.STAFF: MappingProxyType({}),
    })
    monkeypatch.setattr(roles, "PERMISSIONS", partial)

    assert has_permission(Role.ADMIN, Resource.GUESTS, Action.DELETE) is True
    for action in Action:
        assert has_permission(Role.ADMIN, Resource.MEALS, action) is False
        assert has_permission(Role.STAFF, Resource.GUESTS, action) is False
        assert has_permission(Role.BOARD, Resource.GUESTS, action) is False


def test_repeated_evaluation_is_stable():
    first = [has_permission(*t) for t in ALL_TRIPLES]
    second = [has_permission(*t) for t in ALL_TRIPLES]
    assert first == second
    assert [has_access(r, "/admin") for r in Role] == [has_access(r, "/admin") for r in Role]


def test_permissions_for_serialises_grants():
    perms = permissions_for(Role.CHECKIN)
    assert perms["donations"] == ["read"]
    assert perms["guests"] == ["create", "read"]
    assert permissions_for(None) == {r.value: [] for r in Resource}


def test_roles_granted():
    assert roles_granted(Resource.GUESTS, Action.EXPORT) == {Role.ADMIN, Role.BOARD}
    assert roles_granted(Resource.SETTINGS, Action.UPDATE) == {Role.ADMIN}
    assert roles_granted(Resource.SETTINGS, Action.EXPORT) == frozenset()


# ── Tests: shortcuts agree with the matrix ───────────────────────────

@pytest.mark.parametrize("role", list(Role) + [None])
def test_can_delete_matches_matrix(role):
    expected = all(
        role is not None and "delete" in EXPECTED[role.value][r.value]
        for r in DATA_RESOURCES
    )
    assert can_delete(role) is expected


@pytest.mark.parametrize("role", list(Role) + [None])
def test_can_modify_settings_matches_matrix(role):
    assert can_modify_settings(role) is has_permission(role, Resource.SETTINGS, Action.UPDATE)


def test_delete_capable_roles():
    assert {r for r in Role if can_delete(r)} == {Role.ADMIN, Role.BOARD, Role.STAFF}


def test_is_admin_role():
    assert is_admin_role(Role.ADMIN)
    assert not is_admin_role(Role.BOARD)
    assert not is_admin_role(None)


# ── Tests: route policy ──────────────────────────────────────────────

@pytest.mark.parametrize("path", ["/", "/check-in", "/admin", "/login", ""])
def test_null_role_has_no_access(path):
    assert has_access(None, path) is False


@pytest.mark.parametrize("role", list(Role))
def test_configured_prefixes_are_accessible(role):
    for prefix in ROUTE_ACCESS[role]:
        assert has_access(role, prefix)
        assert has_access(role, prefix + "/nested/page")
    assert has_access(role, "/reports") is False
    assert has_access(role, "/") is False


def test_checkin_cannot_reach_admin():
    assert has_access(Role.CHECKIN, "/admin/reports") is False
    assert has_access(Role.STAFF, "/admin/reports") is True


def test_only_admin_reaches_settings():
    assert [r for r in Role if has_access(r, "/settings")] == [Role.ADMIN]


def test_prefix_match_admits_sibling_paths():
    assert has_access(Role.STAFF, "/administration")
    assert has_access(Role.CHECKIN, "/services-archive")


def test_default_path():
    assert get_default_path(None) == "/login"
    for role in Role:
        assert get_default_path(role) == "/check-in"
