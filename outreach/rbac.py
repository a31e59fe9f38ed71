"""
Role-Based Access Control – resolving the actor's role and gating privileged work.
"""

import sys
from collections.abc import Mapping
from typing import Any, Iterable, Optional, Tuple

from sqlalchemy import text

from outreach.models import AccessDecision, Actor, GateResult, RoleResolution
from outreach.roles import Action, Resource, Role, has_permission


def normalize_role(value: Any) -> Optional[Role]:
    """Coerce an arbitrary raw value to a Role, or None if it is not one."""
    if not isinstance(value, str):
        return None
    try:
        return Role(value.strip().lower())
    except ValueError:
        return None


def metadata_role(metadata: Any) -> Optional[Role]:
    """Role claimed in session metadata (a loosely typed mapping)."""
    if not isinstance(metadata, Mapping):
        return None
    return normalize_role(metadata.get("role"))


def fetch_persisted_role(engine, user_id: str) -> Tuple[Any, Optional[str]]:
    """Look up the raw role stored for *user_id*.

    Returns ``(raw_role, error)``. Store failures are reported through
    *error* instead of being raised.
    """
    sql = text("SELECT role FROM users WHERE id = :uid")
    try:
        with engine.connect() as conn:
            row = conn.execute(sql, {"uid": user_id}).mappings().first()
    except Exception as e:
        return None, str(e) or e.__class__.__name__

    if not row:
        return None, None
    return row.get("role"), None


def resolve_role(engine, actor: Optional[Actor]) -> RoleResolution:
    """Work out the effective role of *actor* for the current request.

    The users table is authoritative (administrators can correct it); the
    role in session metadata is only used when the table has no valid role.
    Never raises.
    """
    if actor is None or not actor.user_id:
        return RoleResolution(role=None)

    claimed = metadata_role(actor.metadata)
    raw, error = fetch_persisted_role(engine, actor.user_id)
    if error:
        print(f"[WARN] Role lookup failed for user {actor.user_id}: {error}", file=sys.stderr)

    stored = normalize_role(raw)
    if stored is not None:
        return RoleResolution(role=stored, source="record", error=error)
    if claimed is not None:
        return RoleResolution(role=claimed, source="metadata", error=error)
    return RoleResolution(role=None, error=error)


def check_resolution(
    resolution: RoleResolution,
    resource: Resource,
    action: Action,
    only: Optional[Iterable[Role]] = None,
) -> GateResult:
    """Decide on an already resolved role: matrix first, then the allow-list."""
    role = resolution.role
    if role is None:
        return GateResult(AccessDecision.UNRESOLVED, resolution, "No role could be determined.")

    if not has_permission(role, resource, action):
        return GateResult(
            AccessDecision.DENIED, resolution,
            f"Role '{role.value}' may not {action.value} {resource.value}.",
        )

    if only is not None and role not in frozenset(only):
        return GateResult(
            AccessDecision.DENIED, resolution,
            f"Role '{role.value}' is not permitted to perform this operation.",
        )

    return GateResult(AccessDecision.ALLOWED, resolution)


def authorize(
    engine,
    actor: Optional[Actor],
    resource: Resource,
    action: Action,
    only: Optional[Iterable[Role]] = None,
) -> GateResult:
    """Resolve *actor*'s role and check it against (resource, action).

    *only* is an optional explicit role allow-list that must be satisfied in
    addition to the matrix grant.
    """
    return check_resolution(resolve_role(engine, actor), resource, action, only)
