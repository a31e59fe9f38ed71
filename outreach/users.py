"""
User directory maintenance (the ``users`` table that stores each account's role).
"""

from typing import Any, Dict, List

from sqlalchemy import text

from outreach.roles import Role


def list_users(engine) -> List[Dict[str, Any]]:
    sql = text("SELECT id, email, role, created_at FROM users ORDER BY created_at DESC")
    with engine.connect() as conn:
        return [dict(row) for row in conn.execute(sql).mappings().all()]


def update_user_role(engine, user_id: str, role: Role) -> int:
    """Set *user_id*'s role. Returns the number of rows changed."""
    sql = text("UPDATE users SET role = :role WHERE id = :uid")
    with engine.begin() as conn:
        return conn.execute(sql, {"role": role.value, "uid": user_id}).rowcount


def delete_user(engine, user_id: str) -> int:
    sql = text("DELETE FROM users WHERE id = :uid")
    with engine.begin() as conn:
        return conn.execute(sql, {"uid": user_id}).rowcount
