"""
Interactive CLI for checking what a user may do.
Resolves a user's role against the database and answers permission and route questions.
"""

import pandas as pd

from outreach.database import init_engine
from outreach.exports import EXPORT_RESOURCES
from outreach.models import Actor
from outreach.navigation import route_redirect
from outreach.rbac import check_resolution, resolve_role
from outreach.roles import EXPORT_ROLES, Action, Resource, Role, has_access, has_permission

HELP = """Commands:
  <resource> <action>   e.g. "guests delete"
  export guests|meals   export check (matrix + export allow-list)
  /<path>               route access, e.g. "/admin/reports"
  matrix                print the full permission matrix
  quit"""


def matrix_frame() -> pd.DataFrame:
    """Role x resource table of granted actions."""
    data = {
        resource.value: [
            ",".join(a.value for a in Action if has_permission(role, resource, a)) or "-"
            for role in Role
        ]
        for resource in Resource
    }
    return pd.DataFrame(data, index=[role.value for role in Role])


def answer(resolution, line: str) -> str:
    role = resolution.role
    parts = line.split()

    if line.startswith("/"):
        target = route_redirect(role, True, line)
        if target is None:
            return f"ALLOW  {line}"
        note = "" if has_access(role, line) else " (no access)"
        return f"REDIRECT {line} -> {target}{note}"
    if len(parts) == 2 and parts[0] == "export":
        try:
            resource = Resource(parts[1])
        except ValueError:
            return f"Unknown resource '{parts[1]}'."
        if resource not in EXPORT_RESOURCES:
            exportable = ", ".join(r.value for r in EXPORT_RESOURCES)
            return f"No export exists for {resource.value}; exportable: {exportable}."
        result = check_resolution(resolution, resource, Action.READ, only=EXPORT_ROLES)
        return f"{result.decision.value.upper()}  export {resource.value} {result.reason}".rstrip()

    if len(parts) == 2:
        try:
            resource, action = Resource(parts[0]), Action(parts[1])
        except ValueError:
            return "Expected '<resource> <action>'. Type 'help' for commands."
        result = check_resolution(resolution, resource, action)
        return f"{result.decision.value.upper()}  {resource.value}:{action.value} {result.reason}".rstrip()

    return "Unrecognised command. Type 'help' for commands."


def main():
    print("=== Community Services Admin: access checker ===\n")

    engine = init_engine()

    # ── Identify ─────────────────────────────────────────────────────
    try:
        user_id = input("Enter user id (or 'quit'): ").strip()
        claimed = input("Role from session metadata (blank for none): ").strip()
    except (EOFError, KeyboardInterrupt):
        print("\nExiting.")
        return

    if not user_id or user_id.lower() in {"quit", "exit"}:
        print("Goodbye.")
        return

    resolution = resolve_role(engine, Actor(user_id=user_id, metadata={"role": claimed} if claimed else {}))
    if resolution.error:
        print(f"\n[WARN] User directory unavailable: {resolution.error}")
    if not resolution.resolved:
        print(f"\n[auth] No role could be determined for {user_id}; every check will be denied.")
    else:
        print(f"\n[auth] {user_id} resolved as {resolution.role.value} (from {resolution.source})")
    print(HELP)

    # ── REPL ─────────────────────────────────────────────────────────
    while True:
        try:
            line = input("\n> ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nExiting.")
            break

        if not line:
            continue
        if line.lower() in {"quit", "exit"}:
            print("Goodbye.")
            break
        if line == "help":
            print(HELP)
        elif line == "matrix":
            print(matrix_frame().to_string())
        else:
            print(answer(resolution, line))


if __name__ == "__main__":
    main()
