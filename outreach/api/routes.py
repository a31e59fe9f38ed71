"""
Flask route handlers for the REST API.
"""

import sys
import traceback

from flask import Response, jsonify, request

from outreach.api.auth import current_actor, require_permission, token_required
from outreach.database import ping
from outreach.exports import (
    attendance_filename,
    attendance_frame,
    fetch_attendance,
    fetch_guests,
    guests_filename,
    guests_frame,
    iso_value,
    to_csv,
)
from outreach.navigation import is_passthrough, is_public, route_redirect
from outreach.rbac import normalize_role, resolve_role
from outreach.roles import (
    EXPORT_ROLES,
    POLICY_VERSION,
    ROUTE_ACCESS,
    USER_ADMIN_ROLES,
    Action,
    Resource,
    can_delete,
    can_modify_settings,
    get_default_path,
    has_access,
    is_admin_role,
    permissions_for,
)
from outreach.users import delete_user, list_users, update_user_role


EXPORT_DENIED = "Insufficient permissions for data export"
USER_ADMIN_DENIED = "Only admins can manage users"


def _csv_response(csv_text: str, filename: str) -> Response:
    return Response(
        csv_text,
        status=200,
        mimetype="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def register_routes(app, engine):
    """Register all API routes on the Flask *app*."""

    # ── Health / info ────────────────────────────────────────────────

    @app.route("/", methods=["GET"])
    def index():
        return jsonify({
            "service": "Community Services Admin API",
            "version": "1.0.0",
            "policy_version": POLICY_VERSION,
            "status": "running",
            "endpoints": {
                "me": "/api/me",
                "navigation": "/api/navigation",
                "export_guests": "/api/export/guests",
                "export_attendance": "/api/export/attendance",
                "users": "/api/users",
                "health": "/health",
            },
        })

    @app.route("/health", methods=["GET"])
    def health():
        checks = {"database": engine is not None and ping(engine)}
        all_healthy = all(checks.values())
        return jsonify({
            "status": "healthy" if all_healthy else "unhealthy",
            "checks": checks,
        }), 200 if all_healthy else 503

    # ── Actor / navigation ───────────────────────────────────────────

    @app.route("/api/me", methods=["GET"])
    @token_required
    def get_me():
        actor = request.actor
        resolution = resolve_role(engine, actor)
        role = resolution.role
        return jsonify({
            "success": True,
            "user": {"id": actor.user_id},
            "role": role.value if role else None,
            "role_source": resolution.source,
            "permissions": permissions_for(role),
            "allowed_paths": list(ROUTE_ACCESS.get(role, ())) if role else [],
            "default_path": get_default_path(role),
            "can_delete": can_delete(role),
            "can_modify_settings": can_modify_settings(role),
            "is_admin": is_admin_role(role),
        }), 200

    @app.route("/api/navigation", methods=["GET"])
    def navigation():
        path = request.args.get("path", "").strip()
        if not path.startswith("/"):
            return jsonify({"error": "path must be an absolute path"}), 400

        actor = current_actor()
        role = resolve_role(engine, actor).role if actor else None
        redirect_to = route_redirect(role, actor is not None, path)
        return jsonify({
            "path": path,
            "redirect": redirect_to,
            "passthrough": is_passthrough(path),
            "allowed": is_public(path) or has_access(role, path),
        }), 200

    # ── Exports ──────────────────────────────────────────────────────

    @app.route("/api/export/guests", methods=["GET"])
    @token_required
    @require_permission(engine, Resource.GUESTS, Action.READ, only=EXPORT_ROLES, message=EXPORT_DENIED)
    def export_guests():
        try:
            rows = fetch_guests(engine)
        except Exception as e:
            print(f"[ERROR] Failed to fetch guests: {e}", file=sys.stderr)
            traceback.print_exc()
            return jsonify({"error": "Failed to fetch guests"}), 500

        return _csv_response(to_csv(guests_frame(rows)), guests_filename())

    @app.route("/api/export/attendance", methods=["GET"])
    @token_required
    @require_permission(engine, Resource.MEALS, Action.READ, only=EXPORT_ROLES, message=EXPORT_DENIED)
    def export_attendance():
        start_date = request.args.get("startDate")
        end_date = request.args.get("endDate")
        meal_type = request.args.get("mealType")

        try:
            rows = fetch_attendance(engine, start_date, end_date, meal_type)
        except Exception as e:
            print(f"[ERROR] Failed to fetch attendance: {e}", file=sys.stderr)
            traceback.print_exc()
            return jsonify({"error": "Failed to fetch attendance records"}), 500

        return _csv_response(
            to_csv(attendance_frame(rows)),
            attendance_filename(start_date, end_date),
        )

    # ── User directory ───────────────────────────────────────────────

    @app.route("/api/users", methods=["GET"])
    @token_required
    @require_permission(engine, Resource.SETTINGS, Action.READ, only=USER_ADMIN_ROLES, message=USER_ADMIN_DENIED)
    def get_users():
        try:
            users = list_users(engine)
        except Exception as e:
            print(f"[ERROR] Failed to fetch users: {e}", file=sys.stderr)
            traceback.print_exc()
            return jsonify({"error": f"Failed to fetch users: {e}"}), 500

        for user in users:
            user["created_at"] = iso_value(user.get("created_at"))
        return jsonify({"success": True, "users": users}), 200

    @app.route("/api/users/<user_id>/role", methods=["PATCH"])
    @token_required
    @require_permission(engine, Resource.SETTINGS, Action.UPDATE, only=USER_ADMIN_ROLES, message=USER_ADMIN_DENIED)
    def set_user_role(user_id):
        data = request.get_json(silent=True)
        new_role = normalize_role(data.get("role")) if isinstance(data, dict) else None
        if new_role is None:
            return jsonify({"error": "role must be one of admin, board, staff, checkin"}), 400

        try:
            changed = update_user_role(engine, user_id, new_role)
        except Exception as e:
            print(f"[ERROR] Failed to update role for user {user_id}: {e}", file=sys.stderr)
            traceback.print_exc()
            return jsonify({"error": f"Failed to update role: {e}"}), 500

        if not changed:
            return jsonify({"error": "User not found"}), 404
        return jsonify({"success": True, "id": user_id, "role": new_role.value}), 200

    @app.route("/api/users/<user_id>", methods=["DELETE"])
    @token_required
    @require_permission(engine, Resource.SETTINGS, Action.DELETE, only=USER_ADMIN_ROLES, message=USER_ADMIN_DENIED)
    def remove_user(user_id):
        try:
            changed = delete_user(engine, user_id)
        except Exception as e:
            print(f"[ERROR] Failed to delete user {user_id}: {e}", file=sys.stderr)
            traceback.print_exc()
            return jsonify({"error": f"Failed to delete user: {e}"}), 500

        if not changed:
            return jsonify({"error": "User not found"}), 404
        return jsonify({"success": True, "id": user_id}), 200

    # ── Error handlers ───────────────────────────────────────────────

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "Endpoint not found", "message": str(e)}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"error": "Method not allowed", "message": str(e)}), 405

    @app.errorhandler(500)
    def internal_error(e):
        return jsonify({"error": "Internal server error", "message": str(e)}), 500
