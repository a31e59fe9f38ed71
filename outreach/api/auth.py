"""
Bearer token handling and authorization decorators for the Flask API.

Tokens are issued by the identity provider; this module only verifies them
and turns their claims into an Actor.
"""

from datetime import datetime, timedelta, timezone
from functools import wraps
from typing import Any, Dict, Iterable, Optional

import jwt
from flask import jsonify, request

from outreach.config import SECRET_KEY, TOKEN_EXPIRY_HOURS
from outreach.models import AccessDecision, Actor
from outreach.rbac import authorize
from outreach.roles import Action, Resource, Role


def generate_token(user_id: str, metadata: Optional[Dict[str, Any]] = None) -> str:
    """Generate a JWT carrying the actor id and session metadata."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "user_metadata": metadata or {},
        "iat": now,
        "exp": now + timedelta(hours=TOKEN_EXPIRY_HOURS),
    }
    return jwt.encode(payload, SECRET_KEY, algorithm="HS256")


def verify_token(token: str) -> Optional[Dict[str, Any]]:
    """Verify a JWT token and return the decoded payload (or None)."""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=["HS256"])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def extract_token() -> Optional[str]:
    """Bearer header first, then a ``token`` field in the JSON body or query."""
    auth_header = request.headers.get("Authorization", "")
    parts = auth_header.split(" ")
    if len(parts) == 2 and parts[0].lower() == "bearer" and parts[1]:
        return parts[1]

    if request.is_json:
        body = request.get_json(silent=True)
        if isinstance(body, dict) and body.get("token"):
            return body["token"]
    return request.args.get("token")


def actor_from_claims(payload: Dict[str, Any]) -> Optional[Actor]:
    sub = payload.get("sub")
    if not sub:
        return None
    metadata = payload.get("user_metadata")
    return Actor(user_id=str(sub), metadata=metadata if isinstance(metadata, dict) else {})


def current_actor() -> Optional[Actor]:
    """Actor for the current request, or None when no valid token is sent."""
    token = extract_token()
    if not token:
        return None
    payload = verify_token(token)
    if not payload:
        return None
    return actor_from_claims(payload)


def token_required(f):
    """Decorator that protects endpoints with JWT authentication."""
    @wraps(f)
    def decorated(*args, **kwargs):
        if "Authorization" in request.headers and len(request.headers["Authorization"].split(" ")) != 2:
            return jsonify({"error": "Invalid authorization header format"}), 401

        token = extract_token()
        if not token:
            return jsonify({"error": "Authentication token is missing"}), 401

        payload = verify_token(token)
        if not payload:
            return jsonify({"error": "Invalid or expired token"}), 401

        actor = actor_from_claims(payload)
        if actor is None:
            return jsonify({"error": "Token has no subject"}), 401

        request.actor = actor
        return f(*args, **kwargs)

    return decorated


def require_permission(
    engine,
    resource: Resource,
    action: Action,
    only: Optional[Iterable[Role]] = None,
    message: str = "Insufficient permissions",
):
    """Decorator running the authorization gate before the endpoint body.

    Must sit below ``token_required``. An unresolved role yields 401, a
    resolved role without the grant (or outside *only*) yields 403.
    """
    def decorator(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            result = authorize(engine, getattr(request, "actor", None), resource, action, only)

            if result.decision is AccessDecision.UNRESOLVED:
                body = {"error": "Unauthorized"}
                if result.resolution.error:
                    body["details"] = "Role could not be determined: user directory unavailable."
                return jsonify(body), 401

            if result.decision is AccessDecision.DENIED:
                return jsonify({"error": message, "details": result.reason}), 403

            request.resolution = result.resolution
            request.role = result.role
            return f(*args, **kwargs)

        return decorated

    return decorator
