"""
Flask application factory and server entry-point.
"""

import os
import sys
import traceback

from flask import Flask
from flask_cors import CORS

from outreach.config import TOKEN_EXPIRY_HOURS
from outreach.database import init_engine
from outreach.roles import POLICY_VERSION
from outreach.api.routes import register_routes


def create_app(engine=None):
    """Build and return a fully configured Flask application.

    *engine* may be supplied by the caller (tests); otherwise one is created
    from ``DB_URI``.
    """
    app = Flask(__name__)
    CORS(app)

    # ── Initialise shared resources ──────────────────────────────────
    if engine is None:
        try:
            print("[init] Initializing database connection...")
            engine = init_engine()
            print("[init] ✓ API server ready")
        except Exception as e:
            print(f"[FATAL] Failed to initialize: {e}", file=sys.stderr)
            traceback.print_exc()
            sys.exit(1)

    # ── Register routes ──────────────────────────────────────────────
    register_routes(app, engine)

    return app


def main():
    """Run the development server."""
    print("=" * 60)
    print("Community Services Admin – REST API Server")
    print("=" * 60)

    app = create_app()

    host = os.getenv("API_HOST", "0.0.0.0")
    port = int(os.getenv("API_PORT", "8000"))
    debug = os.getenv("FLASK_ENV") == "development"

    print(f"\n[server] Starting Flask API on {host}:{port}")
    print(f"[server] Debug mode: {debug}")
    print(f"[server] Access policy version: {POLICY_VERSION}")
    print(f"[server] Token lifetime: {TOKEN_EXPIRY_HOURS} hours")
    print("\nAPI Endpoints:")
    print(f"  - GET    http://{host}:{port}/api/me")
    print(f"  - GET    http://{host}:{port}/api/navigation?path=/check-in")
    print(f"  - GET    http://{host}:{port}/api/export/guests")
    print(f"  - GET    http://{host}:{port}/api/export/attendance")
    print(f"  - GET    http://{host}:{port}/api/users")
    print(f"  - PATCH  http://{host}:{port}/api/users/<id>/role")
    print(f"  - DELETE http://{host}:{port}/api/users/<id>")
    print(f"  - GET    http://{host}:{port}/health")
    print("\n" + "=" * 60)

    app.run(host=host, port=port, debug=debug, threaded=True)


if __name__ == "__main__":
    main()
