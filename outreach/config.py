"""
Centralised configuration constants and environment helpers.
"""

import os
import sys

from dotenv import load_dotenv

load_dotenv()

# ── Navigation ───────────────────────────────────────────────────────
LOGIN_PATH = "/login"
DEFAULT_PATH = "/check-in"

# Reachable without a session.
PUBLIC_ROUTES = ("/login", "/offline.html", "/service-worker.js")

# Handled by the asset pipeline / API layer, never redirected.
PASSTHROUGH_PREFIXES = ("/_next", "/api")

# ── Exports ──────────────────────────────────────────────────────────
DEFAULT_GUEST_LOCATION = "Mountain View"
ANONYMOUS_GUEST_NAME = "Anonymous"

# ── API server ───────────────────────────────────────────────────────
SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-secret-key-change-in-production")
TOKEN_EXPIRY_HOURS = 24


def get_env(name: str) -> str:
    """Return an environment variable or exit with an error message."""
    value = os.getenv(name)
    if not value:
        print(f"ERROR: env var {name} is not set", file=sys.stderr)
        sys.exit(1)
    return value
