"""
Database engine initialisation and connectivity checks.
"""

import sys

from sqlalchemy import create_engine, text

from outreach.config import get_env


def init_engine():
    """Create a SQLAlchemy engine and verify the connection."""
    db_uri = get_env("DB_URI")
    engine = create_engine(db_uri, echo=False, future=True)
    if not ping(engine):
        print("ERROR: could not connect to DB", file=sys.stderr)
        sys.exit(1)
    print("[init] Connected to DB.")
    return engine


def ping(engine) -> bool:
    """Run a trivial query; False if the database is unreachable."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        print(f"[WARN] Database ping failed: {e}", file=sys.stderr)
        return False
    return True
