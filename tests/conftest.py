"""
Shared fakes for the SQLAlchemy engine and the Flask test client.
"""

import pytest

from outreach.api.app import create_app
from outreach.api.auth import generate_token


class FakeResult:
    """Mimic SQLAlchemy Result with .mappings().first() / .all() and .rowcount."""
    def __init__(self, rows, rowcount=None):
        self._rows = list(rows)
        self.rowcount = len(self._rows) if rowcount is None else rowcount

    def mappings(self):
        return self

    def first(self):
        return self._rows[0] if self._rows else None

    def all(self):
        return list(self._rows)


class FakeConn:
    def __init__(self, engine):
        self._engine = engine

    def execute(self, sql, params=None):
        statement = str(sql)
        self._engine.executed.append((statement, params))
        for fragment, outcome in self._engine.responses.items():
            if fragment not in statement:
                continue
            if callable(outcome):
                outcome = outcome(params)
            if isinstance(outcome, Exception):
                raise outcome
            if isinstance(outcome, int):
                return FakeResult([], rowcount=outcome)
            return FakeResult(outcome)
        return FakeResult([])

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


class FakeEngine:
    """Mimic engine.connect() / engine.begin().

    *responses* maps a SQL fragment to rows, a rowcount, an exception to
    raise, or a callable taking the bound params.
    """
    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.executed = []

    def connect(self):
        return FakeConn(self)

    def begin(self):
        return FakeConn(self)

    def queries(self, fragment):
        return [sql for sql, _ in self.executed if fragment in sql]


ROLE_LOOKUP = "SELECT role FROM users"


def engine_with_role(role, responses=None):
    """Engine whose users table stores *role* for every id (None: no row)."""
    rows = [] if role is None else [{"role": role}]
    return FakeEngine({ROLE_LOOKUP: rows, **(responses or {})})


@pytest.fixture
def make_client():
    def _make(engine):
        app = create_app(engine)
        app.config["TESTING"] = True
        return app.test_client()
    return _make


def auth_header(user_id="user-1", **metadata):
    return {"Authorization": f"Bearer {generate_token(user_id, metadata)}"}
