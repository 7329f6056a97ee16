import os

os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient

from app.database.supabase_client import get_supabase
from app.main import app


class FakeResult:
    def __init__(self, data):
        self.data = data


class FakeTable:
    """Rows of one table plus a log of executed operations"""

    def __init__(self, unique=("id", "email")):
        self.rows = []
        self.unique = unique
        self.operations = []
        self.error = None


class FakeQuery:
    def __init__(self, table: FakeTable):
        self.table = table
        self.filters = []
        self.row_limit = None
        self.row_to_insert = None

    def select(self, *columns):
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def limit(self, count):
        self.row_limit = count
        return self

    def insert(self, row):
        self.row_to_insert = dict(row)
        return self

    def execute(self):
        operation = "insert" if self.row_to_insert is not None else "select"
        self.table.operations.append(operation)
        if self.table.error is not None:
            raise self.table.error
        if self.row_to_insert is not None:
            for existing in self.table.rows:
                for column in self.table.unique:
                    if existing.get(column) == self.row_to_insert.get(column):
                        raise RuntimeError(
                            f'duplicate key value violates unique constraint "users_{column}_key"'
                        )
            row = {**self.row_to_insert, "created_at": "2026-01-01T00:00:00+00:00"}
            self.table.rows.append(row)
            return FakeResult([dict(row)])
        rows = [r for r in self.table.rows if all(r.get(c) == v for c, v in self.filters)]
        if self.row_limit is not None:
            rows = rows[:self.row_limit]
        return FakeResult([dict(r) for r in rows])


class FakeSupabase:
    """Enough of supabase.Client's table API for the users service"""

    def __init__(self):
        self.tables = {}

    def table(self, name):
        return FakeQuery(self.tables.setdefault(name, FakeTable()))

    def users(self) -> FakeTable:
        return self.tables.setdefault("users", FakeTable())


@pytest.fixture
def fake_supabase():
    return FakeSupabase()


@pytest.fixture
def users_table(fake_supabase):
    return fake_supabase.users()


@pytest.fixture
def api_app(fake_supabase):
    app.dependency_overrides[get_supabase] = lambda: fake_supabase
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(api_app):
    with TestClient(api_app) as test_client:
        yield test_client
