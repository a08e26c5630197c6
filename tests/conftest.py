"""
Shared test fixtures.
"""

import os
import sys
from pathlib import Path

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Settings are loaded at import time; give them something to validate
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

import pytest
from unittest.mock import MagicMock, patch
from datetime import datetime, timezone
from typing import Generator

# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """
    Mock Supabase query builder with chainable methods.

    Filters are recorded but not applied; configure table data to match the
    query under test.
    """

    def __init__(self, table_name: str, client: "MockSupabaseClient", data: list = None, count: int = None):
        self._table_name = table_name
        self._client = client
        self._data = data or []
        self._count = count
        self.filters = []

    def select(self, *args, **kwargs):
        return self

    def insert(self, data):
        if isinstance(data, dict):
            data = [data]
        rows = []
        for item in data:
            row = dict(item)
            row["id"] = "test-uuid-123"
            row["created_at"] = datetime.now(timezone.utc).isoformat()
            rows.append(row)
        self._client.inserted.setdefault(self._table_name, []).extend(rows)
        self._data = rows
        return self

    def eq(self, column, value):
        self.filters.append(("eq", column, value))
        return self

    def ilike(self, column, pattern):
        self.filters.append(("ilike", column, pattern))
        return self

    def in_(self, column, values):
        self.filters.append(("in", column, values))
        return self

    def order(self, column, **kwargs):
        return self

    def limit(self, count):
        self.filters.append(("limit", None, count))
        return self

    def execute(self) -> MockSupabaseResponse:
        self._client.queries.append((self._table_name, self.filters))
        error = self._client.errors.get(self._table_name)
        if error is not None:
            raise error
        return MockSupabaseResponse(
            data=self._data,
            count=self._count if self._count is not None else len(self._data)
        )


class MockSupabaseTable:
    """Mock Supabase table with configurable responses."""

    def __init__(self, name: str, client: "MockSupabaseClient", data: list = None, count: int = None):
        self._name = name
        self._client = client
        self._data = data or []
        self._count = count

    def _query(self) -> MockSupabaseQuery:
        return MockSupabaseQuery(self._name, self._client, [dict(row) for row in self._data], self._count)

    def select(self, *args, **kwargs):
        return self._query()

    def insert(self, data):
        return self._query().insert(data)


class MockSupabaseClient:
    """
    Mock Supabase client.

    Inserted rows are collected per table in `inserted`; every executed query
    is appended to `queries` as (table, filters).
    """

    def __init__(self):
        self._tables = {}
        self.errors = {}
        self.inserted = {}
        self.queries = []

    def set_table_data(self, table_name: str, data: list, count: int = None):
        """Configure mock data for a table."""
        self._tables[table_name] = {"data": data, "count": count}

    def set_table_error(self, table_name: str, error: Exception):
        """Make every query on a table raise."""
        self.errors[table_name] = error

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        config = self._tables.get(name, {"data": [], "count": None})
        return MockSupabaseTable(name, self, config["data"], config["count"])


# ===================
# FIXTURES
# ===================

@pytest.fixture
def now() -> datetime:
    """Fixed reference time for expiry calculations."""
    return datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("bot_tasks", [...])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Usage:
        def test_something(mock_db, mock_supabase):
            mock_supabase.set_table_data("current_supplier_prices", [...])
    """
    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.trade_potential_service.get_supabase_client", return_value=mock_supabase):
            yield mock_supabase


@pytest.fixture
def reply_sender() -> MagicMock:
    """Stand-in for the Twilio sender."""
    return MagicMock(return_value=True)


@pytest.fixture
def bot_service(mock_supabase, reply_sender):
    """BotService wired to the mock client and sender."""
    from services.bot_service import BotService

    return BotService(db=mock_supabase, sender=reply_sender, task_list_limit=10)


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """
    Create FastAPI test client.

    Usage:
        def test_endpoint(test_client):
            response = test_client.get("/api/bot/test")
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)
