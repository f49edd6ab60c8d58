"""Pytest configuration and shared fixtures."""

import pytest
from unittest.mock import Mock, patch
from datetime import datetime

from mariasession.config.settings import Settings
from mariasession.database.connection import Connection
from mariasession.database.models import QueryResult
from mariasession.database.options import ConnectionOptions


def make_cursor(columns=None, rows=None, rowcount=-1):
    """Build a cursor double that serves ``rows`` through fetchall/fetchmany."""
    cursor = Mock()
    cursor.description = [(name, 253) for name in columns] if columns else None
    cursor.rowcount = rowcount
    remaining = list(rows or [])

    def fetchall():
        batch = list(remaining)
        remaining.clear()
        return batch

    def fetchmany(size=1):
        batch = remaining[:size]
        del remaining[:size]
        return batch

    cursor.fetchall.side_effect = fetchall
    cursor.fetchmany.side_effect = fetchmany
    return cursor


@pytest.fixture
def cursor_factory():
    """Factory for cursor doubles."""
    return make_cursor


@pytest.fixture
def sample_options():
    """Options for a TCP session without TLS."""
    return ConnectionOptions(
        host="localhost",
        user="test_user",
        password="test_password",
        dbname="test_db"
    )


@pytest.fixture
def mock_transport_class():
    """Patch the transport used by Connection; yields the class mock."""
    with patch('mariasession.database.connection.Transport') as transport_class:
        transport = transport_class.return_value
        transport.escape.side_effect = lambda value: value.replace("\\", "\\\\").replace("'", "\\'")
        transport.execute.return_value = 0
        transport.open_cursor.side_effect = lambda sql: make_cursor(['x'], [(1,), (2,), (3,)])
        yield transport_class


@pytest.fixture
def mock_transport(mock_transport_class):
    """The transport instance a connection will own."""
    return mock_transport_class.return_value


@pytest.fixture
def advisories():
    """Collects advisory messages emitted by a connection."""
    return []


@pytest.fixture
def connection(mock_transport, sample_options, advisories):
    """A connected Connection backed by the mocked transport."""
    conn = Connection(on_warning=advisories.append)
    conn.connect(sample_options, 3306, 0)
    yield conn
    conn.disconnect()


@pytest.fixture
def mock_settings(sample_options):
    """Create mock settings for testing."""
    settings = Mock(spec=Settings)
    settings.host = "localhost"
    settings.port = 3306
    settings.user = "test_user"
    settings.password = "test_password"
    settings.dbname = "test_db"
    settings.client_flag = 0
    settings.debug = False
    settings.log_level = "INFO"
    settings.log_file = None
    settings.default_output_format = "table"
    settings.to_connection_options.return_value = sample_options
    return settings


@pytest.fixture
def sample_query_result():
    """Create a sample fetched chunk."""
    return QueryResult(
        columns=['id', 'name', 'email'],
        rows=[
            [1, 'John Doe', 'john@example.com'],
            [2, 'Jane Smith', 'jane@example.com'],
            [3, 'Bob Johnson', None]
        ],
        row_count=3,
        execution_time=0.123,
        query="SELECT id, name, email FROM users LIMIT 3",
        timestamp=datetime(2025, 1, 15, 12, 0, 0),
        completed=True
    )


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test (requires database)"
    )
