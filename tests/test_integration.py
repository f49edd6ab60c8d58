"""
Integration tests against a live MySQL or MariaDB server.

To run:
    1. Start a server and create a scratch database
    2. MARIADB_TEST_HOST=127.0.0.1 MARIADB_TEST_USER=root MARIADB_TEST_DB=test pytest -m integration
"""

import os
import uuid
import warnings

import pytest

from mariasession.database.connection import Connection
from mariasession.database.exceptions import ConnectionError, QueryError, SessionWarning
from mariasession.database.options import ConnectionOptions

SKIP_INTEGRATION = os.environ.get('MARIADB_TEST_HOST') is None

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(SKIP_INTEGRATION, reason="Server not configured - set MARIADB_TEST_HOST"),
]


@pytest.fixture
def options():
    return ConnectionOptions(
        host=os.environ.get('MARIADB_TEST_HOST'),
        user=os.environ.get('MARIADB_TEST_USER', 'root'),
        password=os.environ.get('MARIADB_TEST_PASSWORD', ''),
        dbname=os.environ.get('MARIADB_TEST_DB', 'test')
    )


@pytest.fixture
def port():
    return int(os.environ.get('MARIADB_TEST_PORT', '3306'))


@pytest.fixture
def conn(options, port):
    conn = Connection()
    conn.connect(options, port, 0)
    yield conn
    conn.disconnect()


@pytest.fixture
def table_name(conn):
    name = f"mariasession_{uuid.uuid4().hex[:8]}"
    yield name
    if conn.is_connected():
        conn.exec(f"DROP TABLE IF EXISTS {name}")


def test_statement_flow_without_warnings(options, port, table_name):
    """Test create, begin, insert, commit, disconnect emits nothing."""
    with warnings.catch_warnings():
        warnings.simplefilter("error", SessionWarning)
        conn = Connection()
        conn.connect(options, port, 0)
        assert conn.exec(f"CREATE TABLE {table_name}(x INT)") is True
        conn.begin_transaction()
        assert conn.exec(f"INSERT INTO {table_name} VALUES (1)") is True
        conn.commit()
        conn.exec(f"DROP TABLE {table_name}")
        conn.disconnect()


def test_supersession_on_server(conn):
    """Test a second query cancels the first."""
    first = conn.send_query("SELECT 1 UNION ALL SELECT 2")

    with pytest.warns(SessionWarning, match="Cancelling previous query"):
        second = conn.send_query("SELECT 3")

    assert first.is_live is False
    assert conn.is_current_result(second)
    assert second.fetch().rows == [[3]]


def test_rollback_discards_rows(conn, table_name):
    """Test rolled back inserts are not visible."""
    conn.exec(f"CREATE TABLE {table_name}(x INT) ENGINE=InnoDB")
    conn.begin_transaction()
    conn.exec(f"INSERT INTO {table_name} VALUES (1)")
    conn.rollback()

    with conn.send_query(f"SELECT COUNT(*) FROM {table_name}") as result:
        assert result.fetch().rows == [[0]]


def test_quote_round_trips_through_server(conn):
    """Test a quoted literal selects back the original text."""
    value = "O'Brien \\ \"quoted\""

    with conn.send_query(f"SELECT {conn.quote(value)}, {conn.quote(None)}") as result:
        assert result.fetch().rows == [[value, None]]


def test_connection_info(conn, options):
    """Test live session details."""
    info = conn.connection_info()

    assert info.user == options.user
    assert info.dbname == options.dbname
    assert info.protocol_version == 10
    assert info.thread_id > 0


def test_bad_statement(conn):
    """Test a syntax error surfaces as QueryError."""
    with pytest.raises(QueryError) as excinfo:
        conn.exec("SELEC 1")

    assert excinfo.value.errno == 1064


def test_bad_credentials(options, port):
    """Test a rejected handshake leaves the connection closed."""
    conn = Connection()
    bad = ConnectionOptions(host=options.host, user="no_such_user_xyz", password="wrong")

    with pytest.raises(ConnectionError, match="failed to connect"):
        conn.connect(bad, port, 0)

    assert conn.is_connected() is False
