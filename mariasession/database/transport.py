"""Thin owner of one mysql.connector session.

The rest of the package only talks to the server through :class:`Transport`,
which mirrors the handful of client library primitives the session layer
needs: staged options, a combined TLS call, the handshake, statement dispatch,
escaping, commit/rollback and close.
"""

import logging
import os
from enum import Enum
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector.connection import MySQLConnection
from mysql.connector.constants import ClientFlag

logger = logging.getLogger(__name__)

# Client/server protocol version spoken by MySQL and MariaDB servers.
PROTOCOL_VERSION = 10

DEFAULT_OPTION_FILES = ["/etc/my.cnf", "/etc/mysql/my.cnf", "~/.my.cnf"]


class TransportOption(str, Enum):
    """Pending configuration keys understood by the transport."""

    LOCAL_INFILE = "allow_local_infile"
    CHARSET_NAME = "charset"
    READ_DEFAULT_GROUP = "option_groups"
    READ_DEFAULT_FILE = "option_files"


class Transport:
    """Exclusive wrapper around an unconnected, then connected, MySQLConnection."""

    def __init__(self):
        self._conn: Optional[MySQLConnection] = MySQLConnection()
        self._pending: Dict[str, Any] = {
            "autocommit": True,
            "consume_results": True,
        }
        self._database: Optional[str] = None
        self._unix_socket: Optional[str] = None
        self._no_backslash_escapes = False

    @property
    def pending(self) -> Dict[str, Any]:
        """Configuration staged for the next handshake."""
        return dict(self._pending)

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def set_option(self, option: TransportOption, value: Any) -> None:
        self._pending[TransportOption(option).value] = value

    def ssl_set(
        self,
        key: Optional[str],
        cert: Optional[str],
        ca: Optional[str],
        capath: Optional[str],
        cipher: Optional[str],
    ) -> None:
        """Stage all TLS material in one call; ``None`` means no value."""
        for name, value in (("ssl_key", key), ("ssl_cert", cert),
                            ("ssl_ca", ca), ("ssl_cipher", cipher)):
            if value is not None:
                self._pending[name] = value
            else:
                self._pending.pop(name, None)

        if capath is not None:
            logger.warning("mysql-connector has no CA directory option; ignoring ssl_capath=%s", capath)

    def real_connect(
        self,
        host: Optional[str],
        user: Optional[str],
        password: Optional[str],
        database: Optional[str],
        port: int,
        unix_socket: Optional[str],
        client_flags: int,
    ) -> None:
        """Perform the handshake. Raises ``mysql.connector.Error`` on failure."""
        config = dict(self._pending)
        for name, value in (("host", host), ("user", user), ("password", password),
                            ("database", database), ("unix_socket", unix_socket)):
            if value is not None:
                config[name] = value
        if port:
            config["port"] = port
        if client_flags:
            config["client_flags"] = ClientFlag.get_default() | client_flags

        if "option_groups" in config and "option_files" not in config:
            files = self._default_option_files()
            if files:
                config["option_files"] = files
            else:
                logger.debug("No option files found for groups %s", config["option_groups"])
                config.pop("option_groups")

        logger.debug("Opening session to %s", unix_socket or host or "localhost")
        self._conn.connect(**config)
        self._database = database
        self._unix_socket = unix_socket
        # Read once so escaping never needs a round trip while rows are pending.
        self._no_backslash_escapes = "NO_BACKSLASH_ESCAPES" in (self._conn.sql_mode or "")

    @staticmethod
    def _default_option_files() -> List[str]:
        paths = [os.path.expanduser(path) for path in DEFAULT_OPTION_FILES]
        return [path for path in paths if os.path.isfile(path)]

    def execute(self, sql: str) -> int:
        """Run a statement and discard any rows it produced."""
        cursor = self._conn.cursor(buffered=True)
        try:
            cursor.execute(sql)
            return cursor.rowcount
        finally:
            cursor.close()

    def open_cursor(self, sql: str):
        """Run a statement and leave its rows on the wire for incremental fetch."""
        cursor = self._conn.cursor()
        try:
            cursor.execute(sql)
        except mysql.connector.Error:
            cursor.close()
            raise
        return cursor

    def escape(self, value: str) -> str:
        """Escape ``value`` according to the session's current SQL mode."""
        if self._no_backslash_escapes:
            return value.replace("'", "''")
        return self._conn.converter.escape(value).replace("\0", "\\0")

    def start_transaction(self) -> None:
        self._conn.start_transaction()

    def commit(self) -> None:
        self._conn.commit()

    def rollback(self) -> None:
        self._conn.rollback()

    def host_info(self) -> str:
        if self._unix_socket:
            return "Localhost via UNIX socket"
        return f"{self._conn.server_host} via TCP/IP"

    def info(self) -> Dict[str, Any]:
        return {
            "host": self._conn.server_host,
            "user": self._conn.user,
            "dbname": self._database or "",
            "con_type": self.host_info(),
            "server_version": self._conn.get_server_info(),
            "protocol_version": PROTOCOL_VERSION,
            "thread_id": self._conn.connection_id,
            "client": mysql.connector.__version__,
        }

    def close(self) -> None:
        """Close the session. Safe to call more than once."""
        conn, self._conn = self._conn, None
        if conn is not None:
            conn.close()
