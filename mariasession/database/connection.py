"""Database connection management."""

import logging
import warnings
from typing import Callable, Optional

from mysql.connector import Error as MySQLError

from .exceptions import ConnectionError, QueryError, SessionWarning, TransactionError
from .models import ConnectionInfo
from .options import ConnectionOptions, apply_connection_options
from .result import ResultHandle
from .transport import Transport

logger = logging.getLogger(__name__)

WarningHook = Callable[[str], None]


def emit_session_warning(message: str) -> None:
    """Default advisory hook: route through the ``warnings`` module."""
    warnings.warn(message, SessionWarning, stacklevel=3)


def _query_error(prefix: str, err: MySQLError) -> QueryError:
    return QueryError(
        f"{prefix}: {err.msg}",
        driver_message=err.msg,
        errno=err.errno,
        sqlstate=err.sqlstate,
    )


class Connection:
    """One session to a MySQL or MariaDB server.

    The connection owns its transport, tracks the single result handle allowed
    to be live at a time and the transaction state. Advisory diagnostics go
    through ``on_warning``; hard failures raise.

    Example:
        with Connection() as conn:
            conn.connect(ConnectionOptions(host="localhost", user="app"), 3306, 0)
            conn.exec("CREATE TABLE t (x INT)")
    """

    def __init__(self, on_warning: Optional[WarningHook] = None):
        self._transport: Optional[Transport] = None
        self._current_result: Optional[ResultHandle] = None
        self._transacting = False
        self._on_warning = on_warning or emit_session_warning

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.disconnect()

    def __del__(self):
        if getattr(self, "_transport", None) is not None:
            self._warn("call disconnect() when finished working with a connection")
            self.disconnect()

    def _warn(self, message: str) -> None:
        logger.debug("Advisory: %s", message)
        self._on_warning(message)

    # Lifecycle

    def connect(self, options: ConnectionOptions, port: int, client_flags: int) -> None:
        """Open the session; raises ConnectionError when the handshake fails."""
        if self.is_connected():
            raise ConnectionError("connection is already open; call disconnect() first")

        transport = Transport()
        apply_connection_options(transport, options)

        try:
            transport.real_connect(
                host=options.host,
                user=options.user,
                password=options.password,
                database=options.dbname,
                port=port,
                unix_socket=options.unix_socket,
                client_flags=client_flags,
            )
        except (MySQLError, AttributeError, ValueError) as e:
            # The driver rejects some configurations with builtin exceptions.
            error = getattr(e, "msg", None) or str(e)
            logger.error(f"Failed to connect: {error}")
            try:
                transport.close()
            except MySQLError as close_error:
                logger.debug(f"Ignoring error while releasing transport: {close_error}")
            raise ConnectionError(f"failed to connect: {error}") from e

        self._transport = transport
        self._current_result = None
        self._transacting = False
        logger.info("Connected to %s", options.unix_socket or options.host or "localhost")

    def disconnect(self) -> None:
        """Close the session. Does nothing when already disconnected."""
        if not self.is_connected():
            return

        if self.has_open_result():
            self._warn(
                "There is a result object still in use.\n"
                "The connection will be automatically released when it is closed"
            )
            result, self._current_result = self._current_result, None
            result._invalidate()

        transport, self._transport = self._transport, None
        self._transacting = False
        try:
            transport.close()
        except MySQLError as e:
            logger.warning(f"Error while closing connection: {e}")
        logger.info("Disconnected")

    def is_connected(self) -> bool:
        return self._transport is not None

    def check_connection(self) -> None:
        if not self.is_connected():
            raise ConnectionError("invalid or closed connection")

    def connection_info(self) -> ConnectionInfo:
        """Describe the live session."""
        self.check_connection()
        return ConnectionInfo(**self._transport.info())

    # Result slot

    def set_current_result(self, result: Optional[ResultHandle]) -> None:
        """Make ``result`` the only live result, closing whatever held the slot."""
        if result is self._current_result:
            return

        previous = self._current_result
        if previous is not None:
            if result is not None:
                self._warn("Cancelling previous query")
            # Clear the slot first so a re-entrant close() sees it empty.
            self._current_result = None
            previous._release()
        self._current_result = result

    def is_current_result(self, result: ResultHandle) -> bool:
        return self._current_result is result

    def has_open_result(self) -> bool:
        return self._current_result is not None

    def open_cursor(self, sql: str):
        """Dispatch ``sql`` for a result handle and return the unbuffered cursor."""
        self.check_connection()
        try:
            return self._transport.open_cursor(sql)
        except MySQLError as e:
            logger.error(f"Query execution failed: {e}")
            raise _query_error("Error executing query", e) from e

    # Statements

    def exec(self, sql: str) -> bool:
        """Run a statement whose rows, if any, are of no interest."""
        self.check_connection()
        self.set_current_result(None)

        try:
            affected = self._transport.execute(sql)
        except MySQLError as e:
            logger.error(f"Query execution failed: {e}")
            raise _query_error("Error executing query", e) from e

        logger.debug("Statement executed, %s row(s) affected", affected)
        return True

    def send_query(self, sql: str) -> ResultHandle:
        """Start a query and return the handle used to fetch its rows."""
        return ResultHandle(self, sql)

    def quote(self, value: Optional[str]) -> str:
        """Return ``value`` as an SQL string literal, or the bare ``NULL``."""
        self.check_connection()
        if value is None:
            return "NULL"
        return "'" + self._transport.escape(value) + "'"

    # Transactions

    @property
    def is_transacting(self) -> bool:
        return self._transacting

    def begin_transaction(self) -> None:
        self.check_connection()
        if self._transacting:
            raise TransactionError("nested transactions not supported")
        self.set_current_result(None)

        try:
            self._transport.start_transaction()
        except MySQLError as e:
            raise _query_error("Failed to start transaction", e) from e
        self._transacting = True
        logger.debug("Transaction started")

    def commit(self) -> None:
        self.check_connection()
        if not self._transacting:
            raise TransactionError("no transaction in progress")
        self.set_current_result(None)

        try:
            self._transport.commit()
        except MySQLError as e:
            raise _query_error("Failed to commit", e) from e
        self._transacting = False
        logger.debug("Transaction committed")

    def rollback(self) -> None:
        self.check_connection()
        if not self._transacting:
            raise TransactionError("no transaction in progress")
        self.set_current_result(None)

        try:
            self._transport.rollback()
        except MySQLError as e:
            raise _query_error("Failed to roll back", e) from e
        self._transacting = False
        logger.debug("Transaction rolled back")

    def autocommit_flush(self) -> None:
        """Commit pending work of an open transaction without ending it here.

        Best-effort flush for teardown paths. ``is_transacting`` is left as is;
        commit() or rollback() remain responsible for resetting it.
        """
        if self._transacting and self.is_connected():
            self.set_current_result(None)
            try:
                self._transport.commit()
            except MySQLError as e:
                raise _query_error("Failed to commit", e) from e
