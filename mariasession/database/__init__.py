"""Session, result and option management for MySQL/MariaDB servers."""

from .connection import Connection
from .exceptions import ConnectionError, QueryError, SessionError, SessionWarning, TransactionError
from .models import ConnectionInfo, QueryResult
from .options import ConnectionOptions, apply_connection_options
from .result import ResultHandle

__all__ = [
    "Connection",
    "ConnectionError",
    "ConnectionInfo",
    "ConnectionOptions",
    "QueryError",
    "QueryResult",
    "ResultHandle",
    "SessionError",
    "SessionWarning",
    "TransactionError",
    "apply_connection_options",
]
