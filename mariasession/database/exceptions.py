"""Errors and advisory warnings raised by the session layer."""

from typing import Optional


class SessionError(Exception):
    """Base class for session layer errors."""
    pass


class ConnectionError(SessionError):
    """Handshake failure, or a live-session operation on a closed connection."""
    pass


class QueryError(SessionError):
    """A statement could not be dispatched to the server."""

    def __init__(
        self,
        message: str,
        driver_message: Optional[str] = None,
        errno: Optional[int] = None,
        sqlstate: Optional[str] = None,
    ):
        super().__init__(message)
        self.driver_message = driver_message if driver_message is not None else message
        self.errno = errno
        self.sqlstate = sqlstate


class TransactionError(SessionError):
    """Invalid transaction state transition."""
    pass


class SessionWarning(UserWarning):
    """Advisory, non-fatal diagnostic about connection or result lifecycle."""
    pass
