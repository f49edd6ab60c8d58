"""Connection options and the builder that stages them on a transport."""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .transport import Transport, TransportOption

logger = logging.getLogger(__name__)

DEFAULT_CHARSET = "utf8mb4"


@dataclass(frozen=True)
class ConnectionOptions:
    """How to reach a server. ``None`` means unset; ``""`` is a real value."""

    host: Optional[str] = None
    user: Optional[str] = None
    password: Optional[str] = None
    dbname: Optional[str] = None
    unix_socket: Optional[str] = None
    groups: Optional[str] = None
    default_file: Optional[str] = None
    ssl_key: Optional[str] = None
    ssl_cert: Optional[str] = None
    ssl_ca: Optional[str] = None
    ssl_capath: Optional[str] = None
    ssl_cipher: Optional[str] = None

    @property
    def ssl_fields(self) -> Tuple[Optional[str], ...]:
        """TLS material in the order the transport expects it."""
        return (self.ssl_key, self.ssl_cert, self.ssl_ca, self.ssl_capath, self.ssl_cipher)

    @property
    def has_ssl(self) -> bool:
        return any(value is not None for value in self.ssl_fields)


def apply_connection_options(transport: Transport, options: ConnectionOptions) -> None:
    """Stage ``options`` on ``transport`` ahead of the handshake.

    Local infile and the utf8mb4 character set are always enabled. TLS material
    is applied in one call, and only when at least one TLS field is set.
    """
    transport.set_option(TransportOption.LOCAL_INFILE, True)
    transport.set_option(TransportOption.CHARSET_NAME, DEFAULT_CHARSET)

    if options.groups is not None:
        transport.set_option(TransportOption.READ_DEFAULT_GROUP, options.groups)
    if options.default_file is not None:
        transport.set_option(TransportOption.READ_DEFAULT_FILE, options.default_file)

    if options.has_ssl:
        logger.debug("Applying TLS configuration")
        transport.ssl_set(*options.ssl_fields)
