"""Session management for MySQL and MariaDB servers."""

__version__ = "0.1.0"
