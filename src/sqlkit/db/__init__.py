"""Driver contract, adapters and the connection factory."""

from sqlkit.db.backend import Connection, Opener, Row, Statement
from sqlkit.db.connection import open_connection

__all__ = ["Connection", "Opener", "Row", "Statement", "open_connection"]
