"""Public interface for the database package.

This module exposes the main primitives needed by the rest of the
project: the connection handle and its initialization entrypoint, the
query executor, the transactional batch writer, and small helpers.
"""

from .batch import Statement, many_insert
from .connection import Connection, open_connection
from .errors import (
    BatchError,
    ConnectionError,
    DatabaseError,
    IntegrityError,
    QueryError,
)
from .helpers import get_first, set_case_sensitivity, total
from .model import SQLiteModel
from .queries import run_insert, run_query, run_update

__all__ = [
    "Connection",
    "open_connection",
    "run_query",
    "run_insert",
    "run_update",
    "Statement",
    "many_insert",
    "total",
    "get_first",
    "set_case_sensitivity",
    "SQLiteModel",
    "DatabaseError",
    "ConnectionError",
    "QueryError",
    "IntegrityError",
    "BatchError",
]
