"""
Neo4j connection, session and value-conversion helpers.

This package should contain ONLY Neo4j-specific logic:
- Connection/driver setup (remote and ephemeral)
- Session/transaction helpers and query execution
- Conversion between driver values and plain Python data
"""

from .client import Connection, create_connection
from .convert import convert_record, convert_records, to_host, to_native
from .ephemeral import (
    EphemeralConnection,
    create_ephemeral_connection,
    destroy_ephemeral_connection,
    ephemeral_connection,
)
from .session import (
    BoundQuery,
    commit,
    make_bound_query,
    open_session,
    open_transaction,
    rollback,
    run,
    session_scope,
    transaction,
    with_transaction,
)

__all__ = [
    "Connection",
    "create_connection",
    "EphemeralConnection",
    "create_ephemeral_connection",
    "destroy_ephemeral_connection",
    "ephemeral_connection",
    "BoundQuery",
    "make_bound_query",
    "open_session",
    "session_scope",
    "open_transaction",
    "commit",
    "rollback",
    "transaction",
    "with_transaction",
    "run",
    "to_native",
    "to_host",
    "convert_record",
    "convert_records",
]
