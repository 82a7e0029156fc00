"""Convenience layer over the Neo4j Python driver.

Connection creation, session/transaction helpers, disposable test
databases and conversion of query results into plain Python data.
"""

from .config import Config
from .errors import (
    ConversionError,
    Neo4jGlueError,
    ProvisionError,
    UnsupportedParameterType,
)
from .neo4j import (
    BoundQuery,
    Connection,
    EphemeralConnection,
    commit,
    convert_record,
    convert_records,
    create_connection,
    create_ephemeral_connection,
    destroy_ephemeral_connection,
    ephemeral_connection,
    make_bound_query,
    open_session,
    open_transaction,
    rollback,
    run,
    session_scope,
    to_host,
    to_native,
    transaction,
    with_transaction,
)

__version__ = "0.1.0"

__all__ = [
    "Config",
    "Neo4jGlueError",
    "ProvisionError",
    "ConversionError",
    "UnsupportedParameterType",
    "Connection",
    "EphemeralConnection",
    "create_connection",
    "create_ephemeral_connection",
    "destroy_ephemeral_connection",
    "ephemeral_connection",
    "open_session",
    "session_scope",
    "open_transaction",
    "commit",
    "rollback",
    "transaction",
    "with_transaction",
    "run",
    "BoundQuery",
    "make_bound_query",
    "to_native",
    "to_host",
    "convert_record",
    "convert_records",
]
