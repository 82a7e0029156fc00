"""Session and transaction helpers.

All query execution goes through ``run``: parameters are validated and
converted before the driver sees them, and the complete result is pulled
and converted into a list of dicts before ``run`` returns.

Example:

    conn = create_connection("bolt://localhost:7687")
    find_people = make_bound_query("MATCH (p:Person) WHERE p.age > $age RETURN p")

    with session_scope(conn) as session:
        people = find_people(session, {"age": 30})

        with transaction(session) as tx:
            run(tx, "CREATE (:Person {name: $name})", {"name": "Alice"})
            commit(tx)
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, TypeVar, Union

from neo4j import Session, Transaction

from ..logging_utils import log_query, param_names
from .client import CONNECTION_FAILURES, Connection, connection_error
from .convert import convert_records, to_native

Runner = Union[Session, Transaction]
Params = Optional[Mapping[str, Any]]
T = TypeVar("T")


def open_session(connection: Connection, **kwargs) -> Session:
    """Open a session from ``connection``; the caller must close it."""
    return connection.open_session(**kwargs)


@contextmanager
def session_scope(connection: Connection, **kwargs) -> Iterator[Session]:
    """Open a session and close it on every exit path."""
    session = open_session(connection, **kwargs)
    try:
        yield session
    finally:
        session.close()


def open_transaction(session: Session) -> Transaction:
    """Begin an explicit transaction on ``session``."""
    try:
        return session.begin_transaction()
    except CONNECTION_FAILURES as e:
        raise connection_error(e) from e


def commit(tx: Transaction) -> None:
    """Mark the transaction successful and commit it."""
    try:
        tx.commit()
    except CONNECTION_FAILURES as e:
        raise connection_error(e) from e


def rollback(tx: Transaction) -> None:
    """Mark the transaction failed and roll it back."""
    try:
        tx.rollback()
    except CONNECTION_FAILURES as e:
        raise connection_error(e) from e


@contextmanager
def transaction(session: Session) -> Iterator[Transaction]:
    """Scoped transaction.

    The transaction is closed however the block exits. Work that was not
    committed with ``commit(tx)`` is rolled back by the driver on close.
    """
    tx = open_transaction(session)
    try:
        yield tx
    finally:
        tx.close()


def with_transaction(session: Session, body: Callable[[Transaction], T]) -> T:
    """Run ``body(tx)`` inside a scoped transaction and return its result."""
    with transaction(session) as tx:
        return body(tx)


def run(runner: Runner, query: str, params: Params = None) -> List[Dict[str, Any]]:
    """Execute ``query`` on a session or transaction.

    Blocks until the whole result has been fetched and converted.

    Args:
        runner: Open session or transaction.
        query: Cypher text.
        params: Named parameters (str, int, float, bool, None, lists,
            nested mappings).

    Returns:
        One dict per record, keys in the query's field order.

    Raises:
        UnsupportedParameterType: A parameter has an unsupported type; the
            driver is not called.
        ConversionError: A result value could not be converted.
        ConnectionError: The database could not be reached.
    """
    native_params = to_native(params)
    extra = {"params": list(param_names(native_params))}
    log_query(query, "started", extra)

    start = time.perf_counter()
    try:
        result = runner.run(query, native_params)
        records = list(result)
    except CONNECTION_FAILURES as e:
        log_query(query, "failed", extra, time.perf_counter() - start)
        raise connection_error(e) from e

    rows = convert_records(records)
    extra["rows"] = len(rows)
    log_query(query, "completed", extra, time.perf_counter() - start)
    return rows


class BoundQuery:
    """Reusable query text awaiting a runner and parameters.

    Calling a bound query is the same as calling ``run`` with its text.
    """

    __slots__ = ("_text",)

    def __init__(self, text: str) -> None:
        if not isinstance(text, str) or not text.strip():
            raise ValueError("query text must be a non-empty string")
        self._text = text

    @property
    def text(self) -> str:
        return self._text

    def __call__(self, runner: Runner, params: Params = None) -> List[Dict[str, Any]]:
        return run(runner, self._text, params)

    def __repr__(self) -> str:
        return f"BoundQuery({self._text!r})"


def make_bound_query(text: str) -> BoundQuery:
    """Return a callable that runs ``text`` on a session/transaction."""
    return BoundQuery(text)
