"""Shared fixtures and driver fakes."""

from typing import Any, Dict, List, Optional

import pytest
from neo4j import Record
from neo4j.graph import Graph, Node, Relationship

from neo4j_glue.config import Config


class FakeResult:
    """Iterable stand-in for ``neo4j.Result``."""

    def __init__(self, records: List[Record]):
        self._records = records

    def __iter__(self):
        return iter(self._records)


class FakeRunner:
    """Records every ``run`` call and answers with canned rows."""

    def __init__(self, rows: Optional[List[Dict[str, Any]]] = None, error: Optional[Exception] = None):
        self.rows = rows or []
        self.error = error
        self.calls = []
        self.closed = False

    def run(self, query, parameters=None):
        self.calls.append((query, parameters))
        if self.error is not None:
            raise self.error
        return FakeResult([Record(row) for row in self.rows])

    def close(self):
        self.closed = True


class FakeTransaction(FakeRunner):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.committed = False
        self.rolled_back = False
        self.commit_error: Optional[Exception] = None
        self.rollback_error: Optional[Exception] = None

    def commit(self):
        if self.commit_error is not None:
            raise self.commit_error
        self.committed = True

    def rollback(self):
        if self.rollback_error is not None:
            raise self.rollback_error
        self.rolled_back = True


class EchoSession(FakeRunner):
    """Answers every query with one record holding the parameters sent."""

    def run(self, query, parameters=None):
        self.calls.append((query, parameters))
        return FakeResult([Record(parameters or {})])


class FakeSession(FakeRunner):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.transactions: List[FakeTransaction] = []
        self.begin_error: Optional[Exception] = None

    def begin_transaction(self):
        if self.begin_error is not None:
            raise self.begin_error
        tx = FakeTransaction(rows=self.rows)
        self.transactions.append(tx)
        return tx


class FakeDriver:
    def __init__(self, url, auth=None, **kwargs):
        self.url = url
        self.auth = auth
        self.kwargs = kwargs
        self.sessions: List[Dict[str, Any]] = []
        self.closed = False
        self.connectivity_error: Optional[Exception] = None

    def session(self, **kwargs):
        self.sessions.append(kwargs)
        return FakeSession()

    def verify_connectivity(self):
        if self.connectivity_error is not None:
            raise self.connectivity_error

    def close(self):
        self.closed = True


class FakeGraphDatabase:
    """Replacement for ``neo4j.GraphDatabase`` that never opens sockets."""

    drivers: List[FakeDriver] = []

    @classmethod
    def driver(cls, url, auth=None, **kwargs):
        driver = FakeDriver(url, auth=auth, **kwargs)
        cls.drivers.append(driver)
        return driver


@pytest.fixture
def fake_graph_database(monkeypatch):
    from neo4j_glue.neo4j import client

    FakeGraphDatabase.drivers = []
    monkeypatch.setattr(client, "GraphDatabase", FakeGraphDatabase)
    return FakeGraphDatabase


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def graph():
    return Graph()


def make_node(graph: Graph, element_id: str, labels=(), properties=None) -> Node:
    return Node(graph, element_id, int(element_id.split(":")[-1]), labels, properties or {})


def make_relationship(
    graph: Graph,
    element_id: str,
    rel_type: str,
    start: Node,
    end: Node,
    properties=None,
) -> Relationship:
    cls = graph.relationship_type(rel_type)
    rel = cls(graph, element_id, int(element_id.split(":")[-1]), properties or {})
    rel._start_node = start
    rel._end_node = end
    return rel
