"""Neo4j connection and session management."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from neo4j import Driver, GraphDatabase, Session
from neo4j.exceptions import AuthError, ServiceUnavailable, SessionExpired

from ..config import Config

logger = logging.getLogger(__name__)

# Driver exceptions that mean "the database could not be reached or refused
# us", as opposed to errors in the query itself.
CONNECTION_FAILURES = (ServiceUnavailable, SessionExpired, AuthError)


def connection_error(error: Exception, url: Optional[str] = None) -> ConnectionError:
    """Build the ConnectionError reported for a driver connection failure."""
    target = f" at {url}" if url else ""
    logger.error(f"Failed to connect to Neo4j{target}: {error}")
    return ConnectionError(
        f"Cannot connect to Neo4j database{target}. "
        "Please ensure Neo4j is running and accessible."
    )


class Connection:
    """Neo4j connection: target url, optional credentials and driver handle.

    The driver is created up front but does not talk to the server until a
    session is used, so an unreachable server or bad credentials are only
    reported (as ``ConnectionError``) on first use.
    """

    def __init__(
        self,
        url: str,
        user: Optional[str] = None,
        password: Optional[str] = None,
        *,
        database: Optional[str] = None,
        config: Optional[Config] = None,
    ) -> None:
        """Create the driver for ``url``.

        Args:
            url: Bolt or neo4j URI, e.g. ``bolt://localhost:7687``.
            user: Username for basic auth. Omit together with ``password``
                to connect anonymously.
            password: Password for basic auth.
            database: Database name to open sessions against, server
                default when None.
            config: Driver pool settings; defaults are loaded from the
                environment when omitted.
        """
        if (user is None) != (password is None):
            raise ValueError("user and password must be given together")

        self.config = config or Config()
        self.url = url
        self.user = user
        self.password = password
        self.database = database

        auth = (user, password) if user is not None else None
        self._driver: Optional[Driver] = GraphDatabase.driver(
            url,
            auth=auth,
            max_connection_lifetime=self.config.neo4j_max_connection_lifetime,
            max_connection_pool_size=self.config.neo4j_max_connection_pool_size,
        )
        logger.debug(
            "Created Neo4j driver for %s (%s)",
            url,
            "authenticated" if auth else "anonymous",
        )

    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> "Connection":
        """Create a connection from environment / .env settings."""
        config = config or Config()
        return cls(
            str(config.neo4j_uri),
            config.neo4j_username,
            config.neo4j_password,
            database=config.neo4j_database,
            config=config,
        )

    @property
    def driver(self) -> Driver:
        """The underlying driver handle."""
        if self._driver is None:
            raise RuntimeError(f"Connection to {self.url} is closed")
        return self._driver

    @property
    def closed(self) -> bool:
        return self._driver is None

    def close(self) -> None:
        """Close the Neo4j driver connection."""
        if self._driver is not None:
            self._driver.close()
            self._driver = None

    def open_session(self, **kwargs) -> Session:
        """Open a session against the configured database.

        The caller owns the session and must close it.
        """
        if self.database is not None:
            kwargs.setdefault("database", self.database)
        return self.driver.session(**kwargs)

    @contextmanager
    def session(self, **kwargs) -> Iterator[Session]:
        """Context manager for Neo4j session."""
        session = self.open_session(**kwargs)
        try:
            yield session
        finally:
            session.close()

    def verify_connectivity(self) -> bool:
        """Verify connection to Neo4j database."""
        try:
            self.driver.verify_connectivity()
            return True
        except Exception as e:
            logger.error("Neo4j connectivity check failed: %s", e, exc_info=True)
            return False

    def __enter__(self) -> "Connection":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(url={self.url!r}, user={self.user!r})"


def create_connection(
    url: str,
    user: Optional[str] = None,
    password: Optional[str] = None,
    *,
    database: Optional[str] = None,
    config: Optional[Config] = None,
) -> Connection:
    """Return a connection for ``url``. Bolt is the only protocol used.

    With ``user`` and ``password`` the driver authenticates with basic auth,
    without them it connects anonymously. Reachability is not checked here.
    """
    return Connection(url, user, password, database=database, config=config)
