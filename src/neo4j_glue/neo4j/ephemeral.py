"""Disposable Neo4j databases for tests.

An ephemeral connection looks exactly like a remote one: it is a
``Connection`` pointing at ``bolt://localhost:<port>``. Behind it runs a
fresh Neo4j engine whose data directory lives under the system temp
directory. ``destroy()`` stops the engine and deletes that directory, so
*all* data is gone after teardown.

Provisioning steps:

1. Ask the OS for a free port by binding to port 0, then release it.
   Another process may grab the port before the engine binds it; this
   window is not guarded against.
2. Create ``<tempdir>/<epoch millis>`` as the storage directory.
3. Boot the engine with the Bolt connector enabled and published on
   ``localhost:<port>``.
4. Wrap it in an ``EphemeralConnection``.
"""

from __future__ import annotations

import logging
import os
import shutil
import socket
import tempfile
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from testcontainers.core.container import DockerContainer
from testcontainers.core.waiting_utils import wait_for_logs

from ..config import Config
from ..errors import ProvisionError
from .client import Connection

logger = logging.getLogger(__name__)

BOLT_PORT = 7687
DATA_DIR = "/data"
READY_LOG_LINE = "Started."


def get_free_port(host: str = "localhost") -> int:
    """Return a port the OS considers free right now."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.bind((host, 0))
            return sock.getsockname()[1]
    except OSError as e:
        raise ProvisionError(f"Could not obtain a free port on {host}: {e}") from e


def create_storage_dir(base: Optional[str] = None) -> Path:
    """Create a fresh directory named by the current time in milliseconds."""
    base_dir = Path(base or tempfile.gettempdir())
    folder = base_dir / str(int(time.time() * 1000))
    try:
        folder.mkdir(parents=False, exist_ok=False)
    except OSError as e:
        raise ProvisionError(f"Could not create storage directory {folder}: {e}") from e
    return folder


def boot_engine(port: int, storage_dir: Path, config: Config) -> DockerContainer:
    """Start a Neo4j engine serving Bolt on ``localhost:<port>``.

    Authentication is disabled so the connection can be anonymous. The
    engine runs as the current user so the storage directory stays
    removable after shutdown.
    """
    run_kwargs = {}
    if hasattr(os, "getuid"):
        run_kwargs["user"] = f"{os.getuid()}:{os.getgid()}"

    container = (
        DockerContainer(config.ephemeral_image, **run_kwargs)
        .with_env("NEO4J_AUTH", "none")
        .with_env("NEO4J_server_bolt_enabled", "true")
        .with_env("NEO4J_server_bolt_listen__address", f"0.0.0.0:{BOLT_PORT}")
        .with_env("NEO4J_server_bolt_advertised__address", f"localhost:{port}")
        .with_bind_ports(BOLT_PORT, ("127.0.0.1", port))
        .with_volume_mapping(str(storage_dir), DATA_DIR, "rw")
    )

    try:
        container.start()
    except Exception as e:
        raise ProvisionError(f"Could not start Neo4j engine ({config.ephemeral_image}): {e}") from e

    try:
        wait_for_logs(container, READY_LOG_LINE, timeout=config.ephemeral_startup_timeout)
    except Exception as e:
        _stop_quietly(container)
        raise ProvisionError(f"Neo4j engine on port {port} did not become ready: {e}") from e

    return container


def _stop_quietly(container: DockerContainer) -> None:
    """Stop a half-started engine; a failure here must not mask the cause."""
    try:
        container.stop()
    except Exception as e:
        logger.warning("Failed to stop Neo4j engine after a failed start: %s", e)


class EphemeralConnection(Connection):
    """Connection to a disposable engine, with an explicit ``destroy()``.

    Leaving a ``with`` block destroys the engine, not just the driver.
    """

    def __init__(
        self,
        url: str,
        *,
        container: DockerContainer,
        port: int,
        storage_dir: Path,
        config: Optional[Config] = None,
    ) -> None:
        super().__init__(url, config=config)
        self.container = container
        self.port = port
        self.storage_dir = storage_dir
        self._destroyed = False

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def destroy(self) -> None:
        """Shut the engine down and delete all of its data."""
        if self._destroyed:
            logger.debug("Ephemeral database on port %s already destroyed", self.port)
            return
        self._destroyed = True

        try:
            self.close()
        finally:
            try:
                self.container.stop()
            finally:
                shutil.rmtree(self.storage_dir)
        logger.info("Destroyed ephemeral database on port %s", self.port)

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.destroy()


def create_ephemeral_connection(config: Optional[Config] = None) -> EphemeralConnection:
    """Provision a disposable database and return a connection to it.

    Raises:
        ProvisionError: If no port, storage directory or engine could be
            obtained.
    """
    config = config or Config()
    port = get_free_port()
    storage_dir = create_storage_dir()
    try:
        container = boot_engine(port, storage_dir, config)
    except ProvisionError as e:
        logger.error(f"Failed to provision ephemeral database: {e}")
        shutil.rmtree(storage_dir, ignore_errors=True)
        raise

    url = f"bolt://localhost:{port}"
    try:
        connection = EphemeralConnection(
            url,
            container=container,
            port=port,
            storage_dir=storage_dir,
            config=config,
        )
    except Exception:
        _stop_quietly(container)
        shutil.rmtree(storage_dir, ignore_errors=True)
        raise

    logger.info("Started ephemeral database at %s (data in %s)", url, storage_dir)
    return connection


def destroy_ephemeral_connection(connection: EphemeralConnection) -> None:
    """Tear down an ephemeral connection. All of its data is deleted."""
    connection.destroy()


@contextmanager
def ephemeral_connection(config: Optional[Config] = None) -> Iterator[EphemeralConnection]:
    """Provide a disposable database for the duration of a ``with`` block."""
    connection = create_ephemeral_connection(config)
    try:
        yield connection
    finally:
        destroy_ephemeral_connection(connection)
