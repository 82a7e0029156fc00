"""Simple CLI for running queries and disposable databases.

Usage examples (from project root):

    neo4j-glue run "MATCH (n:Person) WHERE n.age > $age RETURN n" --param age=30

    neo4j-glue ping

    # Start a throwaway database and keep it up until Ctrl+C
    neo4j-glue ephemeral

The CLI uses:
- .env configuration (NEO4J_URI, NEO4J_USERNAME, NEO4J_PASSWORD, ...)
- Connection for the driver
- neo4j.session.run for execution and result conversion
"""

import argparse
import json
import sys
import time
from typing import Any, Dict, List, Optional, Tuple

from .config import Config
from .logging_utils import configure_logging
from .neo4j import Connection, create_ephemeral_connection, run, session_scope


def _cmd_run(args: argparse.Namespace) -> int:
    """Run a Cypher query against the configured database and print results."""

    config = Config()
    params: Dict[str, Any] = dict(args.param or [])

    with Connection.from_config(config) as connection:
        with session_scope(connection) as session:
            records = run(session, args.query, params)

    serializable: Dict[str, Any] = {
        "count": len(records),
        "results": records,
    }

    # Use default=str to serialize temporal values (date, datetime) as strings.
    print(json.dumps(serializable, indent=2, sort_keys=True, default=str))
    return 0


def _cmd_ping(args: argparse.Namespace) -> int:
    """Check that the configured database is reachable."""

    config = Config()

    with Connection.from_config(config) as connection:
        ok = connection.verify_connectivity()

    print(f"{connection.url}: {'ok' if ok else 'unreachable'}")
    return 0 if ok else 1


def _wait_for_interrupt() -> None:
    while True:
        time.sleep(1)


def _cmd_ephemeral(args: argparse.Namespace) -> int:
    """Start a disposable database and keep it running until interrupted."""

    config = Config()
    connection = create_ephemeral_connection(config)
    try:
        print(f"Ephemeral database listening on {connection.url}")
        print(f"Data directory: {connection.storage_dir}")
        print("Press Ctrl+C to stop (all data will be deleted)\n")
        _wait_for_interrupt()
    except KeyboardInterrupt:
        print("\nShutting down...")
    finally:
        connection.destroy()
    return 0


def _parse_param(value: str) -> Tuple[str, Any]:
    """Parse KEY=VALUE, decoding VALUE as JSON when possible."""
    key, sep, raw = value.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f'parameter must look like KEY=VALUE, got "{value}"')
    try:
        return key, json.loads(raw)
    except json.JSONDecodeError:
        return key, raw


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run Cypher queries and disposable Neo4j databases",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # run command
    p_run = subparsers.add_parser(
        "run",
        help="Run a Cypher query against NEO4J_URI and print the records as JSON",
    )
    p_run.add_argument("query", type=str, help="Cypher query text")
    p_run.add_argument(
        "--param",
        type=_parse_param,
        action="append",
        metavar="KEY=VALUE",
        help="Query parameter; VALUE is parsed as JSON, falling back to a string",
    )
    p_run.set_defaults(func=_cmd_run)

    # ping command
    p_ping = subparsers.add_parser(
        "ping",
        help="Verify that NEO4J_URI is reachable with the configured credentials",
    )
    p_ping.set_defaults(func=_cmd_ping)

    # ephemeral command
    p_ephemeral = subparsers.add_parser(
        "ephemeral",
        help="Start a disposable database on a free local port until Ctrl+C",
    )
    p_ephemeral.set_defaults(func=_cmd_ephemeral)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(Config().log_level)

    if not hasattr(args, "func"):
        parser.print_help()
        return

    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
