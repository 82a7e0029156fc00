"""Logging helpers shared by the query facade and the CLI."""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional

query_logger = logging.getLogger('neo4j_glue.queries')


def log_query(
    query: str,
    phase: str,
    extra: Optional[Dict[str, Any]] = None,
    duration: Optional[float] = None,
) -> None:
    """Helper function to log query executions and completions.

    Args:
        query: Cypher text being executed. Whitespace is collapsed and the
            text truncated to keep log lines short.
        phase: Either "started", "completed" or "failed".
        extra: Dictionary of additional data to log.
        duration: Optional duration in seconds (for "completed" phase).
    """
    extra = dict(extra or {})
    extra["query"] = " ".join(query.split())[:200]
    if duration is not None:
        extra["duration_seconds"] = duration
    level = logging.WARNING if phase == "failed" else logging.DEBUG
    query_logger.log(level, f"query {phase}", extra=extra)


def param_names(params: Optional[Dict[str, Any]]) -> Iterable[str]:
    """Parameter names only; values stay out of the logs."""
    return sorted(params) if params else []


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for command-line use."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
