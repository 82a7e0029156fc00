"""Exceptions raised by neo4j_glue.

Connection failures are reported with the builtin ``ConnectionError``
(chained from the driver exception). Query errors raised by the driver,
such as syntax errors or constraint violations, are never wrapped.
"""

from typing import Optional


class Neo4jGlueError(Exception):
    """Base class for errors raised by this package."""


class ProvisionError(Neo4jGlueError):
    """An ephemeral database could not be provisioned."""


class ConversionError(Neo4jGlueError):
    """A driver value could not be converted into a plain Python value."""


class UnsupportedParameterType(Neo4jGlueError, TypeError):
    """A query parameter is not one of the supported kinds.

    Attributes:
        path: Location of the offending value inside the parameter mapping,
            e.g. ``person.tags[2]``.
        value_type: Type name of the offending value.
    """

    def __init__(self, path: str, value: object, reason: Optional[str] = None) -> None:
        self.path = path
        self.value_type = type(value).__name__
        message = f"Unsupported parameter type {self.value_type} at {path!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
