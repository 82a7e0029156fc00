"""Conversion between Neo4j driver values and plain Python structures.

Both directions use an explicit table of supported types. Anything outside
the table is a hard failure instead of a best-effort cast:

- ``to_native`` validates query parameters before they reach the driver and
  raises ``UnsupportedParameterType``.
- ``to_host`` / ``convert_record`` / ``convert_records`` turn driver results
  into dicts, lists and scalars and raise ``ConversionError``.

Graph entities are flattened into their property mapping plus metadata
keys:

    Node          -> {"_id": <element id>, "_labels": [...], **properties}
    Relationship  -> {"_id": ..., "_type": ..., "_start": ..., "_end": ...,
                      **properties}
    Path          -> {"nodes": [...], "relationships": [...]}
"""

from __future__ import annotations

import datetime
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional

from neo4j import Record
from neo4j.graph import Node, Path, Relationship
from neo4j.spatial import Point
from neo4j.time import Date, DateTime, Duration, Time

from ..errors import ConversionError, UnsupportedParameterType

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def to_native(params: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Validate and normalize a parameter mapping for ``Session.run``.

    Args:
        params: Mapping of parameter names to str, int, float, bool, None,
            lists/tuples or nested mappings. ``None`` means no parameters.

    Returns:
        A new dict safe to hand to the driver (tuples become lists).

    Raises:
        UnsupportedParameterType: If any value, at any depth, is not one of
            the supported kinds.
    """
    if params is None:
        return {}
    if not isinstance(params, Mapping):
        raise UnsupportedParameterType("<params>", params, "parameters must be a mapping")
    return _native_mapping(params, "", frozenset())


def _native_mapping(value: Mapping[Any, Any], path: str, active: FrozenSet[int]) -> Dict[str, Any]:
    active = _enter(value, path, active)
    result: Dict[str, Any] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            raise UnsupportedParameterType(
                f"{path}[{key!r}]" if path else repr(key),
                key,
                "mapping keys must be strings",
            )
        result[key] = _native_value(item, f"{path}.{key}" if path else key, active)
    return result


def _native_value(value: Any, path: str, active: FrozenSet[int]) -> Any:
    if value is None or isinstance(value, (str, bool, float)):
        return value
    if isinstance(value, int):
        if not INT64_MIN <= value <= INT64_MAX:
            raise UnsupportedParameterType(path, value, "integer out of 64-bit range")
        return value
    if isinstance(value, (list, tuple)):
        active = _enter(value, path, active)
        return [_native_value(item, f"{path}[{i}]", active) for i, item in enumerate(value)]
    if isinstance(value, Mapping):
        return _native_mapping(value, path, active)
    raise UnsupportedParameterType(path, value)


def _enter(container: Any, path: str, active: FrozenSet[int]) -> FrozenSet[int]:
    # ``active`` holds the containers on the current path only, so the same
    # list may appear twice side by side but not inside itself.
    if id(container) in active:
        raise UnsupportedParameterType(path or "<params>", container, "self-referencing container")
    return active | {id(container)}


def to_host(value: Any) -> Any:
    """Convert a single driver value into plain Python data.

    Raises:
        ConversionError: If the value's type is not supported.
    """
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, Node):
        return _node_to_host(value)
    if isinstance(value, Relationship):
        return _relationship_to_host(value)
    if isinstance(value, Path):
        return {
            "nodes": [_node_to_host(node) for node in value.nodes],
            "relationships": [_relationship_to_host(rel) for rel in value.relationships],
        }
    if isinstance(value, (Date, DateTime, Time)):
        return value.to_native()
    # Duration and Point are tuple subclasses, so they go before sequences.
    if isinstance(value, Duration):
        return {
            "months": value.months,
            "days": value.days,
            "seconds": value.seconds,
            "nanoseconds": value.nanoseconds,
        }
    if isinstance(value, Point):
        return {"srid": value.srid, "coordinates": [float(c) for c in value]}
    if isinstance(value, Record):
        return convert_record(value)
    if isinstance(value, (datetime.date, datetime.time, datetime.timedelta)):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, (list, tuple)):
        return [to_host(item) for item in value]
    if isinstance(value, dict):
        return {key: to_host(item) for key, item in value.items()}
    raise ConversionError(f"Cannot convert value of type {type(value).__name__}")


def _flatten(properties: Mapping[str, Any], metadata: Dict[str, Any], what: str) -> Dict[str, Any]:
    clashes = sorted(set(properties) & set(metadata))
    if clashes:
        raise ConversionError(
            f"{what} property names clash with metadata keys: {', '.join(clashes)}"
        )
    result = dict(metadata)
    for key, item in properties.items():
        result[key] = to_host(item)
    return result


def _node_to_host(node: Node) -> Dict[str, Any]:
    metadata = {"_id": node.element_id, "_labels": sorted(node.labels)}
    return _flatten(dict(node.items()), metadata, "Node")


def _relationship_to_host(rel: Relationship) -> Dict[str, Any]:
    start, end = rel.start_node, rel.end_node
    metadata = {
        "_id": rel.element_id,
        "_type": rel.type,
        "_start": start.element_id if start is not None else None,
        "_end": end.element_id if end is not None else None,
    }
    return _flatten(dict(rel.items()), metadata, "Relationship")


def convert_record(record: Record) -> Dict[str, Any]:
    """Convert one record into a dict, keeping the query's field order."""
    try:
        return {key: to_host(value) for key, value in zip(record.keys(), record.values())}
    except ConversionError:
        raise
    except Exception as e:
        raise ConversionError(f"Failed to convert record: {e}") from e


def convert_records(records: Iterable[Record]) -> List[Dict[str, Any]]:
    """Convert a whole result.

    The first failing record aborts the conversion; no partial list is
    returned.
    """
    return [convert_record(record) for record in records]
