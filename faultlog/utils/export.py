"""
Canonical string rendering of log messages and context values.

Strings are passed through untouched. Everything else is reduced to plain
JSON types up to a bounded depth and dumped with ``json``:
- containers nested deeper than the depth become summaries like ``dict(3)``
- a container that reappears inside itself becomes ``*RECURSION*``
- objects are rendered from their attributes with a ``__class__`` marker
"""

import json
from collections.abc import Mapping, Set
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel

DEFAULT_DEPTH = 3
RECURSION_MARKER = "*RECURSION*"


def _class_name(value: Any) -> str:
    klass = type(value)
    if klass.__module__ == "builtins":
        return klass.__qualname__
    return f"{klass.__module__}.{klass.__qualname__}"


def _summary(value: Any) -> str:
    if isinstance(value, (Mapping, list, tuple, Set)):
        return f"{type(value).__name__}({len(value)})"
    return _class_name(value)


def _reduce(value: Any, depth: int, path: frozenset) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Enum):
        return _reduce(value.value, depth, path)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    if id(value) in path:
        return RECURSION_MARKER
    if depth <= 0:
        return _summary(value)

    path = path | {id(value)}
    if isinstance(value, BaseModel):
        return _reduce(value.model_dump(), depth, path)
    if isinstance(value, BaseException):
        return {"__class__": _class_name(value), "message": str(value)}
    if isinstance(value, Mapping):
        return {str(key): _reduce(item, depth - 1, path) for key, item in value.items()}
    if isinstance(value, (list, tuple, Set)):
        return [_reduce(item, depth - 1, path) for item in value]
    attributes = getattr(value, "__dict__", None)
    if isinstance(attributes, dict):
        reduced = {"__class__": _class_name(value)}
        for key, item in attributes.items():
            reduced[key] = _reduce(item, depth - 1, path)
        return reduced
    return repr(value)


def export(value: Any, depth: int = DEFAULT_DEPTH) -> str:
    """
    Render a value as a string.

    Args:
        value: Anything
        depth: Number of container levels expanded before summarizing

    Returns:
        The value itself for strings, otherwise a JSON document
    """
    if isinstance(value, str):
        return value
    return json.dumps(_reduce(value, depth, frozenset()), ensure_ascii=False, default=str)


def dump_context(context: Mapping, depth: int = DEFAULT_DEPTH) -> Dict[str, str]:
    """Render every context value so the backend only ever sees strings."""
    return {str(key): export(value, depth) for key, value in context.items()}


def truncate(text: Optional[str], limit: int) -> Optional[str]:
    if text is None or limit <= 0 or len(text) <= limit:
        return text
    return text[:limit] + "..."
