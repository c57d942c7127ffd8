"""Value model: classification, path navigation and natural text form.

Values are plain Python objects. Mappings and iterables form the tree;
everything else is a scalar. ``None`` stands for an absent value.
"""

from collections.abc import Iterable, Mapping
from datetime import date, datetime, time
from typing import Any

from templet.types import ValueKind

CURRENT = "."


def kind_of(value: Any) -> ValueKind:
    """Classify a value.

    Strings and bytes are scalars even though they are iterable.
    Generators and other one-shot iterables count as sequences.

    Args:
        value: Value to classify

    Returns:
        ValueKind of the value
    """
    if value is None:
        return ValueKind.NULL
    if isinstance(value, (str, bytes, bytearray)):
        return ValueKind.SCALAR
    if isinstance(value, Mapping):
        return ValueKind.MAPPING
    if isinstance(value, Iterable):
        return ValueKind.SEQUENCE
    return ValueKind.SCALAR


def resolve(value: Any, path: str) -> Any:
    """Resolve a dotted path against a value.

    "." is the value itself. Other paths walk mappings one segment at a
    time; when a segment is missing, the remaining path is tried as a
    literal key (so a key named "a.b" is still reachable). Sequences are
    never indexed.

    Args:
        value: Value to navigate
        path: Dotted path

    Returns:
        Resolved value, or None if any step is missing
    """
    if path == CURRENT:
        return value

    segments = path.split(".")
    current = value

    for index, segment in enumerate(segments):
        if not isinstance(current, Mapping):
            return None
        if segment in current:
            current = current[segment]
        else:
            return current.get(".".join(segments[index:]))

    return current


def to_text(value: Any) -> str:
    """Natural string form of a scalar.

    Args:
        value: Scalar value

    Returns:
        "" for None, "true"/"false" for booleans, ISO 8601 for dates
        and times, str() for everything else
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8", errors="replace")
    return str(value)
