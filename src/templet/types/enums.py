"""Shared enumerations for templet."""

from enum import Enum


class LogLevel(str, Enum):
    """Log verbosity level."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


class LogFormat(str, Enum):
    """Log output format."""

    COLORED = "colored"
    JSON = "json"


class ValueKind(str, Enum):
    """Shape of a value in a value tree."""

    NULL = "null"
    SCALAR = "scalar"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


class Sigil(str, Enum):
    """Namespace a variable marker is resolved against."""

    NONE = ""
    RESOURCE = "@"
    CONTEXT = "$"
