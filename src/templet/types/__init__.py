"""Shared types for templet.

Import from here rather than submodules:
    from templet.types import LogLevel, ValueKind, ValidationResult
"""

from .enums import LogFormat, LogLevel, Sigil, ValueKind
from .validation import ValidationIssue, ValidationResult

__all__ = [
    # Enums
    "LogLevel",
    "LogFormat",
    "ValueKind",
    "Sigil",
    # Validation
    "ValidationIssue",
    "ValidationResult",
]
