"""templet error handling - Structured errors with context."""

from .errors import (
    ConfigError,
    ErrorCategory,
    ErrorMatcher,
    ErrorTemplate,
    LoaderFailure,
    MatchResult,
    ParseError,
    RecursionLimitExceeded,
    ResolutionFailure,
    SinkFailure,
    TemplateError,
)
from .factory import ErrorFactory, create_error, get_error_factory
from .matchers import ErrorMatcherChain
from .registry import ErrorRegistry

__all__ = [
    # Core error types
    "TemplateError",
    "ParseError",
    "ResolutionFailure",
    "LoaderFailure",
    "SinkFailure",
    "RecursionLimitExceeded",
    "ConfigError",
    "ErrorCategory",
    "ErrorTemplate",
    "MatchResult",
    # Registry and factory
    "ErrorRegistry",
    "ErrorFactory",
    "ErrorMatcherChain",
    "ErrorMatcher",
    # Convenience functions
    "get_error_factory",
    "create_error",
]
