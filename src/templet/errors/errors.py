"""Template error types and matcher contracts."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error source categories."""

    PARSE = "PARSE"
    RESOLUTION = "RESOLUTION"
    LOADER = "LOADER"
    SINK = "SINK"
    RENDER = "RENDER"
    CONFIG = "CONFIG"


@dataclass
class TemplateError(Exception):
    """Structured error with context. Base exception for all templet errors."""

    # Identity
    code: str  # e.g., "UNBALANCED_SECTION"
    category: ErrorCategory

    # Messages
    message: str  # Human-readable summary
    detail: str | None = None  # Extended explanation
    suggestion: str | None = None  # Actionable fix

    # Context
    template_name: str | None = None  # Which template failed
    line: int | None = None  # 1-based line of the offending marker
    column: int | None = None  # 1-based column of the offending marker

    # Error chain
    cause: "TemplateError | None" = None

    # Metadata
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        """Set Exception message."""
        super().__init__(self.message)

    def __str__(self) -> str:
        location = ""
        if self.template_name:
            location = f" [{self.template_name}"
            if self.line is not None:
                location += f":{self.line}:{self.column}"
            location += "]"
        if self.detail:
            return f"{self.message}{location}: {self.detail}"
        return f"{self.message}{location}"

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logs and API responses.

        Returns:
            Dictionary representation of the error
        """
        return {
            "code": self.code,
            "category": self.category.value,
            "message": self.message,
            "detail": self.detail,
            "suggestion": self.suggestion,
            "template_name": self.template_name,
            "line": self.line,
            "column": self.column,
            "timestamp": self.timestamp.isoformat(),
            "cause": self.cause.to_dict() if self.cause else None,
        }

    def with_context(
        self,
        template_name: str | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> "TemplateError":
        """Return copy with additional context.

        The copy keeps the concrete error class and the chained
        ``__cause__`` of the original.

        Args:
            template_name: Optional template name
            line: Optional line number
            column: Optional column number

        Returns:
            New error instance with updated context
        """
        error = type(self)(
            code=self.code,
            category=self.category,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
            template_name=self.template_name or template_name,
            line=self.line if self.line is not None else line,
            column=self.column if self.column is not None else column,
            cause=self.cause,
            timestamp=self.timestamp,
        )
        error.__cause__ = self.__cause__
        return error


class ParseError(TemplateError):
    """Template source is not well formed."""


class ResolutionFailure(TemplateError):
    """A marker could not be resolved at render time."""


class LoaderFailure(TemplateError):
    """The template source (or resource bundle) could not be read."""


class SinkFailure(TemplateError):
    """The output sink rejected a write."""


class RecursionLimitExceeded(TemplateError):
    """Include nesting exceeded the configured depth."""


class ConfigError(TemplateError):
    """Configuration is missing or invalid."""


ERROR_CLASSES: dict[ErrorCategory, type[TemplateError]] = {
    ErrorCategory.PARSE: ParseError,
    ErrorCategory.RESOLUTION: ResolutionFailure,
    ErrorCategory.LOADER: LoaderFailure,
    ErrorCategory.SINK: SinkFailure,
    ErrorCategory.RENDER: RecursionLimitExceeded,
    ErrorCategory.CONFIG: ConfigError,
}


@dataclass
class ErrorTemplate:
    """Template for creating errors."""

    code: str
    category: ErrorCategory
    message_template: str  # "Template '{template_name}' not found"
    detail_template: str | None = None
    suggestion_template: str | None = None


@dataclass
class MatchResult:
    """Result of matching an exception."""

    code: str
    context: dict[str, Any]


class ErrorMatcher(ABC):
    """Base class for exception matchers."""

    @abstractmethod
    def matches(self, error: Exception) -> bool:
        """Check if this matcher handles the error.

        Args:
            error: Exception to check

        Returns:
            True if this matcher can handle the error
        """

    @abstractmethod
    def extract(self, error: Exception) -> MatchResult:
        """Extract error info from the exception.

        Args:
            error: Exception to extract from

        Returns:
            MatchResult with error code and context
        """
