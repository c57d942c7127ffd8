"""Error matchers for converting foreign exceptions to TemplateErrors."""

from typing import Any

from .errors import ErrorMatcher, MatchResult


class NotFoundErrorMatcher(ErrorMatcher):
    """Matches missing-template errors raised by template sources."""

    def matches(self, error: Exception) -> bool:
        """Check if error signals a missing template.

        Args:
            error: Exception to check

        Returns:
            True for FileNotFoundError, IsADirectoryError and LookupError
        """
        return isinstance(error, (FileNotFoundError, IsADirectoryError, LookupError))

    def extract(self, error: Exception) -> MatchResult:
        """Extract not-found error info.

        Args:
            error: Exception to extract from

        Returns:
            MatchResult with TEMPLATE_NOT_FOUND code
        """
        return MatchResult(
            code="TEMPLATE_NOT_FOUND",
            context={"detail": str(error), "error_type": type(error).__name__},
        )


class DecodeErrorMatcher(ErrorMatcher):
    """Matches text decoding errors."""

    def matches(self, error: Exception) -> bool:
        """Check if error is a decoding error.

        Args:
            error: Exception to check

        Returns:
            True if error is a UnicodeDecodeError
        """
        return isinstance(error, UnicodeDecodeError)

    def extract(self, error: Exception) -> MatchResult:
        """Extract decode error info.

        Args:
            error: Exception to extract from

        Returns:
            MatchResult with TEMPLATE_DECODE_FAILED code
        """
        context: dict[str, Any] = {"error_type": type(error).__name__}
        if isinstance(error, UnicodeDecodeError):
            context["detail"] = f"{error.encoding}: {error.reason} at byte {error.start}"
        return MatchResult(code="TEMPLATE_DECODE_FAILED", context=context)


class GenericErrorMatcher(ErrorMatcher):
    """Fallback matcher for any exception."""

    def matches(self, error: Exception) -> bool:
        """Always matches.

        Args:
            error: Exception to check

        Returns:
            Always True (fallback matcher)
        """
        return True

    def extract(self, error: Exception) -> MatchResult:
        """Extract generic error info.

        Args:
            error: Exception to extract from

        Returns:
            MatchResult with LOADER_FAILED code
        """
        return MatchResult(
            code="LOADER_FAILED",
            context={"detail": str(error) or None, "error_type": type(error).__name__},
        )


class ErrorMatcherChain:
    """Ordered chain of matchers. First match wins."""

    def __init__(self) -> None:
        """Initialize matcher chain with built-in matchers."""
        self.matchers: list[ErrorMatcher] = []
        self._load_builtin_matchers()

    def match(self, error: Exception) -> MatchResult:
        """Find first matching matcher and extract result.

        Args:
            error: Exception to match

        Returns:
            MatchResult from first matching matcher
        """
        for matcher in self.matchers:
            if matcher.matches(error):
                return matcher.extract(error)

        # Should never reach here due to GenericErrorMatcher
        return MatchResult(code="LOADER_FAILED", context={"detail": str(error)})

    def _load_builtin_matchers(self) -> None:
        """Load built-in matchers in priority order."""
        # Order matters - more specific matchers first
        self.matchers = [
            DecodeErrorMatcher(),
            NotFoundErrorMatcher(),
            GenericErrorMatcher(),  # Fallback - must be last
        ]
