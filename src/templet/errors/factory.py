"""Error factory for creating TemplateErrors from any exception type."""

from typing import Any

from .errors import TemplateError
from .matchers import ErrorMatcherChain
from .registry import ErrorRegistry


class ErrorFactory:
    """Creates TemplateErrors from codes or foreign exceptions."""

    def __init__(
        self,
        registry: ErrorRegistry | None = None,
        matcher_chain: ErrorMatcherChain | None = None,
    ):
        """Initialize error factory.

        Args:
            registry: Error registry (defaults to new ErrorRegistry())
            matcher_chain: Matcher chain (defaults to new ErrorMatcherChain())
        """
        self.registry = registry or ErrorRegistry()
        self.matcher_chain = matcher_chain or ErrorMatcherChain()

    def from_exception(
        self,
        error: Exception,
        template_name: str | None = None,
    ) -> TemplateError:
        """Convert any exception to a TemplateError.

        The returned error is not chained; callers raise it ``from error``.

        Args:
            error: Exception to convert
            template_name: Optional template name

        Returns:
            TemplateError instance
        """
        # If already a TemplateError, just add context
        if isinstance(error, TemplateError):
            return error.with_context(template_name=template_name)

        match_result = self.matcher_chain.match(error)

        context = match_result.context.copy()
        if template_name:
            context["template_name"] = template_name

        return self.registry.create(code=match_result.code, context=context)

    def create(
        self,
        code: str,
        context: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> TemplateError:
        """Create TemplateError directly from code.

        Args:
            code: Error code
            context: Context variables for template interpolation
            **kwargs: Additional context variables

        Returns:
            TemplateError instance
        """
        merged_context = dict(context or {})
        merged_context.update(kwargs)

        return self.registry.create(code=code, context=merged_context)


# Convenience singleton
_default_factory: ErrorFactory | None = None


def get_error_factory() -> ErrorFactory:
    """Get default error factory singleton.

    Returns:
        Default ErrorFactory instance
    """
    global _default_factory  # noqa: PLW0603
    if _default_factory is None:
        _default_factory = ErrorFactory()
    return _default_factory


def create_error(code: str, **context: Any) -> TemplateError:
    """Convenience function to create error.

    Args:
        code: Error code
        **context: Context variables for template interpolation

    Returns:
        TemplateError instance
    """
    return get_error_factory().create(code, context)
