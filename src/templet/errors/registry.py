"""Error registry for creating errors from templates."""

from typing import Any

from .errors import ERROR_CLASSES, ErrorCategory, ErrorTemplate, TemplateError


class ErrorRegistry:
    """Registry of error templates. Creates errors from templates + context."""

    def __init__(self) -> None:
        """Initialize error registry with built-in templates."""
        self._templates: dict[str, ErrorTemplate] = {}
        self._load_builtin_templates()

    def get_template(self, code: str) -> ErrorTemplate | None:
        """Get template by error code.

        Args:
            code: Error code to look up

        Returns:
            ErrorTemplate if found, None otherwise
        """
        return self._templates.get(code)

    def list_codes(self) -> list[str]:
        """List all registered error codes.

        Returns:
            List of error codes
        """
        return list(self._templates.keys())

    def register(self, template: ErrorTemplate) -> None:
        """Add or replace an error template.

        Args:
            template: Template to register under its code
        """
        self._templates[template.code] = template

    def create(
        self,
        code: str,
        context: dict[str, Any] | None = None,
        cause: TemplateError | None = None,
    ) -> TemplateError:
        """Create error instance from template + context.

        The error class is chosen by the template's category.

        Args:
            code: Error code
            context: Context variables for template interpolation
            cause: Optional cause error

        Returns:
            TemplateError subclass instance

        Raises:
            ValueError: If error code not found
        """
        template = self.get_template(code)
        if not template:
            msg = f"Unknown error code: {code}"
            raise ValueError(msg)

        context = context or {}

        message = self._interpolate(template.message_template, context)
        detail = self._interpolate(template.detail_template, context)
        suggestion = self._interpolate(template.suggestion_template, context)

        # Explicit detail in context wins over the template's detail
        if "detail" in context and context["detail"] is not None:
            detail = str(context["detail"])

        if message is None:
            message = f"Error {code}"

        error_class = ERROR_CLASSES.get(template.category, TemplateError)
        return error_class(
            code=template.code,
            category=template.category,
            message=message,
            detail=detail,
            suggestion=suggestion,
            template_name=context.get("template_name"),
            line=context.get("line"),
            column=context.get("column"),
            cause=cause,
        )

    def _interpolate(
        self,
        template: str | None,
        context: dict[str, Any],
    ) -> str | None:
        """Safe string interpolation.

        Args:
            template: Template string with {var} placeholders
            context: Context variables

        Returns:
            Interpolated string or None if template is None
        """
        if template is None:
            return None

        try:
            return template.format(**context)
        except (KeyError, IndexError):
            # Missing context variable - return template as-is
            return template

    def _load_builtin_templates(self) -> None:
        """Load hardcoded built-in templates."""
        # PARSE Errors
        self._templates["UNBALANCED_SECTION"] = ErrorTemplate(
            code="UNBALANCED_SECTION",
            category=ErrorCategory.PARSE,
            message_template="Unbalanced section '{section}'",
            detail_template="Closing marker '{{{{/{section}}}}}' does not match the open section",
            suggestion_template="Close sections in the reverse order they were opened",
        )

        self._templates["UNTERMINATED_SECTION"] = ErrorTemplate(
            code="UNTERMINATED_SECTION",
            category=ErrorCategory.PARSE,
            message_template="Unterminated section '{section}'",
            detail_template="End of template reached with section '{section}' still open",
            suggestion_template="Add a matching '{{{{/{section}}}}}' marker",
        )

        self._templates["MALFORMED_MARKER"] = ErrorTemplate(
            code="MALFORMED_MARKER",
            category=ErrorCategory.PARSE,
            message_template="Malformed marker",
            detail_template="The marker could not be parsed",
            suggestion_template="Check the marker syntax: {{{{path:modifier=argument}}}}",
        )

        # RESOLUTION Errors
        self._templates["UNKNOWN_MODIFIER"] = ErrorTemplate(
            code="UNKNOWN_MODIFIER",
            category=ErrorCategory.RESOLUTION,
            message_template="Unknown modifier '{modifier}'",
            detail_template="Registered modifiers: {supported_modifiers}",
            suggestion_template="Register the modifier before rendering or fix the template",
        )

        self._templates["VARIABLE_NOT_SCALAR"] = ErrorTemplate(
            code="VARIABLE_NOT_SCALAR",
            category=ErrorCategory.RESOLUTION,
            message_template="Variable '{path}' is not a scalar",
            detail_template="The path resolved to a {kind} value, which cannot be written as text",
            suggestion_template="Use a section to iterate sequences or address a nested key",
        )

        self._templates["SECTION_NOT_SEQUENCE"] = ErrorTemplate(
            code="SECTION_NOT_SEQUENCE",
            category=ErrorCategory.RESOLUTION,
            message_template="Section '{path}' is not a sequence",
            detail_template="The path resolved to a {kind} value",
            suggestion_template="Sections iterate sequences; use a variable for scalars",
        )

        # LOADER Errors
        self._templates["TEMPLATE_NOT_FOUND"] = ErrorTemplate(
            code="TEMPLATE_NOT_FOUND",
            category=ErrorCategory.LOADER,
            message_template="Template '{template_name}' not found",
            detail_template="The template source has no template with this name",
            suggestion_template="Check the template name and the loader's search location",
        )

        self._templates["TEMPLATE_DECODE_FAILED"] = ErrorTemplate(
            code="TEMPLATE_DECODE_FAILED",
            category=ErrorCategory.LOADER,
            message_template="Template '{template_name}' could not be decoded",
            detail_template="The template bytes are not valid in the configured encoding",
            suggestion_template="Check the template file encoding",
        )

        self._templates["LOADER_FAILED"] = ErrorTemplate(
            code="LOADER_FAILED",
            category=ErrorCategory.LOADER,
            message_template="Failed to load template '{template_name}'",
            detail_template="The template source raised {error_type}",
            suggestion_template="Check the template source",
        )

        self._templates["RESOURCE_INVALID"] = ErrorTemplate(
            code="RESOURCE_INVALID",
            category=ErrorCategory.LOADER,
            message_template="Invalid resource bundle '{path}'",
            detail_template="The resource file could not be parsed",
            suggestion_template="Resource files must contain a YAML mapping",
        )

        # SINK Errors
        self._templates["SINK_FAILED"] = ErrorTemplate(
            code="SINK_FAILED",
            category=ErrorCategory.SINK,
            message_template="Output sink rejected a write",
            detail_template="The sink raised {error_type}",
            suggestion_template="Check the output destination; earlier output was already written",
        )

        # RENDER Errors
        self._templates["RECURSION_LIMIT_EXCEEDED"] = ErrorTemplate(
            code="RECURSION_LIMIT_EXCEEDED",
            category=ErrorCategory.RENDER,
            message_template="Include depth limit of {max_depth} exceeded",
            detail_template="Template '{include}' was included beyond the allowed nesting",
            suggestion_template="Check for self-referencing includes over cyclic values",
        )

        # CONFIG Errors
        self._templates["CONFIG_INVALID"] = ErrorTemplate(
            code="CONFIG_INVALID",
            category=ErrorCategory.CONFIG,
            message_template="Invalid configuration",
            detail_template="The templet configuration is invalid",
            suggestion_template="Check the configuration file and fix errors",
        )
