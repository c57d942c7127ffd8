"""Unit tests for the error registry, factory and matchers."""

import pytest

from templet.errors import (
    ConfigError,
    ErrorCategory,
    ErrorFactory,
    ErrorMatcherChain,
    ErrorRegistry,
    ErrorTemplate,
    LoaderFailure,
    ParseError,
    RecursionLimitExceeded,
    ResolutionFailure,
    SinkFailure,
    TemplateError,
    create_error,
)


class TestErrorRegistry:
    """Tests for ErrorRegistry."""

    @pytest.mark.parametrize(
        ("code", "error_class"),
        [
            ("UNBALANCED_SECTION", ParseError),
            ("UNTERMINATED_SECTION", ParseError),
            ("MALFORMED_MARKER", ParseError),
            ("UNKNOWN_MODIFIER", ResolutionFailure),
            ("VARIABLE_NOT_SCALAR", ResolutionFailure),
            ("SECTION_NOT_SEQUENCE", ResolutionFailure),
            ("TEMPLATE_NOT_FOUND", LoaderFailure),
            ("TEMPLATE_DECODE_FAILED", LoaderFailure),
            ("LOADER_FAILED", LoaderFailure),
            ("RESOURCE_INVALID", LoaderFailure),
            ("SINK_FAILED", SinkFailure),
            ("RECURSION_LIMIT_EXCEEDED", RecursionLimitExceeded),
            ("CONFIG_INVALID", ConfigError),
        ],
    )
    def test_category_selects_class(self, code, error_class):
        """Each code creates its category's exception class."""
        error = ErrorRegistry().create(code)
        assert type(error) is error_class
        assert isinstance(error, TemplateError)
        assert error.code == code

    def test_interpolation(self):
        """Context fills message placeholders."""
        error = ErrorRegistry().create("UNBALANCED_SECTION", {"section": "items"})
        assert error.message == "Unbalanced section 'items'"
        assert error.detail == "Closing marker '{{/items}}' does not match the open section"

    def test_missing_placeholder_left_as_is(self):
        """Missing context keeps the raw template text."""
        error = ErrorRegistry().create("UNBALANCED_SECTION")
        assert error.message == "Unbalanced section '{section}'"

    def test_detail_override(self):
        """An explicit detail replaces the template's detail."""
        error = ErrorRegistry().create("MALFORMED_MARKER", {"detail": "Empty marker"})
        assert error.detail == "Empty marker"

    def test_location_from_context(self):
        """template_name, line and column come from the context."""
        error = ErrorRegistry().create(
            "MALFORMED_MARKER", {"template_name": "t.txt", "line": 3, "column": 7}
        )
        assert (error.template_name, error.line, error.column) == ("t.txt", 3, 7)
        assert str(error).startswith("Malformed marker [t.txt:3:7]")

    def test_unknown_code(self):
        """Unknown codes are a programming error."""
        with pytest.raises(ValueError):
            ErrorRegistry().create("NOPE")

    def test_register(self):
        """Custom templates can be added."""
        registry = ErrorRegistry()
        registry.register(
            ErrorTemplate(
                code="CUSTOM",
                category=ErrorCategory.RESOLUTION,
                message_template="Custom {thing}",
            )
        )
        error = registry.create("CUSTOM", {"thing": "x"})
        assert isinstance(error, ResolutionFailure)
        assert error.message == "Custom x"
        assert "CUSTOM" in registry.list_codes()


class TestTemplateError:
    """Tests for TemplateError behavior."""

    def test_to_dict(self):
        """Errors serialize with their location."""
        error = create_error(
            "UNTERMINATED_SECTION", section="a", template_name="t", line=1, column=1
        )
        data = error.to_dict()
        assert data["code"] == "UNTERMINATED_SECTION"
        assert data["category"] == "PARSE"
        assert data["template_name"] == "t"
        assert data["cause"] is None
        assert "timestamp" in data

    def test_with_context_keeps_class_and_cause(self):
        """with_context copies the error, its class and chained cause."""
        original = create_error("SINK_FAILED", error_type="OSError")
        original.__cause__ = OSError("disk full")
        located = original.with_context(template_name="t", line=2, column=3)
        assert type(located) is SinkFailure
        assert (located.template_name, located.line, located.column) == ("t", 2, 3)
        assert located.__cause__ is original.__cause__
        assert original.template_name is None

    def test_with_context_does_not_overwrite(self):
        """Existing location wins over the new one."""
        error = create_error("MALFORMED_MARKER", template_name="inner", line=1, column=1)
        located = error.with_context(template_name="outer", line=9, column=9)
        assert located.template_name == "inner"
        assert located.line == 1

    def test_str_without_location(self):
        """str() is message and detail."""
        error = create_error("CONFIG_INVALID", detail="bad")
        assert str(error) == "Invalid configuration: bad"


class TestErrorFactory:
    """Tests for ErrorFactory.from_exception."""

    @pytest.mark.parametrize(
        ("exception", "code"),
        [
            (FileNotFoundError("x"), "TEMPLATE_NOT_FOUND"),
            (IsADirectoryError("x"), "TEMPLATE_NOT_FOUND"),
            (KeyError("x"), "TEMPLATE_NOT_FOUND"),
            (
                UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte"),
                "TEMPLATE_DECODE_FAILED",
            ),
            (RuntimeError("x"), "LOADER_FAILED"),
            (PermissionError("x"), "LOADER_FAILED"),
        ],
    )
    def test_matchers(self, exception, code):
        """Foreign exceptions map to loader codes."""
        error = ErrorFactory().from_exception(exception, template_name="t")
        assert isinstance(error, LoaderFailure)
        assert error.code == code
        assert error.template_name == "t"

    def test_decode_detail(self):
        """Decode errors describe the failing byte."""
        exception = UnicodeDecodeError("utf-8", b"ab\xff", 2, 3, "invalid start byte")
        error = ErrorFactory().from_exception(exception)
        assert error.detail == "utf-8: invalid start byte at byte 2"

    def test_template_error_passthrough(self):
        """TemplateErrors only gain context."""
        original = create_error("SINK_FAILED", error_type="OSError")
        error = ErrorFactory().from_exception(original, template_name="t")
        assert type(error) is SinkFailure
        assert error.template_name == "t"

    def test_chain_order(self):
        """The generic matcher is last."""
        chain = ErrorMatcherChain()
        assert type(chain.matchers[-1]).__name__ == "GenericErrorMatcher"

    def test_create_with_kwargs(self):
        """create() merges context and keyword arguments."""
        error = ErrorFactory().create(
            "UNKNOWN_MODIFIER", {"modifier": "x"}, supported_modifiers="a"
        )
        assert error.message == "Unknown modifier 'x'"
        assert error.detail == "Registered modifiers: a"
