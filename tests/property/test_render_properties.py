"""Property-based tests for template parsing and rendering.

Tests literal text, section balance, null tolerance and separators.
"""

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from templet.errors import ParseError
from templet.template import MappingSource, TemplateEngine, parse
from templet.template.types import SectionNode, TextNode

PROPERTY_SETTINGS = settings(
    max_examples=100,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)

section_names = st.from_regex(r"[a-z]{1,8}", fullmatch=True)
plain_text = st.text(max_size=200).filter(lambda s: "{{" not in s)
scalars = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(),
    st.text(max_size=50),
)


def render(source: str, value) -> str:
    engine = TemplateEngine(MappingSource({"t": source}))
    return engine.render_to_string("t", value)


# =============================================================================
# Test Classes
# =============================================================================


@pytest.mark.property
class TestLiteralText:
    """Text outside markers is copied unchanged."""

    @given(plain_text, scalars)
    @PROPERTY_SETTINGS
    def test_text_without_markers_renders_verbatim(self, text, value):
        """A template with no markers renders as itself."""
        assert render(text, value) == text

    @given(plain_text)
    @PROPERTY_SETTINGS
    def test_text_without_markers_is_one_node(self, text):
        """Marker-free text parses to at most one text node."""
        nodes = parse(text)
        if text:
            assert nodes == (TextNode(text),)
        else:
            assert nodes == ()

    @given(st.text(max_size=100))
    @PROPERTY_SETTINGS
    def test_values_are_not_reparsed(self, value):
        """Marker syntax inside a value is written literally."""
        assert render("{{.}}", value) == value


@pytest.mark.property
class TestSectionBalance:
    """Nested sections parse only when balanced."""

    @given(st.lists(section_names, min_size=1, max_size=6))
    @PROPERTY_SETTINGS
    def test_balanced_nesting_parses(self, names):
        """Closing in reverse order always parses to the same depth."""
        source = "".join(f"{{{{#{name}}}}}" for name in names)
        source += "".join(f"{{{{/{name}}}}}" for name in reversed(names))

        nodes = parse(source)
        depth = 0
        while nodes:
            (node,) = nodes
            assert isinstance(node, SectionNode)
            assert node.path == names[depth]
            nodes = node.children
            depth += 1
        assert depth == len(names)

    @given(st.lists(section_names, min_size=1, max_size=6))
    @PROPERTY_SETTINGS
    def test_missing_close_fails(self, names):
        """Dropping the outermost closing marker is a parse error."""
        source = "".join(f"{{{{#{name}}}}}" for name in names)
        source += "".join(f"{{{{/{name}}}}}" for name in reversed(names[1:]))

        with pytest.raises(ParseError):
            parse(source)


@pytest.mark.property
class TestNullTolerance:
    """Missing data renders as nothing."""

    @given(st.lists(section_names, min_size=1, max_size=5), st.sampled_from([None, {}]))
    @PROPERTY_SETTINGS
    def test_missing_paths_render_empty(self, names, value):
        """Variables and sections over missing keys produce no output."""
        source = "".join(f"{{{{{name}}}}}{{{{#{name}}}}}x{{{{/{name}}}}}" for name in names)
        assert render(source, value) == ""


@pytest.mark.property
class TestSeparators:
    """Separators appear only between iterations."""

    @given(st.lists(st.integers(), max_size=20))
    @PROPERTY_SETTINGS
    def test_separator_between_items(self, items):
        """N items produce N-1 separators."""
        output = render("{{#.[|]}}{{.}}{{/.}}", items)
        assert output == "|".join(str(item) for item in items)
        assert output.count("|") == max(len(items) - 1, 0)

    @given(st.lists(st.integers(), max_size=20))
    @PROPERTY_SETTINGS
    def test_body_repeats_per_item(self, items):
        """The section body is rendered once per element."""
        assert render("{{#.}}x{{/.}}", items) == "x" * len(items)
