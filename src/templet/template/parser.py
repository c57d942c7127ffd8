"""Template parsing: source text to an immutable node tree."""

from bisect import bisect_right
from dataclasses import dataclass, field
from typing import Any

from templet.errors import ParseError, TemplateError, create_error
from templet.types import Sigil

from .types import (
    CommentNode,
    IncludeNode,
    ModifierCall,
    Node,
    SectionNode,
    TextNode,
    VariableNode,
)

MARKER_START = "{{"
MARKER_END = "}}"

SECTION_START = "#"
SECTION_END = "/"
INCLUDE = ">"
COMMENT = "!"

MODIFIER_SEPARATOR = ":"
ARGUMENT_SEPARATOR = "="


@dataclass
class _OpenSection:
    """Section whose closing marker has not been seen yet."""

    path: str
    separator: str | None
    line: int
    column: int
    children: list[Node] = field(default_factory=list)


class _Parser:
    """Single left-to-right pass with an explicit stack of open sections."""

    def __init__(self, source: str, name: str | None):
        self.source = source
        self.name = name
        self._newlines = [i for i, c in enumerate(source) if c == "\n"]

    def parse(self) -> tuple[Node, ...]:
        root: list[Node] = []
        stack: list[_OpenSection] = []
        source = self.source
        position = 0

        while True:
            start = source.find(MARKER_START, position)
            if start == -1:
                break

            children = stack[-1].children if stack else root
            if start > position:
                children.append(self._text(position, start))

            end = source.find("}", start + len(MARKER_START))
            if end == -1:
                raise self._error(
                    "MALFORMED_MARKER", start, detail="End of template reached inside a marker"
                )
            if not source.startswith(MARKER_END, end):
                raise self._error(
                    "MALFORMED_MARKER", start, detail="Improperly terminated marker"
                )

            content = source[start + len(MARKER_START) : end]
            line, column = self._location(start)
            position = end + len(MARKER_END)

            if not content:
                raise self._error("MALFORMED_MARKER", start, detail="Empty marker")

            marker_type = content[0]
            if marker_type == SECTION_START:
                path, separator = self._section_start(content[1:], start)
                stack.append(_OpenSection(path, separator, line, column))

            elif marker_type == SECTION_END:
                path = content[1:]
                if not stack or stack[-1].path != path:
                    raise self._error("UNBALANCED_SECTION", start, section=path)
                section = stack.pop()
                parent = stack[-1].children if stack else root
                parent.append(
                    SectionNode(
                        path=section.path,
                        separator=section.separator,
                        children=tuple(section.children),
                        line=section.line,
                        column=section.column,
                    )
                )

            elif marker_type == INCLUDE:
                template_name = content[1:]
                if not template_name:
                    raise self._error("MALFORMED_MARKER", start, detail="Empty include name")
                children.append(IncludeNode(template_name, line=line, column=column))

            elif marker_type == COMMENT:
                children.append(CommentNode(content[1:], line=line, column=column))

            else:
                children.append(self._variable(content, start))

        if position < len(source):
            (stack[-1].children if stack else root).append(self._text(position, len(source)))

        if stack:
            section = stack[-1]
            raise create_error(
                "UNTERMINATED_SECTION",
                section=section.path,
                template_name=self.name,
                line=section.line,
                column=section.column,
            )

        return tuple(root)

    def _section_start(self, content: str, offset: int) -> tuple[str, str | None]:
        """Split ``path[separator]`` into its parts."""
        path, separator = content, None
        if content.endswith("]") and "[" in content:
            index = content.rindex("[")
            path, separator = content[:index], content[index + 1 : -1]

        if not path:
            raise self._error("MALFORMED_MARKER", offset, detail="Empty section name")
        return path, separator

    def _variable(self, content: str, offset: int) -> VariableNode:
        """Build a variable node from ``path:modifier=argument:...``."""
        components = content.split(MODIFIER_SEPARATOR)
        key = components[0]

        sigil = Sigil.NONE
        if key.startswith(Sigil.RESOURCE.value):
            sigil = Sigil.RESOURCE
        elif key.startswith(Sigil.CONTEXT.value):
            sigil = Sigil.CONTEXT
        path = key[len(sigil.value) :]

        if not path:
            raise self._error("MALFORMED_MARKER", offset, detail=f"Empty path in '{content}'")

        modifiers = []
        for component in components[1:]:
            name, equals, argument = component.partition(ARGUMENT_SEPARATOR)
            if not name:
                raise self._error(
                    "MALFORMED_MARKER", offset, detail=f"Empty modifier name in '{content}'"
                )
            modifiers.append(ModifierCall(name, argument if equals else None))

        line, column = self._location(offset)
        return VariableNode(
            path=path,
            modifiers=tuple(modifiers),
            sigil=sigil,
            line=line,
            column=column,
        )

    def _text(self, start: int, end: int) -> TextNode:
        line, column = self._location(start)
        return TextNode(self.source[start:end], line=line, column=column)

    def _location(self, offset: int) -> tuple[int, int]:
        """1-based line and column of a source offset."""
        line = bisect_right(self._newlines, offset - 1)
        line_start = self._newlines[line - 1] + 1 if line else 0
        return line + 1, offset - line_start + 1

    def _error(self, code: str, offset: int, **context: Any) -> TemplateError:
        line, column = self._location(offset)
        return create_error(code, template_name=self.name, line=line, column=column, **context)


def parse(source: str, name: str | None = None) -> tuple[Node, ...]:
    """Parse template source into a node tree.

    Args:
        source: Template text
        name: Template name, attached to parse errors

    Returns:
        Tuple of top-level nodes

    Raises:
        ParseError: UNBALANCED_SECTION, UNTERMINATED_SECTION or MALFORMED_MARKER
    """
    return _Parser(source, name).parse()


def validate_syntax(source: str) -> list[str]:
    """Validate template syntax without rendering.

    Args:
        source: Template text

    Returns:
        List of error messages (empty if valid)
    """
    try:
        parse(source)
    except ParseError as e:
        return [str(e)]
    return []


def extract_references(nodes: tuple[Node, ...]) -> list[str]:
    """Extract every variable and section path, in order of appearance.

    E.g., "{{#items}}{{name}}{{/items}}{{@title}}" → ["items", "name", "@title"]

    Useful for dependency analysis.

    Args:
        nodes: Parsed nodes

    Returns:
        List of references (sigil-prefixed for resource and context keys)
    """
    references: list[str] = []
    for node in nodes:
        if isinstance(node, VariableNode):
            references.append(node.reference)
        elif isinstance(node, SectionNode):
            references.append(node.path)
            references.extend(extract_references(node.children))
    return references


def extract_includes(nodes: tuple[Node, ...]) -> list[str]:
    """Extract the names of included templates, in order of appearance.

    Args:
        nodes: Parsed nodes

    Returns:
        List of template names
    """
    includes: list[str] = []
    for node in nodes:
        if isinstance(node, IncludeNode):
            includes.append(node.template_name)
        elif isinstance(node, SectionNode):
            includes.extend(extract_includes(node.children))
    return includes
