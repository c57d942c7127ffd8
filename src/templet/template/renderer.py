"""Renderer: walks a node tree and streams output to a sink."""

from dataclasses import dataclass, field
from typing import Any, Protocol

from templet.errors import TemplateError, create_error
from templet.types import Sigil, ValueKind

from .context import RenderContext
from .loader import TemplateLoader
from .modifiers import ModifierRegistry
from .types import (
    CommentNode,
    IncludeNode,
    Node,
    SectionNode,
    TextNode,
    VariableNode,
)
from .values import kind_of, resolve, to_text


class Sink(Protocol):
    """Anything with a write(str) method, e.g. io.StringIO or a text file."""

    def write(self, text: str, /) -> Any: ...


@dataclass
class _Output:
    """Write-through wrapper counting characters and mapping sink failures."""

    sink: Sink
    logger: Any = None  # RenderLogger for include events
    chars_written: int = 0
    includes: list[str] = field(default_factory=list)

    def write(self, text: str) -> None:
        if not text:
            return
        try:
            self.sink.write(text)
        except Exception as e:
            raise create_error(
                "SINK_FAILED",
                error_type=type(e).__name__,
                detail=str(e) or None,
            ) from e
        self.chars_written += len(text)


class Renderer:
    """Render node trees against render context frames.

    Output is written as it is produced; nothing is buffered, and output
    already written when an error occurs is not retracted.
    """

    def __init__(
        self,
        loader: TemplateLoader,
        modifiers: ModifierRegistry,
        max_depth: int | None = None,
    ):
        """Initialize renderer.

        Args:
            loader: Loader used to resolve includes
            modifiers: Modifier registry for variable markers
            max_depth: Maximum include nesting (None for unlimited)
        """
        self._loader = loader
        self._modifiers = modifiers
        self.max_depth = max_depth

    def render(
        self,
        nodes: tuple[Node, ...],
        context: RenderContext,
        sink: Sink,
        template_name: str | None = None,
        logger: Any = None,
    ) -> tuple[int, list[str]]:
        """Render nodes to a sink.

        Args:
            nodes: Parsed template
            context: Root frame
            sink: Output sink
            template_name: Name used in error locations
            logger: Optional RenderLogger for include events

        Returns:
            Tuple of (characters written, included template names)

        Raises:
            ResolutionFailure: Unknown modifier, non-scalar variable or
                non-sequence section
            RecursionLimitExceeded: Include nesting beyond max_depth
            LoaderFailure, ParseError: An included template failed to load
            SinkFailure: The sink rejected a write
        """
        output = _Output(sink, logger)
        self._render_nodes(nodes, context, output, template_name)
        return output.chars_written, output.includes

    def _render_nodes(
        self,
        nodes: tuple[Node, ...],
        context: RenderContext,
        output: _Output,
        template_name: str | None,
    ) -> None:
        for node in nodes:
            if isinstance(node, TextNode):
                output.write(node.content)
            elif isinstance(node, VariableNode):
                self._render_variable(node, context, output, template_name)
            elif isinstance(node, SectionNode):
                self._render_section(node, context, output, template_name)
            elif isinstance(node, IncludeNode):
                self._render_include(node, context, output, template_name)
            elif isinstance(node, CommentNode):
                continue

    def _render_variable(
        self,
        node: VariableNode,
        context: RenderContext,
        output: _Output,
        template_name: str | None,
    ) -> None:
        if node.sigil == Sigil.RESOURCE:
            value = context.resources(node.path)
        elif node.sigil == Sigil.CONTEXT:
            value = resolve(context.context, node.path)
        else:
            value = resolve(context.current_value, node.path)

        try:
            if value is None:
                # Nothing to write, but the chain must still be valid
                self._modifiers.check(node.modifiers)
                return

            kind = kind_of(value)
            if kind != ValueKind.SCALAR:
                raise create_error(
                    "VARIABLE_NOT_SCALAR",
                    path=node.reference,
                    kind=kind.value,
                )

            if node.modifiers:
                text = self._modifiers.apply(
                    value, node.modifiers, context.locale, context.tzinfo
                )
            else:
                text = to_text(value)
        except TemplateError as e:
            raise e.with_context(template_name, node.line, node.column) from e.__cause__

        output.write(text)

    def _render_section(
        self,
        node: SectionNode,
        context: RenderContext,
        output: _Output,
        template_name: str | None,
    ) -> None:
        value = resolve(context.current_value, node.path)
        kind = kind_of(value)

        if kind == ValueKind.NULL:
            return
        if kind != ValueKind.SEQUENCE:
            raise create_error(
                "SECTION_NOT_SEQUENCE",
                path=node.path,
                kind=kind.value,
                template_name=template_name,
                line=node.line,
                column=node.column,
            )

        for index, element in enumerate(value):
            if index and node.separator:
                output.write(node.separator)
            self._render_nodes(node.children, context.push(element), output, template_name)

    def _render_include(
        self,
        node: IncludeNode,
        context: RenderContext,
        output: _Output,
        template_name: str | None,
    ) -> None:
        included = context.include()
        if self.max_depth is not None and included.depth > self.max_depth:
            raise create_error(
                "RECURSION_LIMIT_EXCEEDED",
                max_depth=self.max_depth,
                include=node.template_name,
                template_name=template_name,
                line=node.line,
                column=node.column,
            )

        if output.logger:
            output.logger.include(node.template_name, included.depth)

        nodes = self._loader.load(node.template_name)
        output.includes.append(node.template_name)
        self._render_nodes(nodes, included, output, node.template_name)
