"""Template node and render result type definitions."""

from dataclasses import dataclass, field
from typing import Union

from templet.types import Sigil


@dataclass(frozen=True)
class ModifierCall:
    """One entry of a variable's modifier chain, e.g. ``format=0.00``."""

    name: str
    argument: str | None = None


@dataclass(frozen=True)
class TextNode:
    """Literal text written verbatim."""

    content: str
    line: int = 1
    column: int = 1


@dataclass(frozen=True)
class VariableNode:
    """Variable marker.

    Access patterns:
    - {{name}} → resolved against the current value
    - {{@name}} → looked up in the resource lookup
    - {{$name}} → resolved against the context map
    """

    path: str
    modifiers: tuple[ModifierCall, ...] = ()
    sigil: Sigil = Sigil.NONE
    line: int = 1
    column: int = 1

    @property
    def reference(self) -> str:
        """Path as written in the template, sigil included."""
        return f"{self.sigil.value}{self.path}"


@dataclass(frozen=True)
class SectionNode:
    """Repeated region, rendered once per element of a sequence."""

    path: str
    separator: str | None = None
    children: tuple["Node", ...] = ()
    line: int = 1
    column: int = 1


@dataclass(frozen=True)
class IncludeNode:
    """Reference to another template, resolved at render time."""

    template_name: str
    line: int = 1
    column: int = 1


@dataclass(frozen=True)
class CommentNode:
    """Comment marker. Produces no output."""

    text: str = ""
    line: int = 1
    column: int = 1


Node = Union[TextNode, VariableNode, SectionNode, IncludeNode, CommentNode]


@dataclass
class RenderResult:
    """Result of a render call."""

    template_name: str  # Root template
    chars_written: int  # Characters written to the sink
    duration_ms: int = 0
    includes: list[str] = field(default_factory=list)  # Templates included, in order
