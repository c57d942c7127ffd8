"""templet template engine - parsing, caching and rendering."""

from .context import RenderContext
from .engine import TemplateEngine
from .loader import FileSystemSource, MappingSource, TemplateLoader, TemplateSource
from .modifiers import BUILTIN_MODIFIERS, Modifier, ModifierRegistry, default_registry
from .parser import extract_includes, extract_references, parse, validate_syntax
from .renderer import Renderer, Sink
from .resources import ResourceBundle, ResourceLookup, as_locale, as_resource_lookup
from .types import (
    CommentNode,
    IncludeNode,
    ModifierCall,
    Node,
    RenderResult,
    SectionNode,
    TextNode,
    VariableNode,
)
from .values import kind_of, resolve, to_text

__all__ = [
    # Engine
    "TemplateEngine",
    "RenderResult",
    # Parser
    "parse",
    "validate_syntax",
    "extract_references",
    "extract_includes",
    # Nodes
    "Node",
    "TextNode",
    "VariableNode",
    "SectionNode",
    "IncludeNode",
    "CommentNode",
    "ModifierCall",
    # Values
    "kind_of",
    "resolve",
    "to_text",
    # Modifiers
    "Modifier",
    "ModifierRegistry",
    "BUILTIN_MODIFIERS",
    "default_registry",
    # Loading
    "TemplateSource",
    "TemplateLoader",
    "FileSystemSource",
    "MappingSource",
    # Rendering
    "RenderContext",
    "Renderer",
    "Sink",
    # Resources
    "ResourceBundle",
    "ResourceLookup",
    "as_resource_lookup",
    "as_locale",
]
