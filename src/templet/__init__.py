"""templet - a small logic-less template engine.

Quick start:
    from templet import MappingSource, TemplateEngine

    engine = TemplateEngine(MappingSource({"hello.txt": "Hello, {{name}}!"}))
    engine.render_to_string("hello.txt", {"name": "World"})
"""

from templet.errors import (
    ConfigError,
    LoaderFailure,
    ParseError,
    RecursionLimitExceeded,
    ResolutionFailure,
    SinkFailure,
    TemplateError,
)
from templet.template import (
    FileSystemSource,
    MappingSource,
    ModifierRegistry,
    RenderResult,
    ResourceBundle,
    TemplateEngine,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "TemplateEngine",
    "RenderResult",
    "ModifierRegistry",
    "FileSystemSource",
    "MappingSource",
    "ResourceBundle",
    "TemplateError",
    "ParseError",
    "ResolutionFailure",
    "LoaderFailure",
    "SinkFailure",
    "RecursionLimitExceeded",
    "ConfigError",
]
