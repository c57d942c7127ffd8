"""templet logging - Hierarchical colored logging for loading and rendering."""

from .colors import (
    CYAN,
    GREEN,
    LIGHT_BLUE,
    MAGENTA,
    RED,
    RESET,
    YELLOW,
)
from .logger import (
    LoaderLogger,
    LogConfig,
    RenderLogger,
    TemplateLogger,
)

__all__ = [
    # Logger classes
    "TemplateLogger",
    "LoaderLogger",
    "RenderLogger",
    "LogConfig",
    # Colors
    "RESET",
    "GREEN",
    "RED",
    "YELLOW",
    "LIGHT_BLUE",
    "CYAN",
    "MAGENTA",
]
