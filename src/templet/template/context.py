"""Render context frames."""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import UTC, tzinfo
from typing import Any

from babel import Locale

from .resources import ResourceLookup, no_resources


@dataclass(frozen=True)
class RenderContext:
    """One frame of a render.

    Access patterns:
    - {{.}} → self.current_value
    - {{name}} → self.current_value["name"]
    - {{@name}} → self.resources("name")
    - {{$name}} → self.context["name"]

    Sections push a frame per element; includes push a frame with the
    same value one level deeper. Lookups never fall back to parent frames.
    """

    current_value: Any
    resources: ResourceLookup = no_resources
    context: Mapping[str, Any] = field(default_factory=dict)
    locale: Locale = field(default_factory=lambda: Locale("en", "US"))
    tzinfo: tzinfo = UTC
    depth: int = 0  # Include nesting

    def push(self, value: Any) -> "RenderContext":
        """Frame for one section iteration."""
        return replace(self, current_value=value)

    def include(self) -> "RenderContext":
        """Frame for an included template."""
        return replace(self, depth=self.depth + 1)
