"""Template Engine implementation."""

import io
import threading
import time
from collections.abc import Mapping
from datetime import tzinfo
from typing import Any
from zoneinfo import ZoneInfo

from babel import Locale

from templet.config import TempletConfig, load_config
from templet.errors import TemplateError
from templet.logging import TemplateLogger
from templet.telemetry import instrument_render, setup_telemetry

from .context import RenderContext
from .loader import FileSystemSource, TemplateLoader, TemplateSource
from .modifiers import Modifier, ModifierRegistry, default_registry
from .parser import extract_includes, extract_references, validate_syntax
from .renderer import Renderer, Sink
from .resources import ResourceBundle, as_locale, as_resource_lookup
from .types import Node, RenderResult


class TemplateEngine:
    """Render named templates against value trees.

    Supports:
    - Variables: {{name}}, {{user.name}}, {{.}}
    - Resources and context: {{@title}}, {{$request.path}}
    - Modifier chains: {{price:format=0.00}}, {{name:^html}}
    - Sections with separators: {{#items[, ]}}{{.}}{{/items}}
    - Includes: {{>row.html}}
    - Comments: {{!note}}

    Does NOT support:
    - Arithmetic or arbitrary expressions
    - Conditionals beyond empty sequences
    """

    def __init__(
        self,
        source: TemplateSource,
        modifiers: ModifierRegistry | None = None,
        config: TempletConfig | None = None,
        logger: TemplateLogger | None = None,
    ):
        """Initialize template engine.

        Args:
            source: Callable resolving a template name to its text
            modifiers: Modifier registry (defaults to a copy of the built-ins)
            config: Engine configuration (defaults to TempletConfig())
            logger: Optional TemplateLogger instance
        """
        self.config = config or TempletConfig()
        self._logger = logger
        self._loader = TemplateLoader(source, logger)
        self._modifiers = modifiers if modifiers is not None else default_registry.copy()
        self._renderer = Renderer(
            self._loader,
            self._modifiers,
            max_depth=self.config.templates.max_include_depth,
        )
        self._default_locale = as_locale(self.config.locale.default_locale)
        self._default_tzinfo = ZoneInfo(self.config.locale.timezone)
        self._bundles: dict[str, ResourceBundle] = {}
        self._bundles_lock = threading.Lock()

    @classmethod
    def from_config(
        cls,
        config: TempletConfig | None = None,
        logger: TemplateLogger | None = None,
    ) -> "TemplateEngine":
        """Build an engine reading templates from the configured directory.

        Also sets up logging and, if enabled, telemetry.

        Args:
            config: Configuration (loaded with load_config() if None)
            logger: Logger (built from config.logging if None)

        Returns:
            Configured TemplateEngine
        """
        config = config or load_config()
        logger = logger or TemplateLogger(config.logging.to_log_config())
        if config.telemetry.enabled:
            setup_telemetry(config.telemetry)

        source = FileSystemSource(config.templates.directory, config.templates.encoding)
        return cls(source, config=config, logger=logger)

    @property
    def loader(self) -> TemplateLoader:
        """Template cache used by this engine."""
        return self._loader

    @property
    def modifiers(self) -> ModifierRegistry:
        """Modifier registry used by this engine."""
        return self._modifiers

    def render(
        self,
        name: str,
        value: Any,
        sink: Sink,
        resources: Any = None,
        context: Mapping[str, Any] | None = None,
        locale: Locale | str | None = None,
        tzinfo: tzinfo | str | None = None,
    ) -> RenderResult:
        """Render a template to a sink.

        Args:
            name: Root template name
            value: Root value (None renders nothing)
            sink: Object with a write(str) method
            resources: Resource lookup for {{@key}} (mapping or callable;
                defaults to the configured resource bundle)
            context: Context map for {{$key}}
            locale: Locale for modifiers, "de_DE" or "de-DE" (defaults to config)
            tzinfo: Time zone for modifiers (defaults to config)

        Returns:
            RenderResult with characters written and duration

        Raises:
            TemplateError subclasses: ParseError, ResolutionFailure,
            LoaderFailure, SinkFailure, RecursionLimitExceeded
        """
        render_locale = as_locale(locale) if locale else self._default_locale
        if isinstance(tzinfo, str):
            tzinfo = ZoneInfo(tzinfo)
        render_tzinfo = tzinfo or self._default_tzinfo

        render_logger = self._logger.render(name) if self._logger else None
        if render_logger:
            render_logger.started(str(render_locale))

        start_time = time.perf_counter()
        chars_written = 0
        includes: list[str] = []

        with instrument_render(name) as result:
            try:
                nodes = self._loader.load(name)
                if value is not None:
                    frame = RenderContext(
                        current_value=value,
                        resources=as_resource_lookup(
                            resources if resources is not None else self._bundle(render_locale)
                        ),
                        context=context or {},
                        locale=render_locale,
                        tzinfo=render_tzinfo,
                    )
                    chars_written, includes = self._renderer.render(
                        nodes, frame, sink, name, logger=render_logger
                    )
            except TemplateError as e:
                if render_logger:
                    duration_ms = int((time.perf_counter() - start_time) * 1000)
                    render_logger.failed(e, duration_ms)
                raise
            result["chars_written"] = chars_written

        duration_ms = int((time.perf_counter() - start_time) * 1000)
        if render_logger:
            render_logger.completed(duration_ms, chars_written)

        return RenderResult(
            template_name=name,
            chars_written=chars_written,
            duration_ms=duration_ms,
            includes=includes,
        )

    def render_to_string(
        self,
        name: str,
        value: Any,
        resources: Any = None,
        context: Mapping[str, Any] | None = None,
        locale: Locale | str | None = None,
        tzinfo: tzinfo | str | None = None,
    ) -> str:
        """Render a template and return the output as a string.

        Args:
            name: Root template name
            value: Root value
            resources: Resource lookup for {{@key}}
            context: Context map for {{$key}}
            locale: Locale for modifiers
            tzinfo: Time zone for modifiers

        Returns:
            Rendered text
        """
        buffer = io.StringIO()
        self.render(name, value, buffer, resources, context, locale, tzinfo)
        return buffer.getvalue()

    def register_modifier(self, name: str, modifier: Modifier) -> None:
        """Register a custom modifier. Call before rendering concurrently.

        Args:
            name: Modifier name used in templates
            modifier: Callable (value, argument, locale, tzinfo) -> str
        """
        self._modifiers.register(name, modifier)

    def load(self, name: str) -> tuple[Node, ...]:
        """Load (and cache) a template's node tree."""
        return self._loader.load(name)

    def invalidate(self, name: str | None = None) -> None:
        """Drop a cached template, or all of them."""
        self._loader.invalidate(name)

    def validate(self, source: str) -> list[str]:
        """Validate template syntax without rendering.

        Returns list of errors (empty if valid).
        Does NOT check variable existence or include targets.

        Args:
            source: Template text

        Returns:
            List of error messages (empty if valid)
        """
        return validate_syntax(source)

    def extract_references(self, name: str) -> list[str]:
        """Extract all variable and section references from a template.

        E.g., "{{#items}}{{name}}{{/items}}" → ["items", "name"]

        Useful for dependency analysis.

        Args:
            name: Template name

        Returns:
            List of references
        """
        return extract_references(self.load(name))

    def extract_includes(self, name: str) -> list[str]:
        """List the templates a template includes directly."""
        return extract_includes(self.load(name))

    def _bundle(self, locale: Locale) -> ResourceBundle | None:
        """Configured resource bundle for a locale, loaded once."""
        resources = self.config.resources
        if resources.directory is None:
            return None

        key = str(locale)
        with self._bundles_lock:
            bundle = self._bundles.get(key)
            if bundle is None:
                bundle = ResourceBundle(
                    resources.directory,
                    resources.base_name,
                    locale,
                    self.config.templates.encoding,
                )
                self._bundles[key] = bundle
            return bundle
