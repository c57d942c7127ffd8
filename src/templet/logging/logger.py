"""templet logger - hierarchical colored logging for template loading and rendering."""

import json
import sys
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, TextIO

from templet.logging.colors import (
    CYAN,
    GREEN,
    LIGHT_BLUE,
    MAGENTA,
    RED,
    RESET,
    YELLOW,
)
from templet.types import LogFormat, LogLevel


@dataclass
class LogConfig:
    """Logger configuration."""

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.COLORED
    show_context: bool = True
    truncate_at: int = 200
    components: dict[str, bool] = field(default_factory=dict)
    output: TextIO = field(default=sys.stdout)

    def __post_init__(self) -> None:
        """Initialize default components if not provided."""
        if not self.components:
            self.components = {
                "engine": True,
                "loader": True,
                "render": True,
            }


class TemplateLogger:
    """Main logger facade. Creates component-specific loggers."""

    def __init__(self, config: LogConfig | None = None):
        """Initialize logger with configuration.

        Args:
            config: Logger configuration (defaults to LogConfig())
        """
        self.config = config or LogConfig()
        self._level_order = {
            LogLevel.DEBUG: 0,
            LogLevel.INFO: 1,
            LogLevel.WARN: 2,
            LogLevel.ERROR: 3,
        }

    def loader(self) -> "LoaderLogger":
        """Get a logger for template cache events."""
        return LoaderLogger(self)

    def render(self, template_name: str) -> "RenderLogger":
        """Get a logger scoped to one render call.

        Args:
            template_name: Root template being rendered

        Returns:
            RenderLogger instance
        """
        return RenderLogger(self, template_name)

    def configure(self, config: LogConfig) -> None:
        """Update configuration.

        Args:
            config: New logger configuration
        """
        self.config = config

    def info(self, message: str, **context: Any) -> None:
        """Log an engine-level informational message."""
        self._log(LogLevel.INFO, "engine", message, context or None)

    def warn(self, message: str, **context: Any) -> None:
        """Log an engine-level warning."""
        self._log(LogLevel.WARN, "engine", message, context or None)

    def _should_log(self, level: LogLevel) -> bool:
        """Check if a log level should be logged.

        Args:
            level: Log level to check

        Returns:
            True if should log, False otherwise
        """
        return self._level_order.get(level, 0) >= self._level_order.get(self.config.level, 1)

    def _log(
        self,
        level: LogLevel,
        component: str,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Internal logging method.

        Args:
            level: Log level
            component: Component name (engine, loader, render)
            message: Log message
            context: Additional context data
        """
        if not self._should_log(level):
            return

        if not self.config.components.get(component, True):
            return

        if self.config.format == LogFormat.JSON:
            self._log_json(level, component, message, context)
        else:
            self._log_colored(level, component, message, context)

    def _log_json(
        self,
        level: LogLevel,
        component: str,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        log_entry = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": level.value,
            "component": component,
            "message": message,
        }
        if context:
            log_entry.update(context)

        print(json.dumps(log_entry, default=str), file=self.config.output)

    def _log_colored(
        self,
        level: LogLevel,
        component: str,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        level_colors = {
            LogLevel.DEBUG: LIGHT_BLUE,
            LogLevel.INFO: CYAN,
            LogLevel.WARN: YELLOW,
            LogLevel.ERROR: RED,
        }

        color = level_colors.get(level, RESET)
        component_color = {
            "engine": MAGENTA,
            "loader": GREEN,
            "render": CYAN,
        }.get(component, RESET)

        # Format: [COMPONENT] message
        output = f"{component_color}[{component.upper()}]{RESET} {color}{message}{RESET}"

        if context and self.config.show_context:
            context_str = str(context)
            if len(context_str) > self.config.truncate_at:
                context_str = context_str[: self.config.truncate_at] + "..."
            output += f" {LIGHT_BLUE}{context_str}{RESET}"

        print(output, file=self.config.output)


class LoaderLogger:
    """Logger for template cache events."""

    def __init__(self, parent: TemplateLogger):
        """Initialize loader logger.

        Args:
            parent: Parent TemplateLogger instance
        """
        self.parent = parent

    def cache_hit(self, template_name: str) -> None:
        """Log a template served from the cache."""
        context = {"event": "template_cache_hit", "template_name": template_name}
        self.parent._log(LogLevel.DEBUG, "loader", f"Template '{template_name}' cached", context)

    def loaded(self, template_name: str, node_count: int, duration_ms: int) -> None:
        """Log a template read and parsed for the first time.

        Args:
            template_name: Template name
            node_count: Number of top-level nodes produced
            duration_ms: Time spent reading and parsing
        """
        context = {
            "event": "template_loaded",
            "template_name": template_name,
            "node_count": node_count,
            "duration_ms": duration_ms,
        }
        self.parent._log(LogLevel.DEBUG, "loader", f"Template '{template_name}' loaded", context)

    def failed(self, template_name: str, error: Exception) -> None:
        """Log a template that could not be loaded or parsed.

        Args:
            template_name: Template name
            error: Loader or parse failure
        """
        context = {
            "event": "template_load_failed",
            "template_name": template_name,
            "error": str(error),
            "error_type": type(error).__name__,
        }
        message = f"Template '{template_name}' failed to load: {error}"
        self.parent._log(LogLevel.ERROR, "loader", message, context)

    def invalidated(self, template_name: str | None) -> None:
        """Log a cache invalidation (``None`` means the whole cache)."""
        target = f"'{template_name}'" if template_name else "all templates"
        context = {"event": "template_invalidated", "template_name": template_name}
        self.parent._log(LogLevel.INFO, "loader", f"Invalidated {target}", context)


class RenderLogger:
    """Logger for render-level events."""

    def __init__(self, parent: TemplateLogger, template_name: str):
        """Initialize render logger.

        Args:
            parent: Parent TemplateLogger instance
            template_name: Root template being rendered
        """
        self.parent = parent
        self.template_name = template_name

    def started(self, locale: str | None = None) -> None:
        """Log render start."""
        context: dict[str, Any] = {
            "event": "render_started",
            "template_name": self.template_name,
        }
        if locale:
            context["locale"] = locale

        message = f"Rendering '{self.template_name}'"
        self.parent._log(LogLevel.DEBUG, "render", message, context)

    def include(self, include_name: str, depth: int) -> None:
        """Log an include being entered.

        Args:
            include_name: Included template name
            depth: Include nesting depth after entering
        """
        context = {
            "event": "render_include",
            "template_name": self.template_name,
            "include": include_name,
            "depth": depth,
        }
        message = f"Including '{include_name}' (depth {depth})"
        self.parent._log(LogLevel.DEBUG, "render", message, context)

    def completed(self, duration_ms: int, chars_written: int) -> None:
        """Log render completion.

        Args:
            duration_ms: Render duration in milliseconds
            chars_written: Characters written to the sink
        """
        context = {
            "event": "render_completed",
            "template_name": self.template_name,
            "duration_ms": duration_ms,
            "chars_written": chars_written,
        }

        duration_s = duration_ms / 1000
        message = (
            f"Rendered '{self.template_name}' ({chars_written} chars, {duration_s:.3f}s) ✓"
        )
        self.parent._log(LogLevel.INFO, "render", message, context)

    def failed(self, error: Exception, duration_ms: int) -> None:
        """Log render failure.

        Args:
            error: Exception that aborted the render
            duration_ms: Render duration in milliseconds
        """
        context: dict[str, Any] = {
            "event": "render_failed",
            "template_name": self.template_name,
            "duration_ms": duration_ms,
            "error": str(error),
            "error_type": type(error).__name__,
        }
        code = getattr(error, "code", None)
        if code:
            context["error_code"] = code

        message = f"Render of '{self.template_name}' failed: {error}"
        self.parent._log(LogLevel.ERROR, "render", message, context)
