"""templet configuration data models."""

from dataclasses import dataclass, field

from templet.logging import LogConfig
from templet.types import LogFormat, LogLevel


@dataclass
class TemplatesConfig:
    """Template source configuration."""

    directory: str = "./templates"
    encoding: str = "utf-8"
    max_include_depth: int | None = 100  # None disables the guard


@dataclass
class LocaleConfig:
    """Default locale and time zone for modifiers."""

    default_locale: str = "en_US"
    timezone: str = "UTC"


@dataclass
class ResourcesConfig:
    """Resource bundle configuration for @-prefixed variables."""

    directory: str | None = None  # None disables bundle loading
    base_name: str = "messages"


@dataclass
class LoggingComponentsConfig:
    """Per-component logging toggles."""

    engine: bool = True
    loader: bool = True
    render: bool = True


@dataclass
class LoggingOptionsConfig:
    """Logging output options."""

    show_context: bool = True
    truncate_at: int = 200


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.COLORED
    components: LoggingComponentsConfig = field(default_factory=LoggingComponentsConfig)
    options: LoggingOptionsConfig = field(default_factory=LoggingOptionsConfig)

    def to_log_config(self) -> LogConfig:
        """Build the logger configuration this section describes."""
        return LogConfig(
            level=self.level,
            format=self.format,
            show_context=self.options.show_context,
            truncate_at=self.options.truncate_at,
            components={
                "engine": self.components.engine,
                "loader": self.components.loader,
                "render": self.components.render,
            },
        )


@dataclass
class TelemetryConfig:
    """Telemetry configuration.

    Attributes:
        enabled: Whether telemetry is enabled
        service_name: Service name for the OpenTelemetry resource
        service_version: Service version
        metrics_enabled: Whether metrics are recorded
        traces_enabled: Whether render spans are recorded
        attributes: Additional resource attributes
    """

    enabled: bool = False
    service_name: str = "templet"
    service_version: str = "0.1.0"
    metrics_enabled: bool = True
    traces_enabled: bool = True
    attributes: dict[str, str] = field(default_factory=dict)


@dataclass
class TempletConfig:
    """Root configuration object."""

    templates: TemplatesConfig = field(default_factory=TemplatesConfig)
    locale: LocaleConfig = field(default_factory=LocaleConfig)
    resources: ResourcesConfig = field(default_factory=ResourcesConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)
