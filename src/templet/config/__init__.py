"""templet configuration - Config loading and management."""

from .loader import (
    ConfigLoader,
    get_config_loader,
    load_config,
    resolve_env_vars,
)
from .models import (
    LocaleConfig,
    LoggingComponentsConfig,
    LoggingConfig,
    LoggingOptionsConfig,
    ResourcesConfig,
    TelemetryConfig,
    TemplatesConfig,
    TempletConfig,
)

__all__ = [
    # Config models
    "TempletConfig",
    "TemplatesConfig",
    "LocaleConfig",
    "ResourcesConfig",
    "LoggingConfig",
    "LoggingComponentsConfig",
    "LoggingOptionsConfig",
    "TelemetryConfig",
    # Loader
    "ConfigLoader",
    "get_config_loader",
    "load_config",
    "resolve_env_vars",
]
