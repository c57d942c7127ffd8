"""templet configuration loader.

Reads a YAML file, expands environment references, validates the result and
builds the TempletConfig dataclass tree.
"""

import codecs
import os
import re
from dataclasses import fields, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from babel import Locale, UnknownLocaleError

from templet.errors import create_error
from templet.types import LogFormat, LogLevel, ValidationIssue, ValidationResult

from .models import TempletConfig

CONFIG_ENV_VAR = "TEMPLET_CONFIG_PATH"

# ${NAME}, ${NAME:-default} or ${NAME:?message}
ENV_REFERENCE = re.compile(r"\$\{(?P<name>[^}:]+)(?::(?P<op>[-?])(?P<operand>[^}]*))?\}")


def resolve_env_vars(value: str) -> str:
    """Expand environment references in a string.

    - ${VAR} must be set
    - ${VAR:-default} falls back to the default
    - ${VAR:?message} must be set, message explains why

    Raises:
        ConfigError: If a required variable is not set
    """

    def expand(match: re.Match[str]) -> str:
        name = match["name"]
        if name in os.environ:
            return os.environ[name]
        if match["op"] == "-":
            return match["operand"]
        raise create_error(
            "CONFIG_INVALID",
            detail=match["operand"] or f"Environment variable {name} is not set",
        )

    return ENV_REFERENCE.sub(expand, value)


def _expand_tree(data: Any) -> Any:
    """Apply resolve_env_vars to every string in parsed YAML."""
    if isinstance(data, str):
        return resolve_env_vars(data)
    if isinstance(data, dict):
        return {key: _expand_tree(item) for key, item in data.items()}
    if isinstance(data, list):
        return [_expand_tree(item) for item in data]
    return data


class ConfigLoader:
    """Load and validate templet configuration."""

    SECTIONS = ("templates", "locale", "resources", "logging", "telemetry")

    def __init__(self, logger: Any = None):
        """Initialize config loader.

        Args:
            logger: Optional TemplateLogger for load messages and warnings
        """
        self._logger = logger
        self._config: TempletConfig | None = None
        self._config_path: Path | None = None

    def load(self, path: str | Path | None = None, use_defaults: bool = True) -> TempletConfig:
        """Load configuration from a YAML file.

        Without a path the first existing file wins:
        1. $TEMPLET_CONFIG_PATH
        2. ./templet.yaml
        3. ~/.templet/config.yaml

        Args:
            path: Explicit config file
            use_defaults: Fall back to defaults when the file does not exist

        Returns:
            Loaded TempletConfig

        Raises:
            ConfigError: Missing file (use_defaults=False), bad YAML or
                invalid values
        """
        config_path = Path(path) if path is not None else self._find_config()

        if not config_path.is_file():
            if not use_defaults:
                raise create_error(
                    "CONFIG_INVALID", detail=f"Config file {config_path} does not exist"
                )
            if self._logger:
                self._logger.info("No config file, using defaults", path=str(config_path))
            return self.load_defaults()

        try:
            data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise create_error(
                "CONFIG_INVALID", detail=f"Invalid YAML in {config_path}: {e}"
            ) from e

        data = data or {}
        if not isinstance(data, dict):
            raise create_error(
                "CONFIG_INVALID",
                detail=f"{config_path} must contain a mapping, not {type(data).__name__}",
            )

        return self.load_from_dict(_expand_tree(data), config_path)

    def load_defaults(self) -> TempletConfig:
        """Default configuration, no file involved."""
        return self.load_from_dict({})

    def load_from_dict(
        self, data: dict[str, Any], config_path: Path | None = None
    ) -> TempletConfig:
        """Validate a configuration mapping and build the config.

        Args:
            data: Parsed configuration
            config_path: File the data came from, remembered for reload()

        Returns:
            Loaded TempletConfig

        Raises:
            ConfigError: If validation fails
        """
        result = self.validate(data)
        if not result.valid:
            lines = "\n".join(f"- {issue.path}: {issue.message}" for issue in result.errors)
            raise create_error("CONFIG_INVALID", detail=f"Invalid configuration:\n{lines}")

        if self._logger:
            for issue in result.warnings:
                self._logger.warn(issue.message, path=issue.path)

        try:
            config = _build(TempletConfig, data)
        except (TypeError, ValueError) as e:
            raise create_error("CONFIG_INVALID", detail=f"Cannot build configuration: {e}") from e

        self._config = config
        self._config_path = config_path
        if self._logger:
            self._logger.info(
                "Configuration loaded", path=str(config_path) if config_path else None
            )
        return config

    def validate(self, data: dict[str, Any]) -> ValidationResult:
        """Check a configuration mapping without loading it.

        Unknown sections are warnings; values that cannot work (bad depth,
        unknown encoding, locale, time zone or log setting) are errors.

        Args:
            data: Parsed configuration

        Returns:
            ValidationResult with errors and warnings
        """
        errors: list[ValidationIssue] = []
        warnings = [
            ValidationIssue(key, f"Unknown configuration section: {key}", severity="warning")
            for key in data
            if key not in self.SECTIONS
        ]

        sections: dict[str, dict[str, Any]] = {}
        for name in self.SECTIONS:
            section = data.get(name, {})
            if isinstance(section, dict):
                sections[name] = section
            else:
                errors.append(ValidationIssue(name, f"{name} must be a mapping"))

        if "templates" in sections:
            errors.extend(self._check_templates(sections["templates"]))
        if "locale" in sections:
            errors.extend(self._check_locale(sections["locale"]))
        if "logging" in sections:
            errors.extend(self._check_logging(sections["logging"]))

        return ValidationResult(valid=not errors, errors=errors, warnings=warnings)

    def get(self) -> TempletConfig:
        """Configuration from the last successful load.

        Raises:
            ConfigError: If nothing has been loaded
        """
        if self._config is None:
            raise create_error("CONFIG_INVALID", detail="No configuration loaded yet")
        return self._config

    def reload(self) -> TempletConfig:
        """Load the same file again.

        Raises:
            ConfigError: If the configuration did not come from a file
        """
        if self._config_path is None:
            raise create_error(
                "CONFIG_INVALID", detail="Configuration was not loaded from a file"
            )
        return self.load(self._config_path, use_defaults=False)

    def _find_config(self) -> Path:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            return Path(env_path)

        candidates = [Path("templet.yaml"), Path.home() / ".templet" / "config.yaml"]
        return next((path for path in candidates if path.is_file()), candidates[0])

    def _check_templates(self, section: dict[str, Any]) -> list[ValidationIssue]:
        issues = []
        depth = section.get("max_include_depth")
        if depth is not None and (type(depth) is not int or depth < 1):
            issues.append(
                ValidationIssue(
                    "templates.max_include_depth",
                    "max_include_depth must be a positive integer or null",
                )
            )
        if "encoding" in section:
            try:
                codecs.lookup(str(section["encoding"]))
            except LookupError:
                issues.append(
                    ValidationIssue(
                        "templates.encoding", f"Unknown encoding: {section['encoding']}"
                    )
                )
        return issues

    def _check_locale(self, section: dict[str, Any]) -> list[ValidationIssue]:
        issues = []
        if "default_locale" in section:
            try:
                tag = str(section["default_locale"])
                Locale.parse(tag, sep="-" if "-" in tag else "_")
            except (UnknownLocaleError, ValueError):
                issues.append(
                    ValidationIssue(
                        "locale.default_locale", f"Unknown locale: {section['default_locale']}"
                    )
                )
        if "timezone" in section:
            try:
                ZoneInfo(str(section["timezone"]))
            except (ZoneInfoNotFoundError, ValueError):
                issues.append(
                    ValidationIssue(
                        "locale.timezone", f"Unknown time zone: {section['timezone']}"
                    )
                )
        return issues

    def _check_logging(self, section: dict[str, Any]) -> list[ValidationIssue]:
        issues = []
        for key, choices in (("level", LogLevel), ("format", LogFormat)):
            allowed = [choice.value for choice in choices]
            if key in section and section[key] not in allowed:
                issues.append(
                    ValidationIssue(
                        f"logging.{key}", f"{key} must be one of {', '.join(allowed)}"
                    )
                )
        return issues


def _build(cls: type, data: dict[str, Any]) -> Any:
    """Instantiate a config dataclass from a mapping, recursing into sections."""
    kwargs = {}
    for f in fields(cls):
        if f.name not in data:
            continue
        value = data[f.name]
        if is_dataclass(f.type) and isinstance(value, dict):
            value = _build(f.type, value)
        elif isinstance(f.type, type) and issubclass(f.type, Enum) and isinstance(value, str):
            value = f.type(value)
        kwargs[f.name] = value
    return cls(**kwargs)


_default_loader: ConfigLoader | None = None


def get_config_loader() -> ConfigLoader:
    """Shared ConfigLoader instance."""
    global _default_loader  # noqa: PLW0603
    if _default_loader is None:
        _default_loader = ConfigLoader()
    return _default_loader


def load_config(path: str | Path | None = None) -> TempletConfig:
    """Load configuration with the shared loader.

    Args:
        path: Optional config file (see ConfigLoader.load for the search order)

    Returns:
        Loaded TempletConfig
    """
    return get_config_loader().load(path)
