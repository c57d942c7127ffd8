"""Resource bundles for @-prefixed variables."""

from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import yaml
from babel import Locale

from templet.errors import create_error

from .values import resolve, to_text

ResourceLookup = Callable[[str], str | None]


def as_locale(locale: Locale | str) -> Locale:
    """Parse "de_CH" or a BCP 47 tag like "de-CH"; Locale objects pass through."""
    if isinstance(locale, Locale):
        return locale
    return Locale.parse(locale, sep="-" if "-" in locale else "_")


def _flatten(data: Mapping[str, Any], prefix: str = "") -> dict[str, str]:
    """Flatten nested mappings into dotted keys."""
    entries: dict[str, str] = {}
    for key, value in data.items():
        full_key = f"{prefix}{key}"
        if isinstance(value, Mapping):
            entries.update(_flatten(value, f"{full_key}."))
        elif value is not None:
            entries[full_key] = to_text(value)
    return entries


class ResourceBundle:
    """Localized strings loaded from YAML files.

    For base name "messages" and locale de_CH the files are read in order
    (later files override earlier ones, missing files are skipped):
    - messages.yaml
    - messages_de.yaml
    - messages_de_CH.yaml
    """

    def __init__(
        self,
        directory: str | Path,
        base_name: str = "messages",
        locale: Locale | str = "en_US",
        encoding: str = "utf-8",
    ):
        """Initialize and load the bundle.

        Args:
            directory: Directory holding the resource files
            base_name: File name prefix
            locale: Locale selecting the language/territory files
            encoding: Text encoding of the resource files

        Raises:
            LoaderFailure: RESOURCE_INVALID if a file is not a YAML mapping
        """
        self.directory = Path(directory)
        self.base_name = base_name
        self.locale = as_locale(locale)
        self.encoding = encoding
        self._entries = self._load()

    def candidate_paths(self) -> list[Path]:
        """Resource files for this locale, least specific first."""
        names = [self.base_name]
        names.append(f"{self.base_name}_{self.locale.language}")
        if self.locale.territory:
            names.append(f"{self.base_name}_{self.locale.language}_{self.locale.territory}")
        return [self.directory / f"{name}.yaml" for name in names]

    def get(self, key: str) -> str | None:
        """Look up a string by (dotted) key."""
        return self._entries.get(key)

    def keys(self) -> list[str]:
        """List all keys."""
        return sorted(self._entries)

    def __call__(self, key: str) -> str | None:
        return self.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def _load(self) -> dict[str, str]:
        entries: dict[str, str] = {}
        for path in self.candidate_paths():
            if not path.is_file():
                continue

            try:
                with path.open(encoding=self.encoding) as f:
                    data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise create_error("RESOURCE_INVALID", path=str(path), detail=str(e)) from e

            if not isinstance(data, dict):
                raise create_error(
                    "RESOURCE_INVALID",
                    path=str(path),
                    detail=f"Expected a mapping, got {type(data).__name__}",
                )
            entries.update(_flatten(data))
        return entries


def no_resources(key: str) -> str | None:
    """Resource lookup that knows no keys."""
    return None


def as_resource_lookup(resources: Any) -> ResourceLookup:
    """Normalize a resource argument to a lookup function.

    Accepts None (no resources), a mapping (dotted keys walk nested
    mappings) or any callable taking a key.
    """
    if resources is None:
        return no_resources
    if isinstance(resources, Mapping):
        mapping = resources

        def lookup(key: str) -> str | None:
            value = resolve(mapping, key)
            return None if value is None else to_text(value)

        return lookup
    if callable(resources):
        return resources
    msg = f"Unsupported resource lookup: {type(resources).__name__}"
    raise TypeError(msg)
