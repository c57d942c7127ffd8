"""Template cache/loader and ready-made template sources."""

import threading
import time
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

from templet.errors import TemplateError, create_error, get_error_factory
from templet.telemetry import record_template_load

from .parser import parse
from .types import Node


class TemplateSource(Protocol):
    """Resolves a template name to its source text. Any callable qualifies."""

    def __call__(self, name: str) -> str: ...


class FileSystemSource:
    """Read templates from files under a directory.

    Names are paths relative to the directory; names that escape it are
    reported as not found.
    """

    def __init__(self, directory: str | Path, encoding: str = "utf-8"):
        """Initialize file system source.

        Args:
            directory: Template root directory
            encoding: Text encoding of the template files
        """
        self.directory = Path(directory).resolve()
        self.encoding = encoding

    def __call__(self, name: str) -> str:
        path = (self.directory / name).resolve()
        if not path.is_relative_to(self.directory):
            raise create_error(
                "TEMPLATE_NOT_FOUND",
                template_name=name,
                detail=f"'{name}' is outside {self.directory}",
            )
        return path.read_text(encoding=self.encoding)

    def __repr__(self) -> str:
        return f"FileSystemSource({str(self.directory)!r})"


class MappingSource:
    """Serve templates embedded in a mapping of name to source text."""

    def __init__(self, templates: Mapping[str, str]):
        self._templates = dict(templates)

    def __call__(self, name: str) -> str:
        return self._templates[name]


class TemplateLoader:
    """Resolve template names to parsed node trees, memoized per name.

    Concurrent first loads of the same name are serialized, so a name is
    read and parsed at most once. Failures are not cached.
    """

    def __init__(self, source: TemplateSource, logger: Any = None):
        """Initialize template loader.

        Args:
            source: Callable resolving a name to template text
            logger: Optional TemplateLogger instance
        """
        self._source = source
        self._logger = logger.loader() if logger else None
        self._cache: dict[str, tuple[Node, ...]] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()
        self._source_calls = 0

    @property
    def source_calls(self) -> int:
        """Number of times the template source has been invoked."""
        return self._source_calls

    def load(self, name: str) -> tuple[Node, ...]:
        """Get the parsed node tree for a template.

        Args:
            name: Template name

        Returns:
            Tuple of top-level nodes

        Raises:
            LoaderFailure: If the source cannot provide the template
            ParseError: If the template is malformed
        """
        nodes = self._cache.get(name)
        if nodes is not None:
            self._cache_hit(name)
            return nodes

        lock = self._lock_for(name)
        try:
            with lock:
                nodes = self._cache.get(name)
                if nodes is not None:
                    self._cache_hit(name)
                    return nodes

                start_time = time.perf_counter()
                try:
                    nodes = parse(self._read(name), name)
                except TemplateError as e:
                    if self._logger:
                        self._logger.failed(name, e)
                    raise

                self._cache[name] = nodes
        finally:
            self._release_lock(name, lock)

        duration_ms = int((time.perf_counter() - start_time) * 1000)
        if self._logger:
            self._logger.loaded(name, len(nodes), duration_ms)
        record_template_load(name, cache_hit=False)
        return nodes

    def invalidate(self, name: str | None = None) -> None:
        """Drop one cached template, or all of them.

        Args:
            name: Template name (None clears the whole cache)
        """
        with self._guard:
            if name is None:
                self._cache.clear()
            else:
                self._cache.pop(name, None)

        if self._logger:
            self._logger.invalidated(name)

    def is_cached(self, name: str) -> bool:
        """Check whether a template is in the cache."""
        return name in self._cache

    def cached_names(self) -> list[str]:
        """List cached template names."""
        return sorted(self._cache)

    def _read(self, name: str) -> str:
        """Invoke the source, mapping foreign exceptions to LoaderFailure."""
        with self._guard:
            self._source_calls += 1

        try:
            text = self._source(name)
            if isinstance(text, bytes):
                text = text.decode("utf-8")
        except TemplateError:
            raise
        except Exception as e:
            raise get_error_factory().from_exception(e, template_name=name) from e

        return text

    def _lock_for(self, name: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(name)
            if lock is None:
                lock = self._locks[name] = threading.Lock()
            return lock

    def _release_lock(self, name: str, lock: threading.Lock) -> None:
        # Threads already waiting keep their reference; later ones find the cache
        with self._guard:
            if self._locks.get(name) is lock:
                del self._locks[name]

    def _cache_hit(self, name: str) -> None:
        if self._logger:
            self._logger.cache_hit(name)
        record_template_load(name, cache_hit=True)
