"""Plugin discovery from filesystem paths and factory references."""

import hashlib
import importlib
import importlib.util
import inspect
import sys
from pathlib import Path
from types import ModuleType
from typing import Any, Iterable, Optional, Sequence

from deploystack.core.logging import get_logger
from deploystack.plugin_system.base import BasePlugin

logger = get_logger(__name__)


class PluginDiscoverer:
    """Finds plugin instances in configured locations.

    A location is either a single ``.py`` module or a directory whose
    ``*.py`` modules and packages (subdirectories with ``__init__.py``) are
    each treated as one plugin source. Factory references are
    ``"module:attribute"`` strings, callables or ready instances.
    """

    def __init__(
        self,
        plugin_class: type[BasePlugin],
        paths: Optional[Sequence[Path]] = None,
        factories: Optional[Sequence[Any]] = None,
    ) -> None:
        """Initialize discoverer.

        Args:
            plugin_class: Base class discovered plugins must derive from
            paths: Filesystem locations to scan
            factories: Explicit plugin factory references
        """
        self.plugin_class = plugin_class
        self.paths = [Path(p) for p in paths or []]
        self.factories = list(factories or [])

    def discover(self) -> list[BasePlugin]:
        """Discover plugins from all sources.

        A failing source is logged and skipped.

        Returns:
            Discovered plugin instances, paths first, then factories
        """
        discovered: list[BasePlugin] = []

        for path in self.paths:
            for source in self._iter_sources(path):
                try:
                    module = self._load_module(source)
                    plugins = self._collect_from_module(module)
                except Exception as e:
                    logger.error(
                        "plugin_discovery_failed",
                        source=str(source),
                        error=str(e),
                        exc_info=True,
                    )
                    continue
                logger.debug("plugin_source_loaded", source=str(source), count=len(plugins))
                discovered.extend(plugins)

        for factory in self.factories:
            try:
                discovered.extend(self._resolve_factory(factory))
            except Exception as e:
                logger.error(
                    "plugin_discovery_failed",
                    source=repr(factory),
                    error=str(e),
                    exc_info=True,
                )

        logger.info("plugin_discovery_complete", count=len(discovered))
        return discovered

    def _iter_sources(self, path: Path) -> Iterable[Path]:
        """Yield plugin sources under a configured location."""
        if not path.exists():
            logger.info("plugins_directory_not_found", path=str(path))
            try:
                path.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.warning("plugins_directory_create_failed", path=str(path), error=str(e))
            return

        if path.is_file():
            yield path
            return

        for entry in sorted(path.iterdir()):
            if entry.name.startswith(("_", ".")):
                continue
            if entry.is_file() and entry.suffix == ".py":
                yield entry
            elif entry.is_dir() and (entry / "__init__.py").exists():
                yield entry

    def _load_module(self, source: Path) -> ModuleType:
        """Import a plugin module or package from a file path.

        Args:
            source: ``.py`` file or package directory

        Returns:
            Executed module
        """
        resolved = source.resolve()
        digest = hashlib.sha1(str(resolved).encode()).hexdigest()[:8]
        module_name = f"deploystack_plugin_{resolved.stem}_{digest}"

        if resolved.is_dir():
            spec = importlib.util.spec_from_file_location(
                module_name,
                resolved / "__init__.py",
                submodule_search_locations=[str(resolved)],
            )
        else:
            spec = importlib.util.spec_from_file_location(module_name, resolved)

        if not spec or not spec.loader:
            raise ValueError(f"Could not load plugin from {source}")

        module = importlib.util.module_from_spec(spec)
        # Registered before execution so relative imports inside packages resolve
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(module_name, None)
            raise
        return module

    def _collect_from_module(self, module: ModuleType) -> list[BasePlugin]:
        """Instantiate plugins exposed by a module.

        ``create_plugin()`` wins over a module-level ``plugin`` instance,
        which wins over scanning for concrete plugin classes.
        """
        factory = getattr(module, "create_plugin", None)
        if callable(factory):
            return self._coerce(factory())

        instance = getattr(module, "plugin", None)
        if isinstance(instance, self.plugin_class):
            return [instance]

        plugins: list[BasePlugin] = []
        for _, obj in inspect.getmembers(module, inspect.isclass):
            if not self._is_defined_in(obj, module):
                continue
            if issubclass(obj, self.plugin_class) and not inspect.isabstract(obj):
                plugins.append(obj())
        return plugins

    def _resolve_factory(self, factory: Any) -> list[BasePlugin]:
        """Resolve a factory reference into plugin instances."""
        if isinstance(factory, self.plugin_class):
            return [factory]

        if isinstance(factory, str):
            module_name, sep, attribute = factory.partition(":")
            if not sep or not attribute:
                raise ValueError(f"Factory reference must look like 'module:attribute', got '{factory}'")
            module = importlib.import_module(module_name)
            factory = getattr(module, attribute)
            if isinstance(factory, self.plugin_class):
                return [factory]

        if not callable(factory):
            raise TypeError(f"Plugin factory {factory!r} is not callable")
        return self._coerce(factory())

    def _coerce(self, produced: Any) -> list[BasePlugin]:
        """Normalize a factory result to a list of plugins."""
        items = list(produced) if isinstance(produced, (list, tuple)) else [produced]
        for item in items:
            if not isinstance(item, self.plugin_class):
                raise TypeError(
                    f"Expected {self.plugin_class.__name__} instance, got {type(item).__name__}"
                )
        return items

    @staticmethod
    def _is_defined_in(obj: type, module: ModuleType) -> bool:
        owner = getattr(obj, "__module__", "")
        return owner == module.__name__ or owner.startswith(module.__name__ + ".")
