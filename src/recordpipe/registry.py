"""
Named adapter registries.

A registry maps adapter type names ("Memory", "Rest", ...) to constructors
and keeps the instances it created under their names:

    manager = DataManager(["tasks", {"name": "projects", "settings": {"data_sync": True}}])
    manager["projects"].save({"id": 1, "title": "Launch"})

    pipeline = Pipeline("tasks", base_url="http://localhost:8080/api")
    pipeline["tasks"].read(stores=manager["tasks"])

Every adapter constructor is called as ``factory(name, record_id=..., **settings)``.
"""

import logging
from collections.abc import Callable, Iterator, Mapping
from typing import Any

from .data_manager import MemoryStore
from .pipeline import RestPipe

logger = logging.getLogger(__name__)

AdapterFactory = Callable[..., Any]


class AdapterRegistry:
    """
    Collection of named adapter instances.

    Subclasses set ``default_adapter`` and the built-in ``adapters``.
    """

    default_adapter: str = ""
    adapters: dict[str, AdapterFactory] = {}

    def __init__(self, config: Any = None):
        # Per-instance copy so register_adapter() does not leak between registries
        self.adapters = dict(type(self).adapters)
        self._items: dict[str, Any] = {}
        if config is not None:
            self.add(config)

    def register_adapter(self, type_name: str, factory: AdapterFactory) -> None:
        """Make a custom adapter type available to add()."""
        self.adapters[type_name] = factory

    def add(self, config: Any) -> "AdapterRegistry":
        """
        Create and register one or more adapters.

        Args:
            config: A name (default adapter type), a mapping with ``name`` and
                optional ``type``, ``record_id`` and ``settings``, or a list of
                either.

        Returns:
            The registry, for chaining
        """
        if not config:
            return self

        entries = config if isinstance(config, (list, tuple)) else [config]
        for entry in entries:
            if isinstance(entry, str):
                self._create(entry, self.default_adapter, "id", {})
            elif isinstance(entry, Mapping):
                name = entry.get("name")
                if not name:
                    raise ValueError(f"Adapter config without name: {entry!r}")
                self._create(
                    name,
                    entry.get("type") or self.default_adapter,
                    entry.get("record_id") or entry.get("recordId") or "id",
                    dict(entry.get("settings") or {}),
                )
            else:
                raise ValueError(f"Unsupported adapter config: {entry!r}")
        return self

    def remove(self, config: Any) -> "AdapterRegistry":
        """
        Unregister one or more adapters.

        Args:
            config: A name, a mapping or adapter instance with a ``name``, or
                a list of either. Unknown names are ignored.

        Returns:
            The registry, for chaining
        """
        # Stores define __len__, so an empty one is falsy
        if config is None:
            return self

        entries = config if isinstance(config, (list, tuple)) else [config]
        for entry in entries:
            if isinstance(entry, str):
                name = entry
            elif isinstance(entry, Mapping):
                name = entry.get("name")
            else:
                name = getattr(entry, "name", None)

            if name in self._items:
                del self._items[name]
                logger.debug(f"Removed adapter {name!r}")
        return self

    def get(self, name: str) -> Any | None:
        """Return the adapter registered as ``name``, or None."""
        return self._items.get(name)

    def names(self) -> list[str]:
        """Names of registered adapters, in registration order."""
        return list(self._items)

    def __getitem__(self, name: str) -> Any:
        return self._items[name]

    def __contains__(self, name: object) -> bool:
        return name in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def _settings(self, settings: dict[str, Any]) -> dict[str, Any]:
        """Hook for subclasses to inject shared settings."""
        return settings

    def _create(self, name: str, type_name: str, record_id: str, settings: dict[str, Any]) -> Any:
        factory = self.adapters.get(type_name)
        if factory is None:
            raise ValueError(
                f"Unknown adapter type: {type_name!r}. Available: {sorted(self.adapters)}"
            )

        adapter = factory(name, record_id=record_id, **self._settings(settings))
        self._items[name] = adapter
        logger.debug(f"Registered {type_name} adapter {name!r}")
        return adapter


class DataManager(AdapterRegistry):
    """Registry of stores (default type: Memory)."""

    default_adapter = "Memory"
    adapters = {"Memory": MemoryStore}


class Pipeline(AdapterRegistry):
    """Registry of pipes (default type: Rest).

    ``base_url`` is passed to every pipe that does not set its own.
    """

    default_adapter = "Rest"
    adapters = {"Rest": RestPipe}

    def __init__(self, config: Any = None, base_url: str | None = None, **defaults: Any):
        self.base_url = base_url
        self.defaults = defaults
        super().__init__(config)

    def _settings(self, settings: dict[str, Any]) -> dict[str, Any]:
        merged = dict(self.defaults)
        merged.update(settings)
        if self.base_url and not merged.get("base_url"):
            merged["base_url"] = self.base_url
        return merged
