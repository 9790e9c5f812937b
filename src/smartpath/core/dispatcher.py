"""Dispatcher with a route-scoped plugin pipeline (source of truth).

``Dispatcher`` extends ``BaseDispatcher`` with plugins. Plugin settings are
attached to routes and inherited by their subtrees (see
``smartpath.plugins._base_plugin``), so one ``configure`` call on
``articles`` covers every route below it, including routes answered by the
fallback handler.

State
-----
- ``_plugins``: attached plugin instances by name, in attach order.
- ``_plugin_info``: per-plugin store read and written by the plugins.

Registry
--------
``Dispatcher.register_plugin(plugin_class, name=None)`` accepts
``BasePlugin`` subclasses with a ``plugin_code`` (``TypeError`` /
``ValueError`` otherwise). Registering a different class under a taken code
raises unless ``name`` is given explicitly. ``available_plugins()`` returns a
copy of the registry.

Attaching
---------
``plug(name, **config)`` instantiates the registered class (``ValueError``
listing the available names when unknown, or when already attached), runs
``on_decore`` on every entry, rebuilds handlers and returns ``self``.
Attached plugins are reachable as attributes (``dispatcher.logging``).

Pipeline
--------
Layers are built from the last attached plugin to the first, so the first
attached plugin runs outermost. Each layer checks
``plugin.is_enabled_for(route)`` with the *matched* route on every call and
falls through to the next layer when the plugin is switched off for that
part of the tree.
"""

from __future__ import annotations

from functools import wraps
from typing import Any, Callable, Dict, List, Optional, Type

from smartpath.plugins._base_plugin import BasePlugin, HandlerEntry

from .base_dispatcher import BaseDispatcher

__all__ = ["Dispatcher"]

_PLUGIN_REGISTRY: Dict[str, Type[BasePlugin]] = {}


class Dispatcher(BaseDispatcher):
    """Dispatcher whose handlers run through route-scoped plugins."""

    __slots__ = ("_plugins", "_plugin_info")

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        self._plugins: Dict[str, BasePlugin] = {}
        self._plugin_info: Dict[str, Dict[str, Any]] = {}
        super().__init__(*args, **kwargs)

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------
    @classmethod
    def register_plugin(cls, plugin_class: Type[BasePlugin], name: Optional[str] = None) -> None:
        """Register a plugin class globally under ``name`` or its ``plugin_code``."""
        if not isinstance(plugin_class, type) or not issubclass(plugin_class, BasePlugin):
            raise TypeError("plugin_class must be a BasePlugin subclass")
        code = name or plugin_class.plugin_code
        if not code:
            raise ValueError(f"Plugin {plugin_class.__name__} declares no plugin_code")
        current = _PLUGIN_REGISTRY.setdefault(code, plugin_class)
        if current is plugin_class:
            return
        if name is None:
            raise ValueError(f"Plugin '{code}' already registered by {current.__name__}")
        _PLUGIN_REGISTRY[code] = plugin_class

    @classmethod
    def available_plugins(cls) -> Dict[str, Type[BasePlugin]]:
        return dict(_PLUGIN_REGISTRY)

    def plug(self, plugin: str, **config: Any) -> "Dispatcher":
        """Attach a registered plugin by name."""
        if not isinstance(plugin, str):
            raise TypeError(
                f"Plugin must be referenced by name string, got {type(plugin).__name__}"
            )
        plugin_class = _PLUGIN_REGISTRY.get(plugin)
        if plugin_class is None:
            available = ", ".join(sorted(_PLUGIN_REGISTRY)) or "none"
            raise ValueError(f"Unknown plugin '{plugin}'. Available plugins: {available}")
        if plugin in self._plugins:
            raise ValueError(f"Plugin '{plugin}' is already attached")
        instance = plugin_class(self, **config)
        self._plugins[plugin] = instance
        for entry in self._iter_entries():
            self._decorate(instance, entry)
        self._rebuild_handlers()
        return self

    def iter_plugins(self) -> List[BasePlugin]:
        """Attached plugins, outermost first."""
        return list(self._plugins.values())

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return self._attached(name)

    def _attached(self, plugin_name: str) -> BasePlugin:
        plugin = self._plugins.get(plugin_name)
        if plugin is None:
            raise AttributeError(f"No plugin named '{plugin_name}' attached to this dispatcher")
        return plugin

    # ------------------------------------------------------------------
    # Route-scoped settings
    # ------------------------------------------------------------------
    def get_config(self, plugin_name: str, route: Any = None) -> Dict[str, Any]:
        """Effective config of ``plugin_name`` for ``route`` (or the base config)."""
        return self._attached(plugin_name).configuration(route)

    def set_plugin_enabled(self, target: Any, plugin_name: str, enabled: bool = True) -> None:
        """Switch a plugin on/off for ``target``'s subtree (``None``: everywhere)."""
        self._attached(plugin_name).set_enabled(target, enabled)

    def is_plugin_enabled(self, route: Any, plugin_name: str) -> bool:
        return self._attached(plugin_name).is_enabled_for(route)

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------
    def _wrap_handler(self, entry: HandlerEntry, call_next: Callable) -> Callable:
        wrapped = call_next
        for plugin in reversed(self.iter_plugins()):
            wrapped = _gate(plugin, plugin.wrap_handler(self, entry, wrapped), wrapped)
        return wrapped

    def _decorate(self, plugin: BasePlugin, entry: HandlerEntry) -> None:
        if plugin.name not in entry.plugins:
            entry.plugins.append(plugin.name)
        plugin.on_decore(self, entry.handler, entry)

    def _after_entry_registered(self, entry: HandlerEntry) -> None:
        for plugin in self._plugins.values():
            self._decorate(plugin, entry)

    def _describe_entry_extra(
        self, entry: HandlerEntry, base_description: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Plugin config effective at the entry's route, plus plugin metadata."""
        details: Dict[str, Dict[str, Any]] = {}
        for name, plugin in self._plugins.items():
            data = {
                "config": plugin.configuration(entry.route),
                "enabled": plugin.is_enabled_for(entry.route),
            }
            meta = plugin.entry_metadata(self, entry)
            if meta:
                data["metadata"] = meta
            details[name] = data
        return {"plugins": details} if details else {}


def _gate(plugin: BasePlugin, layer: Callable, bypass: Callable) -> Callable:
    @wraps(bypass)
    def gated(params, route):
        step = layer if plugin.is_enabled_for(route) else bypass
        return step(params, route)

    return gated
