"""Plugin contract used by the Dispatcher runtime (source of truth).

Plugins are configured against the route tree, not against handler names.

``HandlerEntry``
    Dataclass describing a registered handler: ``name`` (dotted route name,
    or ``"<default>"`` for the fallback), ``handler`` (callable or constant),
    ``route`` (``None`` for the fallback), ``plugins`` (names of the plugins
    that decorated it) and ``metadata`` (free-form, owned by plugins).

``BasePlugin``
    Subclasses set ``plugin_code`` and ``plugin_description`` and may
    override ``on_decore(dispatcher, handler, entry)``,
    ``wrap_handler(dispatcher, entry, call_next)`` and
    ``entry_metadata(dispatcher, entry)``. ``call_next`` and the returned
    callable take ``(params, route)`` where ``route`` is the matched route.

State
-----
Kept on the dispatcher in ``_plugin_info[plugin_code]``::

    {"base": {"config": {...}, "locals": {...}},
     "routes": {dotted_name: {"config": {...}, "locals": {...}}}}

``config`` holds validated options, ``locals`` runtime flags (``enabled``).

Targets
-------
``configure(_target=...)`` and ``set_enabled(target, ...)`` accept ``None``
(the whole dispatcher), a ``Route``, a dotted route name, a comma separated
string of names or an iterable of routes/names. Names are resolved through
``route_map.find`` so unknown routes raise ``KeyError``.

Resolution
----------
``configuration(route)`` merges the base config with every bucket along
``route.chain()``, root first, so settings made on a route apply to its whole
subtree and deeper routes override. ``is_enabled_for(route)`` returns the
``enabled`` flag of the nearest route in the chain that sets one, else the
base flag (default ``True``).

``configure``
-------------
Subclasses declare options as keyword parameters of ``configure``.
``__init_subclass__`` wraps the declaration: ``flags`` strings
(``"before:off,print"``) are expanded into booleans, pydantic's
``validate_call`` checks the options, and the result is stored in every
target bucket.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import wraps
from typing import Any, Callable, Dict, Iterable, List, Optional

from pydantic import validate_call
from smartseeds.typeutils import safe_is_instance

__all__ = ["BasePlugin", "HandlerEntry", "parse_flags"]

_ROUTE_CLASS = "smartpath.core.route.Route"


@dataclass
class HandlerEntry:
    """Metadata for a registered dispatch handler."""

    name: str
    handler: Any
    route: Any
    plugins: List[str]
    metadata: Dict[str, Any] = field(default_factory=dict)


def parse_flags(flags: str) -> Dict[str, bool]:
    """``"a,b:off,c:on"`` → ``{"a": True, "b": False, "c": True}``."""
    parsed: Dict[str, bool] = {}
    for chunk in filter(None, (part.strip() for part in flags.split(","))):
        key, _, value = chunk.partition(":")
        parsed[key.strip()] = value.strip().lower() != "off"
    return parsed


def _slot() -> Dict[str, Dict[str, Any]]:
    return {"config": {}, "locals": {}}


def _validated_configure(declared: Callable) -> Callable:
    check = validate_call(declared)

    @wraps(declared)
    def configure(self: "BasePlugin", *, _target: Any = None, flags: Optional[str] = None, **options: Any) -> None:
        if flags:
            options = {**parse_flags(flags), **options}
        check(self, **options)
        self._store("config", _target, options)

    return configure


class BasePlugin:
    """Hook interface and route-scoped configuration for dispatcher plugins."""

    __slots__ = ("name", "_dispatcher")

    plugin_code: str = ""
    plugin_description: str = ""

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        declared = cls.__dict__.get("configure")
        if declared is not None:
            cls.configure = _validated_configure(declared)

    def __init__(self, dispatcher: Any, **config: Any):
        self.name = self.plugin_code
        self._dispatcher = dispatcher
        self._bucket()["base"]["config"].setdefault("enabled", True)
        self.configure(**config)

    def configure(self, *, _target: Any = None, flags: Optional[str] = None) -> None:
        """Accept only ``flags``; subclasses declare their own options."""
        if flags:
            self._store("config", _target, parse_flags(flags))

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    def _bucket(self) -> Dict[str, Any]:
        store = getattr(self._dispatcher, "_plugin_info")
        return store.setdefault(self.name, {"base": _slot(), "routes": {}})

    def _resolve_targets(self, target: Any) -> List[Optional[str]]:
        if target is None:
            return [None]
        if isinstance(target, str):
            items: Iterable[Any] = [part.strip() for part in target.split(",") if part.strip()]
        elif safe_is_instance(target, _ROUTE_CLASS):
            items = [target]
        else:
            items = target
        route_map = self._dispatcher.route_map
        names: List[Optional[str]] = []
        for item in items:
            name = item.name if safe_is_instance(item, _ROUTE_CLASS) else item
            names.append(route_map.find(name).name)
        return names

    def _store(self, kind: str, target: Any, values: Dict[str, Any]) -> None:
        if not values:
            return
        bucket = self._bucket()
        for name in self._resolve_targets(target):
            slot = bucket["base"] if name is None else bucket["routes"].setdefault(name, _slot())
            slot[kind].update(values)

    def _chain(self, route: Any) -> tuple:
        if route is None:
            return ()
        if isinstance(route, str):
            route = self._dispatcher.route_map.find(route)
        return route.chain()

    def configuration(self, route: Any = None) -> Dict[str, Any]:
        """Base config overridden by every route bucket from the root down to ``route``."""
        bucket = self._bucket()
        merged = dict(bucket["base"]["config"])
        for node in self._chain(route):
            slot = bucket["routes"].get(node.name)
            if slot is not None:
                merged.update(slot["config"])
        return merged

    def set_enabled(self, target: Any, enabled: bool = True) -> None:
        self._store("locals", target, {"enabled": bool(enabled)})

    def is_enabled_for(self, route: Any) -> bool:
        bucket = self._bucket()
        for node in reversed(self._chain(route)):
            flags = bucket["routes"].get(node.name, {}).get("locals", {})
            if "enabled" in flags:
                return flags["enabled"]
        return bucket["base"]["locals"].get("enabled", True)

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------
    def on_decore(
        self, dispatcher: Any, handler: Any, entry: HandlerEntry
    ) -> None:  # pragma: no cover - default no-op
        """Hook run when a handler is registered."""

    def wrap_handler(self, dispatcher: Any, entry: HandlerEntry, call_next: Callable) -> Callable:
        """Wrap handler invocation; default passthrough."""
        return call_next

    def entry_metadata(self, dispatcher: Any, entry: HandlerEntry) -> Dict[str, Any]:
        """Extra per-entry data exposed by ``Dispatcher.describe()``."""
        return {}
