"""Dispatch helper and plugin-free dispatcher (source of truth).

``pick``
--------
``pick(path, [route_map, default], *overrides)`` matches ``path`` and runs the
handler chosen for the matched route. The table and each override are
two-item sequences (tuples or lists):

- no match → ``None``;
- the first ``[route, handler]`` override whose route *is* the matched route
  wins (identity, not name), otherwise ``default``;
- :func:`call_or_return` invokes callable handlers as ``handler(params,
  route)`` and returns anything else verbatim.

``BaseDispatcher``
------------------
Constructor::

    BaseDispatcher(route_map, default=None, *, overrides=(),
                   use_smartasync=None, get_kwargs=None)

A reusable handler table bound to one route map.

- Slots: ``route_map``, ``_entries`` (dotted route name → ``HandlerEntry``),
  ``_handlers`` (dotted route name → wrapped callable), ``_default`` /
  ``_default_handler`` (the fallback entry and its callable, kept apart from
  route entries so no route key can shadow them), ``_get_defaults``.
- ``on(route, handler, *, replace=False)`` registers a route handler. Routes
  must be nodes of ``route_map`` (``TypeError`` for non-routes,
  ``ValueError`` for foreign routes); duplicates raise ``ValueError`` unless
  ``replace``. ``set_default(handler)`` replaces the fallback. Both return
  ``self``.
- Every entry's callable is ``partial(call_or_return, handler)`` passed
  through ``_wrap_handler`` (identity here, middleware in ``Dispatcher``).
- ``handler_for(route, **options)`` merges options over the constructor
  defaults with ``SmartOptions``. Recognised options: ``default_handler`` (a
  handler used for this call when the route has no handler of its own) and
  ``use_smartasync``. Without any handler it raises ``NotImplementedError``.
- ``dispatch(path, **options)`` (also ``__call__``) returns ``None`` on no
  match, otherwise ``handler_for(route)(params, route)``.
- ``entries()`` lists the routes with a handler; ``describe()`` returns
  ``{"default": info | None, "routes": {name: info}}``, extended by
  ``_describe_entry_extra``.
"""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, Iterator, Optional, Sequence, Tuple

from smartseeds import SmartOptions
from smartseeds.typeutils import safe_is_instance

from smartpath.plugins._base_plugin import HandlerEntry

from .matching import match

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from .route import Route
    from .route_map import RouteMap

__all__ = ["BaseDispatcher", "DEFAULT_ENTRY", "call_or_return", "pick"]

# Display name of the fallback entry; never used as a lookup key.
DEFAULT_ENTRY = "<default>"

_ROUTE_CLASS = "smartpath.core.route.Route"
_ROUTE_MAP_CLASS = "smartpath.core.route_map.RouteMap"


def call_or_return(handler: Any, params: Dict[str, str], route: "Route") -> Any:
    """Invoke ``handler(params, route)`` when callable, else return it as is."""
    if callable(handler):
        return handler(params, route)
    return handler


def _pair(value: Any, message: str) -> Tuple[Any, Any]:
    if isinstance(value, (str, bytes)) or safe_is_instance(value, _ROUTE_MAP_CLASS):
        raise TypeError(message)
    try:
        first, second = value
    except (TypeError, ValueError):
        raise TypeError(message) from None
    return first, second


def pick(path: str, table: Sequence[Any], *overrides: Sequence[Any]) -> Any:
    """Match ``path`` and run the override for the matched route or the default."""
    route_map, default = _pair(table, "pick() expects a [route_map, default_handler] pair")
    if not safe_is_instance(route_map, _ROUTE_MAP_CLASS):
        raise TypeError("Please normalize your routes using as_route_map() before matching")
    found = match(path, route_map)
    if found is None:
        return None
    handler = default
    for override in overrides:
        route, candidate = _pair(
            override, f"pick() overrides must be [route, handler] pairs, got {override!r}"
        )
        if route is found.route:
            handler = candidate
            break
    return call_or_return(handler, found.params, found.route)


class BaseDispatcher:
    """Handler table keyed by route, without plugin logic."""

    __slots__ = ("route_map", "_entries", "_handlers", "_default", "_default_handler", "_get_defaults")

    def __init__(
        self,
        route_map: "RouteMap",
        default: Any = None,
        *,
        overrides: Iterable[Sequence[Any]] = (),
        use_smartasync: Optional[bool] = None,
        get_kwargs: Optional[Dict[str, Any]] = None,
    ) -> None:
        if not safe_is_instance(route_map, _ROUTE_MAP_CLASS):
            raise TypeError("Dispatcher requires a RouteMap built with as_route_map()")
        self.route_map = route_map
        self._entries: Dict[str, HandlerEntry] = {}
        self._handlers: Dict[str, Callable] = {}
        self._default: Optional[HandlerEntry] = None
        self._default_handler: Optional[Callable] = None
        defaults: Dict[str, Any] = dict(get_kwargs or {})
        if use_smartasync is not None:
            defaults.setdefault("use_smartasync", use_smartasync)
        self._get_defaults: Dict[str, Any] = defaults
        if default is not None:
            self.set_default(default)
        for override in overrides:
            route, handler = _pair(override, f"overrides must be [route, handler] pairs, got {override!r}")
            self.on(route, handler)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def on(self, route: "Route", handler: Any, *, replace: bool = False) -> "BaseDispatcher":
        """Register ``handler`` for ``route``."""
        if not safe_is_instance(route, _ROUTE_CLASS):
            raise TypeError(f"on() expects a Route, got {type(route).__name__}")
        try:
            owned = self.route_map.find(route.name) is route
        except KeyError:
            owned = False
        if not owned:
            raise ValueError(f"Route '{route.name}' does not belong to this route map")
        if route.name in self._entries and not replace:
            raise ValueError(f"Handler for '{route.name}' already registered")
        entry = HandlerEntry(name=route.name, handler=handler, route=route, plugins=[])
        self._entries[route.name] = entry
        self._after_entry_registered(entry)
        self._handlers[route.name] = self._build(entry)
        return self

    def set_default(self, handler: Any) -> "BaseDispatcher":
        """Install the handler used for routes without one of their own."""
        entry = HandlerEntry(name=DEFAULT_ENTRY, handler=handler, route=None, plugins=[])
        self._default = entry
        self._after_entry_registered(entry)
        self._default_handler = self._build(entry)
        return self

    def _build(self, entry: HandlerEntry) -> Callable:
        return self._wrap_handler(entry, partial(call_or_return, entry.handler))

    def _iter_entries(self) -> Iterator[HandlerEntry]:
        if self._default is not None:
            yield self._default
        yield from self._entries.values()

    def _after_entry_registered(self, entry: HandlerEntry) -> None:
        """Hook for subclasses needing to react to new entries."""

    def _wrap_handler(self, entry: HandlerEntry, call_next: Callable) -> Callable:
        return call_next

    def _rebuild_handlers(self) -> None:
        self._handlers = {name: self._build(entry) for name, entry in self._entries.items()}
        if self._default is not None:
            self._default_handler = self._build(self._default)

    # ------------------------------------------------------------------
    # Handler execution
    # ------------------------------------------------------------------
    def handler_for(self, route: "Route", **options: Any) -> Callable:
        """Return the callable that answers ``route``.

        Falls back to the ``default_handler`` option, then to the registered
        default handler, otherwise raises NotImplementedError. When
        ``use_smartasync`` is true, the handler is wrapped accordingly.
        """
        opts = SmartOptions(options, defaults=self._get_defaults)
        default = getattr(opts, "default_handler", None)
        use_smartasync = getattr(opts, "use_smartasync", False)

        handler = self._handlers.get(route.name)
        if handler is None and default is not None:
            handler = partial(call_or_return, default)
        if handler is None:
            handler = self._default_handler
        if handler is None:
            raise NotImplementedError(f"No handler registered for route '{route.name}'")

        if use_smartasync:
            from smartasync import smartasync  # type: ignore

            handler = smartasync(handler)

        return handler

    def dispatch(self, path: str, **options: Any) -> Any:
        """Match ``path`` and run the handler of the matched route."""
        found = match(path, self.route_map)
        if found is None:
            return None
        handler = self.handler_for(found.route, **options)
        return handler(found.params, found.route)

    __call__ = dispatch

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def entries(self) -> Tuple[str, ...]:
        """Dotted names of the routes that have a handler of their own."""
        return tuple(self._entries)

    def describe(self) -> Dict[str, Any]:
        return {
            "default": self._describe_entry(self._default) if self._default else None,
            "routes": {name: self._describe_entry(entry) for name, entry in self._entries.items()},
        }

    def _describe_entry(self, entry: HandlerEntry) -> Dict[str, Any]:
        info: Dict[str, Any] = {
            "name": entry.name,
            "route": entry.route.name if entry.route is not None else None,
            "handler": entry.handler,
            "callable": callable(entry.handler),
        }
        info.update(self._describe_entry_extra(entry, info))
        return info

    def _describe_entry_extra(
        self, entry: HandlerEntry, base_description: Dict[str, Any]
    ) -> Dict[str, Any]:
        return {}
