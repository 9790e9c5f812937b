"""SmartPath public API surface (source of truth).

Rules:
- Public exports: ``as_route_map`` (alias ``normalize``), ``match``,
  ``pick``, ``Match``, ``MatchCache``, ``Route``, ``RouteMap``,
  ``RouteMapConfig``, the dispatchers and the error classes.
- Plugin registration: import built-in plugins (``logging``, ``pydantic``) for
  their side effect of calling ``Dispatcher.register_plugin``. Imports go
  through ``import_module`` to avoid cycles.
- Version string lives here as ``__version__``.
"""

from importlib import import_module

__version__ = "0.1.0"

from .core import (
    BaseDispatcher,
    Dispatcher,
    Match,
    MatchCache,
    ReverseRouteError,
    Route,
    RouteDefinitionError,
    RouteMap,
    RouteMapConfig,
    SmartPathError,
    as_route_chain,
    as_route_map,
    call_or_return,
    match,
    normalize,
    pick,
)

# Import plugins to trigger auto-registration (lazy to avoid cycles)
for _plugin in ("logging", "pydantic"):
    import_module(f"{__name__}.plugins.{_plugin}")
del _plugin

__all__ = [
    "BaseDispatcher",
    "Dispatcher",
    "Match",
    "MatchCache",
    "ReverseRouteError",
    "Route",
    "RouteDefinitionError",
    "RouteMap",
    "RouteMapConfig",
    "SmartPathError",
    "as_route_chain",
    "as_route_map",
    "call_or_return",
    "match",
    "normalize",
    "pick",
]
