"""Route normalizer (source of truth).

``as_route_map(routes, config=None, **options)`` turns a nested declaration
into an immutable :class:`RouteMap`.

Input
-----
``routes`` maps a key to an entry. An entry is either a bare pattern string
(sugar for ``{"path": pattern}``) or a mapping with a required ``path``, an
optional ``data`` payload and any number of other keys, each one a nested
child entry. ``path`` is a string or a locale map ``{locale: pattern}``.

Algorithm
---------
Depth first, in declaration order:

1. normalize the entry and compile its ``path`` (``segments.compile_path``);
2. reject parameter names already bound by an ancestor (any locale variant);
3. create the :class:`Route` with its parent reference and register it in the
   global name table;
4. build the children, then ``_seal`` the node (children sorted by descending
   score, stable).

Errors
------
``RouteDefinitionError`` naming the dotted route name for: entries that are
neither strings nor mappings, missing ``path``, invalid ``path`` values,
non-string keys, reused parameter names. Invalid options raise pydantic's
``ValidationError``; a non-mapping ``routes`` argument raises ``TypeError``.

RouteMap
--------
Read-only ``Mapping`` of top-level routes (declaration order) with attribute
access. ``children`` holds the same routes sorted for matching. ``find`` and
``routes`` expose the global name table; ``describe`` builds a nested dict for
debugging. ``match`` and ``pick`` delegate to the matcher and dispatch helper.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .base_dispatcher import pick
from .config import RouteMapConfig, resolve_config
from .errors import RouteDefinitionError
from .matching import Match, match
from .route import Route
from .segments import compile_path

__all__ = ["RouteMap", "as_route_map", "normalize", "as_route_chain", "RESERVED_KEYS"]

logger = logging.getLogger("smartpath")

RESERVED_KEYS = ("path", "data")


class RouteMap(Mapping):
    """Immutable tree of routes produced by :func:`as_route_map`."""

    __slots__ = ("_routes", "_children", "_by_name", "_config")

    def __init__(
        self, routes: List[Route], by_name: Dict[str, Route], config: RouteMapConfig
    ) -> None:
        object.__setattr__(self, "_routes", {route.key: route for route in routes})
        object.__setattr__(self, "_children", tuple(sorted(routes, key=lambda r: -r.score)))
        object.__setattr__(self, "_by_name", dict(by_name))
        object.__setattr__(self, "_config", config)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"RouteMap is immutable (cannot set {name!r})")

    # Mapping protocol -------------------------------------------------
    def __getitem__(self, key: str) -> Route:
        return self._routes[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def __getattr__(self, name: str) -> Route:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return object.__getattribute__(self, "_routes")[name]
        except KeyError:
            raise AttributeError(f"RouteMap has no route '{name}'") from None

    # Introspection ----------------------------------------------------
    @property
    def children(self) -> Tuple[Route, ...]:
        """Top-level routes in matching order."""
        return self._children

    @property
    def config(self) -> RouteMapConfig:
        return self._config

    def routes(self) -> Tuple[Route, ...]:
        """All routes, depth first in declaration order."""
        return tuple(self._by_name.values())

    def find(self, name: str) -> Route:
        """Resolve a dotted route name (``"articles.article.tab1"``)."""
        try:
            return self._by_name[name]
        except KeyError:
            raise KeyError(f"No route named '{name}'") from None

    def describe(self) -> Dict[str, Any]:
        return {key: _describe_route(route) for key, route in self._routes.items()}

    # Operations -------------------------------------------------------
    def match(self, path: str) -> Optional[Match]:
        return match(path, self)

    def pick(self, path: str, default: Any, *overrides: Tuple[Route, Any]) -> Any:
        return pick(path, (self, default), *overrides)

    def __repr__(self) -> str:
        return f"<RouteMap routes={list(self._routes)}>"


def as_route_map(
    routes: Mapping, config: Optional[RouteMapConfig] = None, **options: Any
) -> RouteMap:
    """Normalize a nested route declaration into a :class:`RouteMap`.

    Args:
        routes: mapping of key to entry (pattern string or mapping with ``path``).
        config: optional :class:`RouteMapConfig`.
        options: ``trailing_slash`` / ``locale_param`` overrides.

    Raises:
        RouteDefinitionError: on malformed entries.
        TypeError: when ``routes`` is not a mapping.
    """
    if not isinstance(routes, Mapping):
        raise TypeError(
            f"as_route_map() expects a mapping of route definitions, got {type(routes).__name__}"
        )
    resolved = resolve_config(config, **options)
    by_name: Dict[str, Route] = {}
    top = [
        _build_route(key, entry, None, {}, resolved, by_name) for key, entry in routes.items()
    ]
    route_map = RouteMap(top, by_name, resolved)
    logger.debug("Built route map with %d routes (%d top level)", len(by_name), len(top))
    return route_map


normalize = as_route_map


def as_route_chain(route: Route) -> Tuple[Route, ...]:
    """Return the routes from the root down to ``route``."""
    if not isinstance(route, Route):
        raise TypeError(f"as_route_chain() expects a Route, got {type(route).__name__}")
    return route.chain()


def _build_route(
    key: Any,
    entry: Any,
    parent: Optional[Route],
    bound: Dict[str, str],
    config: RouteMapConfig,
    by_name: Dict[str, Route],
) -> Route:
    owner = parent.name if parent is not None else ""
    if not isinstance(key, str) or not key:
        raise RouteDefinitionError(
            f"Route keys must be non-empty strings, got {key!r} under '{owner or '<root>'}'"
        )
    name = f"{owner}.{key}" if owner else key

    if isinstance(entry, str):
        entry = {"path": entry}
    elif not isinstance(entry, Mapping):
        raise RouteDefinitionError(
            f"No path found for route '{name}': expected a path string or a mapping "
            f"with 'path', got {entry!r}"
        )
    if "path" not in entry:
        raise RouteDefinitionError(f"No path found for route '{name}' in {dict(entry)!r}")

    path = entry["path"]
    pattern = compile_path(path, owner=name, locale_param=config.locale_param)

    for param in pattern.param_names:
        if param in bound:
            raise RouteDefinitionError(
                f"Route '{name}' reuses parameter '{param}' already bound by '{bound[param]}'"
            )
    if pattern.is_localized and config.locale_param not in bound:
        logger.debug(
            "Route '%s' is localized but no ancestor captures '%s'; it will never match",
            name,
            config.locale_param,
        )

    route = Route(key, name, path, entry.get("data"), pattern, parent, config)
    by_name[name] = route

    child_bound = dict(bound)
    child_bound.update(dict.fromkeys(pattern.param_names, name))
    children = [
        _build_route(child_key, child_entry, route, child_bound, config, by_name)
        for child_key, child_entry in entry.items()
        if child_key not in RESERVED_KEYS
    ]
    route._seal(children)
    return route


def _describe_route(route: Route) -> Dict[str, Any]:
    info: Dict[str, Any] = {
        "name": route.name,
        "path": route.path,
        "score": route.score,
        "params": list(route.param_names),
        "data": route.data,
    }
    children = {key: _describe_route(route[key]) for key in route.keys()}
    if children:
        info["children"] = children
    return info
