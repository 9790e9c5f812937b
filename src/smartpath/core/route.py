"""Route node and reverse routing (source of truth).

A :class:`Route` is one node of a route map. It is created by the normalizer
(``smartpath.core.route_map``) and never built by user code.

Construction and slots
----------------------
- Slots: ``key`` (declaration key), ``name`` (dotted path from the root),
  ``path`` (declared pattern, string or locale map), ``data`` (opaque
  payload), ``pattern`` (compiled pattern), ``_parent``, ``_children``
  (sorted by descending score), ``_by_key`` (declaration order),
  ``_config`` (shared ``RouteMapConfig``) and ``_sealed``.
- Two-pass build: the node exists before its children so they can receive
  it as parent; ``_seal(children)`` attaches them once and freezes the node.
  Any later attribute assignment raises ``AttributeError``.

Navigation
----------
- ``parent`` / ``children`` / ``chain()`` (root → self).
- Child routes are reachable as attributes (``route.tab1``) and items
  (``route["tab1"]``). Attribute lookup never shadows the node's own fields.

Reverse routing
---------------
``route(params=None, **extra)`` / ``route.to_path(params)`` walks ``chain()``
and interpolates each node's pattern with the given params (localized
patterns select their variant through ``config.locale_param``). Empty results
(the root pattern) contribute no separator. The path always starts with
``/``; with ``trailing_slash`` a ``/`` is appended unless the path is the root.
Extra params are ignored; missing ones raise ``ReverseRouteError``.

Identity
--------
Routes compare and hash by identity. ``str(route)`` is the dotted name.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Iterable, Mapping, Optional, Tuple

from .segments import CompiledPattern

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from .config import RouteMapConfig

__all__ = ["Route"]


class Route:
    """Immutable node of a route map, callable for reverse routing."""

    __slots__ = (
        "key",
        "name",
        "path",
        "data",
        "pattern",
        "_parent",
        "_children",
        "_by_key",
        "_config",
        "_sealed",
    )

    def __init__(
        self,
        key: str,
        name: str,
        path: Any,
        data: Any,
        pattern: CompiledPattern,
        parent: Optional["Route"],
        config: "RouteMapConfig",
    ) -> None:
        object.__setattr__(self, "key", key)
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "path", path)
        object.__setattr__(self, "data", data)
        object.__setattr__(self, "pattern", pattern)
        object.__setattr__(self, "_parent", parent)
        object.__setattr__(self, "_children", ())
        object.__setattr__(self, "_by_key", {})
        object.__setattr__(self, "_config", config)
        object.__setattr__(self, "_sealed", False)

    def _seal(self, children: Iterable["Route"]) -> None:
        if self._sealed:
            raise RuntimeError(f"Route '{self.name}' is already sealed")
        declared = list(children)
        object.__setattr__(self, "_by_key", {child.key: child for child in declared})
        # sorted() is stable: equal scores keep declaration order
        object.__setattr__(self, "_children", tuple(sorted(declared, key=lambda c: -c.score)))
        object.__setattr__(self, "_sealed", True)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"Route '{self.name}' is immutable (cannot set {name!r})")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"Route '{self.name}' is immutable (cannot delete {name!r})")

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    @property
    def parent(self) -> Optional["Route"]:
        return self._parent

    @property
    def children(self) -> Tuple["Route", ...]:
        """Child routes in matching order (descending score)."""
        return self._children

    @property
    def config(self) -> "RouteMapConfig":
        return self._config

    @property
    def score(self) -> float:
        return self.pattern.score

    @property
    def param_names(self) -> Tuple[str, ...]:
        return self.pattern.param_names

    def keys(self) -> Tuple[str, ...]:
        """Child keys in declaration order."""
        return tuple(self._by_key)

    def chain(self) -> Tuple["Route", ...]:
        """Return the routes from the root down to (and including) this one."""
        routes = []
        node: Optional[Route] = self
        while node is not None:
            routes.append(node)
            node = node._parent
        return tuple(reversed(routes))

    def __getattr__(self, name: str) -> "Route":
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return object.__getattribute__(self, "_by_key")[name]
        except KeyError:
            raise AttributeError(
                f"Route '{object.__getattribute__(self, 'name')}' has no child route '{name}'"
            ) from None

    def __getitem__(self, key: str) -> "Route":
        try:
            return self._by_key[key]
        except KeyError:
            raise KeyError(f"Route '{self.name}' has no child route '{key}'") from None

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    # ------------------------------------------------------------------
    # Reverse routing
    # ------------------------------------------------------------------
    def to_path(self, params: Optional[Mapping[str, Any]] = None) -> str:
        """Build the absolute path of this route from ``params``."""
        values: Mapping[str, Any] = params or {}
        texts = [node.pattern.interpolate(values, route=self) for node in self.chain()]
        texts = [text for text in texts if text]
        path = "/" + "/".join(texts)
        if texts and self._config.trailing_slash:
            path += "/"
        return path

    def __call__(self, params: Optional[Mapping[str, Any]] = None, /, **extra: Any) -> str:
        merged: Dict[str, Any] = dict(params or {})
        merged.update(extra)
        return self.to_path(merged)

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"<Route {self.name!r} path={self.path!r}>"
