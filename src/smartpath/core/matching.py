"""Matcher (source of truth).

``match(path, route_map)`` finds the single best route for ``path`` and the
parameters captured along the way, or returns ``None``.

Algorithm
---------
The input is split into non-empty segments. Starting with
``route_map.children`` (sorted by descending score) each candidate is tried
in order:

a. its pattern consumes a prefix of the remaining segments; localized
   patterns read the locale parameter from the params accumulated so far and
   never match without it;
b. no match → next candidate;
c. captured params are merged over the accumulated ones;
d. a candidate with children recurses into them with what is left (possibly
   nothing); the first successful child result is returned at once;
e. otherwise the candidate itself is the result when nothing is left;
f. else the next sibling is tried (backtracking).

Consequently a child with an empty pattern wins over its parent for the exact
parent path, and a parent terminates the match when none of its children can
consume the empty remainder.

Failure semantics
-----------------
Ordinary misses return ``None``. Passing anything but a ``RouteMap`` (or a
non-string path) raises ``TypeError``.

Helpers
-------
- :class:`Match` is a frozen ``(params, route)`` pair, unpackable as a tuple.
  ``select(*routes)`` returns a ``Match`` for the matched route or its
  closest ancestor found in ``routes``.
- :class:`MatchCache` is an explicit, caller-owned LRU memo bound to one
  route map. It is never required for correctness.
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Iterator, Optional, Sequence, Tuple

from smartseeds.typeutils import safe_is_instance

from .segments import split_path

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from .route import Route
    from .route_map import RouteMap

__all__ = ["Match", "MatchCache", "match"]

_ROUTE_MAP_CLASS = "smartpath.core.route_map.RouteMap"


@dataclass(frozen=True)
class Match:
    """A successful match: captured params and the matched route."""

    params: Dict[str, str]
    route: "Route"

    # Unhashable: params is a mutable dict.
    __hash__ = None  # type: ignore[assignment]

    def __iter__(self) -> Iterator[Any]:
        yield self.params
        yield self.route

    def select(self, *routes: "Route") -> Optional["Match"]:
        """Return a match for the matched route or its nearest listed ancestor."""
        candidates = {id(route): route for route in routes}
        node: Optional[Route] = self.route
        while node is not None:
            if id(node) in candidates:
                return Match(dict(self.params), node)
            node = node.parent
        return None


def match(path: str, route_map: "RouteMap") -> Optional[Match]:
    """Match ``path`` against ``route_map``; ``None`` when nothing fits."""
    if not safe_is_instance(route_map, _ROUTE_MAP_CLASS):
        raise TypeError("Please normalize your routes using as_route_map() before matching")
    if not isinstance(path, str):
        raise TypeError(f"path must be a string, got {type(path).__name__}")
    found = _match_children(route_map.children, split_path(path), {})
    if found is None:
        return None
    params, route = found
    return Match(params, route)


def _match_children(
    candidates: Sequence["Route"], parts: Tuple[str, ...], known: Dict[str, str]
) -> Optional[Tuple[Dict[str, str], "Route"]]:
    for route in candidates:
        captured = route.pattern.match(parts, known)
        if captured is None:
            continue
        params, remaining = captured
        merged = {**known, **params}
        if route.children:
            found = _match_children(route.children, remaining, merged)
            if found is not None:
                return found
        if not remaining:
            return merged, route
    return None


class MatchCache:
    """Bounded memo of ``match`` results for one route map.

    Results are keyed by the raw path. Every call returns a fresh ``Match``
    so callers may mutate ``params`` freely.
    """

    __slots__ = ("route_map", "maxsize", "_entries", "_lock", "hits", "misses")

    def __init__(self, route_map: "RouteMap", maxsize: int = 1024) -> None:
        if not safe_is_instance(route_map, _ROUTE_MAP_CLASS):
            raise TypeError("MatchCache requires a RouteMap built with as_route_map()")
        if maxsize < 1:
            raise ValueError("maxsize must be at least 1")
        self.route_map = route_map
        self.maxsize = maxsize
        self._entries: "OrderedDict[str, Optional[Match]]" = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def match(self, path: str) -> Optional[Match]:
        with self._lock:
            if path in self._entries:
                self._entries.move_to_end(path)
                self.hits += 1
                return _copy(self._entries[path])
        result = match(path, self.route_map)
        with self._lock:
            self.misses += 1
            self._entries[path] = result
            self._entries.move_to_end(path)
            while len(self._entries) > self.maxsize:
                self._entries.popitem(last=False)
        return _copy(result)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)


def _copy(result: Optional[Match]) -> Optional[Match]:
    return None if result is None else Match(dict(result.params), result.route)
