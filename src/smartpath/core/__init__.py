"""Core runtime aggregator (source of truth).

Exposes the building blocks from a single module: the normalizer
(``as_route_map``/``normalize``), the matcher (``match``, ``Match``,
``MatchCache``), reverse-routing nodes (``Route``), the dispatch helper
(``pick``) and the dispatchers. Importing this module performs only imports;
it does not register plugins.
"""

from .base_dispatcher import BaseDispatcher, call_or_return, pick
from .config import RouteMapConfig
from .dispatcher import Dispatcher
from .errors import ReverseRouteError, RouteDefinitionError, SmartPathError
from .matching import Match, MatchCache, match
from .route import Route
from .route_map import RouteMap, as_route_chain, as_route_map, normalize

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
