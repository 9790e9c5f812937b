"""SmartPath exception hierarchy.

Shared by the compiler, the normalizer and reverse routing so callers can
catch one family of errors. Both concrete errors are also ``ValueError``
subclasses: they signal a malformed route table or missing input.

"No route matches" is never an exception; ``match`` returns ``None``.
"""

from __future__ import annotations

from typing import Any, Optional

__all__ = ["SmartPathError", "RouteDefinitionError", "ReverseRouteError"]


class SmartPathError(Exception):
    """Base for all smartpath-specific errors."""


class RouteDefinitionError(SmartPathError, ValueError):
    """Raised while building a route map from an invalid definition."""


class ReverseRouteError(SmartPathError, ValueError):
    """Raised when a path cannot be built for a route.

    ``route`` is the route being reversed, ``param`` the parameter that was
    missing or rejected (``None`` when the problem is not a single parameter).
    """

    def __init__(self, message: str, *, route: Any = None, param: Optional[str] = None) -> None:
        super().__init__(message)
        self.route = route
        self.param = param
