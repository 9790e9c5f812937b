"""Route map configuration.

``RouteMapConfig`` is a frozen pydantic model: validated once when a route map
is built, shared by every route of that map, never mutated afterwards.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

__all__ = ["RouteMapConfig", "DEFAULT_LOCALE_PARAM", "resolve_config"]

DEFAULT_LOCALE_PARAM = "language"


class RouteMapConfig(BaseModel):
    """Options recognised by ``as_route_map``.

    Attributes:
        trailing_slash: append ``/`` to every reversed path except the root.
        locale_param: parameter holding the locale used to pick a variant of a
            localized path, both when matching and when reversing.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    trailing_slash: bool = False
    locale_param: str = Field(default=DEFAULT_LOCALE_PARAM, min_length=1)


def resolve_config(config: Optional[RouteMapConfig] = None, **options: Any) -> RouteMapConfig:
    """Merge keyword ``options`` over ``config`` (or the defaults) and validate."""
    if config is None:
        return RouteMapConfig(**options)
    if not isinstance(config, RouteMapConfig):
        raise TypeError(f"config must be a RouteMapConfig, got {type(config).__name__}")
    if not options:
        return config
    return RouteMapConfig.model_validate({**config.model_dump(), **options})
