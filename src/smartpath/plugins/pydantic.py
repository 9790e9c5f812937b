"""Pydantic validation plugin (source of truth).

Responsibilities
----------------
- At registration time (``on_decore``), inspect the handler's first
  parameter. When it carries a type hint, build a pydantic ``TypeAdapter`` for
  it (typically a ``TypedDict`` or model describing the route params).
- At call time (``wrap_handler``), validate the matched params with the
  adapter and pass the validated value to the handler instead of the raw dict.
- Surface validation failures as pydantic ``ValidationError`` with the title
  ``"Validation error in <route name>"``.

Guards
------
- Constant (non-callable) handlers, handlers without parameters and handlers
  whose hints cannot be resolved are left alone: wrapping is a passthrough.
- ``configure(disabled=True)`` skips validation at call time, for the whole
  dispatcher or, with ``_target``, for a route subtree.

Metadata
--------
``entry.metadata["pydantic"] = {"adapter": adapter, "hint": hint,
"param": name}``; ``entry_metadata`` exposes ``hint`` and ``param`` for
``Dispatcher.describe()``.

Registration
------------
Registers itself globally as ``"pydantic"`` at import time.
"""

from __future__ import annotations

import inspect
from typing import Any, Callable, Dict, get_type_hints

from pydantic import TypeAdapter, ValidationError

from smartpath.core.dispatcher import Dispatcher
from smartpath.plugins._base_plugin import BasePlugin, HandlerEntry

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


class PydanticPlugin(BasePlugin):
    """Validate matched params with pydantic using the handler's type hints."""

    plugin_code = "pydantic"
    plugin_description = "Validates route params using Pydantic type hints"

    def configure(self, disabled: bool = False):
        """Storage is handled by the wrapper installed in ``__init_subclass__``."""

    def on_decore(self, dispatcher: Any, handler: Any, entry: HandlerEntry) -> None:
        if not callable(handler):
            return
        try:
            hints = get_type_hints(handler)
            sig = inspect.signature(handler)
        except Exception:
            # No hints resolvable, no adapter created
            return

        positional = [p for p in sig.parameters.values() if p.kind in _POSITIONAL]
        if not positional:
            return
        name = positional[0].name
        hint = hints.get(name)
        if hint is None:
            return

        entry.metadata["pydantic"] = {
            "adapter": TypeAdapter(hint),
            "hint": hint,
            "param": name,
        }

    def wrap_handler(self, dispatcher: Any, entry: HandlerEntry, call_next: Callable):
        """Validate params with the cached adapter before calling."""
        meta = entry.metadata.get("pydantic", {})
        adapter = meta.get("adapter")
        if adapter is None:
            return call_next

        def wrapper(params, route):
            # Checked per call so configure() applies to built handlers
            if self.configuration(route).get("disabled"):
                return call_next(params, route)
            try:
                validated = adapter.validate_python(params)
            except ValidationError as exc:
                raise ValidationError.from_exception_data(
                    title=f"Validation error in {route.name}",
                    line_errors=exc.errors(),
                ) from exc
            return call_next(validated, route)

        return wrapper

    def entry_metadata(self, dispatcher: Any, entry: HandlerEntry) -> Dict[str, Any]:
        """Return pydantic metadata for introspection."""
        meta = entry.metadata.get("pydantic", {})
        if not meta:
            return {}
        return {"hint": meta.get("hint"), "param": meta.get("param")}


Dispatcher.register_plugin(PydanticPlugin)
