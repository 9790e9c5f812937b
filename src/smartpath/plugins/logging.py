"""Logging plugin (source of truth).

Emits one message before and one after every dispatched call, named after
the *matched* route (so calls answered by the fallback handler are still
reported per route):

* ``before`` (default True): ``"<route.name> start"``
* ``after`` (default True): ``"<route.name> end (<ms> ms)"``, elapsed time
  formatted ``{:.2f}``; skipped when the handler raises.

Sinks: ``print=True`` always prints. Otherwise ``log=True`` sends to
``logger.info`` when the logger has handlers and prints when it has none;
``log=False`` silences the plugin. ``enabled`` gates everything.

Options resolve through the route tree like every plugin option, e.g.
``dispatcher.logging.configure(_target="admin", before=False)`` affects the
``admin`` subtree only. The logger defaults to ``logging.getLogger("smartpath")``.

Registers itself globally as ``"logging"`` at import time.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, Optional

from smartpath.core.dispatcher import Dispatcher
from smartpath.plugins._base_plugin import BasePlugin, HandlerEntry

_DEFAULTS: Dict[str, bool] = {
    "enabled": True,
    "before": True,
    "after": True,
    "log": True,
    "print": False,
}


class LoggingPlugin(BasePlugin):
    """Logs dispatched calls with timing."""

    plugin_code = "logging"
    plugin_description = "Logs routed calls with timing"

    __slots__ = ("_logger",)

    def __init__(self, dispatcher, *, logger: Optional[logging.Logger] = None, **cfg):
        self._logger = logger or logging.getLogger("smartpath")
        super().__init__(dispatcher, **cfg)

    def configure(
        self,
        enabled: bool = True,
        before: bool = True,
        after: bool = True,
        log: bool = True,
        print: bool = False,  # noqa: A002 - mirrors the option name
    ):
        """Storage is handled by the wrapper installed in ``__init_subclass__``."""

    def settings(self, route) -> Dict[str, bool]:
        cfg = self.configuration(route)
        return {key: bool(cfg.get(key, default)) for key, default in _DEFAULTS.items()}

    def _sink(self, settings: Dict[str, bool]) -> Optional[Callable[[str], None]]:
        if not settings["enabled"]:
            return None
        if settings["print"]:
            return print
        if not settings["log"]:
            return None
        return self._logger.info if self._logger.hasHandlers() else print

    def wrap_handler(self, dispatcher, entry: HandlerEntry, call_next: Callable):
        def logged(params, route):
            settings = self.settings(route)
            sink = self._sink(settings)
            if sink is None:
                return call_next(params, route)
            if settings["before"]:
                sink(f"{route.name} start")
            started = time.perf_counter()
            result = call_next(params, route)
            if settings["after"]:
                sink(f"{route.name} end ({(time.perf_counter() - started) * 1000:.2f} ms)")
            return result

        return logged


Dispatcher.register_plugin(LoggingPlugin)
