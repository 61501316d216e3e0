"""Logging plugin for Genro NavRoutes.

Adds a handler at the head of every dispatch chain that logs the route being
dispatched and, once the synchronous part of the chain has returned, the
elapsed time. A chain suspended by a handler that defers ``next`` is logged
as ended when control comes back, not when it is resumed.

Configuration
-------------
Accepted keys (router-level or per-route):
    - ``enabled``: Gate the plugin entirely (default True)
    - ``before``: Log "start" message (default True)
    - ``after``: Log "end" message with timing (default True)
    - ``log``: Use logger.info() when available (default True)
    - ``print``: Always use print() (default False)

Example::

    from genro_navroutes import Router

    router = Router().plug("logging")
    router.add("/inbox", show_inbox)

    # Or configure per-route:
    router.add("/ping", ping, logging_after=False)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from genro_navroutes.core.router import Router
from genro_navroutes.plugins._base_plugin import BasePlugin


class LoggingPlugin(BasePlugin):
    """Logging plugin with configurable start/end messages and timing."""

    plugin_code = "logging"
    plugin_description = "Logs dispatched routes with timing"

    __slots__ = ("_logger",)

    def __init__(self, router, *, logger: logging.Logger | None = None, **cfg):
        self._logger = logger or logging.getLogger("genro_navroutes")
        super().__init__(router, **cfg)

    def configure(  # type: ignore[override]
        self,
        enabled: bool = True,
        before: bool = True,
        after: bool = True,
        log: bool = True,
        print: bool = False,  # noqa: A002 - shadowing builtin intentionally
    ):
        """Configure logging plugin options.

        Args:
            enabled: Enable/disable the plugin entirely.
            before: Log "{route} start ({path})" before the chain continues.
            after: Log "{route} end (X ms)" when the chain returns.
            log: Use logger.info() when handlers available.
            print: Always use print() instead of logger.
        """
        pass  # Storage is handled by the wrapper

    def _emit(self, message: str, *, cfg: dict | None = None):
        """Emit a log message via configured sink."""
        if cfg is None:
            return
        if cfg.get("print"):
            print(message)
            return
        if cfg.get("log"):
            logger = self._logger
            has_handlers = getattr(logger, "hasHandlers", None) or getattr(
                logger, "has_handlers", None
            )
            if callable(has_handlers) and has_handlers():
                logger.info(message)
            else:
                print(message)

    def chain_handler(self, request, chain, next: Callable[[], Any]):
        """Log around the rest of the chain."""
        cfg = self._effective_config(chain.name)
        if not cfg["enabled"]:
            return next()
        label = chain.name or "<chain>"
        if cfg["before"]:
            self._emit(f"{label} start ({chain.value})", cfg=cfg)
        t0 = time.perf_counter()
        result = next()
        elapsed = (time.perf_counter() - t0) * 1000
        if cfg["after"]:
            self._emit(f"{label} end ({elapsed:.2f} ms)", cfg=cfg)
        return result

    def _effective_config(self, route_name: str | None) -> dict:
        """Get effective configuration for a route, merging defaults."""
        defaults = {"enabled": True, "before": True, "after": True, "log": True, "print": False}
        cfg = defaults | self.configuration(route_name)

        def to_bool(key: str) -> bool:
            val = cfg.get(key)
            return defaults[key] if val is None else bool(val)

        return {key: to_bool(key) for key in defaults}


Router.register_plugin(LoggingPlugin)
