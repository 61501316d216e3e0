"""Plugin contract definitions for Genro NavRoutes.

Plugins add behaviour to every route of a router by contributing one handler
at the head of each dispatch chain.

``BasePlugin``
    Base class that every plugin must subclass. Provides:
        - Configuration helpers that delegate to the router's ``_plugin_info`` store
        - Optional hooks ``on_register`` and ``chain_handler`` for the Router

    Required class attributes:
        - ``plugin_code``: unique identifier used for registration (e.g. "logging")
        - ``plugin_description``: human-readable description of the plugin

    Constructor signature: ``BasePlugin(router, **config)``

    Key methods:
        - ``configure(**config)``: Define accepted configuration parameters
        - ``configuration(route_name=None)``: Read merged configuration
        - ``on_register(router, binding)``: Called when a route is added
        - ``chain_handler(request, chain, next)``: Runs inside every chain

Configuration store
-------------------
Configuration lives on the router, not on the plugin::

    router._plugin_info[plugin_code] = {
        "_all_": {"config": {...}, "locals": {...}},
        "<route name>": {"config": {...}, "locals": {...}},
    }

``config`` holds values written by ``configure()``; ``locals`` holds runtime
overrides such as ``set_plugin_enabled``.

Example::

    from genro_navroutes.plugins._base_plugin import BasePlugin

    class TracePlugin(BasePlugin):
        plugin_code = "trace"
        plugin_description = "Prints every dispatched route"

        def configure(self, enabled: bool = True, prefix: str = ">"):
            pass  # Storage handled by wrapper

        def chain_handler(self, request, chain, next):
            cfg = self.configuration(chain.name)
            print(cfg["prefix"], chain.route)
            return next()
"""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import TYPE_CHECKING, Any

from pydantic import validate_call

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from genro_navroutes.core.chain import DispatchChain
    from genro_navroutes.core.matcher import MatchResult
    from genro_navroutes.core.router import RouteBinding, Router

__all__ = ["BasePlugin"]


def _wrap_configure(original_configure: Callable) -> Callable:
    """Wrap a plugin's configure() method to handle flags, _target, validation, and storage."""
    validated = validate_call(original_configure)

    @wraps(original_configure)
    def wrapper(
        self: BasePlugin, *, _target: str = "_all_", flags: str | None = None, **kwargs: Any
    ) -> None:
        if flags:
            kwargs.update(self._parse_flags(flags))

        if "," in _target:
            for target in (t.strip() for t in _target.split(",")):
                if target:
                    wrapper(self, _target=target, **kwargs)
            return

        validated(self, **kwargs)
        self._write_config(_target, kwargs)

    return wrapper


class BasePlugin:
    """Hook interface and configuration helpers for router plugins.

    Subclass this to create custom plugins. Override the hooks you need
    and define your configuration schema in ``configure()``.
    """

    __slots__ = ("name", "_router")

    plugin_code: str = ""
    plugin_description: str = ""

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "configure" in cls.__dict__:
            cls.configure = _wrap_configure(cls.__dict__["configure"])  # type: ignore[method-assign]

    def __init__(self, router: Router, **config: Any):
        self.name = self.plugin_code
        self._router = router
        self._init_store()
        self.configure(**config)

    def _init_store(self) -> None:
        store = self._get_store()
        store.setdefault(self.name, {}).setdefault(
            "_all_", {"config": {"enabled": True}, "locals": {}}
        )

    def _get_store(self) -> dict[str, Any]:
        return self._router._plugin_info  # type: ignore[no-any-return]

    def _write_config(self, target: str, config: dict[str, Any]) -> None:
        if not config:
            return
        plugin_bucket = self._get_store().setdefault(self.name, {})
        bucket = plugin_bucket.setdefault(target, {"config": {}, "locals": {}})
        bucket["config"].update(config)

    def configuration(self, route_name: str | None = None) -> dict[str, Any]:
        """Read merged configuration (base + optional per-route override).

        Args:
            route_name: If provided, merge the route's config over the base config.

        Returns:
            Dict of configuration values.
        """
        plugin_bucket = self._get_store().get(self.name)
        if not plugin_bucket:
            return {}
        merged = dict(plugin_bucket.get("_all_", {}).get("config", {}))
        if route_name:
            merged.update(plugin_bucket.get(route_name, {}).get("config", {}))
        return merged

    def _parse_flags(self, flags: str) -> dict[str, bool]:
        """Parse flag string like "enabled,before:off" into boolean dict."""
        mapping: dict[str, bool] = {}
        for chunk in flags.split(","):
            chunk = chunk.strip()
            if not chunk:
                continue
            if ":" in chunk:
                name, value = chunk.split(":", 1)
                mapping[name.strip()] = value.strip().lower() != "off"
            else:
                mapping[chunk] = True
        return mapping

    # =========================================================================
    # METHODS TO OVERRIDE IN CUSTOM PLUGINS
    # =========================================================================

    def configure(self, *, _target: str = "_all_", flags: str | None = None) -> None:
        """Override to define accepted configuration parameters.

        The wrapper added by __init_subclass__ handles:
            - Parsing ``flags`` (e.g. "enabled,before:off") into booleans
            - Routing to ``_target`` ("_all_", route name, or comma-separated)
            - Pydantic validation via @validate_call
            - Writing to the router's config store

        Args:
            _target: Where to write config. "_all_" for router-level,
                     a route name for per-route, or "r1,r2" for multiple.
            flags: String like "enabled,before:off" parsed into booleans.
        """
        if flags:
            self._write_config(_target, self._parse_flags(flags))

    def on_register(self, router: Router, binding: RouteBinding) -> None:
        """Override to run logic when a route is added (before its first evaluation)."""

    def chain_handler(
        self, request: MatchResult, chain: DispatchChain, next: Callable[[], Any]
    ) -> Any:
        """Override to take part in every dispatch chain of the router.

        Plugin handlers run before the router's global handlers and the route's
        own middleware. Call ``next()`` to continue; not calling it halts the
        chain.
        """
        return next()
