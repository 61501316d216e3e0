"""Router for Genro NavRoutes.

``Router`` owns a set of route bindings, watches a navigation substrate and,
on every navigation, dispatches each matching route through a
:class:`~genro_navroutes.core.chain.DispatchChain`.

Internal state
--------------
- ``options``: validated :class:`RouterOptions` (fixed for the router's life).
- ``substrate``: the :class:`NavigationSubstrate` supplying and storing paths.
- ``state``: the current chain instance (``None`` before the first dispatch).
- ``_bindings``: ``RouteBinding`` list in registration order.
- ``_global_handlers``: handlers prepended to every chain (see ``use()``).
- ``_plugins`` / ``_plugins_by_name`` / ``_plugin_info``: attached plugins and
  their per-router configuration store.

Triggers
--------
``add()`` subscribes the new route to the router's trigger event, then
evaluates it against the current path. The trigger event is ``"hashchange"``
in hash mode, ``"navigate"`` in push-state mode or when ``env="server"``.
Substrate ``hashchange`` signals are re-emitted as ``"hashchange"``;
``popstate`` signals become ``"navigate"``.
``navigate(path)`` writes the path and emits ``"navigate"``.

Dispatch
--------
For one binding: parse the current path; on a match build a chain seeded with
``default_handlers()``, enqueue the route middleware and terminal handler and
emit ``"match"(chain, request)``. A match listener calling
``chain.prevent_default()`` cancels the dispatch. Otherwise the chain becomes
``state`` (the old state moving to ``chain.previous``); if the chain's parent
stopped propagation the chain is marked non-propagating and not run, else it
runs. The veto compares path values only: navigating to the same path again
(e.g. ``navigate("/same")`` twice in push-state or server mode) finds the
vetoed chain as parent, so even the route that called ``stop_propagation()``
is not run until a different path has been dispatched. Handler exceptions
propagate to whoever triggered the dispatch; ``state`` is already updated at
that point.

Plugins
-------
``Router.register_plugin(plugin_class)`` registers a ``BasePlugin`` subclass
globally by ``plugin_code``; ``plug(name, **config)`` attaches an instance to
this router. Route options prefixed with a plugin code (``logging_after=False``)
become per-route configuration for that plugin.

Example::

    from genro_navroutes import Router

    router = Router(push_state=True).plug("logging")

    def load_user(request, chain, next):
        if request.params["id"].isdigit():
            next()

    @router.route("/user/:id", load_user)
    def show_user(request, chain, next):
        print("showing", request.params["id"])

    router.navigate("/user/42")
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from functools import wraps
from typing import Any

from genro_toolbox import dictExtract
from genro_toolbox.typeutils import safe_is_instance

from genro_navroutes.plugins._base_plugin import BasePlugin

from .chain import DispatchChain, Handler
from .events import EventEmitter
from .matcher import MatchResult, PathMatcher
from .navigation import MemoryNavigation, NavigationSubstrate
from .options import RouterOptions

__all__ = ["RouteBinding", "Router", "listen"]

_PLUGIN_REGISTRY: dict[str, type[BasePlugin]] = {}


@dataclass
class RouteBinding:
    """A registered route.

    Attributes:
        route: Pattern as given to ``add()``.
        name: Route key for per-route plugin configuration.
        matcher: Compiled matcher for ``route``.
        middleware: Handlers run before ``handler``.
        handler: Terminal handler.
        event: Router event that re-evaluates this route.
        options: Extra keyword options given to ``add()``.
    """

    route: Any
    name: str
    matcher: PathMatcher
    middleware: tuple[Handler, ...]
    handler: Handler
    event: str
    options: dict[str, Any] = field(default_factory=dict)

    @property
    def handlers(self) -> list[Handler]:
        return [*self.middleware, self.handler]


def _route_name(route: Any) -> str:
    if isinstance(route, re.Pattern):
        return route.pattern
    if isinstance(route, (list, tuple)):
        return "|".join(route)
    return str(route)


class Router(EventEmitter):
    """Path-pattern router driven by a navigation substrate."""

    __slots__ = (
        "options",
        "substrate",
        "state",
        "_bindings",
        "_global_handlers",
        "_plugins",
        "_plugins_by_name",
        "_plugin_handlers",
        "_plugin_info",
    )

    def __init__(
        self,
        substrate: NavigationSubstrate | None = None,
        *,
        options: RouterOptions | None = None,
        **option_fields: Any,
    ) -> None:
        super().__init__()
        self._plugins: list[BasePlugin] = []
        self._plugins_by_name: dict[str, BasePlugin] = {}
        self._plugin_handlers: list[Handler] = []
        self._plugin_info: dict[str, dict[str, Any]] = {}
        if options is None:
            options = RouterOptions(**option_fields)
        elif option_fields:
            options = RouterOptions(**{**options.model_dump(), **option_fields})
        if substrate is None:
            substrate = MemoryNavigation()
        elif not safe_is_instance(
            substrate, "genro_navroutes.core.navigation.NavigationSubstrate"
        ):
            raise TypeError(
                f"Router substrate must be a NavigationSubstrate, got {type(substrate).__name__}"
            )
        self.options = options
        self.substrate = substrate
        self.state: DispatchChain | None = None
        self._bindings: list[RouteBinding] = []
        self._global_handlers: list[Handler] = []
        substrate.on_change(self._on_substrate_change)

    # ------------------------------------------------------------------
    # Route registration
    # ------------------------------------------------------------------
    def add(
        self, route: Any, *handlers: Handler, name: str | None = None, **options: Any
    ) -> Router:
        """Register a route and evaluate it against the current path.

        Args:
            route: Pattern string, list of alternative patterns, or compiled regex.
            *handlers: Middleware followed by the terminal handler.
            name: Route key for per-route plugin config (defaults to the pattern).
            **options: Extra metadata; ``<plugin_code>_<key>`` entries configure
                the corresponding plugin for this route.

        Returns:
            self (for method chaining).

        Raises:
            TypeError: If no handler is given or a handler is not callable.
            InvalidPattern: If ``route`` cannot be compiled.
        """
        if not handlers:
            raise TypeError("add() requires at least one handler")
        for handler in handlers:
            if not callable(handler):
                raise TypeError(f"Route handler must be callable, got {type(handler).__name__}")
        matcher = PathMatcher(
            route, case_sensitive=self.options.case_sensitive, strict=self.options.strict
        )
        binding = RouteBinding(
            route=route,
            name=name or _route_name(route),
            matcher=matcher,
            middleware=tuple(handlers[:-1]),
            handler=handlers[-1],
            event=self.options.trigger_event,
            options=dict(options),
        )
        self._bindings.append(binding)
        for plugin in self._plugins:
            self._apply_plugin_to_binding(plugin, binding)

        def invoke(*_: Any) -> DispatchChain | None:
            return self._dispatch(binding)

        self.on(binding.event, invoke)
        invoke()
        return self

    get = add

    def route(
        self, route: Any, *middleware: Handler, **options: Any
    ) -> Callable[[Handler], Handler]:
        """Decorator form of ``add()``; the decorated function is the terminal handler.

        Example::

            @router.route("/user/:id", require_login)
            def show_user(request, chain, next):
                ...
        """

        def decorator(func: Handler) -> Handler:
            self.add(route, *middleware, func, **options)
            return func

        return decorator

    def context(self, prefix: str, *middleware: Handler) -> Callable[..., Router]:
        """Return an ``add``-like callable registering routes under ``prefix``.

        ``middleware`` runs before the middleware given to each route.

        Example::

            user = router.context("/user", load_user)
            user(":id", show_user)           # /user/:id
            user(":id/edit", check, edit)    # /user/:id/edit
        """

        def add_in_context(pattern: str, *handlers: Handler, **options: Any) -> Router:
            if not handlers:
                raise TypeError("context route requires at least one handler")
            separator = "" if prefix.endswith("/") or pattern in ("", "/") else "/"
            path = pattern[1:] if pattern.startswith("/") else pattern
            return self.add(prefix + separator + path, *middleware, *handlers, **options)

        return add_in_context

    def use(self, *handlers: Handler) -> Router:
        """Append handlers run at the start of every chain of this router."""
        for handler in handlers:
            if not callable(handler):
                raise TypeError(f"Global handler must be callable, got {type(handler).__name__}")
        self._global_handlers.extend(handlers)
        return self

    def default_handlers(self) -> list[Handler]:
        """Handlers seeding every new chain: plugin handlers, then global handlers."""
        return [*self._plugin_handlers, *self._global_handlers]

    @property
    def routes(self) -> list[RouteBinding]:
        return list(self._bindings)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def _dispatch(self, binding: RouteBinding) -> DispatchChain | None:
        request: MatchResult = binding.matcher.parse(self.path)
        if not request.matched:
            return None
        chain = DispatchChain(self, binding=binding, request=request)
        chain.enqueue(binding.handlers)
        self.emit("match", chain, request)
        if not chain.run_default:
            return chain
        chain.previous = self.state
        self.state = chain
        parent = chain.parent()
        if parent is not None and not parent.propagate:
            chain.propagate = False
            return chain
        chain.run()
        return chain

    def _on_substrate_change(self, signal: str) -> None:
        if signal == "hashchange":
            self.emit("hashchange")
        elif signal == "popstate":
            self.emit("navigate")

    # ------------------------------------------------------------------
    # Path access
    # ------------------------------------------------------------------
    @property
    def path(self) -> str:
        """Current route path, read from the substrate according to the mode."""
        opts = self.options
        if opts.push_state:
            pathname = self.substrate.pathname
            if opts.root and pathname.startswith(opts.root):
                return pathname[len(opts.root) :]
            return pathname
        marker = "#!" if opts.hashbang else "#"
        fragment = self.substrate.hash
        return fragment[len(marker) :] if fragment.startswith(marker) else ""

    @path.setter
    def path(self, value: str) -> None:
        opts = self.options
        if opts.push_state:
            self.substrate.push_state(opts.root + value if opts.root else value)
        else:
            self.substrate.set_hash(("!" if opts.hashbang else "") + value)

    def clear_path(self) -> Router:
        """Reset the path to the root (push-state) or to an empty fragment."""
        opts = self.options
        if opts.push_state:
            self.substrate.push_state(opts.root or "/")
        else:
            self.substrate.set_hash("!" if opts.hashbang else "")
        return self

    def navigate(self, path: str) -> Router:
        """Write ``path`` and emit ``"navigate"``."""
        self.path = path
        self.emit("navigate")
        return self

    # ------------------------------------------------------------------
    # Convenience constructor
    # ------------------------------------------------------------------
    @classmethod
    def listen(cls, *args: Any, **options: Any) -> Router:
        """Create a router and register a flat route table in one call.

        Accepts ``listen(routes, **options)`` or ``listen(options, routes)``, where
        ``options`` is a mapping or a :class:`RouterOptions`.
        Each value of ``routes`` is a handler or a sequence of handlers
        (middleware first, terminal handler last).
        """
        if len(args) == 2:
            given, routes = args
            if isinstance(given, RouterOptions):
                given = given.model_dump()
            options = {**given, **options}
        elif len(args) == 1:
            routes = args[0]
        else:
            raise TypeError("listen() expects a route table")
        if not isinstance(routes, Mapping):
            raise TypeError(f"Route table must be a mapping, got {type(routes).__name__}")
        router = cls(**options)
        for pattern, handlers in routes.items():
            if isinstance(handlers, (list, tuple)):
                router.add(pattern, *handlers)
            else:
                router.add(pattern, handlers)
        return router

    # ------------------------------------------------------------------
    # Plugin registration
    # ------------------------------------------------------------------
    @classmethod
    def register_plugin(cls, plugin_class: type[BasePlugin], name: str | None = None) -> None:
        """Register a plugin class globally.

        Args:
            plugin_class: A BasePlugin subclass with plugin_code defined.
            name: Optional override name. If provided, overwrites any existing
                  registration. If not provided, uses plugin_code and raises
                  if already registered with a different class.

        Raises:
            TypeError: If plugin_class is not a BasePlugin subclass.
            ValueError: If plugin_code is missing or name collision occurs.
        """
        if not isinstance(plugin_class, type) or not issubclass(plugin_class, BasePlugin):
            raise TypeError("plugin_class must be a BasePlugin subclass")
        if not getattr(plugin_class, "plugin_code", None):
            raise ValueError(
                f"Plugin {plugin_class.__name__} not following standards: missing plugin_code"
            )
        code = name or plugin_class.plugin_code
        if name is None:
            existing = _PLUGIN_REGISTRY.get(code)
            if existing is not None and existing is not plugin_class:
                raise ValueError(f"Plugin '{code}' already registered")
        _PLUGIN_REGISTRY[code] = plugin_class

    @classmethod
    def available_plugins(cls) -> dict[str, type[BasePlugin]]:
        """Return a copy of the global plugin registry."""
        return dict(_PLUGIN_REGISTRY)

    def plug(self, plugin: str, **config: Any) -> Router:
        """Attach a plugin by name (previously registered globally).

        Args:
            plugin: Name of the plugin to attach.
            **config: Configuration options passed to the plugin.

        Returns:
            self (for method chaining).

        Raises:
            TypeError: If plugin is not a string.
            ValueError: If plugin is not registered or already attached.
        """
        if not isinstance(plugin, str):
            raise TypeError(
                f"Plugin must be referenced by name string, got {type(plugin).__name__}"
            )
        plugin_class = _PLUGIN_REGISTRY.get(plugin)
        if plugin_class is None:
            available = ", ".join(sorted(_PLUGIN_REGISTRY)) or "none"
            raise ValueError(
                f"Unknown plugin '{plugin}'. Register it first. Available plugins: {available}"
            )
        if plugin in self._plugins_by_name:
            raise ValueError(f"Plugin '{plugin}' is already attached to this router")
        instance = plugin_class(self, **config)
        self._plugins.append(instance)
        self._plugins_by_name[instance.name] = instance
        self._plugin_handlers.append(self._create_handler(instance))
        for binding in self._bindings:
            self._apply_plugin_to_binding(instance, binding)
        return self

    def iter_plugins(self) -> list[BasePlugin]:
        """Return attached plugin instances in application order."""
        return list(self._plugins)

    def get_config(self, plugin_name: str, route_name: str | None = None) -> dict[str, Any]:
        """Return plugin config (global + per-route overrides) for an attached plugin."""
        plugin = self._plugins_by_name.get(plugin_name)
        if plugin is None:
            raise AttributeError(f"No plugin named '{plugin_name}' attached to this router")
        return plugin.configuration(route_name)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        plugin = self._plugins_by_name.get(name)
        if plugin is None:
            raise AttributeError(f"No plugin named '{name}' attached to this router")
        return plugin

    def _get_plugin_bucket(self, plugin_name: str) -> dict[str, Any]:
        bucket = self._plugin_info.get(plugin_name)
        if bucket is None:
            raise AttributeError(f"No plugin named '{plugin_name}' attached to this router")
        return bucket

    def set_plugin_enabled(self, route_name: str, plugin_name: str, enabled: bool = True) -> None:
        """Enable or disable a plugin for one route at runtime."""
        bucket = self._get_plugin_bucket(plugin_name)
        entry = bucket.setdefault(route_name, {"config": {}, "locals": {}})
        entry.setdefault("locals", {})["enabled"] = bool(enabled)

    def is_plugin_enabled(self, route_name: str, plugin_name: str) -> bool:
        """Check if a plugin is enabled for a route.

        Resolution order (first found wins):
        1. route locals (runtime override via set_plugin_enabled)
        2. route config (configure(_target=route_name, enabled=...) or route options)
        3. global locals (set_plugin_enabled on "_all_")
        4. global config (configure(enabled=...))
        5. default: True
        """
        bucket = self._get_plugin_bucket(plugin_name)
        for target in (route_name, "_all_"):
            data = bucket.get(target, {})
            for layer in ("locals", "config"):
                values = data.get(layer, {})
                if "enabled" in values:
                    return bool(values["enabled"])
        return True

    def _create_handler(self, plugin: BasePlugin) -> Handler:
        @wraps(plugin.chain_handler)
        def handler(request: MatchResult, chain: DispatchChain, next: Callable[[], Any]) -> Any:
            if not self.is_plugin_enabled(chain.name or "_all_", plugin.name):
                return next()
            return plugin.chain_handler(request, chain, next)

        return handler

    def _apply_plugin_to_binding(self, plugin: BasePlugin, binding: RouteBinding) -> None:
        route_config = dictExtract(
            binding.options, f"{plugin.plugin_code}_", slice_prefix=True, pop=False
        )
        if route_config:
            plugin.configure(_target=binding.name, **route_config)
        plugin.on_register(self, binding)

    def __repr__(self) -> str:
        return f"Router(routes={len(self._bindings)}, path={self.path!r})"


def listen(*args: Any, **options: Any) -> Router:
    """Module-level shortcut for :meth:`Router.listen`."""
    return Router.listen(*args, **options)
