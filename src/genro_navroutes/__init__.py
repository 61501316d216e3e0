"""Genro NavRoutes - Path-pattern routing with cancellable handler chains.

Public API surface for compiling route patterns, matching paths and
dispatching matched routes through ordered chains of handlers.

Public exports:
    - ``Router``: Registers routes and dispatches them on navigation
    - ``DispatchChain``: One execution of a matched route
    - ``PathMatcher`` / ``MatchResult``: Path evaluation and its result
    - ``compile_pattern``: Pattern compiler
    - ``NavigationSubstrate`` / ``MemoryNavigation``: Navigation boundary
    - ``RouterOptions``: Validated router configuration
    - ``listen``: Build a router from a route table

Built-in plugins (logging) are auto-registered on first import.

Example::

    from genro_navroutes import Router

    router = Router(push_state=True)

    def auth(request, chain, next):
        if request.params["id"] == "0":
            chain.prevent_default()
            return
        next()

    router.add("/user/:id", auth, lambda request, chain, next: print(request.params))
    router.navigate("/user/42")
"""

from importlib import import_module

__version__ = "0.1.0"

from .core import (
    CompiledPattern,
    DispatchChain,
    MatchResult,
    MemoryNavigation,
    NavigationSubstrate,
    ParamSpec,
    PathMatcher,
    RouteBinding,
    Router,
    RouterOptions,
    compile_pattern,
    listen,
)
from .exceptions import InvalidPattern

# Import plugins to trigger auto-registration (lazy to avoid cycles)
for _plugin in ("logging",):
    import_module(f"{__name__}.plugins.{_plugin}")
del _plugin

__all__ = [
    "CompiledPattern",
    "DispatchChain",
    "InvalidPattern",
    "MatchResult",
    "MemoryNavigation",
    "NavigationSubstrate",
    "ParamSpec",
    "PathMatcher",
    "RouteBinding",
    "Router",
    "RouterOptions",
    "compile_pattern",
    "listen",
]
