"""Core runtime aggregator for Genro NavRoutes.

Exposes the runtime building blocks from a single module, leaves first:
``compile_pattern``, ``PathMatcher``, ``DispatchChain``, ``Router``.

Importing this module performs only imports; it does not register plugins
or instantiate routers.
"""

from .chain import DispatchChain
from .matcher import MatchResult, PathMatcher
from .navigation import MemoryNavigation, NavigationSubstrate
from .options import RouterOptions
from .pattern import CompiledPattern, ParamSpec, compile_pattern
from .router import RouteBinding, Router, listen

__all__ = [
    "CompiledPattern",
    "DispatchChain",
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
