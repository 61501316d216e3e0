# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Dispatch chain for Genro NavRoutes.

A ``DispatchChain`` is one execution of a matched route: an ordered queue of
handlers walked by an index cursor, plus the control flags handlers use to
talk back to the router.

Handler protocol
----------------
Every handler is called as ``handler(request, chain, next)``:

- ``request``: the :class:`~genro_navroutes.core.matcher.MatchResult`.
- ``chain``: this instance (flags, typed context fields, ``enqueue``).
- ``next``: continuation; calling it runs the next pending handler.

A handler that never calls ``next`` halts the chain. It may keep ``next`` and
call it later, e.g. once an external resource is ready; nothing times out.
Calling ``next`` after the queue is exhausted does nothing and returns None.

Control flags
-------------
- ``prevent_default()`` clears ``run_default``. The chain keeps running.
- ``stop_propagation()`` clears ``propagate``. Routes registered later that
  match the same path in the same navigation will not run their handlers.

Queue
-----
The queue is seeded with a copy of ``router.default_handlers()`` (plugin
handlers, then global handlers). ``enqueue`` appends, or inserts at an index
relative to the handlers still pending; a handler may enqueue more handlers,
itself included, while the chain is running.

Linkage
-------
``previous`` holds the router's chain instance that preceded this one.
``parent()`` exposes it only when both were created for the same non-empty
path, i.e. when this chain is a nested continuation of the same navigation.
"""

from __future__ import annotations

import re
import time
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from .matcher import MatchResult
    from .router import RouteBinding, Router

__all__ = ["DispatchChain", "Handler"]

Handler = Callable[..., Any]


class DispatchChain:
    """Cancellable continuation chain for one matched route."""

    __slots__ = (
        "router",
        "binding",
        "request",
        "value",
        "previous",
        "run_default",
        "propagate",
        "handled",
        "timestamp",
        "_queue",
        "_cursor",
    )

    def __init__(
        self,
        router: Router,
        binding: RouteBinding | None = None,
        request: MatchResult | None = None,
    ) -> None:
        self.router = router
        self.binding = binding
        self.request = request
        self.value: str = router.path
        self.previous: DispatchChain | None = None
        self.run_default = True
        self.propagate = True
        self.handled = False
        self.timestamp: float | None = None
        self._queue: list[Handler] = list(router.default_handlers())
        self._cursor = 0

    # ------------------------------------------------------------------
    # Typed context
    # ------------------------------------------------------------------
    @property
    def route(self) -> Any:
        """Pattern the route was registered with."""
        return self.binding.route if self.binding is not None else None

    @property
    def name(self) -> str | None:
        """Route key used for per-route plugin configuration."""
        return self.binding.name if self.binding is not None else None

    @property
    def regex(self) -> re.Pattern[str] | None:
        return self.binding.matcher.regex if self.binding is not None else None

    @property
    def params(self) -> dict[str | int, str | None]:
        return self.request.params if self.request is not None else {}

    @property
    def pending(self) -> list[Handler]:
        """Handlers not yet invoked, in execution order."""
        return self._queue[self._cursor :]

    # ------------------------------------------------------------------
    # Control flags
    # ------------------------------------------------------------------
    def prevent_default(self) -> None:
        self.run_default = False

    def stop_propagation(self) -> None:
        self.propagate = False

    def parent(self) -> DispatchChain | None:
        """Return the previous chain if it belongs to the same path, else None."""
        previous = self.previous
        if previous is not None and previous.value and previous.value == self.value:
            return previous
        return None

    # ------------------------------------------------------------------
    # Queue and execution
    # ------------------------------------------------------------------
    def enqueue(
        self, handlers: Handler | Sequence[Handler], at_index: int | None = None
    ) -> DispatchChain:
        """Add handlers to the pending queue.

        Args:
            handlers: A handler or a sequence of handlers.
            at_index: Insertion point among pending handlers. None appends.
                The batch keeps its relative order.

        Returns:
            self (for chaining).
        """
        batch = list(handlers) if isinstance(handlers, (list, tuple)) else [handlers]
        if at_index is None:
            self._queue.extend(batch)
        else:
            pending = self._queue[self._cursor :]
            pending[at_index:at_index] = batch
            self._queue[self._cursor :] = pending
        return self

    def run(self) -> Any:
        """Start the chain from its first pending handler."""
        self.handled = True
        self.timestamp = time.time()
        return self.advance()

    def advance(self) -> Any:
        """Invoke the next pending handler, handing it the continuation."""
        if self._cursor >= len(self._queue):
            return None
        handler = self._queue[self._cursor]
        self._cursor += 1
        return handler(self.request, self, self.advance)

    def __repr__(self) -> str:
        return (
            f"DispatchChain(route={self.route!r}, value={self.value!r}, "
            f"pending={len(self._queue) - self._cursor})"
        )
