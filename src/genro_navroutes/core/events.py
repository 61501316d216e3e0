# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Minimal synchronous event emitter used by the Router.

Listeners are kept per event name in registration order. ``emit`` works on a
snapshot of the listener list, so listeners added while an event is being
emitted only see later emissions.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

__all__ = ["EventEmitter"]


class EventEmitter:
    """Register listeners by event name and call them synchronously."""

    __slots__ = ("_listeners",)

    def __init__(self) -> None:
        self._listeners: dict[str, list[Callable[..., Any]]] = {}

    def on(self, event: str, listener: Callable[..., Any]) -> EventEmitter:
        """Call ``listener(*args)`` each time ``event`` is emitted."""
        self._listeners.setdefault(event, []).append(listener)
        return self

    def once(self, event: str, listener: Callable[..., Any]) -> EventEmitter:
        """Like ``on`` but the listener is removed after its first call."""

        def wrapper(*args: Any) -> Any:
            self.off(event, wrapper)
            return listener(*args)

        return self.on(event, wrapper)

    def off(self, event: str, listener: Callable[..., Any] | None = None) -> EventEmitter:
        """Remove one listener, or every listener of ``event`` when omitted."""
        if listener is None:
            self._listeners.pop(event, None)
            return self
        listeners = self._listeners.get(event, [])
        if listener in listeners:
            listeners.remove(listener)
        return self

    def listeners(self, event: str) -> list[Callable[..., Any]]:
        return list(self._listeners.get(event, []))

    def emit(self, event: str, *args: Any) -> bool:
        """Call the listeners of ``event``; return True if there were any."""
        listeners = self.listeners(event)
        for listener in listeners:
            listener(*args)
        return bool(listeners)

    bind = on
    trigger = emit
