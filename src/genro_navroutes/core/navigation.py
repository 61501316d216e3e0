# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Navigation substrate - the address/history mechanism a Router sits on.

``NavigationSubstrate`` is the abstract boundary: it exposes the current
pathname and fragment, accepts fragment writes and history pushes, and
signals changes. Adapters for real hosts (a browser bridge, a terminal UI,
a test harness) subclass it.

Signals
-------
Callbacks registered with ``on_change`` receive one argument:

- ``"hashchange"``: the fragment changed.
- ``"popstate"``: the user (or script) moved through history.

``push_state`` never signals: a push made by the application itself must not
re-trigger route matching.

``MemoryNavigation`` is an in-process implementation keeping a history list.
It is the default substrate of a Router and is what server-side code and
tests use.

Example::

    nav = MemoryNavigation("/start")
    nav.on_change(print)
    nav.set_hash("/inbox")   # prints "hashchange"
    nav.push_state("/next")  # prints nothing
    nav.back()               # prints "popstate"
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlsplit

__all__ = ["MemoryNavigation", "NavigationSubstrate"]


class NavigationSubstrate(ABC):
    """Abstract address/history mechanism driving a Router."""

    @property
    @abstractmethod
    def pathname(self) -> str:
        """Current pathname, e.g. ``"/app/users"``."""
        ...

    @property
    @abstractmethod
    def hash(self) -> str:
        """Current fragment including the ``#`` marker, or ``""``."""
        ...

    @abstractmethod
    def set_hash(self, fragment: str) -> None:
        """Replace the fragment; signal ``hashchange`` if it changed."""
        ...

    @abstractmethod
    def push_state(self, url: str, state: Any = None) -> None:
        """Add a history entry for ``url`` without signalling."""
        ...

    @abstractmethod
    def on_change(self, callback: Callable[[str], Any]) -> None:
        """Register ``callback(signal)`` for navigation signals."""
        ...


@dataclass
class _HistoryEntry:
    pathname: str
    fragment: str = ""
    state: Any = None


class MemoryNavigation(NavigationSubstrate):
    """In-memory history with browser-like signalling."""

    __slots__ = ("_entries", "_index", "_callbacks")

    def __init__(self, url: str = "/") -> None:
        parts = urlsplit(url)
        self._entries: list[_HistoryEntry] = [
            _HistoryEntry(parts.path or "/", parts.fragment)
        ]
        self._index = 0
        self._callbacks: list[Callable[[str], Any]] = []

    @property
    def _current(self) -> _HistoryEntry:
        return self._entries[self._index]

    @property
    def pathname(self) -> str:
        return self._current.pathname

    @property
    def hash(self) -> str:
        fragment = self._current.fragment
        return f"#{fragment}" if fragment else ""

    @property
    def state(self) -> Any:
        return self._current.state

    @property
    def url(self) -> str:
        return self.pathname + self.hash

    def __len__(self) -> int:
        return len(self._entries)

    def on_change(self, callback: Callable[[str], Any]) -> None:
        self._callbacks.append(callback)

    def set_hash(self, fragment: str) -> None:
        fragment = fragment[1:] if fragment.startswith("#") else fragment
        if fragment == self._current.fragment:
            return
        self._push(_HistoryEntry(self.pathname, fragment))
        self._signal("hashchange")

    def push_state(self, url: str, state: Any = None) -> None:
        parts = urlsplit(url)
        self._push(_HistoryEntry(parts.path or self.pathname, parts.fragment, state))

    def go(self, delta: int) -> None:
        """Move ``delta`` entries through history, signalling like a browser."""
        target = self._index + delta
        if delta == 0 or not 0 <= target < len(self._entries):
            return
        old_fragment = self._current.fragment
        self._index = target
        self._signal("popstate")
        if self._current.fragment != old_fragment:
            self._signal("hashchange")

    def back(self) -> None:
        self.go(-1)

    def forward(self) -> None:
        self.go(1)

    def _push(self, entry: _HistoryEntry) -> None:
        del self._entries[self._index + 1 :]
        self._entries.append(entry)
        self._index += 1

    def _signal(self, signal: str) -> None:
        for callback in list(self._callbacks):
            callback(signal)

    def __repr__(self) -> str:
        return f"MemoryNavigation({self.url!r})"
