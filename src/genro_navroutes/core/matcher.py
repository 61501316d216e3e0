# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Path matcher for Genro NavRoutes.

``PathMatcher`` wraps a :class:`~genro_navroutes.core.pattern.CompiledPattern`
and evaluates candidate paths against it, producing a :class:`MatchResult`.

Parameter resolution
--------------------
Capture *i* is named after the *i*-th parameter slot of the pattern, or keyed
by *i* itself when the pattern has no slot for it (pre-built regular
expressions have none). Captures that did not participate stay ``None``;
participating captures are percent-decoded. A malformed escape leaves the raw
capture in place and never fails the match.

The matcher performs no normalisation: trailing slashes and root prefixes are
handled by the pattern and by the router respectively.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import unquote

from .pattern import CompiledPattern, ParamSpec, compile_pattern

__all__ = ["MatchResult", "PathMatcher", "decode_param"]

logger = logging.getLogger("genro_navroutes")

_MALFORMED_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def decode_param(value: str | None) -> str | None:
    """Percent-decode a captured value.

    ``None`` and empty strings are returned unchanged. Values holding a
    malformed escape (a ``%`` not followed by two hex digits, or bytes that
    are not valid UTF-8) are returned undecoded.
    """
    if not value:
        return value
    if _MALFORMED_ESCAPE_RE.search(value):
        logger.debug("Leaving parameter %r undecoded: malformed escape", value)
        return value
    try:
        return unquote(value, errors="strict")
    except UnicodeDecodeError:
        logger.debug("Leaving parameter %r undecoded: invalid UTF-8", value)
        return value


@dataclass(frozen=True)
class MatchResult:
    """Outcome of matching one path against one pattern.

    Attributes:
        path: The candidate path.
        matched: Whether the whole pattern matched.
        captures: Raw captured values (``None`` for non-participating groups).
        params: Decoded values keyed by parameter name or positional index.
        keys: Parameter slots of the pattern.
        match: The underlying ``re.Match``, ``None`` when not matched.
    """

    path: str
    matched: bool
    captures: tuple[str | None, ...] = ()
    params: dict[str | int, str | None] = field(default_factory=dict)
    keys: tuple[ParamSpec, ...] = ()
    match: re.Match[str] | None = field(default=None, compare=False, repr=False)

    def __bool__(self) -> bool:
        return self.matched


class PathMatcher:
    """Compiled route pattern able to parse candidate paths.

    Example::

        matcher = PathMatcher("/user/:id")
        result = matcher.parse("/user/42")
        result.params  # {"id": "42"}
    """

    __slots__ = ("route", "compiled")

    def __init__(
        self, route: Any, case_sensitive: bool = False, strict: bool = False
    ) -> None:
        self.route = route
        self.compiled: CompiledPattern = compile_pattern(
            route, case_sensitive=case_sensitive, strict=strict
        )

    @property
    def regex(self) -> re.Pattern[str]:
        return self.compiled.regex

    @property
    def keys(self) -> tuple[ParamSpec, ...]:
        return self.compiled.params

    def parse(self, path: str) -> MatchResult:
        """Match ``path`` and extract its parameters.

        Args:
            path: Candidate path, already normalised by the caller.

        Returns:
            A MatchResult; ``matched`` is False when the pattern does not match
            the whole path, in which case ``params`` is empty.
        """
        keys = self.compiled.params
        match = self.compiled.regex.search(path)
        if match is None:
            return MatchResult(path=path, matched=False, keys=keys)

        captures = match.groups()
        params: dict[str | int, str | None] = {}
        for index, value in enumerate(captures):
            name = keys[index].name if index < len(keys) else index
            params[name] = decode_param(value)
        return MatchResult(
            path=path,
            matched=True,
            captures=captures,
            params=params,
            keys=keys,
            match=match,
        )

    def __repr__(self) -> str:
        return f"PathMatcher({self.route!r})"
