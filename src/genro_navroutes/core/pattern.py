# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Pattern compiler for Genro NavRoutes.

Turns a declarative route pattern into an anchored regular expression plus
the ordered list of parameter slots the expression captures.

Accepted inputs
---------------
- ``str``: a path pattern (see syntax below).
- ``list``/``tuple`` of ``str``: joined into an alternation group
  ``(a|b|c)`` before compilation.
- ``re.Pattern``: returned unchanged, with no parameter slots.

Anything else raises :class:`~genro_navroutes.exceptions.InvalidPattern`.

Pattern syntax
--------------
``/user/:id``
    Named parameter. Captures one segment without slash or dot.
``/user/:id?``
    Optional parameter. The separator and the capture are both optional.
``/file.:ext``
    Parameter after a literal dot. The dot is a boundary, not part of the
    captured value, which may contain further dots.
``/item/:id(\\d+)``
    Custom capture group replacing the default character class.
``/docs/(intro)?``
    A group right after a slash is an optional segment (non-capturing,
    slash included).
``/files/*`` and ``/files/+``
    Zero-or-more / one-or-more wildcards, captured as positional slots.

Compilation is a single left-to-right tokenizing pass: parameter tokens are
recognised on the raw pattern text and only pattern literals are escaped, so
separators emitted by the compiler itself are never escaped twice. Unless
``strict`` is set an optional trailing slash is appended; matching is
case-insensitive unless ``case_sensitive`` is set.

Known limitation: a list pattern is compiled as its joined alternation
string. The alternation group takes positional slot ``0`` and any ``:name``
inside the members is processed on the joined text, so names are not
guaranteed to line up with captures.

Example::

    compiled = compile_pattern("/user/:id/:tab?")
    compiled.params
    # (ParamSpec(name='id', optional=False), ParamSpec(name='tab', optional=True))
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from genro_navroutes.exceptions import InvalidPattern

__all__ = ["CompiledPattern", "ParamSpec", "compile_pattern"]

_TOKEN_RE = re.compile(
    r"""
    (?P<param>
        (?P<slash>/)?
        (?P<format>\.)?
        :(?P<key>\w+)
        (?P<capture>\(.*?\))?
        (?P<optional>\?)?
    )
    | (?P<segment>/\((?!\?))
    | (?P<escape>\\.)
    | (?P<charclass>\[(?:\\.|[^\]\\])*\])
    | (?P<plus>\+)
    | (?P<star>\*)
    | (?P<group>\((?!\?))
    | (?P<literal>[./])
    """,
    re.VERBOSE | re.DOTALL,
)

_SEGMENT = r"([^/.]+?)"
_FORMAT_SEGMENT = r"([^/]+?)"


@dataclass(frozen=True)
class ParamSpec:
    """One capture slot of a compiled pattern.

    Attributes:
        name: Parameter name, or the index among unnamed slots for wildcards
            and plain capturing groups.
        optional: True when the parameter was declared with a trailing ``?``.
    """

    name: str | int
    optional: bool = False


@dataclass(frozen=True)
class CompiledPattern:
    """Pattern descriptor: the matcher and its parameter plan.

    Attributes:
        source: The pattern as given to :func:`compile_pattern`.
        regex: Compiled regular expression.
        params: Parameter slots in left-to-right order of the pattern.
    """

    source: Any
    regex: re.Pattern[str]
    params: tuple[ParamSpec, ...] = ()

    @property
    def names(self) -> list[str | int]:
        """Return slot names in capture order."""
        return [spec.name for spec in self.params]


class _Translator:
    """Stateful ``re.sub`` callback collecting parameter slots."""

    __slots__ = ("params", "_unnamed")

    def __init__(self) -> None:
        self.params: list[ParamSpec] = []
        self._unnamed = 0

    def _positional(self) -> None:
        self.params.append(ParamSpec(self._unnamed))
        self._unnamed += 1

    def __call__(self, match: re.Match[str]) -> str:
        if match.group("param") is not None:
            return self._named(match)
        if match.group("segment") is not None:
            return "(?:/"
        if match.group("escape") is not None or match.group("charclass") is not None:
            return match.group(0)
        if match.group("plus") is not None:
            self._positional()
            return "(.+)"
        if match.group("star") is not None:
            self._positional()
            return "(.*)"
        if match.group("group") is not None:
            self._positional()
            return "("
        return re.escape(match.group("literal"))

    def _named(self, match: re.Match[str]) -> str:
        slash = match.group("slash") or ""
        fmt = r"\." if match.group("format") else ""
        capture = match.group("capture") or (_FORMAT_SEGMENT if fmt else _SEGMENT)
        optional = match.group("optional") is not None
        self.params.append(ParamSpec(match.group("key"), optional))
        if optional:
            return f"(?:{slash}{fmt}{capture})?"
        return f"{slash}(?:{fmt}{capture})"


def compile_pattern(
    pattern: str | list[str] | tuple[str, ...] | re.Pattern[str],
    case_sensitive: bool = False,
    strict: bool = False,
) -> CompiledPattern:
    """Compile a route pattern into a :class:`CompiledPattern`.

    Args:
        pattern: Path pattern, sequence of alternative patterns, or an already
            compiled regular expression.
        case_sensitive: Match letter case exactly.
        strict: Do not accept an extra trailing slash.

    Returns:
        The compiled pattern with its parameter slots.

    Raises:
        InvalidPattern: If the input type is unsupported or the resulting
            expression is not a valid regular expression.
    """
    if isinstance(pattern, re.Pattern):
        return CompiledPattern(source=pattern, regex=pattern)
    if isinstance(pattern, (list, tuple)):
        if not all(isinstance(item, str) for item in pattern):
            raise InvalidPattern(pattern, "alternatives must all be strings")
        text = "(" + "|".join(pattern) + ")"
    elif isinstance(pattern, str):
        text = pattern
    else:
        raise InvalidPattern(pattern, f"unsupported type {type(pattern).__name__}")

    if not strict:
        text += "/?"

    translator = _Translator()
    body = _TOKEN_RE.sub(translator, text)
    flags = 0 if case_sensitive else re.IGNORECASE
    try:
        regex = re.compile(f"^{body}\\Z", flags)
    except re.error as err:
        raise InvalidPattern(pattern, str(err)) from err
    return CompiledPattern(source=pattern, regex=regex, params=tuple(translator.params))
