# Copyright 2025 Softwell S.r.l. - All Rights Reserved
# SPDX-License-Identifier: Apache-2.0
"""Exceptions for Genro NavRoutes.

This module defines custom exceptions used throughout the routing system.
A path that matches no route is not an error and raises nothing.
"""

from typing import Any

__all__ = [
    "InvalidPattern",
]


class InvalidPattern(Exception):
    """Raised when a route pattern cannot be compiled.

    The compiler never guesses the meaning of a pattern: inputs that are not a
    string, a sequence of strings or a compiled regular expression, and strings
    that do not produce a valid regular expression, are rejected when the
    route is registered.

    Attributes:
        pattern: The offending pattern, as given by the caller.
        reason: Short human-readable explanation.
    """

    def __init__(self, pattern: Any, reason: str) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid route pattern {pattern!r}: {reason}")
