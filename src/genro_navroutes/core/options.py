# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Router options.

``RouterOptions`` is a frozen Pydantic model: values are validated once when
the router is created and cannot change afterwards, so the navigation mode is
fixed for the router's lifetime.

Fields
------
- ``env``: ``"client"`` or ``"server"``. Server routers are triggered by
  ``navigate`` events instead of fragment changes.
- ``push_state``: use the history pathname instead of the fragment.
- ``root``: prefix stripped from (and prepended to) the pathname in
  push-state mode.
- ``hashbang``: fragments are written and read as ``#!/path``.
- ``case_sensitive``: compile patterns case-sensitively.
- ``strict``: do not accept an extra trailing slash.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

__all__ = ["RouterOptions"]


class RouterOptions(BaseModel):
    """Validated, immutable router configuration."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    env: Literal["client", "server"] = "client"
    push_state: bool = False
    root: str = ""
    hashbang: bool = False
    case_sensitive: bool = False
    strict: bool = False

    @property
    def trigger_event(self) -> str:
        """Router event that re-evaluates routes."""
        if self.push_state or self.env == "server":
            return "navigate"
        return "hashchange"
