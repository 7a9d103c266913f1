"""Shared types for seedwarden.

This module defines the share-limit value used by the torrent store, the
rules and the qBittorrent client. The server encodes "unlimited" and
"use the global default" as negative magic numbers; inside seedwarden they
are distinct kinds so they can never be confused with a real limit.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# Wire sentinels used by the qBittorrent Web API
UNLIMITED_WIRE = -1
GLOBAL_WIRE = -2


class LimitKind(str, Enum):
    """Kind of a share limit."""

    UNLIMITED = "unlimited"
    GLOBAL = "global"
    FIXED = "fixed"


@dataclass(frozen=True)
class ShareLimit:
    """A ratio or seeding-time limit.

    Attributes:
        kind: Whether the limit is unlimited, deferred to the server global
            default, or a fixed value.
        value: The limit for FIXED limits, None otherwise.
    """

    kind: LimitKind
    value: float | int | None = None

    @classmethod
    def unlimited(cls) -> ShareLimit:
        return cls(LimitKind.UNLIMITED)

    @classmethod
    def use_global(cls) -> ShareLimit:
        return cls(LimitKind.GLOBAL)

    @classmethod
    def fixed(cls, value: float | int) -> ShareLimit:
        return cls(LimitKind.FIXED, value)

    @classmethod
    def from_wire(cls, value: float | int) -> ShareLimit:
        """Translate a number as sent by the server into a ShareLimit."""
        if value == UNLIMITED_WIRE:
            return cls.unlimited()
        if value == GLOBAL_WIRE:
            return cls.use_global()
        return cls.fixed(value)

    def to_wire(self) -> float | int:
        """Translate back to the number the server expects."""
        if self.kind is LimitKind.UNLIMITED:
            return UNLIMITED_WIRE
        if self.kind is LimitKind.GLOBAL:
            return GLOBAL_WIRE
        if self.value is None:
            raise ValueError("Fixed share limit has no value")
        return self.value

    @property
    def is_limited(self) -> bool:
        """True if this is a real, non-negative limit."""
        return self.kind is LimitKind.FIXED and self.value is not None and self.value >= 0

    def __str__(self) -> str:
        if self.kind is LimitKind.FIXED:
            return str(self.value)
        return self.kind.value
