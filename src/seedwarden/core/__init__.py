"""Core module - Shared configuration and value types."""

from seedwarden.core.config import ServerConfig
from seedwarden.core.types import GLOBAL_WIRE, UNLIMITED_WIRE, LimitKind, ShareLimit

__all__ = [
    # Config
    "ServerConfig",
    # Types
    "GLOBAL_WIRE",
    "LimitKind",
    "ShareLimit",
    "UNLIMITED_WIRE",
]
