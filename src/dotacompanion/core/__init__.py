"""
Dota Companion Core - Foundation modules shared by every layer.

This module contains:
- config: Application configuration management
- errors: Typed error taxonomy mapped to HTTP statuses
- schemas: Normalized response models returned to the frontend
- steam_id: SteamID64 / account id conversion
"""

from dotacompanion.core.errors import (
    Conflict,
    ConfigError,
    DotaCompanionError,
    Forbidden,
    InternalError,
    InvalidIdFormat,
    NotFound,
    Unauthorized,
    UpstreamError,
    UpstreamTimeout,
    ValidationError,
)
from dotacompanion.core.steam_id import STEAM_ID64_OFFSET, to_account_id, to_steam_id64

__all__ = [
    # Errors
    "Conflict",
    "ConfigError",
    "DotaCompanionError",
    "Forbidden",
    "InternalError",
    "InvalidIdFormat",
    "NotFound",
    "Unauthorized",
    "UpstreamError",
    "UpstreamTimeout",
    "ValidationError",
    # Steam ids
    "STEAM_ID64_OFFSET",
    "to_account_id",
    "to_steam_id64",
]
