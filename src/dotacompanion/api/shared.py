"""
Shared utilities for the Dota Companion API.

Contains input validation patterns, request models and the URL helpers used
across the route modules.
"""

import re

from fastapi import Request
from pydantic import BaseModel, Field, field_validator

from dotacompanion import __version__

# =============================================================================
# Input Validation Patterns
# =============================================================================

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@.]+(\.[^\s@.]+)+")
MIN_PASSWORD_LENGTH = 6


def normalize_email(value: str) -> str:
    """Trimmed, lowercased email. Raises ValueError if malformed."""
    email = value.strip().lower()
    if not EMAIL_PATTERN.fullmatch(email):
        raise ValueError("Invalid email address")
    return email


# =============================================================================
# Request Models
# =============================================================================


class RegisterRequest(BaseModel):
    email: str = Field(..., max_length=255, description="Email address")
    password: str = Field(
        ...,
        min_length=MIN_PASSWORD_LENGTH,
        max_length=128,
        description=f"Password (min {MIN_PASSWORD_LENGTH} chars)",
    )

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)


class LoginRequest(BaseModel):
    email: str = Field(..., max_length=255, description="Email address")
    password: str = Field(
        ...,
        min_length=MIN_PASSWORD_LENGTH,
        max_length=128,
        description=f"Password (min {MIN_PASSWORD_LENGTH} chars)",
    )

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)


class PlayerRecordRequest(BaseModel):
    """Admin upload of a player's analytics record."""

    steam_id: str = Field(..., alias="steamId", min_length=1, max_length=20)
    mmr: int | None = Field(None, ge=0)
    farm_efficiency: float | None = Field(None, alias="farmEfficiency")
    vision_score: float | None = Field(None, alias="visionScore")

    model_config = {"populate_by_name": True}


# =============================================================================
# URL Helpers
# =============================================================================


def get_base_url(request: Request) -> str:
    """Public base URL of this server.

    Honors X-Forwarded-Proto / X-Forwarded-Host when running behind a proxy.
    """
    proto = request.headers.get("x-forwarded-proto", request.url.scheme)
    host = request.headers.get("x-forwarded-host") or request.headers.get(
        "host", request.url.netloc
    )
    return f"{proto}://{host}"


def get_callback_url(request: Request) -> str:
    """Callback URL for Steam to redirect back to."""
    return f"{get_base_url(request)}/auth/steam/callback"


__all__ = [
    "EMAIL_PATTERN",
    "MIN_PASSWORD_LENGTH",
    "LoginRequest",
    "PlayerRecordRequest",
    "RegisterRequest",
    "__version__",
    "get_base_url",
    "get_callback_url",
    "normalize_email",
]
