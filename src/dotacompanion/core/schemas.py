"""
Dota Companion Data Contracts

Normalized models returned to the frontend. Provider payload models live next
to their clients (integrations/opendota.py, integrations/stratz.py); nothing
outside those modules touches raw provider JSON.

Fields are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Immutable model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class PlayerProfileSummary(WireModel):
    display_name: str
    avatar_url: str = ""
    account_id: int
    steam_id: str = ""
    profile_url: str = ""


class WinLossRecord(WireModel):
    wins: int = Field(0, ge=0)
    losses: int = Field(0, ge=0)


class MatchSummary(WireModel):
    match_id: str
    result: Literal["win", "loss"]
    hero_id: int
    hero_name: str
    hero_icon_url: str = ""
    hero_image_url: str = ""
    kills: int = 0
    deaths: int = 0
    assists: int = 0
    date: str  # YYYY-MM-DD (UTC)


class PlayerStats(WireModel):
    total_matches: int
    wins: int
    losses: int
    win_rate: float  # percentage, one decimal
    main_roles: tuple[str, ...]


class PlayerStatsResponse(WireModel):
    stats: PlayerStats
    recent_matches: tuple[MatchSummary, ...]  # most recent first


class HeroInfo(WireModel):
    name: str
    icon_url: str = ""
    image_url: str = ""


class PlayerAnalytics(WireModel):
    """Stored per-player analytics from the local player store."""

    farm_efficiency: float | None = None
    vision_score: float | None = None
