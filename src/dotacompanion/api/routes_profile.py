"""
Player profile and stats route handlers.

Endpoints:
- GET /profile/{steam_id} - public profile summary
- GET /stats/{steam_id} - aggregated stats and recent matches (never fails on provider outages)
- GET /stats/{steam_id}/stratz - recent matches from STRATZ
- GET /heroes - hero catalog keyed by hero id
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends

from dotacompanion.api.context import get_aggregator
from dotacompanion.stats.aggregator import ProfileAggregator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["players"])


@router.get("/profile/{steam_id}")
async def get_profile(
    steam_id: str, aggregator: ProfileAggregator = Depends(get_aggregator)
) -> dict[str, Any]:
    """Public profile (name, avatar, ids) of a player."""
    summary = await aggregator.get_profile_summary(steam_id)
    return summary.to_wire()


@router.get("/stats/{steam_id}")
async def get_stats(
    steam_id: str, aggregator: ProfileAggregator = Depends(get_aggregator)
) -> dict[str, Any]:
    """Win/loss stats, main roles and recent matches.

    Serves demo data when live stats are unavailable; only a malformed id is an error.
    """
    stats = await aggregator.get_player_stats(steam_id)
    return stats.to_wire()


@router.get("/stats/{steam_id}/stratz")
async def get_stratz_stats(
    steam_id: str, aggregator: ProfileAggregator = Depends(get_aggregator)
) -> dict[str, Any]:
    """Recent matches from STRATZ (requires STRATZ_API_TOKEN)."""
    matches = await aggregator.get_stratz_matches(steam_id)
    return {"matches": [m.to_wire() for m in matches]}


@router.get("/heroes")
async def get_heroes(aggregator: ProfileAggregator = Depends(get_aggregator)) -> dict[str, Any]:
    """Hero catalog: hero id -> name and image URLs."""
    heroes = await aggregator.get_heroes_data()
    return {str(hero_id): info.to_wire() for hero_id, info in heroes.items()}
