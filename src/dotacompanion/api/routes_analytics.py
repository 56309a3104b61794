"""
Player analytics route handlers, backed by the local player store.

Endpoints:
- GET  /analytics - analytics router liveness
- GET  /analytics/{steam_id} - stored analytics for a player
- POST /analytics/players - create or replace a player record (admin only)
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from dotacompanion.api.context import get_db
from dotacompanion.api.shared import PlayerRecordRequest
from dotacompanion.auth.middleware import require_admin
from dotacompanion.core.errors import NotFound, ValidationError
from dotacompanion.core.schemas import PlayerAnalytics
from dotacompanion.infra.database import User, get_player_by_steam_id, upsert_player

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("")
async def analytics_root() -> dict[str, str]:
    return {"message": "Analytics service is running"}


@router.get("/{steam_id}")
def get_player_analytics(steam_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    """Stored farm efficiency and vision score of a player."""
    player = get_player_by_steam_id(db, steam_id)
    if player is None:
        raise NotFound(f"Player {steam_id} not found")
    if not player.has_stats:
        raise ValidationError(f"No stats recorded for player {steam_id}")

    analytics = PlayerAnalytics(
        farm_efficiency=player.farm_efficiency, vision_score=player.vision_score
    )
    return analytics.to_wire()


@router.post("/players", status_code=status.HTTP_201_CREATED)
def put_player_record(
    body: PlayerRecordRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict[str, Any]:
    """Create or replace a player's analytics record."""
    player, created = upsert_player(
        db,
        body.steam_id,
        mmr=body.mmr,
        farm_efficiency=body.farm_efficiency,
        vision_score=body.vision_score,
    )
    logger.info(f"Admin {admin.id} stored analytics for player {body.steam_id}")
    return {"player": player.to_dict(), "created": created}
