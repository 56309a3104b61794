"""Static stats returned whenever no live data can be obtained."""

from dotacompanion.core.schemas import MatchSummary, PlayerStats, PlayerStatsResponse
from dotacompanion.stats.roles import CARRY, MID

# Frozen models: shared by every caller, never copied
FALLBACK_PLAYER_STATS = PlayerStatsResponse(
    stats=PlayerStats(
        total_matches=245,
        wins=132,
        losses=113,
        win_rate=53.9,
        main_roles=(MID, CARRY),
    ),
    recent_matches=(
        MatchSummary(
            match_id="1",
            result="win",
            hero_id=14,
            hero_name="Pudge",
            kills=12,
            deaths=6,
            assists=15,
            date="2023-04-21",
        ),
        MatchSummary(
            match_id="2",
            result="loss",
            hero_id=11,
            hero_name="Shadow Fiend",
            kills=7,
            deaths=9,
            assists=4,
            date="2023-04-20",
        ),
        MatchSummary(
            match_id="3",
            result="win",
            hero_id=8,
            hero_name="Juggernaut",
            kills=14,
            deaths=3,
            assists=8,
            date="2023-04-19",
        ),
    ),
)
