"""
Player stats aggregation.

ProfileAggregator turns provider payloads into the normalized views served to
the frontend. ``get_player_stats`` follows a mock-data-always policy: whenever
live data cannot be obtained (private or unknown profile, no recorded matches,
provider outage, pipeline timeout) it returns FALLBACK_PLAYER_STATS instead of
an error. Only a malformed Steam id is reported back to the caller.

The STRATZ view (``get_stratz_matches``) is the exception: it has no mock data
and raises the typed upstream errors so the HTTP layer can surface them.
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Mapping
from datetime import UTC, datetime

from dotacompanion.core.errors import ConfigError, NotFound
from dotacompanion.core.schemas import (
    HeroInfo,
    MatchSummary,
    PlayerProfileSummary,
    PlayerStats,
    PlayerStatsResponse,
    WinLossRecord,
)
from dotacompanion.core.steam_id import to_account_id, to_steam_id64
from dotacompanion.integrations.opendota import Hero, OpenDotaClient, RecentMatch
from dotacompanion.integrations.stratz import StratzClient, StratzMatch
from dotacompanion.stats.fallback import FALLBACK_PLAYER_STATS
from dotacompanion.stats.roles import DEFAULT_HERO_ROLES, HeroRoleTable, determine_main_roles

logger = logging.getLogger(__name__)

OPENDOTA_CDN = "https://api.opendota.com"

# Player slots 0-127 are Radiant, 128-255 Dire
DIRE_SLOT_START = 128


def is_win(player_slot: int, radiant_win: bool | None) -> bool:
    """True when the player's side is the winning side."""
    return (player_slot < DIRE_SLOT_START) == bool(radiant_win)


def win_rate(wins: int, total: int) -> float:
    """Win percentage rounded half-up to one decimal; 0 without matches."""
    if total <= 0:
        return 0.0
    return math.floor(wins / total * 1000 + 0.5) / 10


def iso_date(epoch_seconds: int) -> str:
    return datetime.fromtimestamp(epoch_seconds, UTC).date().isoformat()


def hero_fallback_name(hero_id: int) -> str:
    return f"Hero {hero_id}"


class ProfileAggregator:
    """Builds player profile, stats and hero views from the providers."""

    def __init__(
        self,
        opendota: OpenDotaClient,
        stratz: StratzClient | None = None,
        hero_roles: HeroRoleTable = DEFAULT_HERO_ROLES,
        recent_limit: int = 20,
        top_heroes_limit: int = 5,
        request_timeout: float = 25.0,
        cdn_url: str = OPENDOTA_CDN,
    ):
        self.opendota = opendota
        self.stratz = stratz
        self.hero_roles = hero_roles
        self.recent_limit = recent_limit
        self.top_heroes_limit = top_heroes_limit
        self.request_timeout = request_timeout
        self.cdn_url = cdn_url.rstrip("/")

    # =========================================================================
    # Heroes
    # =========================================================================

    def _asset_url(self, path: str | None) -> str:
        if not path:
            return ""
        if path.startswith("http"):
            return path
        return f"{self.cdn_url}{path}"

    def _reshape_catalog(self, heroes: list[Hero]) -> dict[int, HeroInfo]:
        return {
            hero.id: HeroInfo(
                name=hero.localized_name or hero.name or hero_fallback_name(hero.id),
                icon_url=self._asset_url(hero.icon),
                image_url=self._asset_url(hero.img),
            )
            for hero in heroes
        }

    async def get_heroes_data(self) -> dict[int, HeroInfo]:
        """Hero id -> display data; empty when the catalog is unavailable."""
        try:
            return self._reshape_catalog(await self.opendota.get_hero_catalog())
        except Exception:
            logger.exception("Failed to build hero catalog")
            return {}

    # =========================================================================
    # Profile
    # =========================================================================

    async def get_profile_summary(self, steam_id: str) -> PlayerProfileSummary:
        """Public profile of ``steam_id``.

        Raises:
            InvalidIdFormat: ``steam_id`` is not numeric.
            NotFound: the account does not exist or its profile is private.
        """
        account_id = to_account_id(steam_id)
        player = await self.opendota.get_profile(account_id)
        if player is None or player.profile is None:
            raise NotFound(f"Profile {account_id} not found or private")

        profile = player.profile
        return PlayerProfileSummary(
            display_name=profile.personaname or profile.name or f"Player {account_id}",
            avatar_url=profile.avatarfull or profile.avatarmedium or profile.avatar or "",
            account_id=account_id,
            steam_id=to_steam_id64(account_id),
            profile_url=profile.profileurl or "",
        )

    # =========================================================================
    # Stats
    # =========================================================================

    def _summarize_match(self, match: RecentMatch, heroes: Mapping[int, HeroInfo]) -> MatchSummary:
        hero = heroes.get(match.hero_id)
        return MatchSummary(
            match_id=str(match.match_id),
            result="win" if is_win(match.player_slot, match.radiant_win) else "loss",
            hero_id=match.hero_id,
            hero_name=hero.name if hero else hero_fallback_name(match.hero_id),
            hero_icon_url=hero.icon_url if hero else "",
            hero_image_url=hero.image_url if hero else "",
            kills=match.kills or 0,
            deaths=match.deaths or 0,
            assists=match.assists or 0,
            date=iso_date(match.start_time),
        )

    async def get_win_loss(self, account_id: int) -> WinLossRecord:
        """All-time record of ``account_id``; zero counts when unavailable."""
        record = await self.opendota.get_win_loss(account_id)
        return WinLossRecord(wins=record.win, losses=record.lose)

    async def _build_player_stats(self, account_id: int) -> PlayerStatsResponse:
        player = await self.opendota.get_profile(account_id)
        if player is None or player.profile is None:
            logger.info(f"Profile {account_id} not found or private, serving fallback stats")
            return FALLBACK_PLAYER_STATS

        record = await self.get_win_loss(account_id)
        if record.wins == 0 and record.losses == 0:
            # Zero recorded matches and unavailable data are indistinguishable here
            logger.info(f"No match data for {account_id}, serving fallback stats")
            return FALLBACK_PLAYER_STATS

        matches, top_heroes, catalog = await asyncio.gather(
            self.opendota.get_recent_matches(account_id, self.recent_limit),
            self.opendota.get_top_heroes(account_id, self.top_heroes_limit),
            self.opendota.get_hero_catalog(),
        )
        heroes = self._reshape_catalog(catalog)

        total = record.wins + record.losses
        return PlayerStatsResponse(
            stats=PlayerStats(
                total_matches=total,
                wins=record.wins,
                losses=record.losses,
                win_rate=win_rate(record.wins, total),
                main_roles=tuple(
                    determine_main_roles((h.hero_id for h in top_heroes), self.hero_roles)
                ),
            ),
            recent_matches=tuple(self._summarize_match(m, heroes) for m in matches),
        )

    async def get_player_stats(self, steam_id: str) -> PlayerStatsResponse:
        """Stats and recent matches of ``steam_id``, or FALLBACK_PLAYER_STATS.

        Raises:
            InvalidIdFormat: ``steam_id`` is not numeric.
        """
        account_id = to_account_id(steam_id)
        try:
            async with asyncio.timeout(self.request_timeout):
                return await self._build_player_stats(account_id)
        except TimeoutError:
            logger.warning(
                f"Stats for {account_id} exceeded {self.request_timeout}s, serving fallback stats"
            )
        except Exception:
            logger.exception(f"Stats pipeline failed for {account_id}, serving fallback stats")
        return FALLBACK_PLAYER_STATS

    # =========================================================================
    # STRATZ
    # =========================================================================

    def _summarize_stratz_match(
        self, match: StratzMatch, heroes: Mapping[int, HeroInfo]
    ) -> MatchSummary | None:
        row = match.player
        if row is None:
            return None
        hero = heroes.get(row.hero_id)
        return MatchSummary(
            match_id=str(match.id),
            result="win" if row.is_radiant == match.did_radiant_win else "loss",
            hero_id=row.hero_id,
            hero_name=hero.name if hero else hero_fallback_name(row.hero_id),
            hero_icon_url=hero.icon_url if hero else "",
            hero_image_url=hero.image_url if hero else "",
            kills=row.kills,
            deaths=row.deaths,
            assists=row.assists,
            date=iso_date(match.start_date_time),
        )

    async def get_stratz_matches(self, steam_id: str) -> list[MatchSummary]:
        """Recent matches from STRATZ.

        Raises:
            InvalidIdFormat: ``steam_id`` is not numeric.
            ConfigError: STRATZ is not configured.
            UpstreamTimeout, UpstreamError: STRATZ failed.
        """
        account_id = to_account_id(steam_id)
        if self.stratz is None:
            raise ConfigError("STRATZ client is not configured")

        matches = await self.stratz.query_player_matches(account_id, self.recent_limit)
        heroes = await self.get_heroes_data()
        summaries = (self._summarize_stratz_match(m, heroes) for m in matches)
        return [s for s in summaries if s is not None]
